"""Logic for generating the dry-run report of resolved output locations."""

import json
import time
from pathlib import Path
from typing import Any

from vitedoc.link_target import LinkTarget
from vitedoc.run_stats import RunStats


class PathReport:
    """Collects every resolved path, URL and anchor of one run."""

    def __init__(self, config_hash: str) -> None:
        """Initialize the report with metadata."""
        self.config_hash = config_hash
        self.results: list[LinkTarget] = []
        self.start_time = time.time()

    def add_targets(self, targets: list[LinkTarget]) -> None:
        self.results.extend(targets)

    def as_dict(self, stats: RunStats | None = None) -> dict[str, Any]:
        return {
            "meta": {
                "timestamp": time.time(),
                "duration": time.time() - self.start_time,
                "config_hash": self.config_hash,
                "total_items": len(self.results),
            },
            "results": [
                {
                    "qualified_name": t.qualified_name,
                    "kind": t.kind,
                    "path": t.file_path,
                    "url": t.url,
                    "anchor": t.anchor,
                }
                for t in self.results
            ],
            "stats": self._compute_stats(stats),
        }

    def generate_report(self, path: str | Path, stats: RunStats | None = None) -> None:
        """Write the summary report to a JSON file."""
        Path(path).write_text(json.dumps(self.as_dict(stats), indent=2), encoding="utf-8")

    def _compute_stats(self, stats: RunStats | None) -> dict[str, Any]:
        kind_counts: dict[str, int] = {}
        page_count = 0
        for t in self.results:
            kind_counts[t.kind] = kind_counts.get(t.kind, 0) + 1
            if t.anchor is None:
                page_count += 1
        out: dict[str, Any] = {
            "kind_counts": kind_counts,
            "pages": page_count,
            "anchors": len(self.results) - page_count,
        }
        if stats is not None:
            out["run"] = stats.as_dict()
        return out
