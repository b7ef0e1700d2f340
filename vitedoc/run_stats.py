"""Counters collected while generating one documentation run."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class RunStats:
    """Explicit metrics context threaded through the rendering pipeline."""

    references_total: int = 0
    references_resolved: int = 0
    unresolved: dict[str, int] = field(default_factory=dict)
    sanitizer_removals: int = 0
    collisions: int = 0
    files_written: int = 0
    files_unchanged: int = 0
    files_deleted: int = 0

    def record_reference(self, name: str, *, resolved: bool) -> None:
        self.references_total += 1
        if resolved:
            self.references_resolved += 1
        else:
            self.unresolved[name] = self.unresolved.get(name, 0) + 1

    @property
    def resolution_rate(self) -> float:
        if not self.references_total:
            return 1.0
        return self.references_resolved / self.references_total

    def top_unresolved(self, limit: int = 10) -> list[tuple[str, int]]:
        return sorted(self.unresolved.items(), key=lambda kv: (-kv[1], kv[0]))[:limit]

    def as_dict(self) -> dict[str, Any]:
        return {
            "references_total": self.references_total,
            "references_resolved": self.references_resolved,
            "resolution_rate": round(self.resolution_rate, 4),
            "top_unresolved": self.top_unresolved(),
            "sanitizer_removals": self.sanitizer_removals,
            "collisions": self.collisions,
            "files_written": self.files_written,
            "files_unchanged": self.files_unchanged,
            "files_deleted": self.files_deleted,
        }
