"""Command line entry point for generating VitePress API documentation."""

import argparse
import logging
from pathlib import Path

from vitedoc.run_generation import run_generation


def main(argv: list[str] | None = None) -> int:
    """Run the generation process."""
    ap = argparse.ArgumentParser(
        description="Render a resolved API model as a VitePress documentation site.",
    )
    ap.add_argument(
        "model",
        type=Path,
        help="YAML or JSON file describing the resolved API model",
    )
    ap.add_argument(
        "out_dir",
        type=Path,
        help="Output directory (the VitePress project root)",
    )
    ap.add_argument(
        "--config",
        help="Path to configuration file",
    )
    ap.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve every path and write a JSON report without touching the output",
    )
    ap.add_argument(
        "--report",
        type=Path,
        help="Where --dry-run writes its report (default: path_report.json)",
    )
    ap.add_argument(
        "--repository-url",
        help="Repository URL for the site's social links",
    )
    ap.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output",
    )
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return run_generation(args)


if __name__ == "__main__":
    raise SystemExit(main())
