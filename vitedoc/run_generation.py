"""Orchestration logic for turning a resolved model into a VitePress site."""

import argparse
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from vitedoc.compute_config_hash import compute_config_hash
from vitedoc.doc_processor import DocProcessor
from vitedoc.incremental_writer import IncrementalWriter
from vitedoc.load_config import load_config
from vitedoc.load_model import LoadedModel, load_model
from vitedoc.path_report import PathReport
from vitedoc.path_resolver import PathResolver
from vitedoc.render_container_page import render_container_page
from vitedoc.render_library_page import render_library_page
from vitedoc.render_package_page import (
    render_category_page,
    render_package_page,
    render_workspace_overview,
)
from vitedoc.render_top_level_page import render_top_level_page
from vitedoc.run_stats import RunStats
from vitedoc.scaffold import write_scaffold
from vitedoc.sidebar import (
    API_SIDEBAR_PATH,
    API_STYLES,
    API_STYLES_PATH,
    GUIDE_SIDEBAR_PATH,
    GUIDE_SIDEBAR_STUB,
    build_api_sidebar,
)

logger = logging.getLogger(__name__)

PageJob = tuple[str, Callable[[], str]]


def run_generation(args: argparse.Namespace) -> int:
    """Execute the full generation pipeline."""
    config = load_config(args.config)
    if getattr(args, "repository_url", None):
        config["output"]["repository_url"] = args.repository_url

    model = load_model(args.model)
    stats = RunStats()
    # Every path and anchor is fixed here, before the first page is rendered.
    paths = PathResolver(model.packages, config, stats)

    if args.dry_run:
        report = PathReport(compute_config_hash(config))
        report.add_targets(paths.targets())
        report_path = Path(getattr(args, "report", None) or "path_report.json")
        report.generate_report(report_path, stats)
        print(f"Dry run complete. Report generated at {report_path}")
        return 0

    docs = DocProcessor(paths, config, model.fragments, stats)
    writer = IncrementalWriter(args.out_dir, config["output"]["managed_dirs"], stats)

    jobs = collect_page_jobs(model, paths, docs, config)
    written = write_pages(jobs, writer)

    writer.write(API_SIDEBAR_PATH, build_api_sidebar(model.local_packages, paths))
    writer.write(GUIDE_SIDEBAR_PATH, GUIDE_SIDEBAR_STUB)
    writer.write(API_STYLES_PATH, API_STYLES)

    repository_url = config["output"]["repository_url"] or model.primary.repository
    created = write_scaffold(writer, model.workspace_name, repository_url)
    if created:
        print(f"Created {created} scaffold files")

    writer.finalize()
    deleted = writer.delete_stale()

    _log_unresolved(stats)
    print(
        f"Generated {written} Markdown pages into: {writer.out_root.resolve()} "
        f"({stats.files_written} written, {stats.files_unchanged} unchanged, "
        f"{len(deleted)} deleted)"
    )
    return 0


def collect_page_jobs(
    model: LoadedModel,
    paths: PathResolver,
    docs: DocProcessor,
    config: dict[str, Any],
) -> list[PageJob]:
    """List every page of the run as (output path, render callback) pairs."""
    jobs: list[PageJob] = []
    if model.is_workspace:
        jobs.append(
            (
                "api/index.md",
                _bind(
                    render_workspace_overview,
                    model.workspace_name,
                    model.packages,
                    paths,
                    docs,
                ),
            )
        )
    else:
        jobs.append(
            ("api/index.md", _bind(render_package_page, model.primary, paths, docs))
        )

    for package in model.local_packages:
        for lib in paths.navigable_libraries(package):
            lib_path = paths.file_path_for(lib)
            if lib_path is None:
                continue
            jobs.append((lib_path, _bind(render_library_page, lib, paths, docs)))
            for container in lib.containers:
                path = paths.file_path_for(container)
                if path is not None:
                    jobs.append(
                        (path, _bind(render_container_page, container, paths, docs, config))
                    )
            for element in lib.top_level:
                path = paths.file_path_for(element)
                if path is not None:
                    jobs.append(
                        (path, _bind(render_top_level_page, element, paths, docs, config))
                    )
        for category in package.topics:
            path = paths.file_path_for(category)
            if path is not None and category.entities:
                jobs.append((path, _bind(render_category_page, category, paths, docs)))
    return jobs


def write_pages(jobs: list[PageJob], writer: IncrementalWriter) -> int:
    """Render and write every page, printing progress."""
    total = len(jobs)
    print(f"Writing {total} pages...")
    written = 0
    for path, render in jobs:
        writer.write(path, render())
        written += 1
        if written % 50 == 0:
            print(f"  ... wrote {written}/{total} pages")
    return written


def _bind(func: Callable[..., str], *args: Any) -> Callable[[], str]:
    return lambda: func(*args)


def _log_unresolved(stats: RunStats) -> None:
    logger.info(
        f"Resolved {stats.references_resolved}/{stats.references_total} "
        f"doc comment references ({stats.resolution_rate:.1%})"
    )
    for name, count in stats.top_unresolved():
        logger.info(f"  unresolved: [{name}] x{count}")
