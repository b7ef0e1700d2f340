"""Logic for rendering the package, workspace and topic landing pages."""

from vitedoc.doc_processor import DocProcessor
from vitedoc.md_table import md_table
from vitedoc.models import Category, Package
from vitedoc.page_builder import (
    frontmatter,
    h1,
    h2,
    h3_with_anchor,
    join_page,
    markdown_link,
    paragraph,
    strip_leading_h1,
)
from vitedoc.path_resolver import PathResolver
from vitedoc.render_library_page import render_overview_tables


def _libraries_table(package: Package, paths: PathResolver, docs: DocProcessor) -> list[str]:
    rows = []
    for lib in paths.navigable_libraries(package):
        description = docs.extract_one_line_doc(lib) or package.description
        rows.append([markdown_link(lib, paths), description])
    if not rows:
        return []
    return [md_table(["Library", "Description"], rows), ""]


def render_package_page(package: Package, paths: PathResolver, docs: DocProcessor) -> str:
    """Render the API root page of a single package."""
    parts = frontmatter(
        package.name,
        f"API documentation for the {package.name} package",
        False,
    )
    parts += h1(package.name)

    if package.documentation:
        doc = docs.process_raw_documentation(
            strip_leading_h1(package.documentation, package.name)
        )
        parts += paragraph(doc)
    elif package.description:
        parts += paragraph(package.description)

    table = _libraries_table(package, paths, docs)
    if table:
        parts += h2("Libraries")
        parts += table
    return join_page(parts)


def render_workspace_overview(
    workspace_name: str,
    packages: list[Package],
    paths: PathResolver,
    docs: DocProcessor,
) -> str:
    """Render the API root page when several local packages are documented."""
    parts = frontmatter(
        workspace_name,
        f"API documentation for the {workspace_name} workspace",
        [2, 3],
    )
    parts += h1(workspace_name)
    parts += paragraph("This workspace contains the following packages.")
    parts += h2("Packages")

    for package in sorted(
        (p for p in packages if p.is_local), key=lambda p: p.name
    ):
        parts += h3_with_anchor(package.name, package.name.lower().replace(" ", "-"))
        parts += paragraph(package.description)
        parts += _libraries_table(package, paths, docs)
    return join_page(parts)


def render_category_page(category: Category, paths: PathResolver, docs: DocProcessor) -> str:
    """Render a topic page listing every entity tagged with the category."""
    parts = frontmatter(
        category.name,
        f"API documentation for the {category.name} topic",
        [2, 3],
    )
    parts += h1(category.name)
    parts += paragraph(docs.process_raw_documentation(category.documentation))
    parts += render_overview_tables(category.entities, paths, docs)
    return join_page(parts)
