"""Logic for rendering library overview pages."""

from vitedoc.doc_processor import DocProcessor
from vitedoc.md_table import md_table
from vitedoc.models import Container, DocumentableEntity, Library, TopLevelElement
from vitedoc.page_builder import (
    breadcrumb,
    escape_generics,
    frontmatter,
    h1,
    h2,
    join_page,
    markdown_link,
    paragraph,
    strip_leading_h1,
)
from vitedoc.path_resolver import PathResolver

OVERVIEW_SECTIONS = (
    "Classes",
    "Exceptions",
    "Enums",
    "Mixins",
    "Extensions",
    "Extension Types",
    "Functions",
    "Properties",
    "Constants",
    "Typedefs",
)

SINGULAR_NAMES = {
    "Classes": "Class",
    "Exceptions": "Exception",
    "Enums": "Enum",
    "Mixins": "Mixin",
    "Extensions": "Extension",
    "Extension Types": "Extension Type",
    "Functions": "Function",
    "Properties": "Property",
    "Constants": "Constant",
    "Typedefs": "Typedef",
}


def overview_section(entity: DocumentableEntity) -> str | None:
    """Overview table an entity belongs in, None for members and libraries."""
    if isinstance(entity, Container):
        if entity.kind == "class":
            return "Exceptions" if entity.is_exception else "Classes"
        return {
            "enum": "Enums",
            "mixin": "Mixins",
            "extension": "Extensions",
            "extension_type": "Extension Types",
        }.get(entity.kind)
    if isinstance(entity, TopLevelElement):
        if entity.kind == "function":
            return "Functions"
        if entity.kind == "typedef":
            return "Typedefs"
        if entity.kind == "variable":
            return "Constants" if entity.is_const else "Properties"
    return None


def group_entities(
    entities: list[DocumentableEntity],
) -> dict[str, list[DocumentableEntity]]:
    """Public entities grouped per overview section, each sorted by name."""
    groups: dict[str, list[DocumentableEntity]] = {s: [] for s in OVERVIEW_SECTIONS}
    for entity in entities:
        section = overview_section(entity)
        if section is not None and entity.is_public:
            groups[section].append(entity)
    for members in groups.values():
        members.sort(key=lambda e: e.name.lower())
    return groups


def render_overview_tables(
    entities: list[DocumentableEntity],
    paths: PathResolver,
    docs: DocProcessor,
) -> list[str]:
    """Render one table per non-empty overview section."""
    parts: list[str] = []
    for section, members in group_entities(entities).items():
        linkable = [e for e in members if paths.link_for(e) is not None]
        if not linkable:
            continue
        parts += h2(section)
        if section == "Extensions":
            parts += [_extensions_table(linkable, paths, docs), ""]
            continue
        rows = [_name_and_description(e, paths, docs) for e in linkable]
        parts += [md_table([SINGULAR_NAMES[section], "Description"], rows), ""]
    return parts


def _name_and_description(
    entity: DocumentableEntity, paths: PathResolver, docs: DocProcessor
) -> list[str]:
    link = markdown_link(entity, paths)
    one_line = docs.extract_one_line_doc(entity)
    if entity.is_deprecated:
        return [f"~~{link}~~", f"**Deprecated.** {one_line}" if one_line else ""]
    return [link, one_line]


def _extensions_table(
    extensions: list[DocumentableEntity], paths: PathResolver, docs: DocProcessor
) -> str:
    rows = []
    for ext in extensions:
        name, description = _name_and_description(ext, paths, docs)
        extended = getattr(ext, "extended_type", None)
        on_type = escape_generics(extended.display()) if extended is not None else ""
        rows.append([name, on_type, description])
    return md_table(["Extension", "on", "Description"], rows)


def library_entities(library: Library) -> list[DocumentableEntity]:
    return [*library.containers, *library.top_level]


def render_library_page(
    library: Library,
    paths: PathResolver,
    docs: DocProcessor,
) -> str:
    """Render a library landing page in Markdown."""
    parts = frontmatter(
        library.name,
        f"API documentation for the {library.name} library",
        [2, 3],
    )
    parts += breadcrumb()
    parts += h1(library.name)

    doc = docs.process_documentation(library)
    if doc:
        parts += paragraph(strip_leading_h1(doc, library.name))

    parts += render_overview_tables(library_entities(library), paths, docs)
    return join_page(parts)
