"""Logic for rendering pages of library-level functions, variables and typedefs."""

from typing import Any

from vitedoc.doc_processor import DocProcessor
from vitedoc.load_config import DEFAULT_CONFIG
from vitedoc.models import TopLevelElement
from vitedoc.page_builder import (
    annotations_line,
    breadcrumb,
    code_block,
    container_block,
    deprecation_message,
    deprecation_notice,
    frontmatter,
    h1,
    join_page,
    paragraph,
    signature_block,
    source_link,
)
from vitedoc.path_resolver import PathResolver
from vitedoc.render_library_page import overview_section
from vitedoc.signatures import (
    callable_signature,
    html_unescape,
    name_with_generics,
    property_signature,
    typedef_signature,
)


def render_top_level_page(
    element: TopLevelElement,
    paths: PathResolver,
    docs: DocProcessor,
    config: dict[str, Any] | None = None,
) -> str:
    """Render a function, property, constant or typedef page in Markdown."""
    width = (config or DEFAULT_CONFIG)["pages"]["signature_wrap_width"]
    lib_name = element.library.name if element.library else ""

    if element.kind == "function":
        label = "function"
        title = name_with_generics(element)
        signature = callable_signature(element, paths, width)
    elif element.kind == "typedef":
        label = "typedef"
        title = name_with_generics(element)
        signature = typedef_signature(element, paths, width)
    else:
        label = "constant" if element.is_const else "property"
        title = element.name
        signature = property_signature(element, paths)

    parts = frontmatter(
        f"{title} {label}",
        f"API documentation for the {title} {label} from {lib_name}",
        False,
        category=overview_section(element),
        library=lib_name,
    )
    parts += breadcrumb()
    parts += h1(title, deprecated=element.is_deprecated)
    parts += signature_block(signature)
    if element.is_deprecated:
        parts += deprecation_notice(deprecation_message(element))
    if element.kind != "typedef":
        parts += annotations_line(element)
    parts += paragraph(docs.process_documentation(element))
    if element.kind != "typedef":
        parts += source_link(element.source_url)
    if element.source_code:
        parts += container_block(
            "details", "Implementation", code_block(html_unescape(element.source_code))
        )
    return join_page(parts)
