"""Logic for rendering class, enum, mixin, extension and extension type pages."""

import re
from typing import Any

from vitedoc.doc_processor import DocProcessor
from vitedoc.load_config import DEFAULT_CONFIG
from vitedoc.models import Container, Library
from vitedoc.page_builder import (
    annotations_line,
    badge,
    breadcrumb,
    container_block,
    deprecation_message,
    deprecation_notice,
    escape_generics,
    frontmatter,
    h1,
    info_list,
    join_page,
    markdown_link,
    paragraph,
    signature_block,
    source_link,
)
from vitedoc.path_resolver import PathResolver
from vitedoc.render_members import member_count, render_container_members
from vitedoc.signatures import container_declaration, name_with_generics

CATEGORY_LABELS = {
    "class": "Classes",
    "enum": "Enums",
    "mixin": "Mixins",
    "extension": "Extensions",
    "extension_type": "Extension Types",
}

# Modifiers hidden when another, more specific one is present.
HIDDEN_MODIFIERS = {
    "abstract": ("sealed",),
    "interface": ("sealed",),
    "final": ("sealed",),
}


def category_label(container: Container) -> str:
    if container.kind == "class" and container.is_exception:
        return "Exceptions"
    return CATEGORY_LABELS.get(container.kind, "Classes")


def outline_for(container: Container, threshold: int) -> list[int]:
    """Only top-level sections in the outline once a page gets crowded."""
    return [2, 2] if member_count(container) > threshold else [2, 3]


def title_slug(title: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")


def modifier_badges(container: Container) -> list[str]:
    if container.kind not in ("class", "enum", "mixin", "extension_type"):
        return []
    modifiers = container.modifiers
    return [
        badge("info", m)
        for m in modifiers
        if not any(h in modifiers for h in HIDDEN_MODIFIERS.get(m, ()))
    ]


def render_container_page(
    container: Container,
    paths: PathResolver,
    docs: DocProcessor,
    config: dict[str, Any] | None = None,
) -> str:
    """Render the page of one container in Markdown."""
    pages_cfg = (config or DEFAULT_CONFIG)["pages"]
    library: Library | None = container.library
    lib_name = library.name if library else ""
    title = name_with_generics(container)
    kind_word = container.kind.replace("_", " ")

    parts = frontmatter(
        title,
        f"API documentation for {title} {kind_word} from {lib_name}",
        outline_for(container, pages_cfg["outline_member_threshold"]),
        category=category_label(container),
        library=lib_name,
    )
    parts += breadcrumb()
    parts += h1(
        title,
        deprecated=container.is_deprecated,
        badges=modifier_badges(container),
    )
    parts += signature_block(container_declaration(container, paths))
    if container.is_deprecated:
        parts += deprecation_notice(deprecation_message(container))
    parts += annotations_line(container)
    parts += paragraph(docs.process_documentation(container))
    parts += source_link(container.source_url)

    if container.kind in ("class", "enum", "mixin"):
        parts += _render_inheritance_chain(container, paths)
        parts += info_list(
            "Implemented types", [_type_link(t, paths) for t in container.interfaces]
        )
        parts += info_list("Mixed-in types", [_type_link(t, paths) for t in container.mixins])
    if container.kind in ("class", "enum", "mixin", "extension_type"):
        parts += info_list(
            "Implementers",
            [
                markdown_link(c, paths)
                for c in sorted(container.implementers, key=lambda c: c.name.lower())
                if c.is_public
            ],
        )
    if container.kind in ("class", "enum", "mixin"):
        parts += info_list(
            "Available Extensions",
            [
                markdown_link(e, paths)
                for e in sorted(container.extensions, key=lambda e: e.name.lower())
                if e.is_public
            ],
        )
    if container.kind == "mixin":
        parts += info_list(
            "Superclass Constraints",
            [escape_generics(t.display()) for t in container.superclass_constraints],
        )
    if container.kind == "extension" and container.extended_type is not None:
        parts += info_list("Extended type", [_type_link(container.extended_type, paths)])

    used_anchors = {title_slug(title)}
    parts += render_container_members(
        container, paths, docs, used_anchors, pages_cfg["signature_wrap_width"]
    )
    return join_page(parts)


def _type_link(type_ref: Any, paths: PathResolver) -> str:
    if type_ref.target is not None and type_ref.target.is_public:
        return markdown_link(type_ref.target, paths)
    return escape_generics(type_ref.display())


def _render_inheritance_chain(container: Container, paths: PathResolver) -> list[str]:
    chain: list[str] = []
    seen = {id(container)}
    current = container.supertype
    while current is not None and current.name not in ("Object", "Enum"):
        chain.append(_type_link(current, paths))
        target = current.target
        if not isinstance(target, Container) or id(target) in seen:
            break
        seen.add(id(target))
        current = target.supertype
    if not chain:
        return []
    steps = ["Object", *reversed(chain), f"**{escape_generics(name_with_generics(container))}**"]
    return container_block("info", "Inheritance", " → ".join(steps))
