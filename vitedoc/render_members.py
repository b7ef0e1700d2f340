"""Logic for rendering the member sections of a container page."""

from collections.abc import Callable

from vitedoc.doc_processor import DocProcessor
from vitedoc.models import Container, Member
from vitedoc.page_builder import (
    annotations_line,
    code_block,
    container_block,
    deprecation_message,
    deprecation_notice,
    escape_generics,
    h2,
    h3_with_anchor,
    markdown_link,
    member_badges,
    paragraph,
    post_process_member_doc,
    signature_block,
    source_link,
    unique_anchor,
)
from vitedoc.path_resolver import PathResolver
from vitedoc.signatures import (
    callable_signature,
    constructor_signature,
    field_signature,
    html_unescape,
)


def _by_name(members: list[Member]) -> list[Member]:
    return sorted(members, key=lambda m: m.name.lower())


def sorted_constructors(container: Container) -> list[Member]:
    """Unnamed constructor first, then named ones alphabetically."""
    return sorted(
        container.constructors,
        key=lambda m: (not m.is_unnamed_constructor, m.name.lower()),
    )


def member_sections(container: Container) -> list[tuple[str, list[Member]]]:
    """Ordered (title, members) pairs; empty sections are kept out."""
    sections = [
        ("Values", container.enum_values),
        ("Constructors", sorted_constructors(container)),
        ("Properties", _by_name(container.instance_fields)),
        ("Methods", _by_name(container.instance_methods)),
        ("Operators", _by_name(container.operators)),
        ("Static Properties", _by_name(container.static_fields)),
        ("Static Methods", _by_name(container.static_methods)),
        ("Constants", _by_name(container.constants)),
    ]
    return [(title, members) for title, members in sections if members]


def member_count(container: Container) -> int:
    return sum(len(members) for _title, members in member_sections(container))


def render_container_members(
    container: Container,
    paths: PathResolver,
    docs: DocProcessor,
    used_anchors: set[str],
    width: int = 80,
) -> list[str]:
    """Render every member section of ``container`` in the fixed order."""
    renderers: dict[str, Callable[..., list[str]]] = {
        "Values": _render_enum_value,
        "Constructors": _render_constructor,
        "Properties": _render_field,
        "Methods": _render_method,
        "Operators": _render_method,
        "Static Properties": _render_field,
        "Static Methods": _render_method,
        "Constants": _render_field,
    }
    parts: list[str] = []
    for title, members in member_sections(container):
        parts += h2(title)
        for member in members:
            anchor = unique_anchor(paths.anchor_for(member) or member.name.lower(), used_anchors)
            parts += renderers[title](member, anchor, paths, docs, width)
    return parts


def _render_enum_value(
    member: Member, anchor: str, paths: PathResolver, docs: DocProcessor, width: int
) -> list[str]:
    parts = h3_with_anchor(member.name, anchor, deprecated=member.is_deprecated)
    if member.is_deprecated:
        parts += deprecation_notice(deprecation_message(member))
    parts += paragraph(post_process_member_doc(docs.process_documentation(member), anchor))
    return parts


def _render_constructor(
    member: Member, anchor: str, paths: PathResolver, docs: DocProcessor, width: int
) -> list[str]:
    parts = h3_with_anchor(
        f"{member.display_name}()",
        anchor,
        deprecated=member.is_deprecated,
        badges=member_badges(member),
    )
    parts += signature_block(constructor_signature(member, paths, width))
    parts += _render_member_documentation(member, anchor, paths, docs)
    parts += _render_implementation(member)
    return parts


def _render_field(
    member: Member, anchor: str, paths: PathResolver, docs: DocProcessor, width: int
) -> list[str]:
    parts = h3_with_anchor(
        member.name.rstrip("="),
        anchor,
        deprecated=member.is_deprecated,
        badges=member_badges(member),
    )
    parts += signature_block(field_signature(member, paths))
    parts += _render_member_documentation(member, anchor, paths, docs)
    parts += _render_implementation(member)
    return parts


def _render_method(
    member: Member, anchor: str, paths: PathResolver, docs: DocProcessor, width: int
) -> list[str]:
    parts = h3_with_anchor(
        f"{member.display_name}()",
        anchor,
        deprecated=member.is_deprecated,
        badges=member_badges(member),
    )
    parts += signature_block(callable_signature(member, paths, width))
    parts += _render_member_documentation(member, anchor, paths, docs)
    parts += _render_implementation(member)
    return parts


def _render_member_documentation(
    member: Member, anchor: str, paths: PathResolver, docs: DocProcessor
) -> list[str]:
    parts: list[str] = []
    if member.is_deprecated:
        parts += deprecation_notice(deprecation_message(member))
    parts += paragraph(post_process_member_doc(docs.process_documentation(member), anchor))

    if member.inherited_from is not None:
        parts += paragraph(f"*Inherited from {escape_generics(member.inherited_from.name)}.*")

    provider = member.extension_provider
    if provider is not None:
        extended = provider.extended_type
        if extended is None:
            on_type = "unknown"
        elif extended.target is not None:
            on_type = markdown_link(extended.target, paths)
        else:
            on_type = escape_generics(extended.display())
        parts += paragraph(
            f"*Available on {on_type}, provided by the "
            f"{markdown_link(provider, paths)} extension*"
        )
    parts += annotations_line(member)
    parts += source_link(member.source_url)
    return parts


def _render_implementation(member: Member) -> list[str]:
    if not member.source_code:
        return []
    return container_block(
        "details", "Implementation", code_block(html_unescape(member.source_code))
    )
