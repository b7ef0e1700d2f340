"""Building blocks shared by every generated page.

Each helper returns a list of lines that ends with a blank line, so a page is
assembled with ``parts += helper(...)`` and joined once at the end.
"""

import re

from vitedoc.file_names import sanitize_anchor
from vitedoc.models import DocumentableEntity, Member
from vitedoc.path_resolver import PathResolver
from vitedoc.signatures import name_with_generics

LEADING_H1_RE = re.compile(r"^#\s+(.+?)(\r?\n|$)")
HEADING_RE = re.compile(r"^(#{1,6})\s")
HEADING_ID_RE = re.compile(r"\s*\{#[^}]+\}\s*$")
DEPRECATED_MESSAGE_RE = re.compile(r"""^@Deprecated\(\s*(?:message:\s*)?(['"])(.*)\1\s*\)$""")

DEPRECATED_BADGE = '<Badge type="warning" text="deprecated" />'

FIELD_BADGES = {
    "no setter": "tip",
    "no getter": "tip",
    "read / write": "tip",
    "inherited-getter": "info",
    "inherited-setter": "info",
    "override-getter": "info",
    "override-setter": "info",
    "extended": "info",
    "late": "warning",
    "final": "tip",
    "covariant": "info",
}


def yaml_escape(text: str) -> str:
    """Escape a value for a double-quoted YAML scalar."""
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


def escape_generics(text: str) -> str:
    """Backslash-escape angle brackets for headings and inline prose."""
    return text.replace("<", "\\<").replace(">", "\\>")


def badge(kind: str, text: str) -> str:
    return f'<Badge type="{kind}" text="{text}" />'


def frontmatter(
    title: str,
    description: str,
    outline: bool | list[int],
    *,
    category: str | None = None,
    library: str | None = None,
) -> list[str]:
    """YAML metadata block; API pages never get edit links or prev/next."""
    parts = ["---", f'title: "{yaml_escape(title)}"', f'description: "{yaml_escape(description)}"']
    if category is not None:
        parts.append(f'category: "{yaml_escape(category)}"')
    if library is not None:
        parts.append(f'library: "{yaml_escape(library)}"')
    if isinstance(outline, bool):
        parts.append(f"outline: {'true' if outline else 'false'}")
    else:
        parts.append(f"outline: [{', '.join(str(n) for n in outline)}]")
    parts += ["editLink: false", "prev: false", "next: false", "---", ""]
    return parts


def breadcrumb() -> list[str]:
    return ["<ApiBreadcrumb />", ""]


def h1(text: str, *, deprecated: bool = False, badges: list[str] | None = None) -> list[str]:
    escaped = escape_generics(text)
    line = f"# {DEPRECATED_BADGE} ~~{escaped}~~" if deprecated else f"# {escaped}"
    for b in badges or []:
        line += f" {b}"
    return [line, ""]


def h2(text: str) -> list[str]:
    """Section heading with an explicit id so it never collides with a member."""
    slug = text.lower().replace(" ", "-")
    return [f"## {text} {{#section-{slug}}}", ""]


def h3_with_anchor(
    text: str, anchor: str, *, deprecated: bool = False, badges: list[str] | None = None
) -> list[str]:
    escaped = escape_generics(text)
    line = f"### {DEPRECATED_BADGE} ~~{escaped}~~" if deprecated else f"### {escaped}"
    for b in badges or []:
        line += f" {b}"
    return [f"{line} {{#{anchor}}}", ""]


def signature_block(html: str) -> list[str]:
    return [f'<div class="member-signature"><pre><code>{html}</code></pre></div>', ""]


def code_block(code: str, language: str = "dart") -> str:
    return f"```{language}\n{code.rstrip()}\n```"


def container_block(kind: str, title: str, content: str = "") -> list[str]:
    """A VitePress custom container such as ``:::info Title``."""
    parts = [f":::{kind} {title}".rstrip()]
    if content:
        parts.append(content)
    parts += [":::", ""]
    return parts


def info_list(title: str, items: list[str]) -> list[str]:
    if not items:
        return []
    return container_block("info", title, "\n".join(f"- {item}" for item in items))


def deprecation_notice(message: str) -> list[str]:
    return container_block("warning", "DEPRECATED", escape_generics(message))


def paragraph(text: str) -> list[str]:
    return [text, ""] if text else []


def deprecation_message(entity: DocumentableEntity) -> str:
    """Message of a ``@Deprecated('...')`` annotation, if one carries it."""
    for annotation in entity.annotations:
        m = DEPRECATED_MESSAGE_RE.match(annotation.strip())
        if m:
            return m.group(2)
    return ""


def annotations_line(entity: DocumentableEntity) -> list[str]:
    shown = [
        f"`{a}`"
        for a in entity.annotations
        if a != "@deprecated" and not a.startswith("@Deprecated(")
    ]
    if not shown:
        return []
    return paragraph(f"**Annotations:** {', '.join(shown)}")


def source_link(url: str | None) -> list[str]:
    return paragraph(f"[View source]({url})") if url else []


def markdown_link(entity: DocumentableEntity, paths: PathResolver) -> str:
    """``[Name<T>](url)`` when the entity has a page, escaped name otherwise."""
    raw = entity.name
    if hasattr(entity, "type_parameters") and not isinstance(entity, Member):
        raw = name_with_generics(entity)  # type: ignore[arg-type]
    name = escape_generics(raw)
    url = paths.link_for(entity)
    return f"[{name}]({url})" if url else name


def member_badges(member: Member) -> list[str]:
    """Badges for constructors, methods and fields."""
    badges = []
    if member.kind == "constructor":
        if member.is_factory:
            badges.append(badge("tip", "factory"))
        if member.is_const:
            badges.append(badge("tip", "const"))
        return badges
    if member.is_static and member.kind in ("method", "operator"):
        badges.append(badge("info", "static"))
    if member.is_abstract:
        badges.append(badge("info", "abstract"))
    if member.is_inherited:
        badges.append(badge("info", "inherited"))
    if member.is_override:
        badges.append(badge("info", "override"))
    if member.extension_provider is not None:
        badges.append(badge("info", "extension"))
    if member.kind in ("field", "getter", "setter"):
        for attribute in member.attributes:
            kind = FIELD_BADGES.get(attribute)
            if kind is not None:
                badges.append(badge(kind, attribute))
    return badges


def unique_anchor(anchor: str, used: set[str]) -> str:
    """Return ``anchor`` or the first free ``anchor-N`` (N >= 2), and claim it."""
    if anchor not in used:
        used.add(anchor)
        return anchor
    i = 2
    while f"{anchor}-{i}" in used:
        i += 1
    used.add(f"{anchor}-{i}")
    return f"{anchor}-{i}"


def post_process_member_doc(doc: str, member_anchor: str) -> str:
    """Demote headings two levels and give them member-scoped ids."""
    out = []
    in_fence = False
    for line in doc.split("\n"):
        if line.lstrip().startswith(("```", "~~~")):
            in_fence = not in_fence
        m = None if in_fence else HEADING_RE.match(line)
        if m:
            line = HEADING_ID_RE.sub("", line)
            hashes = m.group(1)
            if len(hashes) + 2 <= 6:
                line = line.replace(hashes, "#" * (len(hashes) + 2), 1)
            slug = sanitize_anchor(re.sub(r"^#{1,6}\s+", "", line))
            if slug:
                line = f"{line} {{#{member_anchor}-{slug}}}"
        out.append(line)
    return "\n".join(out)


def strip_leading_h1(text: str, expected_title: str) -> str:
    """Drop a leading H1 that repeats the page title, demote any other one."""
    m = LEADING_H1_RE.match(text)
    if m is None:
        return text
    title = m.group(1).strip().lower().replace("-", "_")
    if title == expected_title.lower().replace("-", "_"):
        return text[m.end() :].lstrip()
    return f"## {m.group(1)}{text[m.end():]}"


def join_page(parts: list[str]) -> str:
    return "\n".join(parts).rstrip() + "\n"
