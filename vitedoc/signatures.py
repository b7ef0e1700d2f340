"""Logic for building linked HTML declarations for signature blocks."""

import re

from vitedoc.models import Container, Member, Parameter, TopLevelElement, TypeParameter, TypeRef
from vitedoc.path_resolver import PathResolver

HTML_TAG_RE = re.compile(r"<[^>]*>")
NUMBER_RE = re.compile(r"^-?\d")
STRING_RE = re.compile(r"""^r?['"]""")

HIDDEN_TYPES = ("Object", "Enum")


def html_escape(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def html_unescape(text: str) -> str:
    """Decode the entities source snippets may carry."""
    for entity, ch in (
        ("&lt;", "<"),
        ("&#60;", "<"),
        ("&gt;", ">"),
        ("&#62;", ">"),
        ("&quot;", '"'),
        ("&#34;", '"'),
        ("&#39;", "'"),
        ("&amp;", "&"),
        ("&#38;", "&"),
    ):
        text = text.replace(entity, ch)
    return text


def plain_length(html: str) -> int:
    """Visible length of a signature fragment once tags and entities are gone."""
    return len(html_unescape(HTML_TAG_RE.sub("", html)))


def kw(word: str) -> str:
    return f'<span class="kw">{html_escape(word)}</span>'


def fn(name: str) -> str:
    return f'<span class="fn">{html_escape(name)}</span>'


def render_type(type_ref: TypeRef | None, paths: PathResolver) -> str:
    """A type with a link when its target has a page, plain span otherwise."""
    if type_ref is None:
        return '<span class="type">dynamic</span>'
    url = paths.url_for(type_ref.target) if type_ref.target is not None else None
    name = html_escape(type_ref.name)
    if url is not None and type_ref.target is not None and type_ref.target.is_public:
        out = f'<a href="{url}" class="type-link">{name}</a>'
    else:
        out = f'<span class="type">{name}</span>'
    if type_ref.arguments:
        out += "&lt;" + ", ".join(render_type(a, paths) for a in type_ref.arguments) + "&gt;"
    if type_ref.nullable:
        out += "?"
    return out


def render_type_parameters(
    type_parameters: list[TypeParameter], paths: PathResolver
) -> str:
    if not type_parameters:
        return ""
    rendered = []
    for tp in type_parameters:
        text = html_escape(tp.name)
        if tp.bound is not None:
            text += f" {kw('extends')} {render_type(tp.bound, paths)}"
        rendered.append(text)
    return "&lt;" + ", ".join(rendered) + "&gt;"


def wrap_default_value(value: str) -> str:
    """Highlight a literal default or constant value."""
    trimmed = value.strip()
    escaped = html_escape(trimmed)
    if NUMBER_RE.match(trimmed):
        return f'<span class="num-lit">{escaped}</span>'
    if STRING_RE.match(trimmed):
        return f'<span class="str-lit">{escaped}</span>'
    if trimmed in ("true", "false", "null"):
        return kw(trimmed)
    return escaped


def _render_parameter(param: Parameter, paths: PathResolver) -> str:
    out = ""
    if param.kind == "named" and param.required:
        out += kw("required") + " "
    out += render_type(param.type, paths)
    if param.name:
        out += f' <span class="param">{html_escape(param.name)}</span>'
    if param.default:
        out += f" = {wrap_default_value(param.default)}"
    return out


def parameter_signature(
    parameters: list[Parameter], paths: PathResolver, prefix_length: int = 0, width: int = 80
) -> str:
    """Parenthesized parameter list, one parameter per line when too wide."""
    if not parameters:
        return "()"
    positional: list[str] = []
    optional: list[str] = []
    named: list[str] = []
    for param in parameters:
        rendered = _render_parameter(param, paths)
        if param.kind == "named":
            named.append(rendered)
        elif param.kind == "optional":
            optional.append(rendered)
        else:
            positional.append(rendered)

    group = ""
    if optional:
        group = "[" + ", ".join(optional) + "]"
    elif named:
        group = "{" + ", ".join(named) + "}"
    single = "(" + ", ".join(positional + ([group] if group else [])) + ")"
    if prefix_length + plain_length(single) <= width:
        return single
    return _tall_parameters(positional, optional, named)


def _tall_parameters(positional: list[str], optional: list[str], named: list[str]) -> str:
    if not positional:
        if named:
            return "({\n" + "".join(f"  {p},\n" for p in named) + "})"
        return "([\n" + "".join(f"  {p},\n" for p in optional) + "])"
    lines = ["(\n"]
    if named or optional:
        lines.extend(f"  {p},\n" for p in positional[:-1])
        opener, closer, rest = ("{", "}", named) if named else ("[", "]", optional)
        lines.append(f"  {positional[-1]}, {opener}\n")
        lines.extend(f"  {p},\n" for p in rest)
        lines.append(f"{closer})")
    else:
        lines.extend(f"  {p},\n" for p in positional)
        lines.append(")")
    return "".join(lines)


def name_with_generics(entity: Container | Member | TopLevelElement) -> str:
    """Plain ``Name<T extends Bound>`` text."""
    name = entity.display_name if isinstance(entity, Member) else entity.name
    params = entity.type_parameters
    if not params:
        return name
    rendered = []
    for tp in params:
        text = tp.name
        if tp.bound is not None:
            text += f" extends {tp.bound.display()}"
        rendered.append(text)
    return f"{name}<{', '.join(rendered)}>"


def callable_signature(
    entity: Member | TopLevelElement, paths: PathResolver, width: int = 80
) -> str:
    out = render_type(entity.return_type, paths) + " "
    out += fn(name_with_generics(entity))
    return out + parameter_signature(entity.parameters, paths, plain_length(out), width)


def constructor_signature(member: Member, paths: PathResolver, width: int = 80) -> str:
    out = ""
    if member.is_const:
        out += kw("const") + " "
    if member.is_factory:
        out += kw("factory") + " "
    out += fn(member.display_name)
    return out + parameter_signature(member.parameters, paths, plain_length(out), width)


def field_signature(member: Member, paths: PathResolver) -> str:
    out = ""
    if member.is_const:
        out += kw("const") + " "
    elif "final" in member.attributes:
        out += kw("final") + " "
    if "late" in member.attributes:
        out += kw("late") + " "
    linked_type = render_type(member.return_type, paths)
    name = fn(member.name.rstrip("="))
    if member.kind == "getter":
        out += f"{linked_type} {kw('get')} {name}"
    elif member.kind == "setter":
        out += f'{kw("set")} {name}({linked_type} <span class="param">value</span>)'
    else:
        out += f"{linked_type} {name}"
    if member.is_const and member.constant_value:
        out += f" = {wrap_default_value(member.constant_value)}"
    return out


def property_signature(element: TopLevelElement, paths: PathResolver) -> str:
    out = ""
    if element.is_const:
        out += kw("const") + " "
    elif element.is_final:
        out += kw("final") + " "
    out += f"{render_type(element.return_type, paths)} {fn(element.name)}"
    if element.is_const and element.constant_value:
        out += f" = {wrap_default_value(element.constant_value)}"
    return out


def typedef_signature(element: TopLevelElement, paths: PathResolver, width: int = 80) -> str:
    out = f"{kw('typedef')} {fn(name_with_generics(element))} = "
    if element.aliased_type is not None:
        return out + render_type(element.aliased_type, paths)
    out += render_type(element.return_type, paths) + ' <span class="type">Function</span>'
    return out + parameter_signature(element.parameters, paths, plain_length(out), width)


def container_declaration(container: Container, paths: PathResolver) -> str:
    """Declaration line of a class, enum, mixin, extension or extension type."""
    kind = container.kind
    out = ""
    if kind in ("class", "enum", "mixin"):
        for modifier in container.modifiers:
            if modifier == "abstract" and "sealed" in container.modifiers:
                continue
            out += kw(modifier) + " "
    out += kw(kind.replace("_", " ")) + " "
    out += fn(container.name) + render_type_parameters(container.type_parameters, paths)

    if kind == "extension":
        if container.extended_type is not None:
            out += f" {kw('on')} {render_type(container.extended_type, paths)}"
        return out
    if kind == "extension_type":
        out += f"({render_type(container.extended_type, paths)})"
    if kind == "mixin":
        constraints = [t for t in container.superclass_constraints if t.name not in HIDDEN_TYPES]
        if constraints:
            out += f" {kw('on')} " + ", ".join(render_type(t, paths) for t in constraints)
    supertype = container.supertype
    if supertype is not None and supertype.name not in HIDDEN_TYPES:
        out += f" {kw('extends')} {render_type(supertype, paths)}"
    if container.mixins:
        out += f" {kw('with')} " + ", ".join(render_type(t, paths) for t in container.mixins)
    if container.interfaces:
        out += f" {kw('implements')} " + ", ".join(
            render_type(t, paths) for t in container.interfaces
        )
    return out
