"""Parsing of bracketed ``[reference]`` text found in doc comments."""

import re
from dataclasses import dataclass

OPERATOR_NAMES: dict[str, str] = {
    "[]": "get",
    "[]=": "put",
    "~": "bitwise_negate",
    "==": "equals",
    "-": "minus",
    "+": "plus",
    "*": "multiply",
    "/": "divide",
    "<": "less",
    ">": "greater",
    ">=": "greater_equal",
    "<=": "less_equal",
    "<<": "shift_left",
    ">>": "shift_right",
    ">>>": "triple_shift",
    "^": "bitwise_exclusive_or",
    "unary-": "unary_minus",
    "|": "bitwise_or",
    "&": "bitwise_and",
    "~/": "truncate_divide",
    "%": "modulo",
}

_PREFIX_RE = re.compile(r"^(?:new|const)\s+")
_OPERATOR_RE = re.compile(r"^(?:(?P<owner>[\w$.]+)\.)?operator\s*(?P<symbol>\S+)$")
_CALLABLE_RE = re.compile(r"\(\s*\)$")


@dataclass(frozen=True)
class CommentReference:
    """A parsed reference: the name path plus hints about the wanted target."""

    text: str
    parts: tuple[str, ...]
    callable_hint: bool = False
    constructor_hint: bool = False

    @property
    def name(self) -> str:
        return ".".join(self.parts)


def _strip_generics(name: str) -> str:
    out = []
    depth = 0
    for ch in name:
        if ch == "<":
            depth += 1
        elif ch == ">" and depth:
            depth -= 1
        elif depth == 0:
            out.append(ch)
    return "".join(out)


def parse_reference(text: str) -> CommentReference:
    """Parse reference text like ``new Foo.bar``, ``foo()`` or ``operator ==``."""
    raw = text.strip()
    body = raw
    constructor_hint = False
    m = _PREFIX_RE.match(body)
    if m:
        constructor_hint = True
        body = body[m.end() :]

    callable_hint = bool(_CALLABLE_RE.search(body))
    if callable_hint:
        body = _CALLABLE_RE.sub("", body)

    op = _OPERATOR_RE.match(body)
    if op:
        parts = [p for p in (op.group("owner") or "").split(".") if p]
        parts.append(op.group("symbol"))
        return CommentReference(raw, tuple(parts), callable_hint, constructor_hint)

    body = _strip_generics(body).rstrip("?!")
    parts = tuple(p.strip() for p in body.split(".") if p.strip())
    return CommentReference(raw, parts, callable_hint, constructor_hint)
