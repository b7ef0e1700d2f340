"""Serializes a parsed document tree back to VitePress-safe Markdown."""

import re
import xml.etree.ElementTree as etree
from collections.abc import Iterable

from markdown import util

from vitedoc.load_config import SAFE_HTML_TAGS
from vitedoc.markdown_extensions import (
    ParsedDocument,
    code_unescape,
    restore_backslash_escapes,
)

HTML_TAG_RE = re.compile(r"<(/?[a-zA-Z][a-zA-Z0-9]*(?:-[a-zA-Z0-9]+)*)\b([^>]*)(/?)>")
ALERT_TYPE_RE = re.compile(r"markdown-alert-(\w+)")

ALERT_CONTAINERS = {
    "note": "info",
    "tip": "tip",
    "important": "info",
    "caution": "warning",
    "warning": "danger",
}

BLOCK_LEVEL_TAGS = frozenset(
    {
        "div",
        "section",
        "article",
        "aside",
        "header",
        "footer",
        "nav",
        "main",
        "figure",
        "figcaption",
        "details",
        "summary",
        "dialog",
        "address",
    }
)

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")


def _is_word_char(ch: str) -> bool:
    return ch == "_" or ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ("0" <= ch <= "9")


def escape_angle_brackets(content: str, safe_tags: Iterable[str] = SAFE_HTML_TAGS) -> str:
    """Escape ``<``/``>`` so the text can never open a component tag.

    Generic type syntax (``Map<K, V>``) is backslash-escaped, tags that are
    not in ``safe_tags`` become entities and safe tags pass through.
    Backtick code spans are copied untouched.
    """
    if "<" not in content:
        return content
    safe = {t.lower() for t in safe_tags}
    out: list[str] = []
    n = len(content)
    i = 0
    while i < n:
        ch = content[i]
        if ch == "`":
            end = content.find("`", i + 1)
            if end != -1:
                out.append(content[i : end + 1])
                i = end + 1
                continue
        if ch != "<":
            out.append(ch)
            i += 1
            continue

        is_generic = (
            i + 1 < n
            and "A" <= content[i + 1] <= "Z"
            and (i == 0 or _is_word_char(content[i - 1]))
        )
        if is_generic:
            out.append("\\<")
            i += 1
            depth = 1
            while i < n and depth > 0:
                c = content[i]
                if c == "<":
                    depth += 1
                    out.append("\\<")
                elif c == ">":
                    depth -= 1
                    out.append("\\>")
                else:
                    out.append(c)
                i += 1
            continue

        m = HTML_TAG_RE.match(content, i)
        if m:
            tag = m.group(1).lstrip("/")
            if tag.lower() in safe:
                out.append(m.group(0))
            else:
                out.append(f"&lt;{m.group(1)}{m.group(2)}{m.group(3)}&gt;")
            i = m.end()
            continue

        out.append(ch)
        i += 1
    return "".join(out)


class MarkdownRenderer:
    """Walks an element tree and writes equivalent Markdown.

    Never raises on unexpected input: unknown tags either pass through (when
    in the safe list) or are entity-escaped.
    """

    def __init__(
        self,
        safe_tags: Iterable[str] | None = None,
        default_language: str = "dart",
    ) -> None:
        """Initialize with the safe tag allow-list and the fence language default."""
        self.safe_tags = frozenset(
            t.lower() for t in (safe_tags if safe_tags is not None else SAFE_HTML_TAGS)
        )
        self.default_language = default_language
        self._reset([])

    def _reset(self, raw_html: list[str]) -> None:
        self._raw_html = raw_html
        self._parts: list[str] = []
        self._trailing_newlines = 0
        self._stack: list[etree.Element] = []
        self._ordinals: list[int] = []
        self._item_widths: list[int] = []
        self._quote_depth = 0
        self._in_code_block = False
        self._in_link = False
        self._in_alert = False
        self._alert_title_skipped = False
        self._table_rows: list[list[str]] = []
        self._row_cells: list[str] | None = None
        self._cell: list[str] | None = None
        self._alignments: list[str | None] = []

    def render(self, document: ParsedDocument) -> str:
        """Render a parsed document; the result has no trailing whitespace."""
        self._reset(document.raw_html)
        root = document.root
        if root.text:
            self._visit_text(root.text)
        for child in root:
            self._visit(child)
            if child.tail:
                self._visit_text(child.tail)
        return "".join(self._parts).rstrip()

    # ------------------------------------------------------------------
    # Tree walk
    # ------------------------------------------------------------------

    def _visit(self, el: etree.Element) -> None:
        self._stack.append(el)
        try:
            # An element whose opening handler consumed it has no closing step.
            if not self._before(el):
                return
            if el.text:
                self._visit_text(el.text)
            for child in el:
                self._visit(child)
                if child.tail:
                    self._visit_text(child.tail)
            self._after(el)
        finally:
            self._stack.pop()

    def _visit_text(self, text: str) -> None:
        if self._in_link:
            # Link text was escaped when the link was built; only raw markup
            # stashed by the parser still needs escaping.
            content = util.HTML_PLACEHOLDER_RE.sub(
                lambda m: self._escape(self._stashed(m)), text
            )
            content = restore_backslash_escapes(content, keep_backslash=True)
        else:
            content = util.HTML_PLACEHOLDER_RE.sub(self._stashed, text)
            content = self._escape(content)
            content = restore_backslash_escapes(content, keep_backslash=True)
        self._write_target(content)

    def _stashed(self, m: re.Match[str]) -> str:
        index = int(m.group(1))
        if index < len(self._raw_html):
            return self._raw_html[index].rstrip("\n")
        return ""

    def _escape(self, content: str) -> str:
        return escape_angle_brackets(content, self.safe_tags)

    def _before(self, el: etree.Element) -> bool:  # noqa: C901, PLR0911, PLR0912
        tag = el.tag
        if tag in HEADING_TAGS:
            self._ensure_blank_line()
            self._write("#" * int(tag[1]) + " ")
            return True
        if tag == "p":
            return self._before_paragraph(el)
        if tag == "blockquote":
            self._quote_depth += 1
            self._ensure_blank_line()
            self._write("> " * self._quote_depth)
            return True
        if tag == "pre":
            return self._before_pre(el)
        if tag == "code":
            self._write_inline_code(el)
            return False
        if tag == "em":
            self._write_target("*")
            return True
        if tag in ("strong", "b"):
            self._write_target("**")
            return True
        if tag == "del":
            self._write_target("~~")
            return True
        if tag == "a":
            self._in_link = True
            self._write_target("[")
            return True
        if tag == "img":
            alt = self._attr(el, "alt")
            src = self._attr(el, "src")
            title = el.get("title")
            suffix = f' "{self._attr(el, "title")}"' if title is not None else ""
            self._write_target(f"![{alt}]({src}{suffix})")
            return False
        if tag == "br":
            self._write_target("  \n")
            return False
        if tag == "hr":
            self._ensure_blank_line()
            self._write("---")
            return False
        if tag in ("ul", "ol"):
            if tag == "ol":
                start = el.get("start", "1")
                self._ordinals.append(int(start) - 1 if start.isdigit() else 0)
            if self._inside("li"):
                if self._trailing_newlines == 0:
                    self._write("\n")
            else:
                self._ensure_blank_line()
            return True
        if tag == "li":
            indent = " " * sum(self._item_widths)
            if self._parent_tag() == "ol" and self._ordinals:
                self._ordinals[-1] += 1
                marker = f"{self._ordinals[-1]}. "
            else:
                marker = "- "
            self._write(indent + marker)
            self._item_widths.append(len(marker))
            return True
        if tag == "table":
            self._table_rows = []
            self._alignments = []
            self._ensure_blank_line()
            return True
        if tag in ("thead", "tbody"):
            return True
        if tag == "tr":
            self._row_cells = []
            return True
        if tag in ("th", "td"):
            self._cell = []
            if tag == "th":
                self._alignments.append(el.get("style") or el.get("align"))
            return True
        if tag == "div" and "markdown-alert" in el.get("class", ""):
            m = ALERT_TYPE_RE.search(el.get("class", ""))
            container = ALERT_CONTAINERS.get(m.group(1) if m else "note", "info")
            self._ensure_blank_line()
            self._write(f":::{container}\n")
            self._in_alert = True
            self._alert_title_skipped = False
            return True
        if tag in self.safe_tags:
            self._write_target(self._open_tag(el))
        else:
            self._write_target(self._escaped_open_tag(el))
        return True

    def _after(self, el: etree.Element) -> None:  # noqa: C901, PLR0912
        tag = el.tag
        if tag in HEADING_TAGS:
            heading_id = el.get("id")
            if heading_id:
                self._write(f" {{#{heading_id}}}")
            self._write("\n")
        elif tag == "p":
            if self._inside("blockquote") or self._inside("li"):
                self._write("\n")
            else:
                self._write("\n\n")
        elif tag == "blockquote":
            self._quote_depth -= 1
            if self._trailing_newlines < 1:
                self._write("\n")
        elif tag in ("code", "img", "br", "hr", "pre"):
            pass
        elif tag == "em":
            self._write_target("*")
        elif tag in ("strong", "b"):
            self._write_target("**")
        elif tag == "del":
            self._write_target("~~")
        elif tag == "a":
            self._in_link = False
            href = self._attr(el, "href")
            if " " in href or ")" in href:
                href = f"<{href}>"
            title = el.get("title")
            suffix = f' "{self._attr(el, "title")}"' if title is not None else ""
            self._write_target(f"]({href}{suffix})")
        elif tag == "li":
            self._item_widths.pop()
            if self._trailing_newlines < 1:
                self._write("\n")
        elif tag == "ul":
            pass
        elif tag == "ol":
            if self._ordinals:
                self._ordinals.pop()
        elif tag == "tr":
            if self._row_cells is not None:
                self._table_rows.append(self._row_cells)
                self._row_cells = None
        elif tag in ("th", "td"):
            if self._cell is not None and self._row_cells is not None:
                self._row_cells.append("".join(self._cell).strip())
            self._cell = None
        elif tag == "table":
            self._write_table()
        elif tag in ("thead", "tbody"):
            pass
        elif tag == "div" and self._in_alert and "markdown-alert" in el.get("class", ""):
            if self._trailing_newlines < 1:
                self._write("\n")
            self._write(":::\n")
            self._ensure_blank_line()
            self._in_alert = False
        elif self._is_void(el):
            pass
        elif tag in self.safe_tags:
            self._write_target(f"</{tag}>")
            if self._cell is None and tag in BLOCK_LEVEL_TAGS:
                self._write("\n")
        else:
            self._write_target(f"&lt;/{tag}&gt;")

    def _before_paragraph(self, el: etree.Element) -> bool:
        if self._in_alert and not self._alert_title_skipped:
            self._alert_title_skipped = True
            return False
        if self._inside("blockquote"):
            if not self._is_first_child(el):
                self._write("\n" + "> " * self._quote_depth)
        elif self._inside("li"):
            if not self._is_first_child(el):
                self._write("\n" + " " * sum(self._item_widths))
        else:
            self._ensure_blank_line()
        return True

    def _before_pre(self, el: etree.Element) -> bool:
        self._ensure_blank_line()
        children = list(el)
        if len(children) != 1 or children[0].tag != "code":
            return True
        code = children[0]
        language = self._language_of(code)
        indent = " " * sum(self._item_widths)
        content = code_unescape("".join(code.itertext()))
        content = content.rstrip("\n")
        if indent:
            content = "\n".join(f"{indent}{line}" if line else line for line in content.split("\n"))
        self._in_code_block = True
        self._write(f"{indent}```{language}\n")
        self._write(content)
        self._write(f"\n{indent}```")
        self._in_code_block = False
        return False

    def _write_inline_code(self, el: etree.Element) -> None:
        content = code_unescape("".join(el.itertext()))
        fence = "``" if "`" in content else "`"
        pad = " " if fence == "``" else ""
        self._write_target(f"{fence}{pad}{content}{pad}{fence}")

    def _language_of(self, code: etree.Element) -> str:
        for cls in (code.get("class") or "").split():
            if cls.startswith("language-"):
                return cls[len("language-") :]
        return self.default_language

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def _write_table(self) -> None:
        if not self._table_rows:
            return
        header = self._table_rows[0]
        columns = len(header)

        def cell(s: str) -> str:
            return s.replace("|", "\\|")

        self._write("| " + " | ".join(cell(c) for c in header) + " |\n")
        separator = ["|"]
        for i in range(columns):
            align = (self._alignments[i] if i < len(self._alignments) else None) or ""
            if "center" in align:
                separator.append(":---:|")
            elif "right" in align:
                separator.append("---:|")
            elif "left" in align:
                separator.append(":---|")
            else:
                separator.append("---|")
        self._write("".join(separator) + "\n")
        for row in self._table_rows[1:]:
            padded = [row[i] if i < len(row) else "" for i in range(columns)]
            self._write("| " + " | ".join(cell(c) for c in padded) + " |\n")

    # ------------------------------------------------------------------
    # Output helpers
    # ------------------------------------------------------------------

    def _write(self, text: str) -> None:
        if not text:
            return
        self._parts.append(text)
        stripped = text.rstrip("\n")
        count = len(text) - len(stripped)
        if stripped:
            self._trailing_newlines = count
        else:
            self._trailing_newlines += count

    def _write_target(self, text: str) -> None:
        if self._cell is not None:
            self._cell.append(text)
        else:
            self._write(text)

    def _ensure_blank_line(self) -> None:
        if not self._parts:
            return
        if self._trailing_newlines < 2:
            self._write("\n" * (2 - self._trailing_newlines))

    def _parent_tag(self) -> str | None:
        if len(self._stack) < 2:
            return None
        return self._stack[-2].tag

    def _inside(self, tag: str) -> bool:
        return any(el.tag == tag for el in self._stack[:-1])

    def _is_first_child(self, el: etree.Element) -> bool:
        if len(self._stack) < 2:
            return True
        parent = self._stack[-2]
        return len(parent) == 0 or parent[0] is el

    @staticmethod
    def _is_void(el: etree.Element) -> bool:
        return len(el) == 0 and el.text is None

    @staticmethod
    def _attr(el: etree.Element, name: str) -> str:
        return restore_backslash_escapes(el.get(name) or "")

    def _open_tag(self, el: etree.Element) -> str:
        attrs = "".join(
            f' {k}="{_escape_attr(restore_backslash_escapes(v))}"' for k, v in el.items()
        )
        return f"<{el.tag}{attrs}{' />' if self._is_void(el) else '>'}"

    def _escaped_open_tag(self, el: etree.Element) -> str:
        attrs = "".join(f' {k}="{restore_backslash_escapes(v)}"' for k, v in el.items())
        return f"&lt;{el.tag}{attrs}{' /&gt;' if self._is_void(el) else '&gt;'}"


def _escape_attr(value: str) -> str:
    return (
        value.replace("&", "&amp;")
        .replace('"', "&quot;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
    )
