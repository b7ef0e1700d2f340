"""Python-Markdown grammar used to parse documentation comments into a tree."""

from __future__ import annotations

import re
import xml.etree.ElementTree as etree
from collections.abc import Callable
from dataclasses import dataclass

import markdown
from markdown import util
from markdown.blockprocessors import (
    BlockProcessor,
    ListIndentProcessor,
    OListProcessor,
)
from markdown.extensions import Extension
from markdown.extensions.toc import TocExtension
from markdown.inlinepatterns import (
    NOIMG,
    InlineProcessor,
    ShortReferenceInlineProcessor,
    SimpleTagInlineProcessor,
)
from markdown.preprocessors import Preprocessor

from vitedoc.header_slug import header_slug

# A resolver receives the bracket text of an undefined ``[reference]`` and
# returns the node to insert, or None to keep the text as written.
LinkResolver = Callable[[str], "etree.Element | None"]

ALERT_TYPES = ("NOTE", "TIP", "IMPORTANT", "WARNING", "CAUTION")
# Spaces that nest a list item under its parent item.
LIST_INDENT = 2
FENCE_PLACEHOLDER = util.STX + "vitedocfence:%d" + util.ETX
FENCE_PLACEHOLDER_RE = re.compile(r"\x02vitedocfence:(\d+)\x03")
ESCAPE_PLACEHOLDER_RE = re.compile(r"\x02(\d+)\x03")
FENCE_RE = re.compile(
    r"^(?P<indent>[ ]*)(?P<fence>`{3,}|~{3,})[ ]*\{?\.?(?P<lang>[\w#+.-]*)\}?[^\n]*\n"
    r"(?P<code>.*?)(?<=\n)[ ]*(?P=fence)[ ]*$",
    re.MULTILINE | re.DOTALL,
)
STRIKE_RE = r"(~{2})(.+?)~{2}"
LEGACY_CODE_RE = r"\[:\s?((?:.|\n)*?)\s?:\]"
BARE_URL_RE = (
    r"(?<![\w/(\[<\"'=])"
    r"((?:https?://|www\.)[^\s<>\[\]]*[^\s<>\[\].,:;\"')!?*_~])"
)


@dataclass
class FencedBlock:
    language: str
    code: str


class FencedBlockPreprocessor(Preprocessor):
    """Pulls fenced code out of the source before raw HTML is stashed."""

    def __init__(self, md: markdown.Markdown, store: list[FencedBlock]) -> None:
        super().__init__(md)
        self.store = store

    def run(self, lines: list[str]) -> list[str]:
        text = "\n".join(lines)
        if "```" not in text and "~~~" not in text:
            return lines
        return FENCE_RE.sub(self._replace, text).split("\n")

    def _replace(self, m: re.Match[str]) -> str:
        indent = m.group("indent")
        code_lines = []
        for line in m.group("code").split("\n"):
            strip = min(len(indent), len(line) - len(line.lstrip(" ")))
            code_lines.append(line[strip:])
        self.store.append(FencedBlock(m.group("lang"), "\n".join(code_lines)))
        placeholder = FENCE_PLACEHOLDER % (len(self.store) - 1)
        return f"\n{indent}{placeholder}\n\n"


class FencedBlockProcessor(BlockProcessor):
    """Turns a fence placeholder block into ``pre > code.language-x``."""

    def __init__(self, parser, store: list[FencedBlock]) -> None:  # noqa: ANN001
        super().__init__(parser)
        self.store = store

    def test(self, parent: etree.Element, block: str) -> bool:
        return bool(FENCE_PLACEHOLDER_RE.fullmatch(block.strip()))

    def run(self, parent: etree.Element, blocks: list[str]) -> None:
        block = blocks.pop(0)
        m = FENCE_PLACEHOLDER_RE.fullmatch(block.strip())
        fenced = self.store[int(m.group(1))]  # type: ignore[union-attr]
        pre = etree.SubElement(parent, "pre")
        code = etree.SubElement(pre, "code")
        if fenced.language:
            code.set("class", f"language-{fenced.language}")
        code.text = util.AtomicString(util.code_escape(fenced.code))


class AlertBlockProcessor(BlockProcessor):
    """GitHub-style ``> [!NOTE]`` alerts as ``div.markdown-alert``."""

    RE = re.compile(r"^[ ]{0,3}>[ ]?\[!(?P<type>\w+)\][ ]*$", re.IGNORECASE)

    def test(self, parent: etree.Element, block: str) -> bool:
        m = self.RE.match(block.split("\n", 1)[0])
        return bool(m) and m.group("type").upper() in ALERT_TYPES

    def run(self, parent: etree.Element, blocks: list[str]) -> None:
        block = blocks.pop(0)
        first, _, rest = block.partition("\n")
        kind = self.RE.match(first).group("type").lower()  # type: ignore[union-attr]
        body = "\n".join(re.sub(r"^[ ]{0,3}>[ ]?", "", line) for line in rest.split("\n"))
        div = etree.SubElement(
            parent, "div", {"class": f"markdown-alert markdown-alert-{kind}"}
        )
        title = etree.SubElement(div, "p", {"class": "markdown-alert-title"})
        title.text = kind.capitalize()
        if body.strip():
            self.parser.parseChunk(div, body)


class LegacyCodeInlineProcessor(InlineProcessor):
    """``[:code:]`` written before backticks were the norm."""

    def handleMatch(self, m: re.Match[str], data: str):  # noqa: ANN201, N802
        el = etree.Element("code")
        el.text = util.AtomicString(util.code_escape(m.group(1).strip()))
        return el, m.start(0), m.end(0)


class BareUrlInlineProcessor(InlineProcessor):
    """Links URLs written without any Markdown link syntax."""

    def handleMatch(self, m: re.Match[str], data: str):  # noqa: ANN201, N802
        url = m.group(1)
        el = etree.Element("a")
        el.set("href", url if "://" in url else f"https://{url}")
        el.text = util.AtomicString(url)
        return el, m.start(0), m.end(0)


class NestedListIndentProcessor(ListIndentProcessor):
    """Nests list children indented by LIST_INDENT spaces instead of a full tab."""

    def __init__(self, parser) -> None:  # noqa: ANN001
        super().__init__(parser)
        self.tab_length = LIST_INDENT
        self.INDENT_RE = re.compile(r"^(([ ]{%d})+)" % LIST_INDENT)


class OrderedListProcessor(OListProcessor):
    """Ordered lists whose nested items need only LIST_INDENT spaces."""

    def __init__(self, parser) -> None:  # noqa: ANN001
        super().__init__(parser)
        self.tab_length = LIST_INDENT
        self.CHILD_RE = re.compile(
            r"^[ ]{0,%d}((\d+\.)|[*+-])[ ]+(.*)" % (LIST_INDENT - 1)
        )
        self.INDENT_RE = re.compile(
            r"^[ ]{%d,%d}((\d+\.)|[*+-])[ ]+.*" % (LIST_INDENT, LIST_INDENT * 2 - 1)
        )

    def get_items(self, block: str) -> list[str]:
        # A list may start up to three spaces in; item lines are relative to it.
        lead = len(block) - len(block.lstrip(" "))
        if lead:
            block = "\n".join(
                line[lead:] if line.startswith(" " * lead) else line
                for line in block.split("\n")
            )
        return super().get_items(block)


class BulletListProcessor(OrderedListProcessor):
    TAG = "ul"

    def __init__(self, parser) -> None:  # noqa: ANN001
        super().__init__(parser)
        self.RE = re.compile(r"^[ ]{0,%d}[*+-][ ]+(.*)" % (parser.md.tab_length - 1))


class ReferenceResolverInlineProcessor(ShortReferenceInlineProcessor):
    """``[name]`` without a link definition is handed to the link resolver."""

    def __init__(self, pattern: str, md: markdown.Markdown, grammar: DocGrammar) -> None:
        super().__init__(pattern, md)
        self.grammar = grammar

    def handleMatch(self, m: re.Match[str], data: str):  # noqa: ANN201, N802
        text, index, handled = self.getText(data, m.end(0))
        if not handled:
            return None, None, None
        if text.lower() in self.md.references:
            return super().handleMatch(m, data)
        resolver = self.grammar.resolver
        if resolver is None:
            return None, m.start(0), index
        name = restore_backslash_escapes(code_unescape(self.unescape(text)))
        node = resolver(name)
        if node is None:
            return None, m.start(0), index
        return node, m.start(0), index


class DocGrammarExtension(Extension):
    """Registers the documentation grammar on a Markdown instance."""

    def __init__(self, grammar: DocGrammar, **kwargs) -> None:  # noqa: ANN003
        self.grammar = grammar
        super().__init__(**kwargs)

    def extendMarkdown(self, md: markdown.Markdown) -> None:  # noqa: N802
        md.registerExtension(self)
        store = self.grammar.fenced_blocks
        md.preprocessors.register(
            FencedBlockPreprocessor(md, store), "fenced_code_block", 25
        )
        md.parser.blockprocessors.register(
            FencedBlockProcessor(md.parser, store), "fenced_placeholder", 85
        )
        md.parser.blockprocessors.register(AlertBlockProcessor(md.parser), "alert", 21)
        md.parser.blockprocessors.register(
            NestedListIndentProcessor(md.parser), "indent", 90
        )
        md.parser.blockprocessors.register(OrderedListProcessor(md.parser), "olist", 40)
        md.parser.blockprocessors.register(BulletListProcessor(md.parser), "ulist", 30)
        md.inlinePatterns.register(
            LegacyCodeInlineProcessor(LEGACY_CODE_RE, md), "legacy_code", 175
        )
        md.inlinePatterns.register(
            ReferenceResolverInlineProcessor(NOIMG + r"\[", md, self.grammar),
            "short_reference",
            130,
        )
        md.inlinePatterns.register(
            BareUrlInlineProcessor(BARE_URL_RE, md), "bare_autolink", 115
        )
        md.inlinePatterns.register(
            SimpleTagInlineProcessor(STRIKE_RE, "del"), "strikethrough", 65
        )
        # The renderer consumes the raw tree: no pretty-print whitespace and
        # backslash escapes kept as placeholders.
        for name in ("prettify", "unescape"):
            if name in md.treeprocessors:
                md.treeprocessors.deregister(name)

    def reset(self) -> None:
        self.grammar.fenced_blocks.clear()


@dataclass
class ParsedDocument:
    """Root of a parsed document plus the raw HTML its placeholders refer to."""

    root: etree.Element
    raw_html: list[str]


class DocGrammar:
    """A reusable Markdown parser producing element trees instead of HTML."""

    def __init__(self) -> None:
        self.resolver: LinkResolver | None = None
        self.fenced_blocks: list[FencedBlock] = []
        self.md = markdown.Markdown(
            extensions=[
                "tables",
                "attr_list",
                TocExtension(marker="", slugify=lambda value, _sep: header_slug(value)),
                DocGrammarExtension(self),
            ]
        )

    def parse(self, text: str, resolver: LinkResolver | None = None) -> ParsedDocument:
        """Parse ``text`` into a tree, resolving references through ``resolver``."""
        self.md.reset()
        root = etree.Element(self.md.doc_tag)
        if not text.strip():
            return ParsedDocument(root, [])
        self.resolver = resolver
        try:
            lines = text.split("\n")
            for prep in self.md.preprocessors:
                lines = prep.run(lines)
            root = self.md.parser.parseDocument(lines).getroot()
            for treeprocessor in self.md.treeprocessors:
                new_root = treeprocessor.run(root)
                if new_root is not None:
                    root = new_root
        finally:
            self.resolver = None
        raw_html = [
            block if isinstance(block, str) else etree.tostring(block, encoding="unicode")
            for block in self.md.htmlStash.rawHtmlBlocks
        ]
        return ParsedDocument(root, raw_html)


def code_unescape(text: str) -> str:
    """Undo the entity escaping Python-Markdown applies to code text."""
    return text.replace("&lt;", "<").replace("&gt;", ">").replace("&amp;", "&")


def restore_backslash_escapes(text: str, *, keep_backslash: bool = False) -> str:
    """Turn escape placeholders back into characters, optionally re-escaped."""
    prefix = "\\" if keep_backslash else ""
    return ESCAPE_PLACEHOLDER_RE.sub(lambda m: prefix + chr(int(m.group(1))), text)
