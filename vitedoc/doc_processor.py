"""Logic for turning raw documentation comments into VitePress Markdown."""

import logging
import posixpath
import re
import xml.etree.ElementTree as etree
from typing import Any

from markdown import util

from vitedoc.comment_reference import parse_reference
from vitedoc.load_config import DEFAULT_CONFIG
from vitedoc.markdown_extensions import DocGrammar
from vitedoc.markdown_renderer import MarkdownRenderer
from vitedoc.models import MEMBER, DocumentableEntity, library_of
from vitedoc.path_resolver import PathResolver
from vitedoc.run_stats import RunStats
from vitedoc.sanitizer import HtmlSanitizer

logger = logging.getLogger(__name__)

HTML_INJECT_RE = re.compile(r"<dartdoc-html>([a-f0-9]+)</dartdoc-html>")
INJECT_MARKER_RE = re.compile(r"DARTDOC_INJECT\{([a-f0-9]+)\}")
HTML_BASE_PLACEHOLDER = "%%__HTMLBASE_dartdoc_internal__%%"
PARAGRAPH_BREAK = "DARTDOC_PARAGRAPH_BREAK"
TOOL_DIRECTIVE_RE = re.compile(r"[ ]*\{@tool\s+[^\}]*\}\n?[\s\S]*?\n?\{@end-tool\}[ ]*\n?")
HARDCODED_HTML_LINK_RE = re.compile(r"\[([^\]]+)\]\((?!https?://)([^)]+\.html)\)")
EMBEDDER_LINK_RE = re.compile(r"\[([^\]]+)\]\((/(javadoc|ios-embedder)/[^)]+)\)")
EMBEDDER_HOST = "https://api.flutter.dev"
BLANK_LINE_RE = re.compile(r"\n\s*\n")


def convert_html_path(raw_path: str) -> str:
    """Map a legacy relative ``.html`` link onto the ``/api/`` URL scheme.

    ``../dart-async/dart-async-library.html`` becomes ``/api/dart-async/``
    and ``dart-core/List.html`` becomes ``/api/dart-core/List``.
    """
    path = re.sub(r"^(\.\./)+", "", raw_path, count=1)
    path = re.sub(r"\.html$", "", path, count=1)
    path = re.sub(r"-library$", "/", path, count=1)
    path = re.sub(r"([^/]+)/\1/?$", r"\1/", path, count=1)
    if not path.startswith("/"):
        path = f"/api/{path}"
    trailing = path.endswith("/")
    path = posixpath.normpath(path)
    if trailing and not path.endswith("/"):
        path += "/"
    return path


def escape_link_text(text: str) -> str:
    """Backslash-escape angle brackets so link text is never read as a tag."""
    return text.replace("<", "\\<").replace(">", "\\>")


def rewrite_html_links(text: str) -> str:
    return HARDCODED_HTML_LINK_RE.sub(
        lambda m: f"[{m.group(1)}]({convert_html_path(m.group(2))})", text
    )


def preprocess(text: str) -> str:
    """Neutralize directive output before the text reaches the parser."""
    text = HTML_INJECT_RE.sub(lambda m: f"DARTDOC_INJECT{{{m.group(1)}}}", text)
    text = text.replace(HTML_BASE_PLACEHOLDER, "")
    text = text.replace(PARAGRAPH_BREAK, "")
    return TOOL_DIRECTIVE_RE.sub("", text)


class DocProcessor:
    """Per-entity documentation pipeline.

    Preprocesses directives, parses with the shared grammar while resolving
    every ``[reference]`` against the entity's scope, serializes the tree back
    to Markdown, re-inserts injected HTML, rewrites legacy links and finally
    sanitizes the result.
    """

    def __init__(
        self,
        paths: PathResolver,
        config: dict[str, Any] | None = None,
        fragments: dict[str, str] | None = None,
        stats: RunStats | None = None,
    ) -> None:
        """Initialize with the finalized path index and the injected HTML lookup."""
        config = config or DEFAULT_CONFIG
        self.paths = paths
        self.fragments = fragments or {}
        self.stats = stats if stats is not None else paths.stats
        self.grammar = DocGrammar()
        self.renderer = MarkdownRenderer(
            safe_tags=config["html"]["safe_tags"],
            default_language=config["pages"]["default_code_language"],
        )
        self.sanitizer = HtmlSanitizer(
            config["sanitizer"].get("allowed_iframe_hosts"), self.stats
        )

    def process_documentation(self, entity: DocumentableEntity) -> str:
        """Return the entity's documentation as resolved, sanitized Markdown."""
        text = entity.documentation
        if not text:
            return ""
        return self._resolve_references(preprocess(text), entity)

    def process_raw_documentation(self, text: str | None) -> str:
        """Directive stripping and link rewriting for docs without a scope."""
        if not text:
            return ""
        return rewrite_html_links(preprocess(text))

    def extract_one_line_doc(self, entity: DocumentableEntity) -> str:
        """First paragraph of the processed documentation, on a single line."""
        if not entity.documentation:
            return ""
        processed = self.process_documentation(entity)
        if not processed:
            return ""
        first = BLANK_LINE_RE.split(processed, maxsplit=1)[0].strip()
        return first.replace("\n", " ")

    def resolve_reference(
        self, text: str, entity: DocumentableEntity
    ) -> etree.Element | None:
        """Build the node that replaces ``[text]`` in ``entity``'s documentation.

        A link when the target has a page, inline code for everything else.
        """
        if not text:
            return None
        target = self._lookup(text, entity)
        if target is None:
            return _code(text)
        if not self._has_public_page(target):
            return _code(text)
        safe_text = escape_link_text(text)
        url = self.paths.link_for(target)
        if url is not None:
            return _link(safe_text, url)
        href = (target.href or "").replace(HTML_BASE_PLACEHOLDER, "")
        if href and not href.startswith("http") and href.endswith(".html"):
            href = convert_html_path(href)
        if href:
            return _link(safe_text, href)
        return _code(text)

    def _lookup(
        self, text: str, entity: DocumentableEntity
    ) -> DocumentableEntity | None:
        ref = parse_reference(text)
        if ref.callable_hint:

            def ref_filter(candidate: DocumentableEntity) -> bool:
                return candidate.capabilities.is_callable

        else:

            def ref_filter(candidate: DocumentableEntity) -> bool:
                return _accept_constructor(candidate, ref.constructor_hint)

        found = entity.reference_by(ref.parts, ref_filter) if ref.parts else None
        self.stats.record_reference(ref.name or text, resolved=found is not None)
        if found is None:
            logger.debug(f"Unresolved reference [{text}] in {entity.qualified_name}")
        return found

    def _has_public_page(self, target: DocumentableEntity) -> bool:
        if not target.is_public:
            return False
        lib = library_of(target)
        return lib is None or lib.is_public

    def _resolve_references(self, text: str, entity: DocumentableEntity) -> str:
        parsed = self.grammar.parse(
            text, lambda name: self.resolve_reference(name, entity)
        )
        rendered = self.renderer.render(parsed)
        rendered = INJECT_MARKER_RE.sub(
            lambda m: self.fragments.get(m.group(1), ""), rendered
        )
        rendered = rewrite_html_links(rendered)
        rendered = EMBEDDER_LINK_RE.sub(
            lambda m: f"[{m.group(1)}]({EMBEDDER_HOST}{m.group(2)})", rendered
        )
        return self.sanitizer.sanitize(rendered)


def _accept_constructor(candidate: DocumentableEntity, constructor_hint: bool) -> bool:
    """Reject unnamed constructors and constructors shadowed by another member."""
    if candidate.variant != MEMBER or candidate.kind != "constructor":
        return True
    if candidate.capabilities.is_unnamed_constructor:
        return constructor_hint
    enclosing = candidate.reference_parent()
    if enclosing is None:
        return True
    shadow = enclosing.reference_children().get(candidate.name.split(".")[-1])
    return shadow is not None and shadow.kind == "constructor"


def _code(text: str) -> etree.Element:
    el = etree.Element("code")
    el.text = util.AtomicString(util.code_escape(text))
    return el


def _link(text: str, href: str) -> etree.Element:
    el = etree.Element("a")
    el.set("href", href)
    el.text = util.AtomicString(text)
    return el
