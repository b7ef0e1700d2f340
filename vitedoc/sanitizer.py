"""Logic for stripping dangerous HTML from rendered documentation."""

import logging
import re
from collections.abc import Callable, Iterable
from urllib.parse import urlsplit

from vitedoc.run_stats import RunStats

logger = logging.getLogger(__name__)

BUILTIN_IFRAME_HOSTS = frozenset(
    {
        "youtube.com",
        "www.youtube.com",
        "youtube-nocookie.com",
        "www.youtube-nocookie.com",
        "dartpad.dev",
        "www.dartpad.dev",
        "dartpad.cn",
        "www.dartpad.cn",
    }
)

DANGEROUS_EMBED_TAGS = ("embed", "object", "applet", "form", "svg")

SCRIPT_OPEN_CLOSE_RE = re.compile(r"<\s*script\b[^>]*>[\s\S]*?<\s*/\s*script\s*>", re.I)
SCRIPT_SELF_CLOSE_RE = re.compile(r"<\s*script\b[^>]*/\s*>", re.I)
STYLE_OPEN_CLOSE_RE = re.compile(r"<\s*style\b[^>]*>[\s\S]*?<\s*/\s*style\s*>", re.I)
BASE_TAG_RE = re.compile(r"<\s*base\b[^>]*/?\s*>", re.I)
META_TAG_RE = re.compile(r"<\s*meta\b[^>]*/?\s*>", re.I)
LINK_TAG_RE = re.compile(r"<\s*link\b[^>]*/?\s*>", re.I)
IFRAME_RE = re.compile(r"<\s*iframe\b[^>]*>[\s\S]*?<\s*/\s*iframe\s*>", re.I)
IFRAME_SRC_RE = re.compile(r"""src\s*=\s*["']([^"']*)["']""", re.I)
JAVASCRIPT_URL_RE = re.compile(r"""(href|src)\s*=\s*["']?\s*javascript:""", re.I)
DATA_URL_RE = re.compile(r"""(href|src)\s*=\s*["']?\s*data:""", re.I)
EVENT_HANDLER_RE = re.compile(r"""\s+on\w+\s*=\s*(?:"[^"]*"|'[^']*'|[^\s>]+)""", re.I)

EMBED_PATTERNS = [
    (
        tag,
        re.compile(rf"<\s*{tag}\b[^>]*>[\s\S]*?<\s*/\s*{tag}\s*>", re.I),
        re.compile(rf"<\s*{tag}\b[^>]*/\s*>", re.I),
    )
    for tag in DANGEROUS_EMBED_TAGS
]


def escape_template_syntax(text: str) -> str:
    """Escape Vue-style ``{{ }}`` interpolation so prose is never evaluated."""
    return text.replace("{{", r"\{\{").replace("}}", r"\}\}")


class HtmlSanitizer:
    """Removes script-capable HTML from Markdown text, logging every removal."""

    def __init__(
        self,
        extra_allowed_hosts: Iterable[str] | None = None,
        stats: RunStats | None = None,
    ) -> None:
        """Initialize with hosts allowed in addition to the built-in iframe list."""
        self.allowed_hosts = BUILTIN_IFRAME_HOSTS | {
            h.lower() for h in (extra_allowed_hosts or [])
        }
        self.stats = stats if stats is not None else RunStats()

    def sanitize(self, html: str) -> str:
        """Strip dangerous markup and escape template interpolation.

        Never raises: every offending construct is deleted and a warning is
        logged.
        """
        html = html.replace("\x00", "")

        html = self._remove(html, SCRIPT_OPEN_CLOSE_RE, "<script>")
        html = self._remove(html, SCRIPT_SELF_CLOSE_RE, "<script/>")
        html = self._remove(html, STYLE_OPEN_CLOSE_RE, "<style>")
        for tag, open_close, self_close in EMBED_PATTERNS:
            html = self._remove(html, open_close, f"<{tag}>")
            html = self._remove(html, self_close, f"<{tag}/>")
        html = self._remove(html, BASE_TAG_RE, "<base>")
        html = self._remove(html, META_TAG_RE, "<meta>")
        html = self._remove(html, LINK_TAG_RE, "<link>")

        html = IFRAME_RE.sub(self._filter_iframe, html)
        html = JAVASCRIPT_URL_RE.sub(self._strip_url("javascript: URL"), html)
        html = DATA_URL_RE.sub(self._strip_url("data: URI"), html)
        html = self._remove(html, EVENT_HANDLER_RE, "inline event handler")

        return escape_template_syntax(html)

    def _remove(self, html: str, pattern: re.Pattern[str], description: str) -> str:
        def repl(_m: re.Match[str]) -> str:
            self._warn(f"sanitize_html: removed {description} tag")
            return ""

        return pattern.sub(repl, html)

    def _strip_url(self, description: str) -> Callable[[re.Match[str]], str]:
        def repl(m: re.Match[str]) -> str:
            self._warn(f"sanitize_html: removed {description}")
            return f'{m.group(1)}="'

        return repl

    def _filter_iframe(self, m: re.Match[str]) -> str:
        tag = m.group(0)
        src_match = IFRAME_SRC_RE.search(tag)
        if src_match is None:
            self._warn("sanitize_html: removed <iframe> without src attribute")
            return ""
        src = src_match.group(1)
        try:
            parts = urlsplit(src)
            host = (parts.hostname or "").lower()
        except ValueError:
            parts, host = None, ""
        if parts is None or parts.scheme not in ("http", "https"):
            self._warn(f"sanitize_html: removed <iframe> with disallowed src: {src}")
            return ""
        if host in self.allowed_hosts:
            return tag
        self._warn(
            f'sanitize_html: removed <iframe> with host "{host}". '
            f'To allow it, add "{host}" to sanitizer.allowed_iframe_hosts '
            "in the configuration file."
        )
        return ""

    def _warn(self, message: str) -> None:
        self.stats.sanitizer_removals += 1
        logger.warning(message)
