"""Inline resolver: turns one line or joined paragraph into inline nodes.

The scan is anchored at the current position: the first construct that
matches there wins, otherwise exactly one character is consumed as literal
text. Nested constructs are resolved by recursing on the captured slice.
"""

from __future__ import annotations

import html
import logging
import re
from collections.abc import Mapping

from .base import Bold, Code, Inline, Italic, LineBreak, SiteConfig, Strike, Text
from .classify import classify_image, classify_link

logger = logging.getLogger(__name__)

ESCAPABLE = "\\`*_~[]!|"

# Deepest emphasis, link label, blockquote or details nesting that is parsed.
MAX_NESTING = 32

_ENTITY_RE = re.compile(r"&(?:#\d+|#x[0-9a-fA-F]+|\w+);")
_BR_RE = re.compile(r"<br\s*/?\s*>", re.IGNORECASE)
_HARD_BREAK_RE = re.compile(r" {2,}\n")
_AUTOLINK_RE = re.compile(
    r"https?://[^\s<>\[\]]*[^\s<>\[\].,;:!?)\]}'\"]|www\.[^\s<>\[\]]*[^\s<>\[\].,;:!?)\]}'\"]"
)
_AUTOLINK_PREFIXES = ("https://", "http://", "www.")
_ITALIC_CLOSE_FOLLOW = re.compile(r"[\s.,;:!?)\]}]")

# (node, end) where node is an inline node, literal text, or None for a
# construct that matched but renders nothing.
_Match = tuple[Inline | str | None, int] | None


def decode_entities(text: str) -> str:
    return _ENTITY_RE.sub(lambda m: html.unescape(m.group(0)), text)


# ---------------------------------------------------------------------------
# Delimiter search helpers
# ---------------------------------------------------------------------------

def _skip_code_span(text: str, i: int) -> int:
    """If a code span opens at *i*, return the index of its closing backtick."""
    end = text.find("`", i + 1)
    return end if end != -1 else i


def find_delimiter(text: str, start: int, delim: str) -> int:
    i = start
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == "`":
            i = _skip_code_span(text, i) + 1
            continue
        if text.startswith(delim, i):
            return i
        i += 1
    return -1


def find_single_delimiter(text: str, start: int, ch: str) -> int:
    """Like :func:`find_delimiter` but ignores *ch* when it is doubled."""
    i = start
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == "`":
            i = _skip_code_span(text, i) + 1
            continue
        if (
            text[i] == ch
            and (i == 0 or text[i - 1] != ch)
            and (i + 1 >= len(text) or text[i + 1] != ch)
        ):
            return i
        i += 1
    return -1


def _find_closing(text: str, open_idx: int, opener: str, closer: str) -> int:
    depth = 0
    i = open_idx
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class InlineResolver:
    """Resolve inline markup against a fixed URL map and site configuration."""

    def __init__(
        self,
        urls: Mapping[str, str] | None = None,
        site: SiteConfig | None = None,
        *,
        preview: bool = False,
        autolink: bool = True,
    ) -> None:
        self.urls = urls or {}
        self.site = site or SiteConfig()
        self.preview = preview
        self.autolink = autolink

    def resolve(self, text: str, depth: int = 0) -> list[Inline]:
        if depth > MAX_NESTING:
            logger.debug("Inline nesting deeper than %d, keeping the rest as text", MAX_NESTING)
            return [Text(decode_entities(text.replace("\n", " ")))] if text else []

        nodes: list[Inline] = []
        buf: list[str] = []
        i = 0

        def emit(node: Inline | None) -> None:
            # Dropped nodes leave the surrounding literal text coalesced.
            if node is None:
                return
            if buf:
                nodes.append(Text(decode_entities("".join(buf))))
                buf.clear()
            nodes.append(node)

        while i < len(text):
            matched = self._match_at(text, i, depth)
            if matched is None:
                ch = text[i]
                buf.append(" " if ch == "\n" else ch)
                i += 1
                continue
            node, end = matched
            if isinstance(node, str):
                buf.append(node)
            else:
                emit(node)
            i = end

        if buf:
            nodes.append(Text(decode_entities("".join(buf))))
        return nodes

    def _match_at(self, text: str, i: int, depth: int) -> _Match:
        """Try every construct anchored at *i*; ``None`` if none matches."""
        ch = text[i]

        if ch == "\\" and i + 1 < len(text) and text[i + 1] in ESCAPABLE:
            return text[i + 1], i + 2

        if ch == " ":
            m = _HARD_BREAK_RE.match(text, i)
            if m:
                return LineBreak(), m.end()

        if ch == "<":
            m = _BR_RE.match(text, i)
            if m:
                return LineBreak(), m.end()

        if ch == "`":
            return self._code_span(text, i)

        if ch == "*":
            return self._asterisk(text, i, depth)

        if ch == "_":
            return self._underscore(text, i, depth)

        if ch == "~":
            return self._tilde(text, i, depth)

        if ch == "!" and text.startswith("![", i):
            return self._image(text, i)

        if ch == "[":
            return self._link(text, i, depth)

        if (
            self.autolink
            and text.startswith(_AUTOLINK_PREFIXES, i)
            and (i == 0 or text[i - 1] in " \t\n(")
        ):
            return self._autolink(text, i)

        return None

    # -- constructs ---------------------------------------------------------

    def _code_span(self, text: str, i: int) -> _Match:
        j = i
        while j < len(text) and text[j] == "`":
            j += 1
        ticks = j - i
        closer = text.find("`" * ticks, j)
        if closer == -1:
            return None
        code = text[j:closer]
        if ticks > 1 and len(code) > 1 and code[0] == " " and code[-1] == " ":
            code = code[1:-1]
        return Code(code), closer + ticks

    def _wrap(
        self,
        text: str,
        start: int,
        end: int,
        width: int,
        cls: type[Bold | Italic | Strike],
        depth: int,
    ) -> _Match:
        inner = self.resolve(text[start:end], depth + 1)
        return cls(inner), end + width

    def _asterisk(self, text: str, i: int, depth: int) -> _Match:
        if text.startswith("***", i):
            end = find_delimiter(text, i + 3, "***")
            if end > i + 3:
                return Bold([Italic(self.resolve(text[i + 3:end], depth + 1))]), end + 3
        if text.startswith("**", i):
            end = find_delimiter(text, i + 2, "**")
            if end > i + 2:
                return self._wrap(text, i + 2, end, 2, Bold, depth)
            return None
        end = find_single_delimiter(text, i + 1, "*")
        if end > i + 1:
            return self._wrap(text, i + 1, end, 1, Italic, depth)
        return None

    def _underscore(self, text: str, i: int, depth: int) -> _Match:
        if text.startswith("__", i) or (i > 0 and not text[i - 1].isspace()):
            return None
        end = find_single_delimiter(text, i + 1, "_")
        if end <= i + 1:
            return None
        if end + 1 < len(text) and not _ITALIC_CLOSE_FOLLOW.match(text[end + 1]):
            return None
        return self._wrap(text, i + 1, end, 1, Italic, depth)

    def _tilde(self, text: str, i: int, depth: int) -> _Match:
        if text.startswith("~~", i):
            end = find_delimiter(text, i + 2, "~~")
            if end > i + 2:
                return self._wrap(text, i + 2, end, 2, Strike, depth)
            return None
        end = find_single_delimiter(text, i + 1, "~")
        if end > i + 1:
            return self._wrap(text, i + 1, end, 1, Strike, depth)
        return None

    def _image(self, text: str, i: int) -> _Match:
        alt_end = _find_closing(text, i + 1, "[", "]")
        if alt_end == -1 or not text.startswith("(", alt_end + 1):
            return None
        src_end = _find_closing(text, alt_end + 1, "(", ")")
        if src_end == -1:
            return None
        alt = text[i + 2:alt_end]
        src = text[alt_end + 2:src_end].strip()
        return classify_image(src, alt, self.urls, self.site), src_end + 1

    def _link(self, text: str, i: int, depth: int) -> _Match:
        label_end = _find_closing(text, i, "[", "]")
        if label_end == -1 or not text.startswith("(", label_end + 1):
            return None
        href_end = _find_closing(text, label_end + 1, "(", ")")
        if href_end == -1:
            return None
        label_text = text[i + 1:label_end]
        href = text[label_end + 2:href_end].strip()
        # Anchors never nest, so bare URLs inside a label stay text.
        labels = InlineResolver(self.urls, self.site, preview=self.preview, autolink=False)
        label = labels.resolve(label_text, depth + 1)
        link = classify_link(href, label_text, label, self.site, preview=self.preview)
        return link, href_end + 1

    def _autolink(self, text: str, i: int) -> _Match:
        m = _AUTOLINK_RE.match(text, i)
        if not m:
            return None
        url = m.group(0)
        href = "https://" + url if url.startswith("www.") else url
        link = classify_link(href, url, [Text(url)], self.site, preview=self.preview)
        return link, m.end()


def resolve_inline(
    text: str,
    urls: Mapping[str, str] | None = None,
    site: SiteConfig | None = None,
    *,
    preview: bool = False,
) -> list[Inline]:
    return InlineResolver(urls, site, preview=preview).resolve(text)
