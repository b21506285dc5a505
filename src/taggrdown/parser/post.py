"""Post-level composition: cut marker, banner gating and text sizing."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime

from .base import BlogTitle, Document, SiteConfig
from .md_parser import MarkdownParser
from .prelink import link_tags_and_users

# Four newlines separate the visible part of a post from its extension.
CUT = "\n\n\n\n"
PREVIEW_RULE = "\n\n- - -\n\n"
COMPLEX_PREFIXES = ("# ", "## ", "![")


@dataclass(slots=True)
class Post:
    body: Document
    extension: Document | None = None
    collapsed: bool = False
    css_class: str = ""

    @property
    def shortened(self) -> bool:
        return self.extension is not None or self.collapsed


def text_size_class(value: str, prime_mode: bool) -> str:
    """CSS class that enlarges short, simple posts in prime mode."""
    if not prime_mode or value.startswith(COMPLEX_PREFIXES):
        return ""
    if len(value.split("\n")) >= 10:
        return ""
    words = len(value.split(" "))
    if words < 50:
        return "x_large_text"
    if words < 100:
        return "enlarged_text"
    return ""


def render_post(
    value: str,
    urls: Mapping[str, str] | None = None,
    blog_title: BlogTitle | None = None,
    *,
    preview: bool = False,
    collapse: bool = False,
    prime_mode: bool = False,
    site: SiteConfig | None = None,
    now: datetime | None = None,
) -> Post:
    """Parse a full post, splitting it at the cut marker."""
    value = link_tags_and_users(value)
    parser = MarkdownParser(urls, site, preview=preview, now=now)

    extension_text: str | None = None
    cut_pos = value.find(CUT)
    if cut_pos >= 0:
        extension_text = value[cut_pos + len(CUT):]
        value = value[:cut_pos]
        if preview:
            value += PREVIEW_RULE

    # The parser drops the banner itself when the body has several titles.
    body = parser.parse(value, blog_title, prelink=False)
    extension = None
    if extension_text is not None and not collapse:
        extension = parser.parse(extension_text, prelink=False)

    return Post(
        body=body,
        extension=extension,
        collapsed=extension_text is not None and collapse,
        css_class=text_size_class(value, prime_mode),
    )
