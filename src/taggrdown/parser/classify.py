"""Decide what a link or image reference turns into."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from urllib.parse import SplitResult, urlsplit

from .base import Image, Inline, Link, LinkKind, SiteConfig, Text

logger = logging.getLogger(__name__)

BLOB_PREFIX = "/blob/"

# 4x3 transparent PNG shown until the blob bytes arrive.
FILLER_IMAGE = (
    "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAQAAAADCAQAAAAe/WZNAAAAEElEQVR42mNkMGYAA0YMBgAJ4QCdD/t7zAAAAABJRU5ErkJggg=="
)

_YOUTUBE_RE = re.compile(
    r"https://(?:www\.)?(?:youtu\.be/|youtube\.com/watch\?v=|youtube\.com/shorts/)([a-zA-Z0-9\-_]*)"
)
_URL_SHAPED_RE = re.compile(r"^(?:https?://.+|www\..+)$", re.DOTALL)
_DIMENSIONS_RE = re.compile(r"(\d+)x(\d+)")


def is_url_shaped(value: str) -> bool:
    return bool(_URL_SHAPED_RE.match(value))


def youtube_id(value: str) -> str | None:
    """Return the video id if *value* contains a YouTube URL, '' if the id is missing."""
    m = _YOUTUBE_RE.search(value)
    if not m:
        return None
    return m.group(1)


def _parse_absolute(url: str) -> SplitResult | None:
    try:
        parsed = urlsplit(url)
    except ValueError:
        return None
    if not parsed.scheme:
        return None
    if parsed.scheme in ("http", "https") and not parsed.netloc:
        return None
    return parsed


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------

def classify_link(
    href: str,
    label_text: str,
    label: list[Inline],
    site: SiteConfig,
    *,
    preview: bool = False,
) -> Link | None:
    """Classify a ``[label](href)`` candidate; ``None`` means render nothing."""
    video = youtube_id(label_text)
    if video is not None:
        if not video:
            logger.debug("Dropping YouTube link without a video id: %r", label_text)
            return None
        return Link(
            href=f"https://youtube.com/embed/{video}",
            label=[Text("YouTube")],
            kind=LinkKind.YOUTUBE,
            video_id=video,
            expanded=not preview,
        )

    label_is_url = is_url_shaped(label_text)
    if label_is_url or is_url_shaped(href):
        parsed = _parse_absolute(href)
        if parsed is not None and parsed.hostname:
            if site.is_own_host(parsed.hostname):
                return _internal_route(href, parsed, label_text, label)
            if label_is_url:
                label = [Text(parsed.hostname.upper())]
            return Link(href=href, label=label, kind=LinkKind.EXTERNAL)
        return Link(href=href, label=label)

    if href.startswith("/"):
        return Link(href="#" + href.replace("/#/", "/", 1), label=label)

    return Link(href=href, label=label)


def _internal_route(href: str, parsed: SplitResult, label_text: str, label: list[Inline]) -> Link:
    origin = f"{parsed.scheme}://{parsed.netloc}"
    rest = href[len(origin):] if href.startswith(origin) else href
    if rest.startswith("/"):
        rest = rest[1:]
    route = ("" if rest.startswith("#") else "#/") + rest
    if label_text == href:
        label = [Text(route.replace("#", "", 1))]
    return Link(href=route, label=label, kind=LinkKind.INTERNAL)


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

def classify_image(
    src: str,
    alt: str,
    urls: Mapping[str, str],
    site: SiteConfig,
) -> Image | None:
    """Resolve an ``![alt](src)`` candidate; ``None`` means render nothing."""
    src = src.replace("&amp;", "&")

    if src.startswith(BLOB_PREFIX):
        blob_id = src[len(BLOB_PREFIX):]
        if blob_id in urls:
            return Image(src=urls[blob_id], alt=alt, internal=True, blob_id=blob_id)
        width, height = placeholder_dimensions(alt, site)
        return Image(
            src=FILLER_IMAGE,
            alt=alt,
            internal=True,
            blob_id=blob_id,
            width=width,
            height=height,
        )

    parsed = _parse_absolute(src)
    if parsed is None:
        logger.debug("Dropping image with unresolvable source: %r", src)
        return None
    return Image(
        src=src,
        alt=alt,
        internal=False,
        blob_id=src,
        source_host=parsed.netloc.rsplit("@", 1)[-1],
    )


def placeholder_dimensions(alt: str, site: SiteConfig) -> tuple[int, int]:
    """Width/height for a placeholder: ``WxH`` from *alt*, else the viewport bound."""
    max_height = site.max_image_height
    m = _DIMENSIONS_RE.search(alt)
    if m:
        width, height = int(m.group(1)), int(m.group(2))
    else:
        width, height = site.viewport_width, max_height
    return width, min(max_height, height)
