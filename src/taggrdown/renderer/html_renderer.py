"""Render the content node tree into a self-contained HTML page."""

from __future__ import annotations

import html
import json
import logging
import re
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from taggrdown.parser.base import (
    Block,
    Blockquote,
    Bold,
    Code,
    CodeBlock,
    Details,
    Document,
    FigureBlock,
    Fragment,
    Gallery,
    Heading,
    HorizontalRule,
    Image,
    Inline,
    Italic,
    LineBreak,
    Link,
    LinkKind,
    ListItem,
    OrderedList,
    Paragraph,
    RealmTag,
    Strike,
    TableBlock,
    Text,
    UnorderedList,
)
from taggrdown.parser.post import Post

logger = logging.getLogger(__name__)

LINK_SCHEMES = frozenset({"http", "https", "mailto"})
IMAGE_SCHEMES = frozenset({"http", "https"})

_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")
_IGNORED_URL_CHARS_RE = re.compile(r"[\x00-\x20\x7f]")


def is_safe_url(url: str, schemes: frozenset[str] = LINK_SCHEMES) -> bool:
    """True for routes, relative paths and absolute URLs with an allowed scheme."""
    # Control characters and whitespace are ignored when reading the scheme.
    m = _SCHEME_RE.match(_IGNORED_URL_CHARS_RE.sub("", url))
    return m is None or m.group(1).lower() in schemes


def _attr(value: object) -> str:
    return html.escape(str(value), quote=True)


class HTMLRenderer:
    """Walk a :class:`Document` and fill the post template."""

    def __init__(self, template_path: Path | None = None) -> None:
        if template_path is None:
            template_path = Path(__file__).resolve().parent.parent / "template" / "post.html"

        loader = FileSystemLoader(str(template_path.parent))
        self._env = Environment(loader=loader, autoescape=True, trim_blocks=True, lstrip_blocks=True)
        self._template_name = template_path.name

    def render(
        self,
        post: Post,
        *,
        title: str | None = None,
        dark_mode: bool = False,
    ) -> str:
        page_title = title or _first_heading_text(post.body) or "Untitled"
        template = self._env.get_template(self._template_name)
        return template.render(
            page_title=page_title,
            css_class=post.css_class,
            body_html=self.render_document(post.body),
            extension_html=self.render_document(post.extension) if post.extension else "",
            collapsed=post.collapsed,
            dark_mode=dark_mode,
        )

    def render_document(self, document: Document) -> str:
        return "\n".join(part for part in (self.render_block(b) for b in document.blocks) if part)

    # -- blocks -------------------------------------------------------------

    def render_block(self, block: Block) -> str:
        if isinstance(block, Heading):
            heading = f"<h{block.level}>{self.render_inline(block.children)}</h{block.level}>"
            if block.banner is None:
                return heading
            banner = self.render_inline(block.banner.children)
            return f'{heading}\n<p class="blog_title medium_text vertically_spaced">{banner}</p>'

        if isinstance(block, Paragraph):
            return f"<p>{self.render_inline(block.children)}</p>"

        if isinstance(block, Gallery):
            return self._render_gallery(block)

        if isinstance(block, FigureBlock):
            return self._render_image(block.image)

        if isinstance(block, CodeBlock):
            cls = f' class="language-{_attr(block.lang)}"' if block.lang else ""
            return f"<pre><code{cls}>{html.escape(block.raw)}</code></pre>"

        if isinstance(block, UnorderedList):
            return f"<ul>{self._render_items(block.items)}</ul>"

        if isinstance(block, OrderedList):
            start = f' start="{block.start}"' if block.start != 1 else ""
            return f"<ol{start}>{self._render_items(block.items)}</ol>"

        if isinstance(block, Blockquote):
            inner = "\n".join(self.render_block(b) for b in block.children)
            return f"<blockquote>{inner}</blockquote>"

        if isinstance(block, TableBlock):
            return self._render_table(block)

        if isinstance(block, HorizontalRule):
            return "<hr />"

        if isinstance(block, Details):
            inner = "\n".join(self.render_block(b) for b in block.children)
            return f"<details><summary>{self.render_inline(block.summary)}</summary>{inner}</details>"

        return ""

    def _render_items(self, items: list[ListItem]) -> str:
        parts = []
        for item in items:
            checkbox = ""
            if item.checked is not None:
                checked = " checked" if item.checked else ""
                checkbox = f'<input type="checkbox" disabled readonly{checked} /> '
            parts.append(f"<li>{checkbox}{self.render_inline(item.children)}</li>")
        return "".join(parts)

    def _render_gallery(self, gallery: Gallery) -> str:
        if not gallery.images:
            return ""
        first, *thumbnails = gallery.images
        parts = [f'<div class="gallery">{self._render_image(first)}</div>']
        if thumbnails:
            thumbs = "".join(self._render_image(image) for image in thumbnails)
            parts.append(f'<div data-meta="skipClicks" class="thumbnails row_container">{thumbs}</div>')
        if gallery.trailing:
            parts.append(f"<p>{self.render_inline(gallery.trailing)}</p>")
        return "\n".join(parts)

    def _render_table(self, table: TableBlock) -> str:
        def style(idx: int) -> str:
            return f' style="text-align: {table.alignments[idx].value}"'

        head = "".join(
            f"<th{style(idx)}>{self.render_inline(cell)}</th>" for idx, cell in enumerate(table.header)
        )
        rows = "".join(
            "<tr>"
            + "".join(f"<td{style(idx)}>{self.render_inline(cell)}</td>" for idx, cell in enumerate(row))
            + "</tr>"
            for row in table.rows
        )
        return f"<table><thead><tr>{head}</tr></thead><tbody>{rows}</tbody></table>"

    # -- inline -------------------------------------------------------------

    def render_inline(self, nodes: list[Inline]) -> str:
        return "".join(self._render_inline_node(node) for node in nodes)

    def _render_inline_node(self, node: Inline) -> str:
        if isinstance(node, Text):
            return html.escape(node.text)
        if isinstance(node, Code):
            return f"<code>{html.escape(node.text)}</code>"
        if isinstance(node, Bold):
            return f"<strong>{self.render_inline(node.children)}</strong>"
        if isinstance(node, Italic):
            return f"<em>{self.render_inline(node.children)}</em>"
        if isinstance(node, Strike):
            return f"<del>{self.render_inline(node.children)}</del>"
        if isinstance(node, LineBreak):
            return "<br />"
        if isinstance(node, Fragment):
            return self.render_inline(node.children)
        if isinstance(node, RealmTag):
            style = f' style="background: {_attr(node.background)}"' if node.background else ""
            return (
                f'<a class="realm_span realm_tag" href="{_attr(node.href)}"{style}>'
                f"{html.escape(node.name)}</a>"
            )
        if isinstance(node, Image):
            return self._render_image(node)
        if isinstance(node, Link):
            return self._render_link(node)
        return ""

    def _render_link(self, link: Link) -> str:
        if link.kind is LinkKind.YOUTUBE:
            if link.expanded:
                return (
                    '<span class="video-container" style="display: block">'
                    f'<iframe loading="lazy" allowfullscreen referrerpolicy="origin" frameborder="0" '
                    f'src="{_attr(link.href)}"></iframe></span>'
                )
            return (
                f'<span data-meta="skipClicks" class="yt_preview" data-video-id="{_attr(link.video_id)}">'
                "YouTube</span>"
            )

        if not is_safe_url(link.href):
            logger.debug("Rendering link with unsafe href as text: %r", link.href)
            return self.render_inline(link.label)

        attrs = [f'href="{_attr(link.href)}"']
        if link.kind is LinkKind.EXTERNAL:
            attrs.insert(0, 'class="external"')
            attrs.append(f'rel="{link.rel}"')
            attrs.append(f'target="{link.target}"')
        return f"<a {' '.join(attrs)}>{self.render_inline(link.label)}</a>"

    def _render_image(self, image: Image) -> str:
        if not image.internal and not is_safe_url(image.src, IMAGE_SCHEMES):
            logger.debug("Dropping image with unsafe source: %r", image.src)
            return ""
        target = image.preview_target()
        attrs = [
            f'src="{_attr(image.src)}"',
            f'alt="{_attr(image.alt)}"',
            f'data-preview-src="{_attr(target.src)}"',
            f'data-blob-id="{_attr(target.blob_id)}"',
        ]
        if target.gallery:
            attrs.append(f'data-gallery="{_attr(json.dumps(list(target.gallery)))}"')
        if image.thumbnail:
            attrs.append('class="thumbnail"')
        if image.width is not None:
            attrs.append(f'width="{image.width}"')
        if image.height is not None:
            attrs.append(f'height="{image.height}"')
        element = f"<img {' '.join(attrs)} />"
        if not image.show_source:
            return element
        return (
            f'<div class="text_centered">{element}<span class="external_image_bar">URL: '
            f'<a rel="nofollow noopener noreferrer" href="{_attr(image.src)}">'
            f"{html.escape(image.source_host or '')}</a></span></div>"
        )


def _first_heading_text(document: Document) -> str:
    for block in document.blocks:
        if isinstance(block, Heading):
            return "".join(
                node.text for node in block.children if isinstance(node, (Text, Code))
            ).strip()
    return ""
