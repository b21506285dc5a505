"""Decide the final block shape of a paragraph that may contain images."""

from __future__ import annotations

from dataclasses import replace

from .base import Block, FigureBlock, Gallery, Image, Inline, Paragraph, Text


def split_paragraph(children: list[Inline]) -> list[Block]:
    """Turn one paragraph's inline nodes into prose, a gallery, or prose/image runs."""
    images = [node for node in children if isinstance(node, Image)]
    if not images:
        return [Paragraph(children)]

    if isinstance(children[0], Image):
        return [make_gallery(children)]

    blocks: list[Block] = []
    chunk: list[Inline] = []
    for node in children:
        if isinstance(node, Image):
            _flush_chunk(chunk, blocks)
            chunk = []
            blocks.append(FigureBlock(node))
        else:
            chunk.append(node)
    _flush_chunk(chunk, blocks)
    return blocks


def make_gallery(children: list[Inline]) -> Gallery:
    """First image full size, the rest as thumbnails, prose trailing below."""
    images = [node for node in children if isinstance(node, Image)]
    others = [node for node in children if not isinstance(node, Image)]
    ids = [image.blob_id for image in images]

    gallery_images: list[Image] = []
    for idx, image in enumerate(images):
        if idx == 0:
            gallery_images.append(replace(image, gallery=list(ids)))
        else:
            gallery_images.append(replace(image, thumbnail=True, alt="", gallery=list(ids)))
    return Gallery(images=gallery_images, trailing=trim_inline(others))


def _flush_chunk(chunk: list[Inline], blocks: list[Block]) -> None:
    trimmed = trim_inline(chunk)
    if trimmed:
        blocks.append(Paragraph(trimmed))


def trim_inline(nodes: list[Inline]) -> list[Inline]:
    """Strip whitespace at both ends of an inline run, dropping emptied text nodes."""
    nodes = list(nodes)
    if nodes and isinstance(nodes[0], Text):
        nodes[0] = Text(nodes[0].text.lstrip())
    if nodes and isinstance(nodes[-1], Text):
        nodes[-1] = Text(nodes[-1].text.rstrip())
    return [node for node in nodes if not (isinstance(node, Text) and not node.text)]
