"""Tests for paragraph / gallery splitting."""

from __future__ import annotations

from taggrdown.parser.base import FigureBlock, Gallery, Image, Italic, Paragraph, SiteConfig, Text
from taggrdown.parser.gallery import make_gallery, split_paragraph, trim_inline
from taggrdown.parser.md_parser import parse


SITE = SiteConfig(domain="taggr.link")
URLS = {"x": "https://cdn.test/x", "y": "https://cdn.test/y", "z": "https://cdn.test/z"}


def img(blob_id: str) -> Image:
    return Image(src=f"https://cdn.test/{blob_id}", alt=blob_id, internal=True, blob_id=blob_id)


# ---------------------------------------------------------------------------
# Galleries
# ---------------------------------------------------------------------------

def test_two_leading_images_form_a_gallery() -> None:
    doc = parse("![a](/blob/x)\n![b](/blob/y)", URLS, site=SITE)
    assert len(doc.blocks) == 1
    gallery = doc.blocks[0]
    assert isinstance(gallery, Gallery)
    first, second = gallery.images
    assert first.blob_id == "x" and first.gallery == ["x", "y"] and first.thumbnail is False
    assert first.alt == "a"
    assert second.blob_id == "y" and second.gallery == ["x", "y"] and second.thumbnail is True
    assert second.alt == ""
    assert gallery.trailing == []


def test_single_image_is_a_gallery() -> None:
    doc = parse("![a](/blob/x)", URLS, site=SITE)
    assert doc.blocks == [
        Gallery(images=[Image(src="https://cdn.test/x", alt="a", internal=True, blob_id="x", gallery=["x"])])
    ]


def test_gallery_keeps_trailing_prose() -> None:
    doc = parse("![a](/blob/x) a _nice_ view", URLS, site=SITE)
    gallery = doc.blocks[0]
    assert isinstance(gallery, Gallery)
    assert gallery.trailing == [Text("a "), Italic([Text("nice")]), Text(" view")]


def test_gallery_images_do_not_share_id_lists() -> None:
    gallery = make_gallery([img("x"), img("y"), img("z")])
    gallery.images[0].gallery.append("mutated")
    assert gallery.images[1].gallery == ["x", "y", "z"]


# ---------------------------------------------------------------------------
# Mixed paragraphs
# ---------------------------------------------------------------------------

def test_mixed_paragraph_is_split_around_images() -> None:
    doc = parse("hello ![a](/blob/x) world", URLS, site=SITE)
    assert len(doc.blocks) == 3
    before, figure, after = doc.blocks
    assert before == Paragraph([Text("hello")])
    assert isinstance(figure, FigureBlock)
    assert figure.image.blob_id == "x"
    assert figure.image.thumbnail is False
    assert after == Paragraph([Text("world")])


def test_consecutive_images_after_text_are_standalone() -> None:
    blocks = split_paragraph([Text("intro "), img("x"), Text(" "), img("y")])
    assert blocks == [Paragraph([Text("intro")]), FigureBlock(img("x")), FigureBlock(img("y"))]


def test_paragraph_without_images_is_unchanged() -> None:
    children = [Text("just "), Italic([Text("words")])]
    assert split_paragraph(children) == [Paragraph(children)]


def test_trim_inline_drops_emptied_text() -> None:
    assert trim_inline([Text("  "), Italic([Text("x")]), Text(" ")]) == [Italic([Text("x")])]
