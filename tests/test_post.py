"""Tests for post-level composition."""

from __future__ import annotations

from datetime import datetime, timezone

from taggrdown.parser.base import BlogTitle, HorizontalRule, Link, Paragraph, SiteConfig, Text
from taggrdown.parser.post import CUT, render_post, text_size_class


SITE = SiteConfig(domain="taggr.link")
NOW = datetime(2024, 3, 10, tzinfo=timezone.utc)


def test_post_without_cut() -> None:
    post = render_post("just text", site=SITE)
    assert post.body.blocks == [Paragraph([Text("just text")])]
    assert post.extension is None
    assert post.shortened is False


def test_cut_splits_body_and_extension() -> None:
    post = render_post(f"intro{CUT}more", site=SITE)
    assert post.body.blocks == [Paragraph([Text("intro")])]
    assert post.extension.blocks == [Paragraph([Text("more")])]
    assert post.collapsed is False
    assert post.shortened is True


def test_preview_marks_cut_with_rule() -> None:
    post = render_post(f"intro{CUT}more", site=SITE, preview=True)
    assert post.body.blocks[-1] == HorizontalRule()


def test_collapse_hides_extension() -> None:
    post = render_post(f"intro{CUT}more", site=SITE, collapse=True)
    assert post.extension is None
    assert post.collapsed is True


def test_mentions_are_linked() -> None:
    post = render_post("hi @bob", site=SITE)
    assert post.body.blocks == [Paragraph([Text("hi "), Link(href="#/user/bob", label=[Text("@bob")])])]


def test_banner_only_in_body() -> None:
    title = BlogTitle(author="alice", created=NOW, length=10)
    post = render_post(f"# Title{CUT}# Appendix", None, title, site=SITE, now=NOW)
    assert post.body.blocks[0].banner is not None
    assert post.extension.blocks[0].banner is None


def test_text_size_class() -> None:
    assert text_size_class("short post", True) == "x_large_text"
    assert text_size_class("word " * 60, True) == "enlarged_text"
    assert text_size_class("word " * 120, True) == ""
    assert text_size_class("short post", False) == ""
    assert text_size_class("# Title", True) == ""
    assert text_size_class("\n".join(["line"] * 12), True) == ""
    assert render_post("tiny", site=SITE, prime_mode=True).css_class == "x_large_text"
