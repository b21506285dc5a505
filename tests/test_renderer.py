from datetime import datetime, timezone

from taggrdown.parser.base import BlogTitle, Document, Gallery, SiteConfig
from taggrdown.parser.post import render_post
from taggrdown.renderer.html_renderer import HTMLRenderer, is_safe_url


SITE = SiteConfig(domain="taggr.link", viewport_width=600, viewport_height=600)
NOW = datetime(2024, 3, 10, tzinfo=timezone.utc)


def test_renderer_generates_post_page() -> None:
    md = """\
# Renderer Test

Visit [https://example.com/a](https://example.com/a) or @bob.

![a](/blob/x)
![b](/blob/y)

text before ![ext](https://img.example.com/p.png) after

| L | R |
|:--|--:|
| 1 | 2 |

- [x] done

<details>
<summary>More</summary>
hidden <script>
</details>
"""
    title = BlogTitle(author="alice", created=NOW, length=800, realm="chess", background="#123456")
    post = render_post(md, {"x": "https://cdn.test/x"}, title, site=SITE, now=NOW)

    html = HTMLRenderer().render(post)

    assert html.startswith("<!DOCTYPE html>")
    assert "<title>Renderer Test</title>" in html
    assert "<h1>Renderer Test</h1>" in html
    assert 'class="blog_title' in html
    assert 'href="#/journal/alice"' in html
    assert "realm_tag" in html
    assert "2 minutes read" in html
    assert 'class="external"' in html
    assert 'rel="nofollow noopener noreferrer"' in html
    assert "EXAMPLE.COM" in html
    assert 'href="#/user/bob"' in html
    assert 'class="gallery"' in html
    assert "thumbnails row_container" in html
    assert 'data-gallery="[&quot;x&quot;, &quot;y&quot;]"' in html
    assert 'data-blob-id="x"' in html
    assert 'src="https://cdn.test/x"' in html
    assert 'height="200"' in html
    assert "external_image_bar" in html
    assert "img.example.com" in html
    assert "text-align: right" in html
    assert 'type="checkbox" disabled readonly checked' in html
    assert "<details><summary>More</summary>" in html
    assert "&lt;script&gt;" in html
    assert "/blob/" not in html


def test_youtube_preview_is_collapsed() -> None:
    renderer = HTMLRenderer()
    collapsed = render_post("https://youtu.be/abc123", site=SITE, preview=True)
    expanded = render_post("https://youtu.be/abc123", site=SITE)
    assert 'class="yt_preview"' in renderer.render_document(collapsed.body)
    assert 'data-video-id="abc123"' in renderer.render_document(collapsed.body)
    assert 'src="https://youtube.com/embed/abc123"' in renderer.render_document(expanded.body)


def test_empty_gallery_renders_nothing() -> None:
    assert HTMLRenderer().render_document(Document([Gallery()])) == ""


def test_collapsed_post_shows_arrow() -> None:
    post = render_post("intro\n\n\n\nmore", site=SITE, collapse=True)
    html = HTMLRenderer().render(post, title="Custom")
    assert "<title>Custom</title>" in html
    assert "arrow_down" in html
    assert "more" not in HTMLRenderer().render_document(post.body)


def test_script_links_render_as_text() -> None:
    renderer = HTMLRenderer()
    for href in ("javascript:alert(document.cookie)", "JavaScript:alert(1)", "java\tscript:alert(1)", "data:text/html,x"):
        post = render_post(f"[click]({href})", site=SITE)
        html = renderer.render_document(post.body)
        assert html == "<p>click</p>"


def test_safe_links_are_kept() -> None:
    renderer = HTMLRenderer()
    html = renderer.render_document(render_post("[mail](mailto:a@b.c) [home](/about)", site=SITE).body)
    assert 'href="mailto:a@b.c"' in html
    assert 'href="#/about"' in html
    assert is_safe_url("#/user/bob")
    assert is_safe_url("https://example.com")
    assert not is_safe_url(" javascript:x")
    assert not is_safe_url("vbscript:x")


def test_external_image_with_script_source_is_dropped() -> None:
    post = render_post("text ![x](javascript:alert(1))", site=SITE)
    assert "javascript" not in HTMLRenderer().render_document(post.body)
