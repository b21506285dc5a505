from __future__ import annotations

import json
from pathlib import Path

from click.testing import CliRunner

from taggrdown.cli import main


def _write_post(tmp_path: Path) -> Path:
    post = tmp_path / "post.md"
    post.write_text("# Hello\n\nSee #news.\n\n![a](/blob/x)\n", encoding="utf-8")
    return post


def test_cli_renders_html(tmp_path: Path) -> None:
    post = _write_post(tmp_path)
    urls = tmp_path / "urls.json"
    urls.write_text(json.dumps({"x": "https://cdn.test/x.png"}), encoding="utf-8")
    out = tmp_path / "out" / "post.html"

    result = CliRunner().invoke(
        main,
        [
            str(post),
            "-o",
            str(out),
            "--urls",
            str(urls),
            "--author",
            "alice",
            "--created",
            "2024-03-05T10:00:00+00:00",
            "--realm",
            "chess",
        ],
    )

    assert result.exit_code == 0, result.output
    assert f"Rendered: {out}" in result.output
    html = out.read_text(encoding="utf-8")
    assert "<h1>Hello</h1>" in html
    assert 'href="#/journal/alice"' in html
    assert 'href="#/feed/news"' in html
    assert 'src="https://cdn.test/x.png"' in html


def test_cli_rejects_bad_viewport(tmp_path: Path) -> None:
    post = _write_post(tmp_path)
    result = CliRunner().invoke(main, [str(post), "-o", str(tmp_path / "o.html"), "--viewport", "wide"])
    assert result.exit_code == 2
    assert "WIDTHxHEIGHT" in result.output


def test_cli_rejects_bad_url_map(tmp_path: Path) -> None:
    post = _write_post(tmp_path)
    urls = tmp_path / "urls.json"
    urls.write_text("[1, 2]", encoding="utf-8")
    result = CliRunner().invoke(main, [str(post), "-o", str(tmp_path / "o.html"), "--urls", str(urls)])
    assert result.exit_code == 1
    assert "Invalid URL map" in result.output


def test_cli_domain_from_environment(tmp_path: Path) -> None:
    post = tmp_path / "post.md"
    post.write_text("[https://my.site/#/post/1](https://my.site/#/post/1)\n", encoding="utf-8")
    out = tmp_path / "o.html"
    result = CliRunner().invoke(main, [str(post), "-o", str(out)], env={"TAGGRDOWN_DOMAIN": "my.site"})
    assert result.exit_code == 0, result.output
    assert 'href="#/post/1"' in out.read_text(encoding="utf-8")
