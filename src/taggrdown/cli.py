"""taggrdown CLI entrypoint."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import click

from taggrdown.parser.base import BlogTitle, SiteConfig
from taggrdown.parser.post import render_post
from taggrdown.renderer.html_renderer import HTMLRenderer


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("input_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(path_type=Path), required=True, help="Output HTML path")
@click.option(
    "--urls",
    "urls_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON object mapping blob ids to resolved image URLs",
)
@click.option("--preview", is_flag=True, help="Collapse embeds and mark the cut with a rule")
@click.option("--collapse", is_flag=True, help="Hide the part of the post after the cut")
@click.option("--prime-mode", is_flag=True, help="Enlarge the text of short posts")
@click.option("--title", type=str, default=None, help="Override page title")
@click.option("--dark-mode", is_flag=True, help="Enable dark mode stylesheet")
@click.option("--author", type=str, default=None, help="Blog banner author (enables the banner)")
@click.option("--created", type=str, default=None, help="Blog banner creation time (ISO 8601)")
@click.option("--realm", type=str, default=None, help="Blog banner realm tag")
@click.option("--background", type=str, default=None, help="Blog banner realm tag colour")
@click.option("--domain", envvar="TAGGRDOWN_DOMAIN", default="taggr.link", show_default=True, help="Own site domain")
@click.option(
    "--alt-domain",
    "alt_domains",
    envvar="TAGGRDOWN_ALT_DOMAINS",
    multiple=True,
    help="Additional domain served by the same site (repeatable)",
)
@click.option(
    "--viewport",
    envvar="TAGGRDOWN_VIEWPORT",
    default="1024x768",
    show_default=True,
    help="Viewport WIDTHxHEIGHT used to size image placeholders",
)
@click.option("--verbose", "-v", is_flag=True, help="Log dropped and normalized nodes")
def main(
    input_path: Path,
    output: Path,
    urls_path: Path | None,
    preview: bool,
    collapse: bool,
    prime_mode: bool,
    title: str | None,
    dark_mode: bool,
    author: str | None,
    created: str | None,
    realm: str | None,
    background: str | None,
    domain: str,
    alt_domains: tuple[str, ...],
    viewport: str,
    verbose: bool,
) -> None:
    """Render a markdown post into a self-contained HTML file."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    now = datetime.now(timezone.utc)
    text = input_path.read_text(encoding="utf-8")
    urls = _load_urls(urls_path) if urls_path else {}
    width, height = _parse_viewport(viewport)
    site = SiteConfig(
        domain=domain,
        alt_domains=frozenset(alt_domains),
        viewport_width=width,
        viewport_height=height,
    )
    blog_title = None
    if author:
        blog_title = BlogTitle(
            author=author,
            created=_parse_created(created, now),
            length=len(text.split()),
            realm=realm,
            background=background,
        )

    post = render_post(
        text,
        urls,
        blog_title,
        preview=preview,
        collapse=collapse,
        prime_mode=prime_mode,
        site=site,
        now=now,
    )
    html = HTMLRenderer().render(post, title=title, dark_mode=dark_mode)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(html, encoding="utf-8")

    click.echo(f"Rendered: {output}")


def _load_urls(path: Path) -> dict[str, str]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid URL map {path.name}: {e}") from e
    if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
        raise click.ClickException(f"Invalid URL map {path.name}: expected an object of strings")
    return {str(k): v for k, v in data.items()}


def _parse_viewport(value: str) -> tuple[int, int]:
    width, sep, height = value.lower().partition("x")
    if not sep or not width.isdigit() or not height.isdigit():
        raise click.BadParameter(f"expected WIDTHxHEIGHT, got {value!r}", param_hint="--viewport")
    return int(width), int(height)


def _parse_created(value: str | None, now: datetime) -> datetime:
    if value is None:
        return now
    try:
        return datetime.fromisoformat(value)
    except ValueError as e:
        raise click.BadParameter(f"expected an ISO 8601 timestamp, got {value!r}", param_hint="--created") from e


if __name__ == "__main__":  # pragma: no cover
    main()
