"""Metadata line shown beneath a post's title heading."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

from .base import BlogTitle, Bold, Fragment, Link, RealmTag, Text

WORDS_PER_MINUTE = 400
SEPARATOR = "  ·  "


def reading_minutes(length: int) -> int:
    return math.ceil(length / WORDS_PER_MINUTE)


def time_ago(created: datetime, now: datetime) -> str:
    """Long absolute date: ``March 5`` within 90 days of *now*, ``March 5, 24`` beyond."""
    created = _aware(created)
    now = _aware(now)
    if now - created < timedelta(days=90):
        return f"{created:%B} {created.day}"
    return f"{created:%B} {created.day}, {created:%y}"


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def blog_banner(title: BlogTitle, now: datetime) -> Fragment:
    children = [
        Text("By "),
        Link(href=f"#/journal/{title.author}", label=[Text(title.author)]),
        Text(SEPARATOR),
        Bold([Text(time_ago(title.created, now))]),
    ]
    if title.realm:
        children += [Text(SEPARATOR), RealmTag(title.realm, title.background)]
    children += [Text(SEPARATOR), Text(f"{reading_minutes(title.length)} minutes read")]
    return Fragment(children)
