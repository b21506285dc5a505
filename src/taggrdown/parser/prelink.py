"""Rewrite bare #tags, @mentions, $tokens and /realms into markdown links."""

from __future__ import annotations

import re

import regex

# Code spans, fenced code and existing link/image syntax pass through untouched.
_PROTECTED_RE = re.compile(r"(!?\[.*?\]\(.*?\)|```.+?```|`.+?`)", re.DOTALL)

_TOKEN_RE = regex.compile(
    r"(?<=\s|\(|^)(/|\$[\p{L}\p{M}]|#|@)[\p{L}\p{M}\d\-_.]*[\p{L}\p{M}\d]"
)

TOKEN_ROUTES: dict[str, str] = {
    "@": "user",
    "#": "feed",
    "$": "feed",
    "/": "realm",
}


def link_tags_and_users(text: str) -> str:
    """Return *text* with every bare token turned into ``[token](#/kind/rest)``."""
    parts = _PROTECTED_RE.split(text)
    # re.split keeps captured separators at odd indices.
    return "".join(part if idx % 2 else _link_part(part) for idx, part in enumerate(parts))


def _link_part(value: str) -> str:
    def _replace(m: regex.Match[str]) -> str:
        token = m.group(0)
        return f"[{token}](#/{TOKEN_ROUTES[token[0]]}/{token[1:]})"

    return _TOKEN_RE.sub(_replace, value)
