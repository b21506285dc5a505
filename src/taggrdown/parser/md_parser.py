"""Line-oriented block parser producing the content node tree."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import datetime, timezone

from .banner import blog_banner
from .base import (
    Alignment,
    Block,
    BlogTitle,
    Blockquote,
    CodeBlock,
    Details,
    Document,
    Heading,
    HorizontalRule,
    Inline,
    ListItem,
    OrderedList,
    Paragraph,
    SiteConfig,
    TableBlock,
    Text,
    UnorderedList,
)
from .gallery import split_paragraph
from .inline import MAX_NESTING, InlineResolver
from .prelink import link_tags_and_users

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^(`{3,}|~{3,})(.*)$")
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)(?:\s+#+)?\s*$")
_HR_RE = re.compile(r"^([-*_])(?:\s*\1){2,}\s*$")
_BULLET_RE = re.compile(r"^[-*+]\s+(.*)$")
_ORDERED_RE = re.compile(r"^(\d+)[.)]\s+(.*)$")
_TABLE_SEP_RE = re.compile(r"^\|?\s*:?-+:?\s*(?:\|\s*:?-+:?\s*)*\|?\s*$")
_TASK_RE = re.compile(r"^\[([ xX])\]\s+(.*)$", re.DOTALL)
_DETAILS_OPEN_RE = re.compile(r"^<details(?:\s[^>]*)?>", re.IGNORECASE)
_DETAILS_CLOSE_RE = re.compile(r"</details\s*>", re.IGNORECASE)
_SUMMARY_RE = re.compile(r"[ \t]*\n?[ \t]*<summary[^>]*>(.*?)</summary\s*>", re.IGNORECASE | re.DOTALL)
_CELL_SPLIT_RE = re.compile(r"(?<!\\)\|")


# ---------------------------------------------------------------------------
# Line classification
# ---------------------------------------------------------------------------

def _is_hr(line: str) -> bool:
    return bool(_HR_RE.match(line))


def _bullet(line: str) -> re.Match[str] | None:
    return None if _is_hr(line) else _BULLET_RE.match(line)


def _is_quote(line: str) -> bool:
    return line.startswith("> ") or line == ">"


def _is_table_start(line: str, next_line: str | None) -> bool:
    if not line.startswith("|") or next_line is None:
        return False
    sep = next_line.strip()
    return "|" in sep and bool(_TABLE_SEP_RE.match(sep))


def _is_block_start(line: str, next_line: str | None) -> bool:
    return bool(
        _FENCE_RE.match(line)
        or _HEADING_RE.match(line)
        or _bullet(line)
        or _ORDERED_RE.match(line)
        or _is_quote(line)
        or _is_hr(line)
        or _is_table_start(line, next_line)
        or _DETAILS_OPEN_RE.match(line)
    )


def count_title_headings(text: str) -> int:
    return sum(1 for line in text.split("\n") if line.startswith("# "))


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class MarkdownParser:
    """Parse post markdown into a :class:`Document`.

    The parser holds only read-only inputs, so one instance can parse any
    number of texts and equal inputs always yield equal trees. The clock used
    for blog banner dates is read once, here, unless *now* is given.
    """

    def __init__(
        self,
        urls: Mapping[str, str] | None = None,
        site: SiteConfig | None = None,
        *,
        preview: bool = False,
        now: datetime | None = None,
    ) -> None:
        self.urls = dict(urls or {})
        self.site = site or SiteConfig()
        self.preview = preview
        self.now = now if now is not None else datetime.now(timezone.utc)
        self._inline = InlineResolver(self.urls, self.site, preview=preview)

    def parse(
        self,
        text: str,
        blog_title: BlogTitle | None = None,
        *,
        now: datetime | None = None,
        prelink: bool = True,
    ) -> Document:
        if prelink:
            text = link_tags_and_users(text)
        if blog_title is not None and count_title_headings(text) > 1:
            blog_title = None
        lines = text.replace("\r\n", "\n").split("\n")
        return Document(self._parse_lines(lines, blog_title, now if now is not None else self.now))

    def inline(self, text: str) -> list[Inline]:
        return self._inline.resolve(text)

    def _parse_lines(
        self,
        lines: list[str],
        blog_title: BlogTitle | None = None,
        now: datetime | None = None,
        depth: int = 0,
    ) -> list[Block]:
        if depth > MAX_NESTING:
            logger.debug("Block nesting deeper than %d, keeping the rest as text", MAX_NESTING)
            rest = " ".join(line.strip() for line in lines if line.strip())
            return [Paragraph([Text(rest)])] if rest else []

        blocks: list[Block] = []
        i = 0
        count = len(lines)

        while i < count:
            line = lines[i].strip()
            next_line = lines[i + 1] if i + 1 < count else None

            if not line:
                i += 1
                continue

            fence = _FENCE_RE.match(line)
            if fence:
                block, i = self._code_block(lines, i, fence)
                blocks.append(block)
                continue

            heading = _HEADING_RE.match(line)
            if heading:
                level = len(heading.group(1))
                block = Heading(level=level, children=self.inline(heading.group(2)))
                if level == 1 and blog_title is not None:
                    block.banner = blog_banner(blog_title, now)
                    blog_title = None
                blocks.append(block)
                i += 1
                continue

            if _bullet(line):
                items, i = self._list_items(lines, i, _bullet)
                blocks.append(UnorderedList(items=items))
                continue

            ordered = _ORDERED_RE.match(line)
            if ordered:
                start = int(ordered.group(1))
                items, i = self._list_items(lines, i, _ORDERED_RE.match)
                blocks.append(OrderedList(items=items, start=start))
                continue

            if _is_quote(line):
                block, i = self._blockquote(lines, i, depth)
                blocks.append(block)
                continue

            if _is_hr(line):
                blocks.append(HorizontalRule())
                i += 1
                continue

            if _is_table_start(line, next_line):
                block, i = self._table(lines, i)
                blocks.append(block)
                continue

            if _DETAILS_OPEN_RE.match(line):
                block, i = self._details(lines, i, depth)
                blocks.append(block)
                continue

            para_lines, i = self._paragraph_lines(lines, i)
            children = self.inline("\n".join(para_lines).strip())
            if children:
                blocks.extend(split_paragraph(children))

        return blocks

    # -- block kinds --------------------------------------------------------

    def _code_block(self, lines: list[str], i: int, fence: re.Match[str]) -> tuple[CodeBlock, int]:
        marker = fence.group(1)
        closing = re.compile(rf"^{re.escape(marker[0])}{{{len(marker)},}}\s*$")
        body: list[str] = []
        i += 1
        while i < len(lines):
            if closing.match(lines[i].strip()):
                i += 1
                break
            body.append(lines[i])
            i += 1
        return CodeBlock(raw="\n".join(body), lang=fence.group(2).strip()), i

    def _list_items(self, lines: list[str], i: int, marker) -> tuple[list[ListItem], int]:
        raw_items: list[list[str]] = []
        while i < len(lines):
            line = lines[i].strip()
            m = marker(line)
            if m:
                raw_items.append([m.group(m.lastindex)])
                i += 1
                continue
            if not line:
                j = i
                while j < len(lines) and not lines[j].strip():
                    j += 1
                if j < len(lines) and marker(lines[j].strip()):
                    i = j
                    continue
                break
            # Indented lazy continuation of the previous item.
            if lines[i][:1] in (" ", "\t") and not _is_block_start(line, None):
                raw_items[-1].append(line)
                i += 1
                continue
            break
        return [self._list_item("\n".join(parts)) for parts in raw_items], i

    def _list_item(self, text: str) -> ListItem:
        task = _TASK_RE.match(text)
        if task:
            return ListItem(children=self.inline(task.group(2)), checked=task.group(1) != " ")
        return ListItem(children=self.inline(text))

    def _blockquote(self, lines: list[str], i: int, depth: int) -> tuple[Blockquote, int]:
        inner: list[str] = []
        while i < len(lines):
            line = lines[i].strip()
            if _is_quote(line):
                inner.append(line[2:] if line.startswith("> ") else line[1:])
                i += 1
                continue
            if not line:
                j = i
                while j < len(lines) and not lines[j].strip():
                    j += 1
                if j < len(lines) and _is_quote(lines[j].strip()):
                    inner.append("")
                    i = j
                    continue
            break
        return Blockquote(children=self._parse_lines(inner, depth=depth + 1)), i

    def _table(self, lines: list[str], i: int) -> tuple[TableBlock, int]:
        header_cells = _split_cells(lines[i])
        width = len(header_cells)
        alignments = _normalize_row(
            [_alignment(cell) for cell in _split_cells(lines[i + 1])], width, Alignment.LEFT
        )
        i += 2
        rows: list[list[list[Inline]]] = []
        while i < len(lines) and lines[i].strip().startswith("|"):
            cells = _split_cells(lines[i])
            if len(cells) != width:
                logger.debug("Normalizing table row of %d cells to %d", len(cells), width)
            rows.append([self.inline(cell) for cell in _normalize_row(cells, width, "")])
            i += 1
        return (
            TableBlock(
                alignments=alignments,
                header=[self.inline(cell) for cell in header_cells],
                rows=rows,
            ),
            i,
        )

    def _details(self, lines: list[str], i: int, depth: int) -> tuple[Details, int]:
        first = lines[i].strip()
        raw: list[str] = [_DETAILS_OPEN_RE.sub("", first, count=1)]
        closed = _DETAILS_CLOSE_RE.search(raw[0])
        i += 1
        if closed:
            raw[0] = raw[0][:closed.start()]
        else:
            while i < len(lines):
                closed = _DETAILS_CLOSE_RE.search(lines[i])
                if closed:
                    raw.append(lines[i][:closed.start()])
                    i += 1
                    break
                raw.append(lines[i])
                i += 1

        body = "\n".join(raw)
        summary = ""
        # Only a summary directly after the opening tag counts.
        m = _SUMMARY_RE.match(body)
        if m:
            summary = m.group(1).strip()
            body = body[m.end():]
        children = self._parse_lines(body.split("\n"), depth=depth + 1)
        return Details(summary=self.inline(summary), children=children), i

    def _paragraph_lines(self, lines: list[str], i: int) -> tuple[list[str], int]:
        # The first line is never a block start, so at least one line is consumed.
        para = [lines[i].lstrip()]
        i += 1
        while i < len(lines):
            line = lines[i].strip()
            next_line = lines[i + 1] if i + 1 < len(lines) else None
            if not line or _is_block_start(line, next_line):
                break
            para.append(lines[i].lstrip())
            i += 1
        return para, i


# ---------------------------------------------------------------------------
# Table helpers
# ---------------------------------------------------------------------------

def _split_cells(line: str) -> list[str]:
    row = line.strip()
    if row.startswith("|"):
        row = row[1:]
    if row.endswith("|") and not row.endswith("\\|"):
        row = row[:-1]
    return [cell.strip() for cell in _CELL_SPLIT_RE.split(row)]


def _alignment(cell: str) -> Alignment:
    cell = cell.strip()
    if cell.startswith(":") and cell.endswith(":") and len(cell) > 1:
        return Alignment.CENTER
    if cell.endswith(":"):
        return Alignment.RIGHT
    return Alignment.LEFT


def _normalize_row(cells: list, width: int, filler) -> list:
    """Pad with *filler* or truncate so the row has exactly *width* cells."""
    return list(cells[:width]) + [filler] * (width - len(cells))


def parse(
    text: str,
    urls: Mapping[str, str] | None = None,
    blog_title: BlogTitle | None = None,
    preview: bool = False,
    *,
    site: SiteConfig | None = None,
    now: datetime | None = None,
    prelink: bool = True,
) -> Document:
    """Parse *text* in one call; see :class:`MarkdownParser`."""
    return MarkdownParser(urls, site, preview=preview, now=now).parse(text, blog_title, prelink=prelink)
