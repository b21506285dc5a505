"""Content node tree produced by the markdown engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

@dataclass(slots=True, frozen=True)
class SiteConfig:
    """Read-only site facts the classifier needs: own domains and viewport size."""

    domain: str = "taggr.link"
    alt_domains: frozenset[str] = frozenset()
    viewport_width: int = 1024
    viewport_height: int = 768

    def is_own_host(self, hostname: str) -> bool:
        hostname = hostname.lower()
        return hostname == self.domain.lower() or hostname in {d.lower() for d in self.alt_domains}

    @property
    def max_image_height(self) -> int:
        # Placeholders never grow taller than a third of the viewport.
        return -(-self.viewport_height // 3)


@dataclass(slots=True, frozen=True)
class BlogTitle:
    author: str
    created: datetime
    length: int
    realm: str | None = None
    background: str | None = None


# ---------------------------------------------------------------------------
# Inline nodes
# ---------------------------------------------------------------------------

class LinkKind(str, Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"
    YOUTUBE = "youtube"


EXTERNAL_REL = "nofollow noopener noreferrer"


@dataclass(slots=True)
class Text:
    text: str


@dataclass(slots=True)
class Code:
    text: str


@dataclass(slots=True)
class Bold:
    children: list[Inline] = field(default_factory=list)


@dataclass(slots=True)
class Italic:
    children: list[Inline] = field(default_factory=list)


@dataclass(slots=True)
class Strike:
    children: list[Inline] = field(default_factory=list)


@dataclass(slots=True)
class LineBreak:
    pass


@dataclass(slots=True)
class Fragment:
    children: list[Inline] = field(default_factory=list)


@dataclass(slots=True)
class RealmTag:
    name: str
    background: str | None = None

    @property
    def href(self) -> str:
        return f"#/realm/{self.name}"


@dataclass(slots=True, frozen=True)
class ImagePreview:
    """What an image hands to the preview overlay when activated."""

    src: str
    blob_id: str
    gallery: tuple[str, ...] = ()


@dataclass(slots=True)
class Image:
    src: str
    alt: str = ""
    internal: bool = False
    blob_id: str = ""
    thumbnail: bool = False
    gallery: list[str] = field(default_factory=list)
    width: int | None = None
    height: int | None = None
    source_host: str | None = None

    @property
    def show_source(self) -> bool:
        return not self.internal and not self.thumbnail

    def preview_target(self) -> ImagePreview:
        return ImagePreview(src=self.src, blob_id=self.blob_id, gallery=tuple(self.gallery))


@dataclass(slots=True)
class Link:
    href: str
    label: list[Inline] = field(default_factory=list)
    kind: LinkKind = LinkKind.INTERNAL
    video_id: str | None = None
    expanded: bool = True

    @property
    def rel(self) -> str | None:
        return EXTERNAL_REL if self.kind is LinkKind.EXTERNAL else None

    @property
    def target(self) -> str | None:
        return "_blank" if self.kind is LinkKind.EXTERNAL else None


Inline = Text | Code | Bold | Italic | Strike | LineBreak | Fragment | RealmTag | Image | Link


def plain_text(nodes: list[Inline]) -> str:
    """Concatenate the visible text of an inline sequence."""
    parts: list[str] = []
    for node in nodes:
        if isinstance(node, (Text, Code)):
            parts.append(node.text)
        elif isinstance(node, (Bold, Italic, Strike, Fragment)):
            parts.append(plain_text(node.children))
        elif isinstance(node, Link):
            parts.append(plain_text(node.label))
        elif isinstance(node, RealmTag):
            parts.append(node.name)
        elif isinstance(node, Image):
            parts.append(node.alt)
        elif isinstance(node, LineBreak):
            parts.append("\n")
    return "".join(parts)


# ---------------------------------------------------------------------------
# Block nodes
# ---------------------------------------------------------------------------

class Alignment(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(slots=True)
class Heading:
    level: int
    children: list[Inline] = field(default_factory=list)
    banner: Fragment | None = None


@dataclass(slots=True)
class Paragraph:
    children: list[Inline] = field(default_factory=list)


@dataclass(slots=True)
class Gallery:
    images: list[Image] = field(default_factory=list)
    trailing: list[Inline] = field(default_factory=list)


@dataclass(slots=True)
class FigureBlock:
    image: Image


@dataclass(slots=True)
class CodeBlock:
    raw: str
    lang: str = ""


@dataclass(slots=True)
class ListItem:
    children: list[Inline] = field(default_factory=list)
    checked: bool | None = None


@dataclass(slots=True)
class UnorderedList:
    items: list[ListItem] = field(default_factory=list)


@dataclass(slots=True)
class OrderedList:
    items: list[ListItem] = field(default_factory=list)
    start: int = 1


@dataclass(slots=True)
class Blockquote:
    children: list[Block] = field(default_factory=list)


@dataclass(slots=True)
class TableBlock:
    alignments: list[Alignment] = field(default_factory=list)
    header: list[list[Inline]] = field(default_factory=list)
    rows: list[list[list[Inline]]] = field(default_factory=list)


@dataclass(slots=True)
class HorizontalRule:
    pass


@dataclass(slots=True)
class Details:
    summary: list[Inline] = field(default_factory=list)
    children: list[Block] = field(default_factory=list)


Block = (
    Heading
    | Paragraph
    | Gallery
    | FigureBlock
    | CodeBlock
    | UnorderedList
    | OrderedList
    | Blockquote
    | TableBlock
    | HorizontalRule
    | Details
)


@dataclass(slots=True)
class Document:
    blocks: list[Block] = field(default_factory=list)

    def __iter__(self):
        return iter(self.blocks)

    def __len__(self) -> int:
        return len(self.blocks)
