"""Parser package."""

from .base import (
    Alignment,
    Blockquote,
    BlogTitle,
    Bold,
    Code,
    CodeBlock,
    Details,
    Document,
    FigureBlock,
    Fragment,
    Gallery,
    Heading,
    HorizontalRule,
    Image,
    ImagePreview,
    Italic,
    LineBreak,
    Link,
    LinkKind,
    ListItem,
    OrderedList,
    Paragraph,
    RealmTag,
    SiteConfig,
    Strike,
    TableBlock,
    Text,
    UnorderedList,
)
from .md_parser import MarkdownParser, parse
from .post import Post, render_post
from .prelink import link_tags_and_users

__all__ = [
    "Alignment",
    "Blockquote",
    "BlogTitle",
    "Bold",
    "Code",
    "CodeBlock",
    "Details",
    "Document",
    "FigureBlock",
    "Fragment",
    "Gallery",
    "Heading",
    "HorizontalRule",
    "Image",
    "ImagePreview",
    "Italic",
    "LineBreak",
    "Link",
    "LinkKind",
    "ListItem",
    "OrderedList",
    "Paragraph",
    "RealmTag",
    "SiteConfig",
    "Strike",
    "TableBlock",
    "Text",
    "UnorderedList",
    "MarkdownParser",
    "parse",
    "Post",
    "render_post",
    "link_tags_and_users",
]
