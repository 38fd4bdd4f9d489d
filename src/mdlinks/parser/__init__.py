"""Parser module turning Markdown text into document trees."""

from .md_parser import MarkdownParser, parse_markdown
from .nodes import LINK_KINDS, Node, NodeKind, Position, flatten_text

__all__ = [
    "MarkdownParser",
    "parse_markdown",
    "Node",
    "NodeKind",
    "Position",
    "LINK_KINDS",
    "flatten_text",
]
