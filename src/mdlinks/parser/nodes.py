"""Minimal document tree consumed by the link walker.

Any CommonMark parser can feed the walker as long as it produces these
nodes. Only the kinds the walker cares about are distinguished; everything
else is a generic container or an opaque node.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional


class NodeKind(str, Enum):
    """Closed set of node kinds."""

    DOCUMENT = "document"
    HEADING = "heading"
    CONTAINER = "container"
    TEXT = "text"
    CODE = "code"
    BREAK = "break"
    LINK = "link"
    IMAGE = "image"
    AUTOLINK = "autolink"
    REFERENCE_DEFINITION = "reference-definition"
    FOOTNOTE_REFERENCE = "footnote-reference"
    FOOTNOTE_DEFINITION = "footnote-definition"
    OTHER = "other"


# Kinds that produce link records
LINK_KINDS = frozenset({
    NodeKind.LINK,
    NodeKind.IMAGE,
    NodeKind.AUTOLINK,
    NodeKind.FOOTNOTE_REFERENCE,
})


@dataclass(frozen=True)
class Position:
    """1-based line and column in the source text."""

    line: int
    column: int = 1


@dataclass(frozen=True)
class Node:
    """A node of a parsed Markdown document."""

    kind: NodeKind
    children: tuple["Node", ...] = ()
    text: str = ""  # literal content of text and code nodes
    position: Optional[Position] = None

    # Kind specific attributes
    level: int = 0  # heading level
    destination: Optional[str] = None  # link/image/definition url
    title: Optional[str] = None
    label: Optional[str] = None  # reference or footnote label
    reference: bool = False  # link or image written in reference form

    def walk(self) -> Iterator["Node"]:
        """Yield this node and all descendants, depth-first in document order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def flatten_text(node: Node) -> str:
    """Render a node's inline content as plain text.

    Markup is dropped, code spans keep their content, line breaks become a
    single space and images contribute their alt text.
    """
    if node.kind in (NodeKind.TEXT, NodeKind.CODE):
        return node.text
    if node.kind is NodeKind.BREAK:
        return " "
    return "".join(flatten_text(child) for child in node.children)
