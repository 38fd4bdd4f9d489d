"""Document tree walker that yields links in document order."""

import logging
from typing import Iterator

from ..models import LinkRecord
from ..parser.nodes import LINK_KINDS, Node, NodeKind, flatten_text
from .context import DocumentContext
from .resolver import resolve

logger = logging.getLogger(__name__)


class LinkWalker:
    """Iterable over the links of one parsed document.

    Each iteration runs both passes from scratch with a fresh
    DocumentContext, so the same walker can be iterated repeatedly and
    always yields an equal sequence. The tree is never modified.
    """

    def __init__(self, tree: Node, file_identifier: str):
        self.tree = tree
        self.file_identifier = file_identifier

    def __iter__(self) -> Iterator[LinkRecord]:
        # Pass 1: definitions may appear after their first use
        context = DocumentContext.collect(self.tree, self.file_identifier)
        logger.debug(
            "%s: %d reference definitions, %d footnotes",
            self.file_identifier,
            len(context.reference_definitions),
            len(context.footnote_labels),
        )
        # Pass 2
        yield from self._extract(self.tree, context)

    def _extract(self, node: Node, context: DocumentContext) -> Iterator[LinkRecord]:
        if node.kind is NodeKind.HEADING:
            context.enter_heading(node.level, flatten_text(node).strip())

        if node.kind in LINK_KINDS:
            yield from resolve(node, context)
            # Links inside link text or alt text are not separate links
            nested = sum(1 for inner in node.walk() if inner is not node and inner.kind in LINK_KINDS)
            if nested:
                logger.debug(
                    "Skipped %d nested link(s) in %s at line %s",
                    nested, context.file_identifier, node.position.line if node.position else "?",
                )
            return

        for child in node.children:
            yield from self._extract(child, context)


def walk(tree: Node, file_identifier: str) -> LinkWalker:
    """
    Walk a parsed document and produce its links.

    Args:
        tree: Root node of a parsed document
        file_identifier: Path or handle recorded on every link

    Returns:
        Lazy, restartable iterable of LinkRecords in document order
    """
    return LinkWalker(tree, file_identifier)
