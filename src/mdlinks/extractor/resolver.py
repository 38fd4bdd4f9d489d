"""Turn link-bearing nodes into LinkRecords."""

import logging
from typing import Callable, Optional

from ..models import LinkKind, LinkRecord, SourcePosition
from ..parser.nodes import Node, NodeKind, flatten_text
from ..utils.text import normalize_label
from .context import DocumentContext

logger = logging.getLogger(__name__)

Resolver = Callable[[Node, DocumentContext], list[LinkRecord]]


def _record(
    node: Node,
    context: DocumentContext,
    kind: LinkKind,
    url: str,
    text: str,
    title: Optional[str] = None,
    label: Optional[str] = None,
    resolved: bool = True,
) -> LinkRecord:
    position = node.position
    return LinkRecord(
        kind=kind,
        url=url if resolved else "",
        title=title if resolved else None,
        text=text,
        label=label,
        resolved=resolved,
        source=SourcePosition(
            file_identifier=context.file_identifier,
            line=position.line if position else None,
            column=position.column if position else None,
        ),
        context_path=context.context_path(),
    )


def _resolve_reference(node: Node, context: DocumentContext, kind: LinkKind) -> list[LinkRecord]:
    text = flatten_text(node)
    label = node.label or text
    definition = context.lookup(label) if normalize_label(label) else None
    if definition is None:
        logger.debug(
            "Unresolved reference [%s] in %s at line %s",
            label, context.file_identifier, node.position.line if node.position else "?",
        )
        return [_record(node, context, kind, "", text, label=label, resolved=False)]
    return [_record(node, context, kind, definition.url, text, title=definition.title, label=label)]


def resolve_link(node: Node, context: DocumentContext) -> list[LinkRecord]:
    """Inline (``[text](url)``) and reference (``[text][label]``) links."""
    if node.reference:
        return _resolve_reference(node, context, LinkKind.REFERENCE)
    text = flatten_text(node)
    if node.destination is None:
        logger.debug("Link without destination in %s", context.file_identifier)
        return [_record(node, context, LinkKind.INLINE, "", text, resolved=False)]
    return [_record(node, context, LinkKind.INLINE, node.destination, text, title=node.title)]


def resolve_image(node: Node, context: DocumentContext) -> list[LinkRecord]:
    """Images; text is the flattened alt text."""
    if node.reference:
        return _resolve_reference(node, context, LinkKind.IMAGE)
    text = flatten_text(node)
    if node.destination is None:
        return [_record(node, context, LinkKind.IMAGE, "", text, resolved=False)]
    return [_record(node, context, LinkKind.IMAGE, node.destination, text, title=node.title)]


def resolve_autolink(node: Node, context: DocumentContext) -> list[LinkRecord]:
    """Angle-bracket autolinks and bare URLs; text mirrors the url."""
    url = node.destination or flatten_text(node)
    if not url:
        return [_record(node, context, LinkKind.AUTOLINK, "", "", resolved=False)]
    return [_record(node, context, LinkKind.AUTOLINK, url, url)]


def resolve_footnote(node: Node, context: DocumentContext) -> list[LinkRecord]:
    """Footnote references point at a synthetic ``#fn-<label>`` anchor."""
    label = node.label
    if not label:
        return [_record(node, context, LinkKind.FOOTNOTE_REFERENCE, "", "", resolved=False)]
    text = f"^{label}"
    if not context.has_footnote(label):
        return [_record(
            node, context, LinkKind.FOOTNOTE_REFERENCE, "", text, label=label, resolved=False,
        )]
    return [_record(node, context, LinkKind.FOOTNOTE_REFERENCE, f"#fn-{label}", text, label=label)]


def _ignore(node: Node, context: DocumentContext) -> list[LinkRecord]:
    return []


# Registry of resolvers by node kind; every other kind is ignored
_RESOLVERS: dict[NodeKind, Resolver] = {
    NodeKind.LINK: resolve_link,
    NodeKind.IMAGE: resolve_image,
    NodeKind.AUTOLINK: resolve_autolink,
    NodeKind.FOOTNOTE_REFERENCE: resolve_footnote,
}


def get_resolver(kind: NodeKind) -> Resolver:
    """Get the resolver for a node kind (a no-op for non-link kinds)."""
    return _RESOLVERS.get(kind, _ignore)


def register_resolver(kind: NodeKind, resolver: Resolver) -> None:
    """
    Register or replace the resolver for a node kind.

    Args:
        kind: Node kind to handle
        resolver: Callable returning the records for one node
    """
    _RESOLVERS[kind] = resolver


def resolve(node: Node, context: DocumentContext) -> list[LinkRecord]:
    """
    Resolve one node into zero or more link records.

    Args:
        node: Candidate node
        context: Definitions and heading stack of the current document

    Returns:
        Records for the node, empty for kinds that carry no link
    """
    return get_resolver(node.kind)(node, context)
