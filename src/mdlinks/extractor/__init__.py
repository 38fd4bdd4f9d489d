"""Link extraction from parsed document trees."""

from .context import DocumentContext, ReferenceDefinition
from .resolver import get_resolver, register_resolver, resolve
from .walker import LinkWalker, walk

__all__ = [
    "DocumentContext",
    "ReferenceDefinition",
    "LinkWalker",
    "walk",
    "resolve",
    "get_resolver",
    "register_resolver",
]
