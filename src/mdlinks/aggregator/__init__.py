"""Aggregation of links across documents."""

from .collection import (
    DuplicateReport,
    LinkAggregator,
    dedup_key,
    deduplicate,
    detect_duplicates,
)

__all__ = [
    "LinkAggregator",
    "DuplicateReport",
    "dedup_key",
    "deduplicate",
    "detect_duplicates",
]
