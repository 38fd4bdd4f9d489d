"""Serializer module for writing link records."""

from .writer import (
    CONTEXT_SEPARATOR,
    format_value,
    record_fields,
    record_to_dict,
    serialize,
    write,
)

__all__ = [
    "serialize",
    "write",
    "record_to_dict",
    "record_fields",
    "format_value",
    "CONTEXT_SEPARATOR",
]
