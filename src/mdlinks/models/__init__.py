"""Models for extracted links and run options."""

from .link import LinkKind, LinkRecord, SourcePosition
from .options import (
    DEFAULT_FIELD_ORDER,
    FIELD_NAMES,
    ExtractionSettings,
    OutputFormat,
    OutputFormatKind,
)

__all__ = [
    "LinkKind",
    "LinkRecord",
    "SourcePosition",
    "OutputFormat",
    "OutputFormatKind",
    "ExtractionSettings",
    "FIELD_NAMES",
    "DEFAULT_FIELD_ORDER",
]
