"""Exceptions raised by the link extraction pipeline."""

from typing import Optional

from pydantic import ValidationError


class MdLinksError(Exception):
    """Base class for all mdlinks errors."""


class ConfigurationError(MdLinksError):
    """Raised when the run configuration is invalid.

    Configuration is validated before any file is processed, so this error
    always aborts the run before output is written.
    """

    @classmethod
    def from_validation_error(cls, what: str, error: ValidationError) -> "ConfigurationError":
        """Build a readable error from a pydantic ValidationError."""
        lines = []
        for item in error.errors():
            loc = ".".join(str(x) for x in item["loc"]) or what
            lines.append(f"  - {loc}: {item['msg']}")
        return cls(f"Invalid {what}:\n" + "\n".join(lines))


class SerializationError(MdLinksError):
    """Raised when a field value cannot be written in the requested format."""

    def __init__(self, field: str, value: str, record: Optional[object] = None) -> None:
        self.field = field
        self.value = value
        self.record = record
        where = ""
        source = getattr(record, "source", None)
        if source is not None:
            where = f" ({source.file_identifier}:{source.line}:{source.column})"
        super().__init__(
            f"Field '{field}' value {value!r} contains the delimiter or a line break "
            f"and quoting is disabled{where}"
        )
