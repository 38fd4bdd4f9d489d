"""Run options: output format and extraction settings."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ConfigurationError


class OutputFormatKind(str, Enum):
    """Supported serializations."""

    JSON_LINES = "json-lines"
    JSON = "json"
    DELIMITED = "delimited"


# Attributes a delimited row can carry, in their natural order
FIELD_NAMES = (
    "kind",
    "url",
    "title",
    "text",
    "label",
    "resolved",
    "file_identifier",
    "line",
    "column",
    "context_path",
)

DEFAULT_FIELD_ORDER = (
    "kind",
    "url",
    "title",
    "text",
    "file_identifier",
    "line",
    "column",
)


class OutputFormat(BaseModel):
    """How extracted links are written out."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    format: OutputFormatKind = Field(default=OutputFormatKind.JSON_LINES)
    delimiter: str = Field(default="\t", description="Field separator for delimited output")
    quote_fields: bool = Field(default=True, description="Quote values that need it")
    field_order: tuple[str, ...] = Field(default=DEFAULT_FIELD_ORDER)
    header: bool = Field(default=False, description="Emit a header row in delimited output")

    @field_validator("delimiter")
    @classmethod
    def _check_delimiter(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError(f"delimiter must be a single character, got {value!r}")
        if value in '"\r\n':
            raise ValueError(f"delimiter cannot be {value!r}")
        return value

    @field_validator("field_order")
    @classmethod
    def _check_field_order(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("field_order must name at least one field")
        unknown = [name for name in value if name not in FIELD_NAMES]
        if unknown:
            raise ValueError(
                f"unknown field(s) {', '.join(unknown)}; expected any of {', '.join(FIELD_NAMES)}"
            )
        if len(set(value)) != len(value):
            raise ValueError("field_order contains duplicate fields")
        return value

    @classmethod
    def from_options(cls, **options: Any) -> "OutputFormat":
        """Validate options, raising ConfigurationError instead of ValidationError."""
        try:
            return cls(**options)
        except ValidationError as e:
            raise ConfigurationError.from_validation_error("output format", e) from e


class ExtractionSettings(BaseModel):
    """Options that control parsing and aggregation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    deduplicate: bool = Field(default=False, description="Keep the first link per (url, file)")
    linkify: bool = Field(default=True, description="Treat bare URLs as autolinks")
    front_matter: bool = Field(default=True, description="Skip YAML front matter")

    @classmethod
    def from_options(cls, **options: Any) -> "ExtractionSettings":
        """Validate options, raising ConfigurationError instead of ValidationError."""
        try:
            return cls(**options)
        except ValidationError as e:
            raise ConfigurationError.from_validation_error("extraction settings", e) from e
