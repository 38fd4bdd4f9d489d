"""Data models for extracted links."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LinkKind(str, Enum):
    """Markdown construct a link was written as."""

    INLINE = "inline"
    REFERENCE = "reference"
    AUTOLINK = "autolink"
    IMAGE = "image"
    FOOTNOTE_REFERENCE = "footnote-reference"


class SourcePosition(BaseModel):
    """Where a link starts in its source file (1-based)."""

    model_config = ConfigDict(frozen=True)

    file_identifier: str = Field(..., description="Path or handle of the input file")
    line: Optional[int] = Field(None, ge=1)
    column: Optional[int] = Field(None, ge=1)


class LinkRecord(BaseModel):
    """One link extracted from a Markdown document."""

    model_config = ConfigDict(frozen=True)

    kind: LinkKind = Field(..., description="Construct the link was written as")
    url: str = Field(..., description="Destination as written, empty when unresolved")
    title: Optional[str] = Field(None, description="Link title if any")
    text: str = Field(..., description="Plain text of the link content")
    label: Optional[str] = Field(None, description="Reference or footnote label")
    resolved: bool = Field(default=True)
    source: SourcePosition
    context_path: tuple[str, ...] = Field(
        default=(), description="Enclosing headings, outermost first"
    )

    @model_validator(mode="after")
    def _unresolved_has_no_url(self) -> "LinkRecord":
        if not self.resolved and self.url:
            raise ValueError("unresolved links must have an empty url")
        return self

    @property
    def file_identifier(self) -> str:
        return self.source.file_identifier
