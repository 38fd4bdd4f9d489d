"""Serialization of link records to JSON and delimited text."""

import csv
import io
import json
import logging
from typing import BinaryIO, Iterable, Optional

from ..errors import SerializationError
from ..models import LinkRecord, OutputFormat, OutputFormatKind

logger = logging.getLogger(__name__)

CONTEXT_SEPARATOR = " > "

_LINE_BREAKS = ("\n", "\r")


def record_to_dict(record: LinkRecord) -> dict:
    """JSON-ready mapping with every attribute, absent values as None."""
    return record.model_dump(mode="json")


def record_fields(record: LinkRecord) -> dict[str, object]:
    """Flat attribute mapping used for delimited output."""
    return {
        "kind": record.kind.value,
        "url": record.url,
        "title": record.title,
        "text": record.text,
        "label": record.label,
        "resolved": record.resolved,
        "file_identifier": record.source.file_identifier,
        "line": record.source.line,
        "column": record.source.column,
        "context_path": list(record.context_path),
    }


def format_value(value: object) -> str:
    """Render one field value as delimited text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return CONTEXT_SEPARATOR.join(str(item) for item in value)
    return str(value)


def _needs_quoting(value: str, delimiter: str) -> bool:
    return delimiter in value or any(brk in value for brk in _LINE_BREAKS)


def _json_lines(records: Iterable[LinkRecord]) -> str:
    lines = [json.dumps(record_to_dict(record), ensure_ascii=False) for record in records]
    return "".join(line + "\n" for line in lines)


def _json_array(records: Iterable[LinkRecord]) -> str:
    return json.dumps([record_to_dict(record) for record in records], indent=2, ensure_ascii=False) + "\n"


def _delimited(records: Iterable[LinkRecord], output_format: OutputFormat) -> str:
    delimiter = output_format.delimiter
    fields = output_format.field_order
    rows: list[tuple[list[str], Optional[LinkRecord]]] = []
    if output_format.header:
        rows.append((list(fields), None))
    for record in records:
        values = record_fields(record)
        rows.append(([format_value(values[name]) for name in fields], record))

    if output_format.quote_fields:
        # csv quotes a row made of one empty value as "" so it is not read
        # back as a blank line; unquoted output writes an empty line instead
        buffer = io.StringIO()
        writer = csv.writer(buffer, delimiter=delimiter, quotechar='"', doublequote=True,
                            quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
        writer.writerows(row for row, _ in rows)
        return buffer.getvalue()

    lines = []
    for row, record in rows:
        for name, value in zip(fields, row):
            if _needs_quoting(value, delimiter):
                raise SerializationError(name if record is not None else "header", value, record)
        lines.append(delimiter.join(row) + "\n")
    return "".join(lines)


def serialize(records: Iterable[LinkRecord], output_format: OutputFormat) -> bytes:
    """
    Render records in the requested format.

    Args:
        records: Ordered LinkRecords
        output_format: Format and delimited-text options

    Returns:
        UTF-8 encoded output

    Raises:
        SerializationError: If a value needs quoting while quoting is disabled
    """
    if output_format.format is OutputFormatKind.JSON_LINES:
        text = _json_lines(records)
    elif output_format.format is OutputFormatKind.JSON:
        text = _json_array(records)
    else:
        text = _delimited(records, output_format)
    return text.encode("utf-8")


def write(records: Iterable[LinkRecord], output_format: OutputFormat, sink: BinaryIO) -> int:
    """Serialize records into a binary sink; returns the number of bytes written.

    Nothing is written if serialization fails.
    """
    data = serialize(records, output_format)
    sink.write(data)
    sink.flush()
    logger.debug("Wrote %d bytes as %s", len(data), output_format.format.value)
    return len(data)
