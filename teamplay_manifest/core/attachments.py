"""
FHIR Attachment encoding for Task input/output blocks.

A Task lists its inputs and outputs as values; one legal value type is
Attachment, which describes a file. Of its fields we use ``contentType`` (the
MIME type) and ``url`` (a ``file://`` URL holding the filename). The
surrounding element also has a free-text ``type`` that we use to describe the
data modality (e.g. "CT image" or "RNASeq").

Wire shape of one element:

    {"type": {"text": "<description>"},
     "valueAttachment": {"contentType": "<mime>", "url": "file://<filename>"}}

See
https://www.hl7.org/fhir/task.html
https://www.hl7.org/fhir/datatypes-definitions.html#Attachment
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from teamplay_manifest.core.errors import DecodeError, InvalidInputError

logger = logging.getLogger(__name__)

FILE_SCHEME = "file://"

# Column names of a file table, keyed by their lower-cased form.
FILE_TABLE_COLUMNS = {
    "description": "description",
    "filename": "filename",
    "mime": "mime",
}


class Attachment(BaseModel):
    """One described file: modality/purpose, path and MIME type."""

    model_config = ConfigDict(frozen=True)

    description: str = Field(min_length=1)
    filename: str = Field(min_length=1)
    mime: str = Field(min_length=1)


FileRow = Union[Attachment, Mapping[str, Any]]


def _row_to_attachment(row: FileRow, index: int, table: str) -> Attachment:
    if isinstance(row, Attachment):
        return row
    if not isinstance(row, Mapping):
        raise InvalidInputError(
            f"Row {index} of the {table} file table is not a mapping",
            field=table,
            expected="mapping with Description, Filename, MIME",
            found=type(row).__name__,
        )

    values: Dict[str, Any] = {}
    for key, value in row.items():
        column = FILE_TABLE_COLUMNS.get(str(key).lower())
        if column is not None:
            values[column] = value

    missing = [c for c in FILE_TABLE_COLUMNS.values() if c not in values]
    if missing:
        raise InvalidInputError(
            f"Row {index} of the {table} file table misses column(s): {', '.join(missing)}",
            field=table,
            expected=["Description", "Filename", "MIME"],
            found=sorted(str(k) for k in row.keys()),
        )

    try:
        return Attachment(**values)
    except ValidationError as exc:
        raise InvalidInputError(
            f"Row {index} of the {table} file table is invalid: {exc.errors()[0]['msg']}",
            field=table,
            found=dict(row),
        ) from exc


def coerce_file_table(rows: Iterable[FileRow], table: str = "input") -> Tuple[Attachment, ...]:
    """
    Normalize a file table to a tuple of Attachments.

    Rows may be Attachments or mappings with the columns Description,
    Filename and MIME (any letter case, any order). Other columns are ignored.

    Raises:
        InvalidInputError: If the table or one of its rows is malformed.
    """
    if rows is None or isinstance(rows, (str, bytes, Mapping)):
        raise InvalidInputError(
            f"The {table} file table must be a sequence of rows",
            field=table,
            expected="sequence of file rows",
            found=type(rows).__name__,
        )
    return tuple(_row_to_attachment(row, i, table) for i, row in enumerate(rows))


def encode_attachments(table: Iterable[Attachment]) -> List[Dict[str, Any]]:
    """Encode Attachments to the FHIR input/output list, preserving order."""
    return [
        {
            "type": {"text": att.description},
            "valueAttachment": {
                "contentType": att.mime,
                "url": FILE_SCHEME + att.filename,
            },
        }
        for att in table
    ]


def _require_str(value: Any, index: int, field: str) -> str:
    if not isinstance(value, str):
        raise DecodeError(
            f"Attachment {index} has no usable {field}",
            field=field,
            expected="string",
            found=value,
        )
    return value


def decode_attachments(json_list: Any) -> Tuple[Attachment, ...]:
    """
    Decode a FHIR input/output list back to Attachments.

    A leading ``file://`` is stripped from the url; a url without it is
    taken as the filename unchanged.

    Raises:
        DecodeError: If the list or one of its elements is malformed.
    """
    if not isinstance(json_list, list):
        raise DecodeError(
            "Attachment list must be a JSON array",
            expected="array",
            found=type(json_list).__name__,
        )

    result: List[Attachment] = []
    for i, element in enumerate(json_list):
        if not isinstance(element, Mapping):
            raise DecodeError(f"Attachment {i} is not an object", found=element)

        value = element.get("valueAttachment")
        if not isinstance(value, Mapping):
            raise DecodeError(
                f"Attachment {i} lacks valueAttachment",
                field="valueAttachment",
                expected="object",
                found=value,
            )
        type_block = element.get("type")
        text = type_block.get("text") if isinstance(type_block, Mapping) else None

        description = _require_str(text, i, "type.text")
        url = _require_str(value.get("url"), i, "valueAttachment.url")
        mime = _require_str(value.get("contentType"), i, "valueAttachment.contentType")

        filename = url[len(FILE_SCHEME):] if url.startswith(FILE_SCHEME) else url
        try:
            result.append(Attachment(description=description, filename=filename, mime=mime))
        except ValidationError as exc:
            raise DecodeError(
                f"Attachment {i} is invalid: {exc.errors()[0]['msg']}",
                found=dict(element),
            ) from exc

    logger.debug(f"Decoded {len(result)} attachment(s)")
    return tuple(result)
