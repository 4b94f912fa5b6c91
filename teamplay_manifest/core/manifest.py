from __future__ import annotations

import html
import logging
from enum import Enum
from typing import Any, ClassVar, Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from teamplay_manifest.core.attachments import Attachment, FileRow, coerce_file_table
from teamplay_manifest.core.errors import InvalidInputError, InvalidStateError
from teamplay_manifest.core.timestamps import format_timestamp

logger = logging.getLogger(__name__)

XHTML_NS = "http://www.w3.org/1999/xhtml"


class TaskStatus(str, Enum):
    REQUESTED = "requested"
    COMPLETED = "completed"


class Manifest(BaseModel):
    """
    A Task manifest describing one unit of analysis work.

    A manifest starts out ``requested`` with a table of input files, and is
    turned into a ``completed`` one (with output files and a modification
    time) by :func:`finalize_manifest`. Instances are immutable; lifecycle
    operations return new values.

    Attributes:
        status: ``requested`` or ``completed``.
        requested_performer: The analysis package/container to invoke.
        sample_id: Subject of the analysis (FHIR ``focus``), e.g. a pseudonymized patient ID.
        encounter: Timepoint or episode of care the data is from.
        authored_on: Creation time as a FHIR dateTime.
        last_modified: Completion time; set only once completed.
        input: Input files, fixed at creation.
        output: Output files; set only once completed.
        archive_reference: Filename of the archive this manifest was packaged into (FHIR ``for``).
    """

    model_config = ConfigDict(frozen=True)

    RESOURCE_TYPE: ClassVar[str] = "Task"
    INTENT: ClassVar[str] = "order"

    status: TaskStatus = TaskStatus.REQUESTED
    requested_performer: str
    sample_id: Optional[str] = None
    encounter: Optional[str] = None
    authored_on: str
    last_modified: Optional[str] = None
    input: Tuple[Attachment, ...] = ()
    output: Optional[Tuple[Attachment, ...]] = None
    archive_reference: Optional[str] = None

    @model_validator(mode="after")
    def _check_completion_fields(self) -> "Manifest":
        completed = self.status == TaskStatus.COMPLETED
        if completed != (self.output is not None):
            raise ValueError(
                f"output must be present if and only if status is 'completed' "
                f"(status={self.status.value!r}, output present={self.output is not None})"
            )
        if completed != (self.last_modified is not None):
            raise ValueError(
                f"lastModified must be present if and only if status is 'completed' "
                f"(status={self.status.value!r}, lastModified={self.last_modified!r})"
            )
        return self

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    @property
    def files(self) -> Tuple[Attachment, ...]:
        """The files this manifest is about: outputs once completed, inputs before."""
        if self.is_completed:
            return self.output or ()
        return self.input

    @property
    def narrative(self) -> str:
        """The generated XHTML summary emitted as the FHIR ``text.div``."""
        kind = "Output" if self.is_completed else "Input"
        summary = (
            f"{kind} task for {html.escape(self.requested_performer)} , "
            f"created {self.authored_on}"
        )
        if self.last_modified is not None:
            summary += f" , completed {self.last_modified}"
        return f"<div xmlns='{XHTML_NS}'>{summary}</div>"

    def with_archive_reference(self, archive_name: str) -> "Manifest":
        """Return a copy referencing the archive it is packaged into."""
        return self.model_copy(update={"archive_reference": archive_name})


def is_manifest(obj: Any) -> bool:
    return isinstance(obj, Manifest)


def create_manifest(
    requested_performer: str,
    sample_id: Optional[str],
    encounter: Optional[str],
    input_files: Iterable[FileRow],
) -> Manifest:
    """
    Create a ``requested`` manifest for the given analysis and input files.

    ``sample_id`` and ``encounter`` are free text, but they are reused to
    build the archive filename when packaging, which only keeps ASCII
    letters, digits and ``-_()``. Sticking to ASCII is advisable.

    Args:
        requested_performer: Analysis package identifier (e.g. "OUS-0001").
        sample_id: ID of the sample/patient to be analysed.
        encounter: Timepoint or encounter the data is from.
        input_files: Rows with Description, Filename and MIME (may be empty).

    Raises:
        InvalidInputError: If the file table or an identifier is malformed.
    """
    files = coerce_file_table(input_files, table="input")
    try:
        manifest = Manifest(
            status=TaskStatus.REQUESTED,
            requested_performer=requested_performer,
            sample_id=sample_id,
            encounter=encounter,
            authored_on=format_timestamp(),
            input=files,
        )
    except ValidationError as exc:
        error = exc.errors()[0]
        raise InvalidInputError(
            f"Cannot create manifest: {error['msg']}",
            field=".".join(str(p) for p in error["loc"]) or None,
            found=error.get("input") if error["loc"] else None,
        ) from exc

    logger.debug(
        f"Created manifest for {requested_performer} with {len(files)} input file(s)"
    )
    return manifest


def finalize_manifest(manifest: Manifest, output_files: Iterable[FileRow]) -> Manifest:
    """
    Mark a requested manifest as completed and attach its output files.

    The given manifest is left untouched; a new one is returned with status
    ``completed``, ``last_modified`` set to now and ``output`` set.

    Raises:
        InvalidStateError: If the manifest is not ``requested`` (e.g. it was
            already finalized).
        InvalidInputError: If the output file table is malformed.
    """
    if manifest.status != TaskStatus.REQUESTED:
        raise InvalidStateError(
            "Only a requested manifest can be finalized",
            field="status",
            expected=TaskStatus.REQUESTED.value,
            found=manifest.status.value,
        )

    files = coerce_file_table(output_files, table="output")
    finalized = Manifest(
        status=TaskStatus.COMPLETED,
        requested_performer=manifest.requested_performer,
        sample_id=manifest.sample_id,
        encounter=manifest.encounter,
        authored_on=manifest.authored_on,
        last_modified=format_timestamp(),
        input=manifest.input,
        output=files,
        archive_reference=manifest.archive_reference,
    )
    logger.debug(
        f"Finalized manifest for {manifest.requested_performer} with {len(files)} output file(s)"
    )
    return finalized
