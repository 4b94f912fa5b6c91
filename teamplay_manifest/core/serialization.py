"""
Conversion between Manifest objects and HL7 FHIR Task JSON.

Emitted shape (optional keys are left out when unset):

    {
      "resourceType": "Task",
      "text": {"status": "generated", "div": "<div ...>Input task for ...</div>"},
      "status": "requested" | "completed",
      "requestedPerformer": [{"reference": {"reference": "<performer>"}}],
      "intent": "order",
      "focus": {"reference": "<sample id>"},
      "encounter": {"reference": "<encounter>"},
      "authoredOn": "<dateTime>",
      "lastModified": "<dateTime>",
      "for": {"reference": "<archive filename>"},
      "input": [<Attachment>...],
      "output": [<Attachment>...]
    }

Every scalar is written as a JSON scalar, never as a one-element array.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional, Union

from pydantic import ValidationError

from teamplay_manifest.core.attachments import decode_attachments, encode_attachments
from teamplay_manifest.core.errors import ParseError
from teamplay_manifest.core.manifest import Manifest, TaskStatus

logger = logging.getLogger(__name__)

# Older manifests mark finished tasks as "done".
LEGACY_STATUS_ALIASES: Dict[str, str] = {"done": TaskStatus.COMPLETED.value}


def _reference(value: str) -> Dict[str, Any]:
    return {"reference": value}


def manifest_to_wire(manifest: Manifest) -> Dict[str, Any]:
    """Build the JSON-ready FHIR Task tree for a manifest."""
    wire: Dict[str, Any] = {
        "resourceType": Manifest.RESOURCE_TYPE,
        "text": {"status": "generated", "div": manifest.narrative},
        "status": manifest.status.value,
        "requestedPerformer": [{"reference": _reference(manifest.requested_performer)}],
        "intent": Manifest.INTENT,
    }
    if manifest.sample_id is not None:
        wire["focus"] = _reference(manifest.sample_id)
    if manifest.encounter is not None:
        wire["encounter"] = _reference(manifest.encounter)
    wire["authoredOn"] = manifest.authored_on
    if manifest.last_modified is not None:
        wire["lastModified"] = manifest.last_modified
    if manifest.archive_reference is not None:
        wire["for"] = _reference(manifest.archive_reference)

    wire["input"] = encode_attachments(manifest.input)
    if manifest.output is not None:
        wire["output"] = encode_attachments(manifest.output)
    return wire


def to_json(manifest: Manifest, pretty: Union[bool, int] = False) -> str:
    """
    Convert a manifest to FHIR Task JSON text.

    Args:
        manifest: Manifest to convert.
        pretty: False for compact output, True for 2-space indentation, or
                an int for that many spaces. Only whitespace is affected.
    """
    if pretty is True:
        indent: Optional[int] = 2
    elif pretty is False:
        indent = None
    else:
        indent = int(pretty)
    return json.dumps(manifest_to_wire(manifest), indent=indent, ensure_ascii=False)


def _unwrap_reference(value: Any, field: str) -> Optional[str]:
    """
    Extract the identifier from a FHIR Reference or CodeableReference.

    Accepts ``{"reference": id}``, ``{"reference": {"reference": id}}`` and
    a one-element list of either.
    """
    if value is None:
        return None
    if isinstance(value, list):
        if len(value) != 1:
            raise ParseError(
                "Reference list must hold exactly one element",
                field=field,
                expected="1 element",
                found=len(value),
            )
        value = value[0]
    if isinstance(value, Mapping):
        inner = value.get("reference")
        if isinstance(inner, Mapping):
            inner = inner.get("reference")
        if isinstance(inner, str):
            return inner
    raise ParseError(
        "Malformed reference",
        field=field,
        expected='{"reference": "<id>"}',
        found=value,
    )


def _load_tree(source: Union[str, bytes, Mapping[str, Any]]) -> Mapping[str, Any]:
    if isinstance(source, Mapping):
        return source
    try:
        tree = json.loads(source)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"Manifest is not valid JSON: {exc}") from exc
    if not isinstance(tree, Mapping):
        raise ParseError(
            "Manifest JSON must be an object",
            expected="object",
            found=type(tree).__name__,
        )
    return tree


def from_json(
    source: Union[str, bytes, Mapping[str, Any]],
    status_aliases: Optional[Mapping[str, str]] = None,
) -> Manifest:
    """
    Parse FHIR Task JSON (text or an already-parsed tree) into a Manifest.

    ``lastModified``, ``output``, ``for``, ``focus`` and ``encounter`` may be
    absent. The narrative ``text`` block is derived data and is ignored.

    Args:
        source: JSON text, or the mapping produced by a JSON parser.
        status_aliases: Extra status spellings mapped onto canonical ones.
                        Defaults to LEGACY_STATUS_ALIASES (``done`` ->
                        ``completed``); pass ``{}`` to accept only canonical values.

    Raises:
        ParseError: If the JSON is invalid, is not a Task, lacks required
            fields or breaks the completed/output invariant.
        DecodeError: If an input/output element is malformed.
    """
    tree = _load_tree(source)
    aliases = LEGACY_STATUS_ALIASES if status_aliases is None else status_aliases

    resource_type = tree.get("resourceType")
    if resource_type != Manifest.RESOURCE_TYPE:
        raise ParseError(
            "Not a Task manifest",
            field="resourceType",
            expected=Manifest.RESOURCE_TYPE,
            found=resource_type,
        )

    performer = _unwrap_reference(tree.get("requestedPerformer"), "requestedPerformer")
    if performer is None:
        raise ParseError("Missing requestedPerformer", field="requestedPerformer")

    raw_status = tree.get("status")
    status_value = aliases.get(raw_status, raw_status) if isinstance(raw_status, str) else raw_status
    try:
        status = TaskStatus(status_value)
    except ValueError as exc:
        raise ParseError(
            "Unknown task status",
            field="status",
            expected=[s.value for s in TaskStatus] + sorted(aliases),
            found=raw_status,
        ) from exc

    if "authoredOn" not in tree:
        raise ParseError("Missing authoredOn", field="authoredOn")

    fields: Dict[str, Any] = {
        "status": status,
        "requested_performer": performer,
        "sample_id": _unwrap_reference(tree.get("focus"), "focus"),
        "encounter": _unwrap_reference(tree.get("encounter"), "encounter"),
        "authored_on": tree.get("authoredOn"),
        "last_modified": tree.get("lastModified"),
        "archive_reference": _unwrap_reference(tree.get("for"), "for"),
        "input": decode_attachments(tree["input"]) if "input" in tree else (),
    }
    if "output" in tree:
        fields["output"] = decode_attachments(tree["output"])

    try:
        manifest = Manifest(**fields)
    except ValidationError as exc:
        error = exc.errors()[0]
        raise ParseError(
            f"Invalid manifest: {error['msg']}",
            field=".".join(str(p) for p in error["loc"]) or None,
            found=error.get("input") if error["loc"] else None,
        ) from exc

    logger.debug(f"Parsed {status.value} manifest for {performer}")
    return manifest
