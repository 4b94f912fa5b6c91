from teamplay_manifest.core.attachments import (
    Attachment,
    coerce_file_table,
    decode_attachments,
    encode_attachments,
)
from teamplay_manifest.core.errors import (
    DecodeError,
    InvalidInputError,
    InvalidStateError,
    ManifestError,
    ParseError,
    UnsupportedFormatError,
)
from teamplay_manifest.core.filenames import MISSING, sanitize
from teamplay_manifest.core.manifest import (
    Manifest,
    TaskStatus,
    create_manifest,
    finalize_manifest,
    is_manifest,
)
from teamplay_manifest.core.serialization import (
    LEGACY_STATUS_ALIASES,
    from_json,
    manifest_to_wire,
    to_json,
)
from teamplay_manifest.core.timestamps import format_timestamp

__all__ = [
    "Attachment",
    "coerce_file_table",
    "encode_attachments",
    "decode_attachments",
    "ManifestError",
    "InvalidInputError",
    "ParseError",
    "DecodeError",
    "InvalidStateError",
    "UnsupportedFormatError",
    "MISSING",
    "sanitize",
    "Manifest",
    "TaskStatus",
    "create_manifest",
    "finalize_manifest",
    "is_manifest",
    "LEGACY_STATUS_ALIASES",
    "manifest_to_wire",
    "to_json",
    "from_json",
    "format_timestamp",
]
