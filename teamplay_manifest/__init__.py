__version__ = "0.3.0"

from teamplay_manifest.core.attachments import Attachment, decode_attachments, encode_attachments
from teamplay_manifest.core.errors import (
    DecodeError,
    InvalidInputError,
    InvalidStateError,
    ManifestError,
    ParseError,
    UnsupportedFormatError,
)
from teamplay_manifest.core.filenames import sanitize
from teamplay_manifest.core.manifest import (
    Manifest,
    TaskStatus,
    create_manifest,
    finalize_manifest,
    is_manifest,
)
from teamplay_manifest.core.serialization import from_json, to_json
from teamplay_manifest.core.timestamps import format_timestamp
from teamplay_manifest.runtime.io import read_manifest, write_manifest
from teamplay_manifest.runtime.packaging import PackageResult, package_manifest

__all__ = [
    "Manifest",
    "TaskStatus",
    "Attachment",
    "create_manifest",
    "finalize_manifest",
    "is_manifest",
    "to_json",
    "from_json",
    "read_manifest",
    "write_manifest",
    "package_manifest",
    "PackageResult",
    "encode_attachments",
    "decode_attachments",
    "format_timestamp",
    "sanitize",
    "ManifestError",
    "InvalidInputError",
    "ParseError",
    "DecodeError",
    "InvalidStateError",
    "UnsupportedFormatError",
]
