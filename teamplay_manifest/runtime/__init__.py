from teamplay_manifest.runtime.io import read_manifest, write_manifest
from teamplay_manifest.runtime.packaging import (
    ArchiveWriter,
    FileCheck,
    PackageResult,
    ZipArchiveWriter,
    archive_name,
    package_manifest,
)

__all__ = [
    "read_manifest",
    "write_manifest",
    "ArchiveWriter",
    "ZipArchiveWriter",
    "FileCheck",
    "PackageResult",
    "archive_name",
    "package_manifest",
]
