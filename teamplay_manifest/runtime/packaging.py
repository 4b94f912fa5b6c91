"""
Packaging of manifests and their files into archives.

Depending on the manifest status, the input files (``requested``) or the
output files (``completed``) are bundled together with a JSON copy of the
manifest. The archive is named

    {NEW|RES}.{sampleID}.{encounter}.{requestedPerformer}.{unix time}.{kind}

with each identifier passed through the filename sanitizer. Packages created
for the same sample, encounter and performer within the same second share a
name; the last writer wins.

Usage:
    result = package_manifest(manifest)
    if not result.created:
        for check in result.file_checks:
            print(check.filename, check.exists)
"""

from __future__ import annotations

import logging
import tempfile
import time
import zipfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Type, Union

from teamplay_manifest.core.errors import InvalidInputError, UnsupportedFormatError
from teamplay_manifest.core.filenames import sanitize
from teamplay_manifest.core.manifest import Manifest
from teamplay_manifest.runtime.io import ManifestSource, read_manifest, write_manifest

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "MANIFEST.json"
DEFAULT_COMPRESSION_LEVEL = 6

MISSING_SAMPLE_ID = "--MISSING_sampleID--"
MISSING_ENCOUNTER = "--MISSING_encounter--"
MISSING_PERFORMER = "--MISSING_requestedPerformer--"


class ArchiveWriter(ABC):
    """
    Interface for the archive format used to bundle manifest files.
    """

    @abstractmethod
    def create_archive(self, path: Path, files: Sequence[Path], compression_level: int) -> Path:
        """
        Create an archive at ``path`` holding ``files``.

        Files are stored under their base name. Returns the archive path.
        Failures propagate to the caller unchanged.
        """
        pass


class ZipArchiveWriter(ArchiveWriter):
    """Writes DEFLATE-compressed zip archives."""

    def create_archive(self, path: Path, files: Sequence[Path], compression_level: int) -> Path:
        with zipfile.ZipFile(
            path, "w", zipfile.ZIP_DEFLATED, compresslevel=compression_level
        ) as zf:
            for f in files:
                zf.write(f, arcname=Path(f).name)
        return path


ARCHIVE_WRITERS: Dict[str, Type[ArchiveWriter]] = {
    "zip": ZipArchiveWriter,
}


@dataclass(frozen=True)
class FileCheck:
    filename: str
    exists: bool


@dataclass
class PackageResult:
    """
    Outcome of a packaging attempt.

    Attributes:
        archive_path: The created archive, or None if nothing was created.
        manifest: The manifest as packaged (with its archive reference set
                  when an archive was created).
        file_checks: One entry per listed file, missing files first.
    """

    archive_path: Optional[Path]
    manifest: Manifest
    file_checks: List[FileCheck] = field(default_factory=list)

    @property
    def created(self) -> bool:
        return self.archive_path is not None

    @property
    def missing(self) -> List[str]:
        return [c.filename for c in self.file_checks if not c.exists]


def check_files(filenames: Sequence[str]) -> List[FileCheck]:
    """Existence table for ``filenames``, missing files first, then by name."""
    checks = [FileCheck(filename=f, exists=Path(f).exists()) for f in filenames]
    return sorted(checks, key=lambda c: (c.exists, c.filename))


def archive_name(manifest: Manifest, archive_kind: str, timestamp: int) -> str:
    prefix = "RES" if manifest.is_completed else "NEW"
    return ".".join(
        [
            prefix,
            sanitize(manifest.sample_id, MISSING_SAMPLE_ID),
            sanitize(manifest.encounter, MISSING_ENCOUNTER),
            sanitize(manifest.requested_performer, MISSING_PERFORMER),
            str(timestamp),
            archive_kind,
        ]
    )


def _check_archive_names(filenames: Sequence[str]) -> None:
    # Archive entries are flat, so two files may not share a base name and
    # none may shadow the manifest copy.
    seen: Dict[str, List[str]] = {MANIFEST_FILENAME: [MANIFEST_FILENAME]}
    for f in filenames:
        seen.setdefault(Path(f).name, []).append(f)
    clashes = {name: paths for name, paths in seen.items() if len(paths) > 1}
    if clashes:
        raise InvalidInputError(
            f"Files would collide in the archive: {', '.join(sorted(clashes))}",
            field="files",
            expected="unique base names, none called " + MANIFEST_FILENAME,
            found={name: paths for name, paths in sorted(clashes.items())},
        )


def _writer_for(archive_kind: str) -> ArchiveWriter:
    try:
        return ARCHIVE_WRITERS[archive_kind]()
    except KeyError:
        raise UnsupportedFormatError(
            f"Archive kind {archive_kind!r} is not supported",
            field="archive_kind",
            expected=sorted(ARCHIVE_WRITERS),
            found=archive_kind,
        ) from None


def package_manifest(
    manifest: ManifestSource,
    archive_kind: str = "zip",
    *,
    destination: Optional[Union[str, Path]] = None,
    compression_level: int = DEFAULT_COMPRESSION_LEVEL,
    writer: Optional[ArchiveWriter] = None,
    clock: Callable[[], float] = time.time,
) -> PackageResult:
    """
    Bundle a manifest's files and a JSON copy of the manifest into an archive.

    If any listed file is missing nothing is created; the returned result
    has ``archive_path=None`` and reports every file with its existence
    flag so the caller can fetch the missing ones and retry.

    Args:
        manifest: A Manifest or anything :func:`read_manifest` accepts.
        archive_kind: Archive format. Only "zip" is supported.
        destination: Directory receiving the archive (default: current directory).
        compression_level: Passed to the archive writer.
        writer: Archive writer to use instead of the one registered for ``archive_kind``.
        clock: Source of the unix time used in the archive name.

    Raises:
        UnsupportedFormatError: For an unknown ``archive_kind``, before any I/O.
        InvalidInputError: If two files share a base name, or one is named
            MANIFEST.json, since archive entries are stored flat.
    """
    archive_writer = _writer_for(archive_kind)
    if writer is not None:
        archive_writer = writer

    manifest = read_manifest(manifest)
    filenames = [att.filename for att in manifest.files]
    _check_archive_names(filenames)

    file_checks = check_files(filenames)
    if not all(c.exists for c in file_checks):
        missing = [c.filename for c in file_checks if not c.exists]
        logger.warning(
            f"Some or all {'output' if manifest.is_completed else 'input'} files missing: "
            f"{', '.join(missing)}"
        )
        return PackageResult(archive_path=None, manifest=manifest, file_checks=file_checks)

    name = archive_name(manifest, archive_kind, int(clock()))
    archive_path = Path(destination or ".") / name
    packaged = manifest.with_archive_reference(name)

    # The manifest copy must exist on disk to be archived; keep it out of
    # the working directory and remove it whatever happens.
    with tempfile.TemporaryDirectory(prefix="teamplay_manifest_") as tmpdir:
        manifest_copy = write_manifest(packaged, Path(tmpdir) / MANIFEST_FILENAME, pretty=2)
        files = [Path(f) for f in filenames] + [manifest_copy]

        logger.info(f"Compressing {','.join(str(f) for f in files)} to {archive_path}")
        created = archive_writer.create_archive(archive_path, files, compression_level)

    return PackageResult(archive_path=Path(created), manifest=packaged, file_checks=file_checks)
