"""
Unit tests for packaging manifests and their files into archives.
"""

from __future__ import annotations

import json
import zipfile
from pathlib import Path
from typing import List, Sequence

import pytest

from teamplay_manifest.core.errors import InvalidInputError, UnsupportedFormatError
from teamplay_manifest.core.manifest import create_manifest, finalize_manifest
from teamplay_manifest.core.serialization import from_json
from teamplay_manifest.runtime.io import write_manifest
from teamplay_manifest.runtime.packaging import (
    ArchiveWriter,
    FileCheck,
    MANIFEST_FILENAME,
    archive_name,
    check_files,
    package_manifest,
)

FIXED_TIME = 1700000000.5


def _clock() -> float:
    return FIXED_TIME


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "mutations.vcf").write_text("##fileformat=VCFv4.2\n")
    (tmp_path / "survival_report.pdf").write_bytes(b"%PDF-1.4\n")
    return tmp_path


class RecordingWriter(ArchiveWriter):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: List[tuple] = []
        self.manifest_texts: List[str] = []

    def create_archive(self, path: Path, files: Sequence[Path], compression_level: int) -> Path:
        self.calls.append((path, list(files), compression_level))
        manifest_copy = Path(files[-1])
        self.manifest_texts.append(manifest_copy.read_text(encoding="utf-8"))
        if self.fail:
            raise OSError("disk full")
        return path


class TestArchiveName:
    def test_requested_prefix(self, requested_manifest):
        name = archive_name(requested_manifest, "zip", 1700000000)
        assert name == "NEW.OUS_Patient1.Start_of_treatment.OUS-0001.1700000000.zip"

    def test_completed_prefix(self, completed_manifest):
        assert archive_name(completed_manifest, "zip", 1).startswith("RES.")

    def test_missing_fields_use_placeholders(self):
        m = create_manifest("OUS-0001", None, None, [])
        name = archive_name(m, "zip", 5)
        assert name == "NEW.--MISSING_sampleID--.--MISSING_encounter--.OUS-0001.5.zip"


class TestCheckFiles:
    def test_missing_first_then_by_name(self, workdir):
        checks = check_files(["mutations.vcf", "b.csv", "a.csv"])
        assert checks == [
            FileCheck("a.csv", False),
            FileCheck("b.csv", False),
            FileCheck("mutations.vcf", True),
        ]


class TestPackageManifest:
    def test_requested_zip(self, workdir, requested_manifest):
        result = package_manifest(requested_manifest, clock=_clock)

        assert result.created
        assert result.archive_path.name == "NEW.OUS_Patient1.Start_of_treatment.OUS-0001.1700000000.zip"
        assert result.archive_path.exists()
        assert result.manifest.archive_reference == result.archive_path.name
        assert result.missing == []

        with zipfile.ZipFile(result.archive_path) as zf:
            assert sorted(zf.namelist()) == [MANIFEST_FILENAME, "mutations.vcf"]
            packed = from_json(zf.read(MANIFEST_FILENAME).decode("utf-8"))
        assert packed == result.manifest
        assert packed.archive_reference == result.archive_path.name

    def test_completed_packages_outputs(self, workdir, completed_manifest):
        result = package_manifest(completed_manifest, clock=_clock)

        assert result.archive_path.name.startswith("RES.")
        with zipfile.ZipFile(result.archive_path) as zf:
            assert sorted(zf.namelist()) == [MANIFEST_FILENAME, "survival_report.pdf"]

    def test_files_stored_under_base_name(self, workdir):
        sub = workdir / "nested" / "dir"
        sub.mkdir(parents=True)
        (sub / "table.csv").write_text("a,b\n")
        m = create_manifest("OUS-0001", "S1", "EOT", [
            {"Description": "table", "Filename": str(sub / "table.csv"), "MIME": "text/csv"},
        ])
        result = package_manifest(m, clock=_clock)
        with zipfile.ZipFile(result.archive_path) as zf:
            assert "table.csv" in zf.namelist()

    def test_destination(self, workdir, requested_manifest):
        dest = workdir / "out"
        dest.mkdir()
        result = package_manifest(requested_manifest, destination=dest, clock=_clock)
        assert result.archive_path.parent == dest
        assert result.archive_path.exists()

    def test_missing_input_creates_nothing(self, workdir):
        m = create_manifest("OUS-0001", "S1", "EOT", [
            {"Description": "VCF", "Filename": "mutations.vcf", "MIME": "text/plain"},
            {"Description": "gone", "Filename": "does_not_exist.csv", "MIME": "text/csv"},
        ])
        result = package_manifest(m, clock=_clock)

        assert not result.created
        assert result.archive_path is None
        assert result.missing == ["does_not_exist.csv"]
        assert result.file_checks == [
            FileCheck("does_not_exist.csv", False),
            FileCheck("mutations.vcf", True),
        ]
        assert list(workdir.glob("*.zip")) == []

    def test_missing_files_logged(self, workdir, caplog):
        m = create_manifest("OUS-0001", "S1", "EOT", [
            {"Description": "gone", "Filename": "does_not_exist.csv", "MIME": "text/csv"},
        ])
        with caplog.at_level("WARNING"):
            package_manifest(m, clock=_clock)
        assert "does_not_exist.csv" in caplog.text

    def test_unsupported_kind_before_any_io(self, tmp_path):
        with pytest.raises(UnsupportedFormatError) as excinfo:
            package_manifest(tmp_path / "missing_manifest.json", archive_kind="tar.gz")
        assert excinfo.value.found == "tar.gz"
        assert excinfo.value.expected == ["zip"]

    def test_accepts_manifest_path(self, workdir, requested_manifest):
        path = write_manifest(requested_manifest, workdir / "request.json")
        result = package_manifest(str(path), clock=_clock)
        assert result.created

    def test_custom_writer_and_compression(self, workdir, requested_manifest):
        writer = RecordingWriter()
        result = package_manifest(requested_manifest, writer=writer, compression_level=9, clock=_clock)

        (path, files, level), = writer.calls
        assert level == 9
        assert path == result.archive_path
        assert [f.name for f in files] == ["mutations.vcf", MANIFEST_FILENAME]
        written = json.loads(writer.manifest_texts[0])
        assert written["for"] == {"reference": path.name}

    def test_temporary_manifest_removed(self, workdir, requested_manifest):
        writer = RecordingWriter()
        package_manifest(requested_manifest, writer=writer, clock=_clock)
        _, files, _ = writer.calls[0]
        assert not files[-1].exists()
        assert not (workdir / MANIFEST_FILENAME).exists()

    def test_writer_failure_propagates_and_cleans_up(self, workdir, requested_manifest):
        writer = RecordingWriter(fail=True)
        with pytest.raises(OSError, match="disk full"):
            package_manifest(requested_manifest, writer=writer, clock=_clock)
        _, files, _ = writer.calls[0]
        assert not files[-1].exists()

    def test_input_manifest_unchanged(self, workdir, requested_manifest):
        package_manifest(requested_manifest, clock=_clock)
        assert requested_manifest.archive_reference is None

    def test_finalize_after_packaging_keeps_reference(self, workdir, requested_manifest, output_files):
        packaged = package_manifest(requested_manifest, clock=_clock).manifest
        done = finalize_manifest(packaged, output_files)
        assert done.archive_reference == packaged.archive_reference

    def test_duplicate_base_names_rejected(self, workdir):
        for sub in ("a", "b"):
            (workdir / sub).mkdir()
            (workdir / sub / "x.csv").write_text("a,b\n")
        m = create_manifest("OUS-0001", "S1", "EOT", [
            {"Description": "first", "Filename": "a/x.csv", "MIME": "text/csv"},
            {"Description": "second", "Filename": "b/x.csv", "MIME": "text/csv"},
        ])
        with pytest.raises(InvalidInputError) as excinfo:
            package_manifest(m, clock=_clock)
        assert excinfo.value.found == {"x.csv": ["a/x.csv", "b/x.csv"]}
        assert list(workdir.glob("*.zip")) == []

    def test_file_named_like_manifest_copy_rejected(self, workdir):
        (workdir / MANIFEST_FILENAME).write_text("{}")
        m = create_manifest("OUS-0001", "S1", "EOT", [
            {"Description": "clash", "Filename": MANIFEST_FILENAME, "MIME": "application/json"},
        ])
        with pytest.raises(InvalidInputError, match=MANIFEST_FILENAME):
            package_manifest(m, clock=_clock)
        assert list(workdir.glob("*.zip")) == []
