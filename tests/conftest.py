from pathlib import Path

import pytest

from teamplay_manifest.core.attachments import Attachment
from teamplay_manifest.core.manifest import create_manifest, finalize_manifest

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture
def data_dir() -> Path:
    return DATA_DIR


@pytest.fixture
def input_files():
    return [
        {"Description": "VCF", "Filename": "mutations.vcf", "MIME": "text/tab-separated-values"},
    ]


@pytest.fixture
def output_files():
    return [
        {"Description": "Survival report", "Filename": "survival_report.pdf", "MIME": "application/pdf"},
    ]


@pytest.fixture
def requested_manifest(input_files):
    return create_manifest("OUS-0001", "OUS_Patient1", "Start of treatment", input_files)


@pytest.fixture
def completed_manifest(requested_manifest, output_files):
    return finalize_manifest(requested_manifest, output_files)


@pytest.fixture
def attachments():
    return [
        Attachment(description="mutations", filename="mut_export.vcf", mime="text/tab-separated-values"),
        Attachment(description="methylation", filename="data/sample1_methylation.csv", mime="text/csv"),
        Attachment(description="CT image", filename="/abs/path/scan 01.dcm", mime="application/dicom"),
    ]
