"""
Manifest lifecycle CLI commands.

Contains commands that produce manifests:
- cmd_create: Create a requested manifest
- cmd_finalize: Mark a manifest as completed with output files
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from teamplay_manifest.config import load_settings
from teamplay_manifest.core.manifest import Manifest, create_manifest, finalize_manifest
from teamplay_manifest.core.serialization import to_json
from teamplay_manifest.runtime.io import read_manifest, write_manifest

logger = logging.getLogger("cli.manifest_ops")


def _file_rows(triples: Optional[Sequence[Sequence[str]]]) -> List[dict]:
    return [
        {"Description": desc, "Filename": filename, "MIME": mime}
        for desc, filename, mime in (triples or [])
    ]


def _emit(manifest: Manifest, out: Optional[str], indent: int) -> None:
    if out:
        path = write_manifest(manifest, Path(out), pretty=indent)
        print(f"Manifest written: {path}")
    else:
        print(to_json(manifest, pretty=indent))


def cmd_create(args):
    """
    Create a requested manifest from the command line file list.
    """
    settings = load_settings(args.config)
    manifest = create_manifest(
        args.performer,
        args.sample_id,
        args.encounter,
        _file_rows(args.file),
    )
    _emit(manifest, args.out, settings.pretty_indent)


def cmd_finalize(args):
    """
    Finalize an existing manifest with the given output files.
    """
    settings = load_settings(args.config)
    manifest = read_manifest(args.manifest, status_aliases=settings.status_aliases)
    finalized = finalize_manifest(manifest, _file_rows(args.file))
    _emit(finalized, args.out, settings.pretty_indent)
