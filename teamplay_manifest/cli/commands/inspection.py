"""
Inspection and packaging CLI commands.

- cmd_show: Print a manifest as tables
- cmd_package: Bundle a manifest's files into an archive
"""

import logging
import sys

from teamplay_manifest.cli.tables import print_file_checks, print_manifest
from teamplay_manifest.config import load_settings
from teamplay_manifest.runtime.io import read_manifest
from teamplay_manifest.runtime.packaging import package_manifest

logger = logging.getLogger("cli.inspection")


def cmd_show(args):
    """
    Show a manifest's fields and file tables.
    """
    settings = load_settings(args.config)
    manifest = read_manifest(args.manifest, status_aliases=settings.status_aliases)
    print_manifest(manifest)


def cmd_package(args):
    """
    Package the input or output files of a manifest.
    """
    settings = load_settings(args.config)
    manifest = read_manifest(args.manifest, status_aliases=settings.status_aliases)

    result = package_manifest(
        manifest,
        args.kind,
        destination=args.dest or settings.archive_dir,
        compression_level=settings.compression_level,
    )
    if not result.created:
        print_file_checks(result.file_checks)
        logger.error(f"Package not created: {len(result.missing)} file(s) missing.")
        sys.exit(1)

    print(f"Package created: {result.archive_path}")
