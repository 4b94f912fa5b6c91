"""
teamplay-manifest CLI entry point.

This module contains:
- Argparse setup for all subcommands
- main() entry point (referenced by pyproject.toml: teamplay_manifest.cli.main:main)

Command implementations are in the commands/ subpackage.
"""

import argparse
import logging
import sys

from teamplay_manifest.cli.commands import cmd_create, cmd_finalize, cmd_package, cmd_show
from teamplay_manifest.config import ConfigError
from teamplay_manifest.core.errors import ManifestError
from teamplay_manifest.runtime.packaging import ARCHIVE_WRITERS

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

logger = logging.getLogger("cli.main")


def _add_file_argument(parser: argparse.ArgumentParser, help_text: str) -> None:
    parser.add_argument(
        "--file",
        nargs=3,
        action="append",
        metavar=("DESCRIPTION", "FILENAME", "MIME"),
        help=help_text,
    )


def main():
    parser = argparse.ArgumentParser(description="Create, read and package Teamplay Task manifests")
    parser.add_argument("--config", help="Path to a teamplay_manifest YAML config file (optional)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # create
    parser_create = subparsers.add_parser("create", help="Create a requested manifest")
    parser_create.add_argument("performer", help="Analysis package to run (requestedPerformer)")
    parser_create.add_argument("--sample-id", dest="sample_id", help="Sample/patient ID (focus)")
    parser_create.add_argument("--encounter", help="Timepoint or encounter of the data")
    _add_file_argument(parser_create, "Input file; repeat for several files")
    parser_create.add_argument("-o", "--out", help="Write the manifest here instead of stdout")
    parser_create.set_defaults(func=cmd_create)

    # finalize
    parser_finalize = subparsers.add_parser("finalize", help="Mark a manifest completed with output files")
    parser_finalize.add_argument("manifest", help="Manifest file or JSON text")
    _add_file_argument(parser_finalize, "Output file; repeat for several files")
    parser_finalize.add_argument("-o", "--out", help="Write the manifest here instead of stdout")
    parser_finalize.set_defaults(func=cmd_finalize)

    # package
    parser_package = subparsers.add_parser("package", help="Bundle a manifest and its files into an archive")
    parser_package.add_argument("manifest", help="Manifest file or JSON text")
    parser_package.add_argument("--kind", choices=sorted(ARCHIVE_WRITERS), default="zip", help="Archive kind")
    parser_package.add_argument("--dest", help="Directory receiving the archive (default: config or cwd)")
    parser_package.set_defaults(func=cmd_package)

    # show
    parser_show = subparsers.add_parser("show", help="Print a manifest as tables")
    parser_show.add_argument("manifest", help="Manifest file or JSON text")
    parser_show.set_defaults(func=cmd_show)

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        args.func(args)
    except (ManifestError, ConfigError) as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
