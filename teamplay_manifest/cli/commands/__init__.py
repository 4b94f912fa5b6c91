"""
CLI commands subpackage.

Re-exports all command handlers for use by main.py.
"""

from teamplay_manifest.cli.commands.inspection import cmd_package, cmd_show
from teamplay_manifest.cli.commands.manifest_ops import cmd_create, cmd_finalize

__all__ = [
    # Manifest lifecycle
    "cmd_create",
    "cmd_finalize",
    # Inspection and packaging
    "cmd_show",
    "cmd_package",
]
