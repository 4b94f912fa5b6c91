from __future__ import annotations

from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from teamplay_manifest.core.attachments import Attachment
from teamplay_manifest.core.manifest import Manifest, TaskStatus
from teamplay_manifest.runtime.packaging import FileCheck


def file_table(files: Sequence[Attachment], title: str) -> Table:
    table = Table(title=title, box=box.SIMPLE_HEAD)
    table.add_column("Description")
    table.add_column("Filename", style="cyan")
    table.add_column("MIME")
    for att in files:
        table.add_row(att.description, att.filename, att.mime)
    return table


def file_check_table(checks: Sequence[FileCheck]) -> Table:
    table = Table(title="Package files", box=box.SIMPLE_HEAD)
    table.add_column("Filename", style="cyan")
    table.add_column("Exists")
    for check in checks:
        exists = "[green]yes[/green]" if check.exists else "[red]no[/red]"
        table.add_row(check.filename, exists)
    return table


def summary_table(manifest: Manifest) -> Table:
    status_style = "green" if manifest.status == TaskStatus.COMPLETED else "yellow"

    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Status", f"[{status_style}]{manifest.status.value}[/{status_style}]")
    table.add_row("Requested performer", manifest.requested_performer)
    table.add_row("Sample ID", manifest.sample_id or "-")
    table.add_row("Encounter", manifest.encounter or "-")
    table.add_row("Authored on", manifest.authored_on)
    table.add_row("Last modified", manifest.last_modified or "-")
    table.add_row("Archive", manifest.archive_reference or "-")
    return table


def print_manifest(manifest: Manifest, console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print(summary_table(manifest))
    console.print(file_table(manifest.input, "Input files"))
    if manifest.output is not None:
        console.print(file_table(manifest.output, "Output files"))


def print_file_checks(checks: Sequence[FileCheck], console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print("Some or all files missing:")
    console.print(file_check_table(checks))
