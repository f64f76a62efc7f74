"""Output formatting utilities"""

from typing import Any, Dict, List, Optional

from rich import box
from rich.markup import escape
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from ...constants import EMOJI_ARROW, EMOJI_ERROR, EMOJI_ROCKET, EMOJI_WARNING, MSG_DEPLOY_SUCCESS
from ...models import (
    DeployResult,
    DeployStage,
    ReleaseInfo,
    RepointInstructions,
    RollbackResult,
    RollbackStage,
)
from ...utils.file_utils import format_size

console = Console()


def format_deploy_result(result: DeployResult) -> None:
    """Format and display deploy operation result"""
    if result.is_success:
        lines = [
            f"[green]{MSG_DEPLOY_SUCCESS.format(version=result.version, location=result.location)}[/green]",
            "",
            f"[bold]Version:[/bold] {result.version}",
            f"[bold]Bucket:[/bold] {result.bucket}",
            f"[bold]Prefix:[/bold] {result.prefix or '(root)'}",
        ]

        if result.compression:
            compression = result.compression
            line = f"[bold]Compressed:[/bold] {compression.compressed_count} files"
            if compression.ratio is not None:
                line += (f" ({format_size(compression.original_bytes)} {EMOJI_ARROW} "
                         f"{format_size(compression.compressed_bytes)})")
            if compression.reused:
                line += f", {len(compression.reused)} shipped .gz reused"
            lines.append(line)

        if result.upload:
            upload = result.upload
            sync = upload.sync
            lines.extend([
                f"[bold]Synced:[/bold] {len(sync.uploaded)} uploaded, {len(sync.unchanged)} unchanged"
                + (f", {len(sync.deleted)} deleted" if sync.deleted else ""),
                f"[bold]Compressed assets:[/bold] {upload.compressed_assets}",
                f"[bold]HTML:[/bold] {upload.html_files} (+{upload.compressed_html} gzip)",
                f"[bold]Verified:[/bold] {'yes' if upload.verified else 'no'}",
            ])
            if upload.sync_log:
                lines.append(f"[bold]Sync log:[/bold] {upload.sync_log}")

        if result.duration is not None:
            lines.append(f"[dim]Duration: {result.duration:.2f}s[/dim]")

        console.print(Panel(
            "\n".join(lines),
            title=f"{EMOJI_ROCKET} Deploy Result",
            border_style="green"
        ))

        _print_warnings(result.warnings)

        if result.instructions:
            console.print(f"\n[yellow]Load balancer update required[/yellow]: "
                          f"route traffic to {result.instructions.rewrite_path} to activate this release")
            _print_instructions(result.instructions)

        if result.releases:
            console.print()
            format_release_list(result.releases, title="Available releases")

    elif result.stage == DeployStage.CANCELLED:
        console.print(f"[yellow]{result.message}[/yellow]")

    else:
        format_error(result.exception, stage=result.failed_stage.value if result.failed_stage else None)
        _print_warnings(result.warnings)


def format_rollback_result(result: RollbackResult) -> None:
    """Format and display rollback instructions"""
    if result.stage == RollbackStage.CANCELLED:
        console.print(f"[yellow]{result.message}[/yellow]")
        return

    if not result.is_success:
        format_error(result.exception, stage=result.failed_stage.value if result.failed_stage else None)
        return

    _print_warnings(result.warnings)

    instructions = result.instructions
    lines = [
        f"[green]{result.message}[/green]",
        "",
        f"[bold]Location:[/bold] {instructions.location}",
        f"[bold]Objects:[/bold] {result.object_count}",
        f"[bold]Index document:[/bold] {'present' if result.has_index else '[yellow]missing[/yellow]'}",
    ]
    if instructions.rewrite_path:
        lines.append(f"[bold]Path prefix rewrite:[/bold] {instructions.rewrite_path}")

    console.print(Panel("\n".join(lines), title="Rollback", border_style="green"))
    _print_instructions(instructions)


def _print_instructions(instructions: RepointInstructions) -> None:
    if instructions.console_steps:
        console.print("\n[bold]Steps:[/bold]")
        for number, step in enumerate(instructions.console_steps, 1):
            console.print(f"  {number}. {step}")

    if instructions.commands:
        console.print("\n[bold]Or with gcloud:[/bold]")
        console.print(Syntax("\n".join(instructions.commands), "bash", word_wrap=True))

    if instructions.cache_invalidation:
        console.print("\n[bold]Then invalidate the CDN cache:[/bold]")
        console.print(Syntax(instructions.cache_invalidation, "bash", word_wrap=True))


def format_release_list(releases: List[ReleaseInfo],
                        title: str = "Releases",
                        location: Optional[str] = None) -> None:
    """Format and display release list"""
    if not releases:
        console.print("[yellow]No releases found[/yellow]")
        return

    table = Table(title=title, box=box.SIMPLE)
    table.add_column("#", style="dim")
    table.add_column("Version", style="cyan")
    table.add_column("Rewrite path", style="green")

    for number, release in enumerate(releases, 1):
        table.add_row(str(number), release.version, release.rewrite_path)

    console.print(table)
    if location:
        console.print(f"[dim]{location}[/dim]")


def format_config(config: Dict[str, Any]) -> None:
    """Format and display the effective configuration"""
    table = Table(title="Configuration", box=box.SIMPLE)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for key, value in config.items():
        table.add_row(key, "" if value is None else str(value))

    console.print(table)


def format_error(error: Optional[BaseException], stage: Optional[str] = None) -> None:
    """Diagnostic panel for a fatal error

    Shows the error code, the stage that failed and any remediation hints
    the error carries.
    """
    if error is None:
        console.print(f"[red]{EMOJI_ERROR} Operation failed[/red]")
        return

    code = getattr(error, 'error_code', None)
    lines = [f"[red]{EMOJI_ERROR} {escape(str(error))}[/red]"]

    if code or stage:
        lines.append("")
    if code:
        lines.append(f"[bold]Code:[/bold] {code}")
    if stage:
        lines.append(f"[bold]Failed stage:[/bold] {stage}")

    existing = getattr(error, 'existing', None)
    if existing:
        lines.append("")
        lines.append("[bold]Existing objects:[/bold]")
        lines.extend(f"  {escape(key)}" for key in existing)

    remediation = getattr(error, 'remediation', None)
    if remediation:
        lines.append("")
        lines.append("[bold]To fix:[/bold]")
        lines.extend(f"  • {escape(hint)}" for hint in remediation)

    console.print(Panel("\n".join(lines), title="Error", border_style="red"))


def _print_warnings(warnings: List[str]) -> None:
    for warning in warnings:
        print_warning(warning)


def print_warning(message: str) -> None:
    """Print warning message"""
    console.print(f"[yellow]{EMOJI_WARNING} Warning:[/yellow] {message}")
