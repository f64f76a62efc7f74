"""Interactive utilities for CLI commands"""

from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.prompt import Confirm, Prompt

from .output import format_release_list
from ...models import ReleaseInfo
from ...services.config_service import ConfigProvider


class InteractiveProvider(ConfigProvider):
    """Asks the operator for missing values and confirmations"""

    interactive = True

    def __init__(self, console: Console = None):
        self.console = console or Console()

    def ask(self, key: str, prompt: str, default: Optional[str] = None,
            remediation: Optional[List[str]] = None) -> str:
        self.console.print(f"[yellow]{prompt} is not configured[/yellow]")
        if remediation:
            self.console.print(f"[dim]{remediation[0]}[/dim]")

        value = ""
        while not value:
            value = Prompt.ask(prompt, default=default, console=self.console) or ""
            value = value.strip()
        return value

    def confirm(self, message: str, default: bool = False) -> bool:
        return Confirm.ask(message, default=default, console=self.console)

    def confirm_typed(self, message: str, expected: str) -> bool:
        """Only an exact match of ``expected`` counts as consent"""
        answer = Prompt.ask(message, default="", show_default=False, console=self.console)
        return answer.strip() == expected

    def choose_release(self, releases: List[ReleaseInfo]) -> Optional[str]:
        """Show the releases and ask for a version or a list number"""
        if not releases:
            return None

        format_release_list(releases, title="Available releases")
        answer = Prompt.ask(
            "Release version to roll back to (number or name)",
            default="",
            show_default=False,
            console=self.console
        ).strip()

        if answer.isdigit() and 1 <= int(answer) <= len(releases):
            return releases[int(answer) - 1].version
        return answer or None

    def corrected_build_dir(self, missing: Path) -> Optional[Path]:
        self.console.print(f"[red]Build directory not found: {missing}[/red]")
        answer = Prompt.ask(
            "Build directory (leave empty to abort)",
            default="",
            show_default=False,
            console=self.console
        ).strip()
        return Path(answer).expanduser() if answer else None
