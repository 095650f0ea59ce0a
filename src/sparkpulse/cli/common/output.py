"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import questionary
from rich.console import Console, Group
from rich.table import Table
from rich.theme import Theme

from sparkpulse.cli.common.tui_style import QUESTIONARY_STYLE_SELECT
from sparkpulse.core.models import Alert, AlertSeverity, ApplicationState, StageActivity

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)

_SEVERITY_STYLE = {AlertSeverity.ERROR: "err", AlertSeverity.WARNING: "warn"}


def format_duration(ms: int) -> str:
    """Render a duration in ms as ``1h 02m 03s`` (hours omitted when zero)."""
    seconds = max(int(ms), 0) // 1000
    hours, rest = divmod(seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes:02d}m {seconds:02d}s"
    return f"{minutes}m {seconds:02d}s"


def build_status_table(state: ApplicationState, title: str = "Application status") -> Table:
    """Build a two-column table summarizing the application state."""
    t = Table(title=title, show_header=False, show_lines=False)
    t.add_column("Metric", style="meta", no_wrap=True)
    t.add_column("Value")

    if not state.initialized:
        t.add_row("State", "[warn]waiting for application data[/]")
        return t

    meta = state.run_metadata
    t.add_row("Application", f"{meta.app_name or '-'} ({meta.app_id})")
    t.add_row("Spark version", meta.spark_version)
    t.add_row("Run", "[warn]running[/]" if meta.is_running else "[ok]finished[/]")
    t.add_row("Duration", format_duration(state.status.duration))

    stages = state.status.stage_summary
    if stages is not None:
        style = "ok" if stages.status == StageActivity.WORKING else "meta"
        t.add_row("Activity", f"[{style}]{stages.status.value}[/{style}]")
        t.add_row("Active tasks", str(stages.total_active_tasks))
        t.add_row("Pending tasks", str(stages.total_pending_tasks))
        t.add_row("Input", stages.total_input)
        t.add_row("Output", stages.total_output)
        t.add_row("Disk spill", stages.total_disk_spill)

    executors = state.status.executor_status
    if executors is not None:
        mode = "local" if executors.num_of_executors == 0 else str(executors.num_of_executors)
        t.add_row("Executors", mode)
        t.add_row("Core hours", f"{executors.total_core_hour:.2f}")
        t.add_row("Activity rate", f"{executors.activity_rate:.2f}%")
        if executors.max_executor_memory_bytes:
            t.add_row("Max executor memory", f"{executors.max_executor_memory_percentage:.2f}%")

    return t


def build_alerts_table(alerts: Iterable[Alert], title: str = "Alerts") -> Table:
    """Build a table of alerts, one row per alert."""
    t = Table(title=title, show_lines=True)
    t.add_column("Severity", no_wrap=True)
    t.add_column("Title", style="title")
    t.add_column("Message")
    t.add_column("Suggestion", style="meta")

    for alert in alerts:
        style = _SEVERITY_STYLE[alert.severity]
        t.add_row(
            f"[{style}]{alert.severity.value}[/{style}]",
            alert.title,
            alert.message,
            " ".join(alert.suggestion.split()),
        )

    return t


def build_dashboard(state: ApplicationState, alerts: list[Alert]) -> Group:
    """Status table plus, when there are any, the active alerts."""
    if not alerts:
        return Group(build_status_table(state))
    return Group(build_status_table(state), build_alerts_table(alerts, title="Active alerts"))


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def alert(self, alert: Alert) -> None:
        """Print a single newly raised alert."""
        style = _SEVERITY_STYLE[alert.severity]
        console.print(f"[{style}]●[/] [title]{alert.title}[/] {alert.message}")

    def select_one(self, message: str, choices: list[questionary.Choice]) -> Any:
        """
        Prompt the user to pick one item from a list.

        Returns:
            The value of the selected choice, or None if cancelled.
        """
        if not choices:
            return None
        return questionary.select(
            message,
            choices=choices,
            style=QUESTIONARY_STYLE_SELECT,
            qmark="✦",
            instruction="Use ↑/↓ then Enter",
        ).ask()

    def status_table(self, state: ApplicationState, title: str = "Application status") -> None:
        console.print(build_status_table(state, title=title))

    def alerts_table(self, alerts: Iterable[Alert], title: str = "Alerts") -> None:
        console.print(build_alerts_table(alerts, title=title))

    def applications_table(
        self, apps: Iterable[Mapping[str, Any]], title: str = "Applications"
    ) -> None:
        """
        Expects Spark REST application records (``id``, ``name``, ``attempts``).
        """
        t = Table(title=title, show_lines=False)
        t.add_column("App ID", style="ok", no_wrap=True)
        t.add_column("Name")
        t.add_column("State", style="meta")

        for app in apps:
            attempts = app.get("attempts") or [{}]
            completed = bool(attempts[0].get("completed"))
            t.add_row(
                str(app.get("id", "")),
                str(app.get("name", "")),
                "completed" if completed else "running",
            )

        console.print(t)


out = Out()
