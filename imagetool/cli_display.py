"""Console rendering helpers for imagetool CLI."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.status import Status
from rich.table import Table

from .models import ProcessedResult, RequestState
from .orchestrator.state import SessionView

console = Console()


def _human_size(value: int) -> str:
    size = float(max(value, 0))
    units = ["B", "KB", "MB", "GB", "TB"]
    unit_idx = 0
    while size >= 1024.0 and unit_idx < len(units) - 1:
        size /= 1024.0
        unit_idx += 1
    if unit_idx == 0:
        return f"{int(size)} {units[unit_idx]}"
    return f"{size:.2f} {units[unit_idx]}"


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    panel = Panel(
        table,
        title="[bold green]imagetool[/bold green]",
        subtitle="[dim]Image Processing Tool[/dim]",
        border_style="blue",
    )
    console.print(panel)


class SessionDisplay:
    """Renders ``state_changed`` events: busy spinner, notices, panes."""

    def __init__(self, label: str = "Processing", source: Optional[Path] = None):
        self._label = label
        self._source = source
        self._status: Optional[Status] = None
        self._last_notice: Optional[str] = None
        self._last_original: Optional[str] = None

    def on_state_changed(self, view: SessionView) -> None:
        if view.busy:
            self._start_spinner()
        else:
            self._stop_spinner()

        if view.original_locator and view.original_locator != self._last_original:
            shown = self._source if self._source is not None else view.original_locator
            console.print(f"[cyan]Uploaded image:[/cyan] {shown}", soft_wrap=True)
            self._last_original = view.original_locator

        if view.notice_message and view.notice_message != self._last_notice:
            console.print(f"[red]Error:[/red] {view.notice_message}")
        self._last_notice = view.notice_message

    def render_result(
        self,
        state: RequestState,
        result: Optional[ProcessedResult],
        saved_to: Optional[Path] = None,
        size: Optional[int] = None,
    ) -> None:
        self._stop_spinner()
        if state is not RequestState.SUCCEEDED or result is None:
            return

        if saved_to is not None:
            detail = f" [dim]({_human_size(size or 0)})[/dim]" if size is not None else ""
            console.print(f"[green]Processed image:[/green] {saved_to}{detail}", soft_wrap=True)
            return
        console.print(f"[green]Processed image:[/green] {result.locator}", soft_wrap=True)

    def close(self) -> None:
        self._stop_spinner()

    def _start_spinner(self) -> None:
        if self._status is None:
            self._status = console.status(f"[bold cyan]{self._label}...")
            self._status.start()

    def _stop_spinner(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None
