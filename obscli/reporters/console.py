"""Console reporter using Rich library for formatted CLI output.

Renders command results for a terminal:
- Status line for every response, green for 2xx and yellow otherwise
- Listing rows as a table, or the raw body when it isn't a listing
- Per-unit outcome table for batch commands
- Progress lines for multipart part uploads
"""

from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from obscli.models import BatchResult, ObsResponse, PartDescriptor
from obscli.reporters.base import Reporter


class ConsoleReporter(Reporter):
    """Rich-based console reporter for CLI output.

    Args:
        quiet: If True, suppress per-part progress (results still print)
        console: Console to print to; defaults to stdout
    """

    def __init__(self, quiet: bool = False, console: Optional[Console] = None):
        """Initialize the console reporter.

        Args:
            quiet: Suppress per-part output if True
            console: Rich console to write to
        """
        # Use legacy_windows=True for ASCII-safe output on Windows consoles
        self.console = console or Console(legacy_windows=True)
        self.quiet = quiet

    def on_response(
        self,
        action: str,
        response: ObsResponse,
        rows: Optional[list[dict[str, str]]] = None,
    ) -> None:
        """Display the status line followed by rows or the raw body."""
        if response.ok:
            status = f"[bold green]Result:[/bold green] {response.status_code}"
        else:
            status = f"[bold yellow]Result:[/bold yellow] {response.status_code}"
        self.console.print(f"{status} [dim]({action})[/dim]")

        if not response.text.strip():
            self.console.print("[bright_blue]No text in response body[/bright_blue]")
        elif rows is None:
            self.console.print(response.text, markup=False, highlight=False)
        elif not rows:
            self.console.print("[bright_yellow]No entries in response table[/bright_yellow]")
        else:
            self.console.print(self._rows_table(rows))

    def _rows_table(self, rows: list[dict[str, str]]) -> Table:
        table = Table(
            show_header=True,
            header_style="bold magenta",
            border_style="dim",
            box=box.ROUNDED,
        )
        for label in rows[0]:
            table.add_column(label, no_wrap=True)
        for row in rows:
            table.add_row(*(escape(value) for value in row.values()))
        return table

    def on_batch_complete(self, action: str, result: BatchResult) -> None:
        """Display a per-unit summary table."""
        table = Table(
            title=action,
            show_header=True,
            header_style="bold magenta",
            border_style="dim",
            box=box.ASCII,
        )
        table.add_column("Name", style="cyan", no_wrap=True)
        table.add_column("Status", justify="center", no_wrap=True)
        table.add_column("Detail")

        for unit in result.units:
            if unit.ok:
                status = f"[green]{unit.response.status_code}[/green]"
                detail = ""
            elif unit.response is not None:
                status = f"[yellow]{unit.response.status_code}[/yellow]"
                detail = unit.response.text.strip()
            else:
                status = "[red]ERROR[/red]"
                detail = unit.error or ""
            table.add_row(escape(unit.name), status, escape(detail))

        self.console.print(table)
        self.console.print(
            f"{len(result.succeeded)} succeeded, {len(result.failed)} failed"
        )

    def on_part_complete(self, part: PartDescriptor, total_parts: int) -> None:
        if self.quiet:
            return
        self.console.print(f"  [green]uploaded[/green] part {part.part_number}/{total_parts} ({part.length} bytes)")

    def on_error(self, action: str, message: str) -> None:
        self.console.print(f"[bold red]ERROR:[/bold red] {escape(action)}: {escape(message)}", highlight=False)

    def on_run_complete(self) -> None:
        """No-op for the console reporter."""
        pass
