"""Terminal output for the command-line front end."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from resilient_fs.identity import ContentIdentity
from resilient_fs.types import CopyFailure


class Display:
    """Rich-based output for command results."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize display.

        Args:
            console: Console to print to (a new one by default).
        """
        self.console = console or Console()

    def show_success(self, message: str) -> None:
        """Show success message.

        Args:
            message: Success message.
        """
        self.console.print(f"[green]✓[/green] {message}")

    def show_error(self, message: str) -> None:
        """Show error message.

        Args:
            message: Error message.
        """
        self.console.print(f"[red]✗[/red] {message}")

    def show_warning(self, message: str) -> None:
        """Show warning message.

        Args:
            message: Warning message.
        """
        self.console.print(f"[yellow]![/yellow] {message}")

    def show_copy_failures(self, failures: list[CopyFailure]) -> None:
        """Display every entry that failed during a tree copy.

        Args:
            failures: Failed entries.
        """
        table = Table(title="Copy Failures")
        table.add_column("Source", style="cyan")
        table.add_column("Destination")
        table.add_column("Error", style="red")

        for failure in failures:
            table.add_row(failure.source, failure.destination, str(failure.error))

        self.console.print(table)

    def new_identity_table(self) -> Table:
        """Create an empty table for content identities."""
        table = Table(title="Content Identity")
        table.add_column("Path", style="cyan")
        table.add_column("Digest", style="green")
        table.add_column("Size", justify="right")
        table.add_column("Latency", justify="right")
        return table

    def add_identity_row(self, table: Table, path: str, ident: ContentIdentity) -> None:
        """Append one computed identity to a table."""
        table.add_row(
            path,
            ident.hexdigest,
            f"{ident.size:,}",
            f"{ident.latency * 1000:.2f} ms",
        )
