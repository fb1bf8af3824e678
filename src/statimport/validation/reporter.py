"""
Console reporter for import results.

Formats service response bodies using Rich for clear, colored output.
"""

from typing import Any

from rich.console import Console
from rich.table import Table


class ConsoleReporter:
    """Formats and displays import, theme and error results to the console."""

    def __init__(self, console: Console) -> None:
        """
        Initialize console reporter.

        Args:
            console: Rich Console instance for output.
        """
        self.console = console

    def print_import_result(self, status_code: int, body: dict[str, Any]) -> None:
        """
        Print the outcome of an upload.

        Args:
            status_code: Response status.
            body: Response body from ImportService.upload.
        """
        if body.get("success"):
            self._print_success(body)
        elif "errors" in body:
            self._print_validation_errors(body)
        else:
            self.print_error(status_code, body)

    def _print_success(self, body: dict[str, Any]) -> None:
        summary = body["summary"]
        details = body["details"]

        table = Table(title="Import Results", show_header=True)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green", justify="right")

        table.add_row("Rows read", str(summary["totalRows"]))
        table.add_row("Candidate cells", str(summary["totalCells"]))
        table.add_row("Cells imported", str(summary["cellsProcessed"]))
        table.add_row("Inserted", str(summary["inserted"]))
        table.add_row("Updated", str(summary["updated"]))
        table.add_row("Skipped (empty or zero)", str(summary["skipped"]))
        table.add_row("Processing time", summary["processingTime"])

        self.console.print(table)
        self.console.print()
        self.console.print(
            f"[bold]Regions:[/bold] {', '.join(details['affectedMunicipalities'])}"
        )
        self.console.print(
            f"[bold]Indicators:[/bold] {', '.join(details['affectedIndicators'])}"
        )
        self.console.print(
            f"[bold]Years:[/bold] {', '.join(str(y) for y in details['affectedYears'])}"
        )
        scenario = details["scenario"]
        if isinstance(scenario, list):
            scenario = ", ".join(scenario)
        self.console.print(f"[bold]Scenario:[/bold] {scenario}")

    def _print_validation_errors(self, body: dict[str, Any]) -> None:
        summary = body["summary"]
        errors = body["errors"]

        table = Table(title="Validation Errors", show_header=True)
        table.add_column("Row", justify="right", style="cyan", no_wrap=True)
        table.add_column("Column", style="blue")
        table.add_column("Value", style="yellow")
        table.add_column("Error", style="red")

        for error in errors:
            value = error["value"]
            table.add_row(
                str(error["row"]),
                error["column"],
                "-" if value is None else str(value),
                error["error"],
            )

        self.console.print(table)
        self.console.print()
        self.console.print("[bold]Summary:[/bold]")
        self.console.print(f"  Rows read: {summary['totalRows']}")
        self.console.print(f"  Valid records: {summary['validRecords']}")
        self.console.print(f"  [red]Errors: {summary['failed']}[/red]")
        if summary["failed"] > len(errors):
            self.console.print(f"  [dim](showing first {len(errors)})[/dim]")
        self.console.print("[red]Nothing was imported.[/red]")

    def print_error(self, status_code: int, body: dict[str, Any]) -> None:
        """Print a request, format or store error."""
        self.console.print(f"[red]Error ({status_code}): {body.get('error')}[/red]")
        if body.get("hint"):
            self.console.print(f"[yellow]Hint: {body['hint']}[/yellow]")
        if body.get("availableThemes"):
            self.console.print("[blue]Available themes:[/blue]")
            for theme in body["availableThemes"]:
                self.console.print(f"  {theme}")

    def print_themes(self, body: dict[str, Any]) -> None:
        """Print the theme listing, one table per theme."""
        for theme in body["themes"]:
            table = Table(title=f"{theme['theme']} ({theme['count']})", show_header=True)
            table.add_column("Column", style="cyan", no_wrap=True)
            table.add_column("Label")
            table.add_column("Unit", style="dim")
            for indicator in theme["indicators"]:
                table.add_row(
                    indicator["excelColumn"], indicator["label"], indicator["unit"] or "-"
                )
            self.console.print(table)

        self.console.print(
            f"\n[bold]{body['totalThemes']} themes, "
            f"{body['totalIndicators']} importable indicators[/bold]"
        )
