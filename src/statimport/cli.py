"""Command-line interface for the statimport pipeline."""

import json
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any

import typer
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from statimport.config.settings import AppConfig

app = typer.Typer(
    name="statimport",
    help="Validate and import regional indicator statistics from spreadsheets.",
    no_args_is_help=True,
)

console = Console()

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to configuration YAML file. Defaults apply when omitted.",
        exists=True,
        dir_okay=False,
    ),
]

JsonOption = Annotated[
    bool,
    typer.Option("--json", help="Print the raw JSON response instead of tables."),
]


def _setup(config: Path | None) -> "AppConfig":
    """Load configuration and configure logging."""
    from statimport.config.loader import load_config
    from statimport.errors import ConfigurationError
    from statimport.utils.logging import configure_logging

    try:
        app_config = load_config(config)
    except ConfigurationError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    configure_logging(app_config.logging.level, app_config.logging.json_output)
    return app_config


def _print_json(body: dict[str, Any]) -> None:
    console.print_json(json.dumps(body, default=str))


@app.command("init-db")
def init_db(config: ConfigOption = None) -> None:
    """Create the database tables if they do not exist."""
    from statimport.errors import PersistenceError
    from statimport.store.database import ensure_schema, open_connection, table_counts

    app_config = _setup(config)
    console.print(f"[blue]Initializing database {app_config.database_path}[/blue]")

    try:
        with open_connection(app_config.database) as conn:
            ensure_schema(conn)
            counts = table_counts(conn)
    except PersistenceError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    table = Table(title="Tables")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", style="green", justify="right")
    for name, count in counts.items():
        table.add_row(name, str(count))
    console.print(table)


@app.command()
def seed(
    directory: Annotated[
        Path,
        typer.Argument(
            help="Directory with indicators.csv, time_periods.csv, scenarios.csv, regions.csv.",
            exists=True,
            file_okay=False,
        ),
    ],
    config: ConfigOption = None,
) -> None:
    """Seed empty reference tables from CSV files."""
    from pandera.errors import SchemaError

    from statimport.errors import PersistenceError
    from statimport.store.database import ensure_schema, open_connection
    from statimport.store.seed import seed_reference_data

    app_config = _setup(config)

    try:
        with open_connection(app_config.database) as conn:
            ensure_schema(conn)
            results = seed_reference_data(conn, directory)
    except SchemaError as e:
        console.print(f"[red]Invalid reference data: {e}[/red]")
        raise typer.Exit(code=1) from e
    except PersistenceError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    table = Table(title="Reference Data")
    table.add_column("Table", style="cyan")
    table.add_column("Status")
    table.add_column("Rows", justify="right")
    styles = {"imported": "green", "skipped": "yellow", "missing": "red"}
    for result in results:
        style = styles.get(result.status, "white")
        table.add_row(result.table, f"[{style}]{result.status}[/{style}]", str(result.rows))
    console.print(table)


@app.command("import")
def import_file(
    file: Annotated[
        Path,
        typer.Argument(help="Spreadsheet to import (.xlsx).", exists=True, dir_okay=False),
    ],
    config: ConfigOption = None,
    as_json: JsonOption = False,
) -> None:
    """Validate a spreadsheet and import it. Nothing is imported if any cell fails."""
    from statimport.service import ImportService
    from statimport.validation.reporter import ConsoleReporter

    app_config = _setup(config)
    service = ImportService(app_config)

    if not as_json:
        console.print(f"[blue]Importing {file}[/blue]")

    response = service.upload(file.read_bytes(), file.name)
    body = response.json_body()

    if as_json:
        _print_json(body)
    else:
        ConsoleReporter(console).print_import_result(response.status_code, body)

    if not response.ok:
        raise typer.Exit(code=1)


@app.command()
def themes(config: ConfigOption = None, as_json: JsonOption = False) -> None:
    """List importable themes, their indicators and spreadsheet columns."""
    from statimport.service import ImportService
    from statimport.validation.reporter import ConsoleReporter

    app_config = _setup(config)
    response = ImportService(app_config).list_themes()
    body = response.json_body()

    reporter = ConsoleReporter(console)
    if not response.ok:
        reporter.print_error(response.status_code, body)
        raise typer.Exit(code=1)

    if as_json:
        _print_json(body)
    else:
        reporter.print_themes(body)


@app.command()
def template(
    themes: Annotated[
        str,
        typer.Option(
            "--themes",
            "-t",
            help='Comma-separated theme names, e.g. "Contact crimes,Property crimes".',
        ),
    ],
    year: Annotated[
        int | None,
        typer.Option("--year", "-y", help="Year to pre-fill in the sample row."),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output path. Defaults to the generated name."),
    ] = None,
    config: ConfigOption = None,
) -> None:
    """Generate a blank import template for the given themes."""
    from statimport.service import ImportService
    from statimport.validation.reporter import ConsoleReporter

    app_config = _setup(config)
    response = ImportService(app_config).template(themes, year)

    if not response.ok:
        ConsoleReporter(console).print_error(response.status_code, response.json_body())
        raise typer.Exit(code=1)

    if response.content is None or response.filename is None:
        console.print("[red]Error: the service returned no template file[/red]")
        raise typer.Exit(code=1)
    output = output or Path(response.filename)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(response.content)
    console.print(f"[green]Saved template to: {output}[/green]")


@app.command()
def show(
    indicator: Annotated[str, typer.Option("--indicator", "-i", help="Indicator key.")],
    year: Annotated[int, typer.Option("--year", "-y", help="Year.")],
    region: Annotated[str, typer.Option("--region", "-r", help="Region code.")],
    scenario: Annotated[
        str | None,
        typer.Option("--scenario", "-s", help="Scenario key (default from config)."),
    ] = None,
    config: ConfigOption = None,
) -> None:
    """Show one stored observation by its natural key."""
    from statimport.errors import PersistenceError
    from statimport.store.database import open_connection
    from statimport.store.upsert import fetch_observation

    app_config = _setup(config)
    scenario = scenario or app_config.importer.default_scenario

    try:
        with open_connection(app_config.database) as conn:
            record = fetch_observation(conn, indicator, year, scenario, region)
    except PersistenceError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    if record is None:
        console.print(
            f"[yellow]No value for {indicator} / {year} / {scenario} / {region}[/yellow]"
        )
        raise typer.Exit(code=1)

    table = Table(title="Observation")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for key, value in record.items():
        table.add_row(key, "null" if value is None else str(value))
    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from statimport import __version__

    console.print(f"statimport version {__version__}")


if __name__ == "__main__":
    app()
