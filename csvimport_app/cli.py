"""
Command-line interface for importing a MySQL CSV dump into a table.

    mysqlcsvimport <csv_file> <xml_table_schema> <json_mapping>

Exit codes:
    1  wrong number of arguments
    2  CSV file does not exist
    3  schema document does not exist
    4  mapping document does not exist
    5  schema or mapping document is malformed
    6  validation failed
    7  CSV could not be read or the database write failed
    8  schema or mapping document could not be opened
"""

import codecs
import json
import logging
import sqlite3
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from csvimport import Importer, MalformedDocumentError, ValidationError
from csvimport.config import DEFAULT_DB_PATH, ImportSettings
from csvimport_app import __version__

EXIT_USAGE = 1
EXIT_CSV_MISSING = 2
EXIT_SCHEMA_MISSING = 3
EXIT_MAPPING_MISSING = 4
EXIT_MALFORMED = 5
EXIT_INVALID = 6
EXIT_LOAD_FAILED = 7
EXIT_UNREADABLE = 8

USAGE = "Usage: mysqlcsvimport <csv_file> <xml_table_schema> <json_mapping_to_table>"

app = typer.Typer(
    name="mysqlcsvimport",
    help="Load a MySQL CSV dump into a table using its describe-table schema and a JSON column mapping",
    add_completion=False
)

console = Console()
err_console = Console(stderr=True)


def usage_and_exit(message: Optional[str], exit_code: int):
    if message:
        console.print(message, markup=False, highlight=False, soft_wrap=True)
    console.print(USAGE, markup=False, highlight=False, soft_wrap=True)
    sys.exit(exit_code)


def fail(message: str, exit_code: int):
    err_console.print(f"[bold red]Error:[/bold red] {escape(message)}", highlight=False, soft_wrap=True)
    sys.exit(exit_code)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True
    )


def version_callback(value: bool):
    if value:
        console.print(f"mysqlcsvimport {__version__}")
        raise typer.Exit()


def print_report(report: dict) -> None:
    console.print(f"\n[bold]Status:[/bold] {report['status']}")
    console.print(f"[bold]Table:[/bold] {escape(report['table'])}", soft_wrap=True)
    console.print(f"[bold]Rows read:[/bold] {report['rows_read']}")
    console.print(f"[bold]Rows loaded:[/bold] {report['rows_loaded']}")

    table = Table(title="Column Mapping")
    table.add_column("Source", style="cyan")
    table.add_column("Destination", style="magenta")
    for source, dest in report["columns"].items():
        table.add_row(escape(source), escape(dest))
    console.print(table)

    val_report = report["validation_report"]
    if val_report["status"] == "pass":
        console.print("[bold green]✓ Validation passed[/bold green]")
    elif val_report["status"] == "warnings":
        console.print(f"[bold yellow]⚠ Validation passed with {val_report['warning_count']} warning(s)[/bold yellow]")
        for warning in val_report["warnings"]:
            console.print(f"  [yellow]WARNING:[/yellow] {escape(warning['details'])}", highlight=False, soft_wrap=True)
    else:
        console.print(f"[bold red]✗ Validation failed with {val_report['error_count']} error(s)[/bold red]")
        for error in val_report["errors"]:
            console.print(f"  [red]ERROR:[/red] {escape(error['details'])}", highlight=False, soft_wrap=True)


@app.command()
def main(
    paths: Optional[List[str]] = typer.Argument(
        default=None,
        metavar="CSV_FILE XML_TABLE_SCHEMA JSON_MAPPING",
        help="CSV dump, `describe table` XML schema, and JSON column mapping",
        show_default=False
    ),
    db: str = typer.Option(
        DEFAULT_DB_PATH,
        "--db",
        envvar="MYSQLCSVIMPORT_DB",
        help="Path to SQLite database receiving the table"
    ),
    strict: bool = typer.Option(
        False,
        "--strict/--lenient",
        envvar="MYSQLCSVIMPORT_STRICT",
        help="Reject mapped columns that are not in the schema"
    ),
    header: bool = typer.Option(
        False,
        "--header/--no-header",
        help="CSV has a header row (otherwise columns follow schema order)"
    ),
    delimiter: str = typer.Option(",", "--delimiter", help="CSV field separator"),
    encoding: str = typer.Option("utf-8-sig", "--encoding", help="CSV file encoding"),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Validate inputs and read the CSV without writing to the database"
    ),
    output_report: Optional[str] = typer.Option(
        None,
        "--output-report",
        help="Path to write JSON import report"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
):
    """
    Import CSV_FILE into the table named by JSON_MAPPING.

    Only columns listed in the mapping are loaded; each is renamed to its
    destination column.

    Example:
        mysqlcsvimport user.csv user_schema.xml user_mapping.json --db db/import.sqlite
    """
    paths = paths or []
    if len(paths) != 3:
        usage_and_exit("Wrong number of arguments", EXIT_USAGE)

    configure_logging(verbose)

    csv_file, schema_file, mapping_file = (Path(p) for p in paths)
    for path, exit_code in (
        (csv_file, EXIT_CSV_MISSING),
        (schema_file, EXIT_SCHEMA_MISSING),
        (mapping_file, EXIT_MAPPING_MISSING),
    ):
        if not path.exists():
            usage_and_exit(f"{path} does not exist", exit_code)

    try:
        codecs.lookup(encoding)
    except LookupError:
        fail(f"Unknown CSV encoding: {encoding}", EXIT_LOAD_FAILED)

    settings = ImportSettings(
        db_path=db,
        strict=strict,
        header=header,
        delimiter=delimiter,
        encoding=encoding,
        dry_run=dry_run
    )

    try:
        importer = Importer(csv_file, schema_file, mapping_file, settings)
    except MalformedDocumentError as e:
        fail(str(e), EXIT_MALFORMED)
    except ValidationError as e:
        fail(str(e), EXIT_INVALID)
    except OSError as e:
        fail(f"Cannot read import inputs: {e}", EXIT_UNREADABLE)

    try:
        report = importer.run()
    except ValidationError as e:
        fail(str(e), EXIT_INVALID)
    except (pd.errors.ParserError, UnicodeDecodeError, sqlite3.Error, OSError) as e:
        fail(f"Import into '{importer.table_name}' failed: {e}", EXIT_LOAD_FAILED)

    if output_report:
        report_path = Path(output_report)
        report_path.parent.mkdir(parents=True, exist_ok=True)
        with open(report_path, "w") as f:
            json.dump(report, f, indent=2)

    print_report(report)

    if output_report:
        console.print(f"\n[dim]Full report written to: {output_report}[/dim]\n")

    if report["status"] == "failed":
        sys.exit(EXIT_INVALID)


if __name__ == "__main__":
    app()
