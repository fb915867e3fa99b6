"""Runtime settings for a single import run."""

from dataclasses import dataclass


DEFAULT_DB_PATH = "data/import.sqlite"


@dataclass(frozen=True)
class ImportSettings:
    """
    Options controlling how an import is validated and loaded.

    Attributes:
        db_path: SQLite database receiving the destination table
        strict: Reject mapping keys (and CSV header columns) unknown to the schema
        header: CSV carries a header row; otherwise columns follow schema order
        delimiter: CSV field separator
        encoding: CSV file encoding
        dry_run: Validate inputs and read the CSV without writing to the database
    """

    db_path: str = DEFAULT_DB_PATH
    strict: bool = False
    header: bool = False
    delimiter: str = ","
    encoding: str = "utf-8-sig"
    dry_run: bool = False
