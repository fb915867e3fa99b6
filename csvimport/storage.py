"""
SQLite destination for imported tables.

Every destination column is TEXT; values are copied from the CSV as strings.
Lineage for each imported CSV is kept in the import_metadata table.
"""

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Iterable, Sequence

METADATA_TABLE = "import_metadata"

METADATA_DDL = f"""
    CREATE TABLE IF NOT EXISTS {METADATA_TABLE} (
        source_name TEXT PRIMARY KEY,
        table_name TEXT NOT NULL,
        sha256 TEXT NOT NULL,
        rows_loaded INTEGER NOT NULL,
        loaded_at TEXT NOT NULL
    )
"""


def quote_identifier(name: str) -> str:
    """Quote a table or column name for SQLite (handles ':' in HBase-style names)."""
    return '"' + name.replace('"', '""') + '"'


def initialize_database(db_path: str) -> sqlite3.Connection:
    """
    Open the destination database, creating it and the metadata table if needed.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLite connection
    """
    db_file = Path(db_path)
    if db_path != ":memory:":
        db_file.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.execute(METADATA_DDL)
    conn.commit()
    return conn


def table_exists(conn: sqlite3.Connection, table_name: str) -> bool:
    cursor = conn.cursor()
    cursor.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
        (table_name,)
    )
    return cursor.fetchone() is not None


def create_table(conn: sqlite3.Connection, table_name: str, columns: Sequence[str]) -> None:
    """Create the destination table with one TEXT column per destination identifier."""
    column_defs = ", ".join(f"{quote_identifier(col)} TEXT" for col in columns)
    conn.execute(f"CREATE TABLE IF NOT EXISTS {quote_identifier(table_name)} ({column_defs})")


def insert_rows(
    conn: sqlite3.Connection,
    table_name: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[str]]
) -> int:
    """
    Insert rows into the destination table without committing.

    Returns:
        Number of rows inserted
    """
    column_list = ", ".join(quote_identifier(col) for col in columns)
    placeholders = ", ".join("?" for _ in columns)
    sql = f"INSERT INTO {quote_identifier(table_name)} ({column_list}) VALUES ({placeholders})"

    cursor = conn.cursor()
    count = 0
    for row in rows:
        cursor.execute(sql, tuple(row))
        count += 1
    return count


def record_metadata(
    conn: sqlite3.Connection,
    source_name: str,
    table_name: str,
    sha256: str,
    rows_loaded: int
) -> None:
    """
    Record CSV import metadata for lineage tracking (upsert by source name).

    Args:
        conn: SQLite connection
        source_name: CSV filename (e.g., "user.csv")
        table_name: Destination table
        sha256: SHA256 hash of the CSV
        rows_loaded: Number of rows written
    """
    cursor = conn.cursor()
    cursor.execute(f"""
        INSERT INTO {METADATA_TABLE} (source_name, table_name, sha256, rows_loaded, loaded_at)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(source_name) DO UPDATE SET
            table_name = excluded.table_name,
            sha256 = excluded.sha256,
            rows_loaded = excluded.rows_loaded,
            loaded_at = excluded.loaded_at
    """, (source_name, table_name, sha256, rows_loaded, datetime.now().isoformat()))
