"""
CSV import orchestrator.

An Importer is built from three files:
- the CSV data file (a MySQL table dump)
- the XML schema from `mysql --xml -e "describe <table>;"`
- the JSON mapping naming the destination table and column renames

Construction reads and validates the schema and mapping; it either succeeds
completely or raises. run() then copies the mapped CSV columns, as strings,
into the destination table and records SHA256 lineage.
"""

import hashlib
import io
import logging
from collections import Counter
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd

from .config import ImportSettings
from .errors import ValidationError
from .mapping_reader import read_mapping
from .schema_reader import read_schema
from .storage import create_table, initialize_database, insert_rows, record_metadata
from .validators import (
    check_mapping_against_schema,
    find_unmapped_columns,
    generate_validation_report,
    validate_loaded_table,
)

LOGGER = logging.getLogger("csvimport.importer")


def _require_file(path: Path, label: str) -> Path:
    if not path.exists():
        raise FileNotFoundError(f"{label} not found: {path}")
    return path


class Importer:
    """
    Validated import job for one CSV into one destination table.

    Attributes:
        csv_path: CSV data file
        schema: Source columns parsed from the schema document
        mapping: Destination table name and column renames
        settings: ImportSettings for this run
    """

    def __init__(
        self,
        csv_path: Union[str, Path],
        schema_path: Union[str, Path],
        mapping_path: Union[str, Path],
        settings: Optional[ImportSettings] = None
    ):
        self.settings = settings or ImportSettings()

        csv_file = _require_file(Path(csv_path), "CSV file")
        schema_file = _require_file(Path(schema_path), "Schema file")
        mapping_file = _require_file(Path(mapping_path), "Mapping file")

        schema = read_schema(schema_file)
        mapping = read_mapping(mapping_file)
        mapping_warnings = check_mapping_against_schema(schema, mapping, strict=self.settings.strict)

        self.csv_path = csv_file
        self.schema = schema
        self.mapping = mapping
        self._mapping_warnings = mapping_warnings

        LOGGER.info(
            "Prepared import of %s into '%s' (%d schema columns, %d mapped)",
            csv_file, mapping.table, len(schema), len(mapping)
        )

    @property
    def table_name(self) -> str:
        return self.mapping.table

    @property
    def columns(self) -> dict[str, str]:
        return dict(self.mapping.columns)

    def read_csv(self) -> tuple[pd.DataFrame, str]:
        """
        Read the CSV as strings, hashing the same bytes for lineage.

        Without a header row the columns are named from the schema, in order,
        and the column count must match the schema. Blank lines are rows of
        empty values there, not skipped.

        Returns:
            (frame, SHA256 hex digest of the file)

        Raises:
            ValidationError: If the CSV shape does not fit the schema
            pd.errors.ParserError: If the CSV is malformed
            LookupError: If the configured encoding is unknown
        """
        with open(self.csv_path, "rb") as f:
            raw = f.read()
        sha256 = hashlib.sha256(raw).hexdigest()

        read_kwargs = {
            "dtype": str,
            "keep_default_na": False,
            "sep": self.settings.delimiter,
            "encoding": self.settings.encoding,
        }
        if not self.settings.header:
            read_kwargs["header"] = None
            read_kwargs["skip_blank_lines"] = False

        try:
            df = pd.read_csv(io.BytesIO(raw), **read_kwargs)
        except pd.errors.EmptyDataError:
            LOGGER.warning("CSV file %s is empty", self.csv_path)
            return pd.DataFrame(columns=self.schema.names if not self.settings.header else [], dtype=str), sha256

        if self.settings.header:
            df.columns = [str(col) for col in df.columns]
            unknown = [col for col in df.columns if self.schema.find(col) is None]
            if unknown and self.settings.strict:
                raise ValidationError(f"CSV header columns not in the schema: {unknown}")
            return df, sha256

        if len(df.columns) != len(self.schema):
            raise ValidationError(
                f"CSV {self.csv_path} has {len(df.columns)} columns but the schema describes {len(self.schema)}"
            )
        df.columns = self.schema.names
        return df, sha256

    def _select_columns(self, df: pd.DataFrame) -> tuple[dict[str, str], list[dict[str, Any]]]:
        """Pick the mapped columns present in the CSV; report mapped columns it lacks."""
        selected = {}
        issues = []
        for source_column, dest_column in self.mapping.columns.items():
            if source_column in df.columns:
                selected[source_column] = dest_column
                continue
            issues.append({
                "type": "mapping",
                "severity": "warning",
                "table": self.table_name,
                "column": source_column,
                "issue": "missing_csv_column",
                "details": f"Mapped column '{source_column}' is not present in {self.csv_path.name}"
            })

        if not selected:
            raise ValidationError(f"None of the mapped columns are present in {self.csv_path}")

        duplicates = [dest for dest, count in Counter(selected.values()).items() if count > 1]
        if duplicates:
            raise ValidationError(f"Destination columns mapped from multiple source columns: {duplicates}")

        return selected, issues

    def run(self, db_path: Optional[str] = None) -> dict[str, Any]:
        """
        Load mapped CSV rows into the destination table.

        Source columns absent from the mapping are dropped. Rows are written
        in one transaction; a failure leaves no partial rows behind.

        Args:
            db_path: SQLite database, overriding settings.db_path

        Returns:
            Import report dictionary with:
            - status: "success" | "success_with_warnings" | "failed" | "dry_run"
            - table, source, rows_loaded, sha256, columns
            - validation_report: {...}
            - timestamp

        Raises:
            ValidationError: If the CSV does not fit the schema or mapping
            sqlite3.Error: If database operations fail
        """
        db_path = db_path or self.settings.db_path

        df, sha256 = self.read_csv()
        selected, issues = self._select_columns(df)
        issues = self._mapping_warnings + issues + find_unmapped_columns(self.schema, self.mapping)

        dest_columns = list(selected.values())
        rows_loaded = 0

        if self.settings.dry_run:
            LOGGER.info("Dry run: %d row(s) would be loaded into '%s'", len(df), self.table_name)
        else:
            conn = initialize_database(db_path)
            try:
                conn.execute("BEGIN")
                create_table(conn, self.table_name, dest_columns)
                frame = df[list(selected)]
                rows_loaded = insert_rows(
                    conn, self.table_name, dest_columns, frame.itertuples(index=False, name=None)
                )
                record_metadata(conn, self.csv_path.name, self.table_name, sha256, rows_loaded)
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            else:
                issues.extend(validate_loaded_table(conn, self.table_name, self.schema, selected))
            finally:
                conn.close()

            LOGGER.info("Loaded %d row(s) into '%s' (%s)", rows_loaded, self.table_name, db_path)

        validation_report = generate_validation_report(issues)
        if self.settings.dry_run:
            status = "dry_run"
        elif validation_report["status"] == "errors":
            status = "failed"
        elif validation_report["status"] == "warnings":
            status = "success_with_warnings"
        else:
            status = "success"

        return {
            "status": status,
            "table": self.table_name,
            "source": str(self.csv_path),
            "rows_loaded": rows_loaded,
            "rows_read": int(len(df)),
            "sha256": sha256,
            "columns": selected,
            "validation_report": validation_report,
            "timestamp": datetime.now().isoformat()
        }
