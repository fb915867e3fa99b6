"""
Validation of import inputs and loaded tables.

Checks:
- Mapping columns exist in the schema (error in strict mode, warning otherwise)
- Schema columns left out of the mapping (informational)
- Destination columns loaded from NOT NULL source columns have no empty values
"""

import logging
import sqlite3
from typing import Any, Mapping

from .errors import ValidationError
from .mapping_reader import ColumnMapping
from .schema_reader import TableSchema
from .storage import quote_identifier, table_exists

LOGGER = logging.getLogger("csvimport.validators")


def check_mapping_against_schema(
    schema: TableSchema,
    mapping: ColumnMapping,
    strict: bool = False
) -> list[dict[str, Any]]:
    """
    Cross-check mapping source columns against the schema's column names.

    Args:
        schema: Parsed table schema
        mapping: Parsed column mapping
        strict: Raise on the first unknown column instead of reporting it

    Returns:
        List of warning dictionaries, one per unknown mapping column

    Raises:
        ValidationError: In strict mode, if a mapping column is not in the schema

    Example warning:
        {
            "type": "mapping",
            "severity": "warning",
            "table": "user",
            "column": "email",
            "issue": "unknown_source_column",
            "details": "Mapped column 'email' is not in the schema"
        }
    """
    known = set(schema.names)
    warnings = []

    for source_column in mapping.columns:
        if source_column in known:
            continue
        if strict:
            raise ValidationError(f"Mapped column '{source_column}' is not in the schema")
        LOGGER.warning("Mapped column '%s' is not in the schema", source_column)
        warnings.append({
            "type": "mapping",
            "severity": "warning",
            "table": mapping.table,
            "column": source_column,
            "issue": "unknown_source_column",
            "details": f"Mapped column '{source_column}' is not in the schema"
        })

    return warnings


def find_unmapped_columns(schema: TableSchema, mapping: ColumnMapping) -> list[dict[str, Any]]:
    """Report schema columns that the mapping drops."""
    return [
        {
            "type": "mapping",
            "severity": "warning",
            "table": mapping.table,
            "column": name,
            "issue": "unmapped_column",
            "details": f"Schema column '{name}' is not mapped and will not be loaded"
        }
        for name in schema.names
        if name not in mapping.columns
    ]


def validate_loaded_table(
    conn: sqlite3.Connection,
    table_name: str,
    schema: TableSchema,
    columns: Mapping[str, str]
) -> list[dict[str, Any]]:
    """
    Check that NOT NULL source columns arrived with values.

    Args:
        conn: SQLite connection
        table_name: Destination table
        schema: Parsed table schema
        columns: Source column -> destination column actually loaded

    Returns:
        List of issue dictionaries
    """
    issues = []
    if not table_exists(conn, table_name):
        return [{
            "type": "completeness",
            "severity": "error",
            "table": table_name,
            "column": "",
            "issue": "missing_table",
            "details": f"Destination table '{table_name}' does not exist"
        }]

    cursor = conn.cursor()
    for source_column, dest_column in columns.items():
        descriptor = schema.find(source_column)
        if descriptor is None or descriptor.nullable:
            continue

        quoted = quote_identifier(dest_column)
        cursor.execute(
            f"SELECT COUNT(*) FROM {quote_identifier(table_name)} WHERE {quoted} IS NULL OR {quoted} = ''"
        )
        result = cursor.fetchone()
        empty_count = result[0] if result else 0

        if empty_count > 0:
            issues.append({
                "type": "completeness",
                "severity": "warning",
                "table": table_name,
                "column": dest_column,
                "issue": "empty_value",
                "details": f"{empty_count} rows have empty {dest_column} (source '{source_column}' is NOT NULL)"
            })

    return issues


def generate_validation_report(issues: list[dict[str, Any]]) -> dict[str, Any]:
    """
    Summarize issues into a report.

    Returns:
        {
            "status": "pass" | "warnings" | "errors",
            "error_count": int,
            "warning_count": int,
            "errors": [...],
            "warnings": [...],
            "summary": str
        }
    """
    errors = [i for i in issues if i.get("severity") == "error"]
    warnings = [i for i in issues if i.get("severity") == "warning"]

    if errors:
        status = "errors"
        summary = f"Validation FAILED: {len(errors)} error(s), {len(warnings)} warning(s)"
    elif warnings:
        status = "warnings"
        summary = f"Validation passed with {len(warnings)} warning(s)"
    else:
        status = "pass"
        summary = "Validation passed: no errors or warnings"

    return {
        "status": status,
        "error_count": len(errors),
        "warning_count": len(warnings),
        "errors": errors,
        "warnings": warnings,
        "summary": summary
    }
