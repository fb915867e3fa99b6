"""
Table import module for loading MySQL CSV dumps into a destination table.

This module provides:
- Schema parsing of `mysql --xml -e "describe <table>"` output
- JSON column mapping parsing and validation
- CSV loading into SQLite with lineage tracking
"""

from .errors import (
    CSVImportError,
    MalformedDocumentError,
    MappingValidationError,
    SchemaValidationError,
    ValidationError,
)
from .importer import Importer
from .mapping_reader import ColumnMapping, read_mapping
from .schema_reader import COLUMN_NAME_KEY, ColumnDescriptor, TableSchema, read_schema

__version__ = "0.1.0"

__all__ = [
    "COLUMN_NAME_KEY",
    "CSVImportError",
    "ColumnDescriptor",
    "ColumnMapping",
    "Importer",
    "MalformedDocumentError",
    "MappingValidationError",
    "SchemaValidationError",
    "TableSchema",
    "ValidationError",
    "read_mapping",
    "read_schema",
]
