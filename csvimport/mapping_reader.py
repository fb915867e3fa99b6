"""
Mapping reader for source-to-destination column renames.

For a column in the CSV to make it into the destination table it must be
named in the mapping. The JSON holds the destination table name and a map of
source column name to destination column identifier:

    {"table": "user", "columns": {"userid": "columns:userid"}}

loads the CSV column 'userid' into the column 'columns:userid' of table 'user'.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Union

from .errors import MalformedDocumentError, MappingValidationError

LOGGER = logging.getLogger("csvimport.mapping_reader")

TABLE_KEY = "table"
COLUMNS_KEY = "columns"


@dataclass(frozen=True)
class ColumnMapping:
    """Destination table name plus source column -> destination column renames."""

    table: str
    columns: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))

    def destination(self, source_column: str):
        """Destination identifier for a source column, or None if it is dropped."""
        return self.columns.get(source_column)

    def __len__(self) -> int:
        return len(self.columns)


def parse_mapping(obj, source: str = "<mapping>") -> ColumnMapping:
    """
    Validate an already-decoded mapping object.

    The first invalid entry aborts the parse; errors are not accumulated.

    Raises:
        MalformedDocumentError: If the object is not a JSON object
        MappingValidationError: If table/columns are missing or an entry is empty
    """
    if not isinstance(obj, dict):
        raise MalformedDocumentError(f"Mapping {source} must be a JSON object, got {type(obj).__name__}")

    table = obj.get(TABLE_KEY)
    if not isinstance(table, str):
        raise MappingValidationError(f"Failed to find table/columns in {source}: '{TABLE_KEY}' must be a string")
    if not table:
        raise MappingValidationError(f"Failed to find table/columns in {source}: '{TABLE_KEY}' is empty")

    raw_columns = obj.get(COLUMNS_KEY)
    if not isinstance(raw_columns, dict):
        raise MappingValidationError(f"Failed to find table/columns in {source}: '{COLUMNS_KEY}' must be an object")

    columns: dict[str, str] = {}
    for key, value in raw_columns.items():
        if not key:
            raise MappingValidationError(f"Empty column name in {source}")
        if not isinstance(value, str) or not value:
            raise MappingValidationError(f"{key} value must be a non-empty string")
        columns[key] = value

    return ColumnMapping(table=table, columns=columns)


def read_mapping(mapping_path: Union[str, Path]) -> ColumnMapping:
    """
    Read the JSON column mapping.

    Args:
        mapping_path: Path to the JSON mapping document

    Returns:
        ColumnMapping with the destination table name and one entry per column

    Raises:
        FileNotFoundError: If the mapping document does not exist
        MalformedDocumentError: If the file is not valid UTF-8 JSON
        MappingValidationError: If table/columns are missing or an entry is empty
    """
    mapping_file = Path(mapping_path)
    if not mapping_file.exists():
        raise FileNotFoundError(f"Mapping file not found: {mapping_file}")

    with open(mapping_file, "r", encoding="utf-8") as f:
        try:
            obj = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise MalformedDocumentError(
                f"Failed tokenization of json mapping {mapping_file}: {e}", mapping_file
            ) from e

    mapping = parse_mapping(obj, source=str(mapping_file))
    LOGGER.debug("Mapping %s targets table '%s' with %d column(s)", mapping_file, mapping.table, len(mapping))
    return mapping
