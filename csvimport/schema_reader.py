"""
Schema reader for MySQL table descriptions.

Parses the XML produced by:

    mysql --xml -e "describe user;" > user_schema.xml

which looks like:

    <resultset statement="describe user" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
      <row>
        <field name="Field">userid</field>
        <field name="Type">int(10) unsigned</field>
        <field name="Null">NO</field>
        <field name="Key">PRI</field>
        <field name="Default" xsi:nil="true" />
        <field name="Extra">auto_increment</field>
      </row>
      ...
    </resultset>

Each row becomes one ColumnDescriptor keyed by the field's "name" attribute.
"""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterator, Mapping, Union

from .errors import MalformedDocumentError, SchemaValidationError

LOGGER = logging.getLogger("csvimport.schema_reader")

# Attribute holding the source column name in every row
COLUMN_NAME_KEY = "Field"
NULL_KEY = "Null"

XSI_NIL = "{http://www.w3.org/2001/XMLSchema-instance}nil"


@dataclass(frozen=True)
class ColumnDescriptor:
    """All attributes of one source column (name, type, nullability, ...)."""

    attributes: Mapping[str, str]

    def __post_init__(self):
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @property
    def name(self) -> str:
        return self.attributes[COLUMN_NAME_KEY]

    @property
    def nullable(self) -> bool:
        return self.attributes.get(NULL_KEY, "YES").upper() != "NO"

    def get(self, key: str, default=None):
        return self.attributes.get(key, default)

    def __getitem__(self, key: str) -> str:
        return self.attributes[key]

    def __contains__(self, key: object) -> bool:
        return key in self.attributes


@dataclass(frozen=True)
class TableSchema:
    """Source columns in the order the schema document lists them."""

    columns: tuple[ColumnDescriptor, ...] = field(default_factory=tuple)

    @property
    def names(self) -> list[str]:
        return [column.name for column in self.columns]

    def __len__(self) -> int:
        return len(self.columns)

    def __iter__(self) -> Iterator[ColumnDescriptor]:
        return iter(self.columns)

    def __getitem__(self, index: int) -> ColumnDescriptor:
        return self.columns[index]

    def find(self, name: str):
        """Return the descriptor for a source column name, or None."""
        for column in self.columns:
            if column.name == name:
                return column
        return None


def _is_nil(element: ET.Element) -> bool:
    return element.get(XSI_NIL, "").lower() == "true"


def _read_row(row: ET.Element, row_number: int) -> ColumnDescriptor:
    """
    Collect the attributes of one schema row.

    Fields with no text (or marked xsi:nil) are left out rather than stored
    as empty strings.

    Raises:
        SchemaValidationError: If a field has no name or the row has no 'Field'
    """
    attributes: dict[str, str] = {}
    for element in row:
        if _is_nil(element):
            continue
        value = element.text
        if not value:
            continue

        key = element.get("name")
        if key is None:
            raise SchemaValidationError(
                f"Field element without 'name' attribute in row {row_number}: {attributes}"
            )
        attributes[key] = value

    if COLUMN_NAME_KEY not in attributes:
        raise SchemaValidationError(f"No '{COLUMN_NAME_KEY}' in row {row_number}: {attributes}")

    return ColumnDescriptor(attributes)


def read_schema(schema_path: Union[str, Path]) -> TableSchema:
    """
    Parse a MySQL XML table description into an ordered schema.

    Args:
        schema_path: Path to the XML schema document

    Returns:
        TableSchema with one ColumnDescriptor per <row>, in document order

    Raises:
        FileNotFoundError: If the schema document does not exist
        MalformedDocumentError: If the document is not well-formed XML
        SchemaValidationError: If any row lacks the 'Field' attribute

    Example:
        >>> schema = read_schema("data/inputs/user_schema.xml")
        >>> schema.names
        ['userid', 'nickname']
    """
    schema_file = Path(schema_path)
    if not schema_file.exists():
        raise FileNotFoundError(f"Schema file not found: {schema_file}")

    with open(schema_file, "rb") as f:
        try:
            document = ET.parse(f)
        except ET.ParseError as e:
            raise MalformedDocumentError(f"Failed document parse of {schema_file}: {e}", schema_file) from e

    rows = [
        _read_row(row, row_number)
        for row_number, row in enumerate(document.getroot().iter("row"), start=1)
    ]

    LOGGER.debug("Read %d column(s) from %s", len(rows), schema_file)
    return TableSchema(tuple(rows))
