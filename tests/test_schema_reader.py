from __future__ import annotations

from pathlib import Path

import pytest

from csvimport import COLUMN_NAME_KEY, MalformedDocumentError, SchemaValidationError, read_schema


def _write(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "schema.xml"
    path.write_text(body, encoding="utf-8")
    return path


def test_read_schema_returns_one_descriptor_per_row_in_order(schema_path: Path) -> None:
    schema = read_schema(schema_path)

    assert len(schema) == 2
    assert schema.names == ["userid", "nickname"]
    assert schema[0][COLUMN_NAME_KEY] == "userid"
    assert schema[0]["Type"] == "int(10) unsigned"
    assert schema[0]["Extra"] == "auto_increment"


def test_read_schema_omits_empty_and_nil_fields(schema_path: Path) -> None:
    schema = read_schema(schema_path)

    assert "Default" not in schema[0]
    assert "Default" not in schema[1]
    assert "Extra" not in schema[1]
    assert dict(schema[1].attributes) == {
        "Field": "nickname",
        "Type": "varchar(16)",
        "Null": "NO",
        "Key": "MUL",
    }


def test_read_schema_nullable_follows_null_attribute(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "<resultset>"
        "<row><field name='Field'>a</field><field name='Null'>NO</field></row>"
        "<row><field name='Field'>b</field><field name='Null'>YES</field></row>"
        "<row><field name='Field'>c</field></row>"
        "</resultset>",
    )

    schema = read_schema(path)

    assert [c.nullable for c in schema] == [False, True, True]
    assert schema.find("b") is schema[1]
    assert schema.find("missing") is None


def test_read_schema_skips_text_nodes_between_fields(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "<resultset><row>\n  stray text\n  <field name='Field'>id</field>\n  tail\n</row></resultset>",
    )

    schema = read_schema(path)

    assert dict(schema[0].attributes) == {"Field": "id"}


def test_read_schema_with_no_rows_is_empty(tmp_path: Path) -> None:
    schema = read_schema(_write(tmp_path, "<resultset statement='describe empty'/>"))

    assert len(schema) == 0
    assert schema.names == []


def test_read_schema_fails_on_row_without_field_key(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "<resultset>"
        "<row><field name='Field'>userid</field></row>"
        "<row><field name='Type'>varchar(16)</field><field name='Null'>NO</field></row>"
        "</resultset>",
    )

    with pytest.raises(SchemaValidationError, match="No 'Field' in row 2") as excinfo:
        read_schema(path)

    assert "varchar(16)" in str(excinfo.value)
    assert "'Null': 'NO'" in str(excinfo.value)


def test_read_schema_treats_empty_field_value_as_missing(tmp_path: Path) -> None:
    path = _write(tmp_path, "<resultset><row><field name='Field'></field></row></resultset>")

    with pytest.raises(SchemaValidationError, match="No 'Field'"):
        read_schema(path)


def test_read_schema_fails_on_field_without_name(tmp_path: Path) -> None:
    path = _write(tmp_path, "<resultset><row><field>userid</field></row></resultset>")

    with pytest.raises(SchemaValidationError, match="without 'name' attribute"):
        read_schema(path)


def test_read_schema_malformed_xml_keeps_parser_cause(tmp_path: Path) -> None:
    path = _write(tmp_path, "<resultset><row><field name='Field'>userid</row>")

    with pytest.raises(MalformedDocumentError) as excinfo:
        read_schema(path)

    assert excinfo.value.path == str(path)
    assert excinfo.value.__cause__ is not None


def test_read_schema_missing_file_raises_file_not_found(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_schema(tmp_path / "nope.xml")


def test_column_descriptor_is_read_only(schema_path: Path) -> None:
    schema = read_schema(schema_path)

    with pytest.raises(TypeError):
        schema[0].attributes["Field"] = "other"
