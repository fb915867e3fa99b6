from __future__ import annotations

import json
from pathlib import Path

import pytest

USER_SCHEMA_XML = """<?xml version="1.0"?>
<resultset statement="describe user" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
  <row>
    <field name="Field">userid</field>
    <field name="Type">int(10) unsigned</field>
    <field name="Null">NO</field>
    <field name="Key">PRI</field>
    <field name="Default" xsi:nil="true" />
    <field name="Extra">auto_increment</field>
  </row>

  <row>
    <field name="Field">nickname</field>
    <field name="Type">varchar(16)</field>
    <field name="Null">NO</field>
    <field name="Key">MUL</field>
    <field name="Default"></field>
    <field name="Extra"></field>
  </row>
</resultset>
"""


@pytest.fixture
def schema_path(tmp_path: Path) -> Path:
    path = tmp_path / "user_schema.xml"
    path.write_text(USER_SCHEMA_XML, encoding="utf-8")
    return path


@pytest.fixture
def csv_path(tmp_path: Path) -> Path:
    path = tmp_path / "user.csv"
    path.write_text("1,alice\n2,bob\n3,carol\n", encoding="utf-8")
    return path


@pytest.fixture
def write_mapping(tmp_path: Path):
    def _write(obj, name: str = "user_mapping.json") -> Path:
        path = tmp_path / name
        path.write_text(obj if isinstance(obj, str) else json.dumps(obj), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def mapping_path(write_mapping) -> Path:
    return write_mapping({"table": "user", "columns": {"userid": "columns:userid"}})


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "db" / "import.sqlite")
