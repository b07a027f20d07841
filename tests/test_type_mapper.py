"""Tests for relational to graph type mapping"""

from __future__ import annotations

import pytest

from rdbms_graph.schema_mapper.type_mapper import map_type


@pytest.mark.parametrize("sql_type, expected", [
    ("VARCHAR(255)", "string"),
    ("character varying", "string"),
    ("int4", "integer"),
    ("INT UNSIGNED", "integer"),
    ("bigint(20) unsigned", "integer"),
    ("decimal(10, 2)", "float"),
    ("double precision", "float"),
    ("bool", "boolean"),
    ("date", "date"),
    ("timestamp with time zone", "datetime"),
    ("jsonb", "json"),
    ("bytea", "binary"),
    ("http://www.w3.org/2001/XMLSchema#integer", "integer"),
    ("http://www.w3.org/2001/XMLSchema#string", "string"),
])
def test_known_types(sql_type, expected):
    assert map_type(sql_type) == expected


def test_type_family_match():
    assert map_type("mediumblob") == "binary"
    assert map_type("timestamp(6) without time zone") == "datetime"
    assert map_type("unsigned big int") == "integer"
    assert map_type("long varchar") == "string"


@pytest.mark.parametrize("sql_type", ["interval", "point", "tsvector", "_int4"])
def test_family_match_needs_whole_words(sql_type):
    assert map_type(sql_type) == "string"


def test_unknown_type_falls_back_to_string(log_messages):
    assert map_type("geometry") == "string"
    assert any("geometry" in m for m in log_messages)


def test_empty_type():
    assert map_type(None) == "string"
