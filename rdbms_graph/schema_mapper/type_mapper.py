"""Mapping of relational type names to graph property types"""

import re
from typing import Callable
from loguru import logger

from .graph_schema import PropertyType

XML_SCHEMA_PREFIX = "http://www.w3.org/2001/xmlschema#"

TYPE_MAPPING = {
    "integer": PropertyType.INTEGER,
    "int": PropertyType.INTEGER,
    "int2": PropertyType.INTEGER,
    "int4": PropertyType.INTEGER,
    "int8": PropertyType.INTEGER,
    "bigint": PropertyType.INTEGER,
    "smallint": PropertyType.INTEGER,
    "tinyint": PropertyType.INTEGER,
    "mediumint": PropertyType.INTEGER,
    "serial": PropertyType.INTEGER,
    "bigserial": PropertyType.INTEGER,
    "long": PropertyType.INTEGER,
    "year": PropertyType.INTEGER,
    "numeric": PropertyType.FLOAT,
    "decimal": PropertyType.FLOAT,
    "dec": PropertyType.FLOAT,
    "number": PropertyType.FLOAT,
    "real": PropertyType.FLOAT,
    "float": PropertyType.FLOAT,
    "float4": PropertyType.FLOAT,
    "float8": PropertyType.FLOAT,
    "double": PropertyType.FLOAT,
    "double precision": PropertyType.FLOAT,
    "money": PropertyType.FLOAT,
    "smallmoney": PropertyType.FLOAT,
    "varchar": PropertyType.STRING,
    "varchar2": PropertyType.STRING,
    "nvarchar": PropertyType.STRING,
    "nvarchar2": PropertyType.STRING,
    "character varying": PropertyType.STRING,
    "char": PropertyType.STRING,
    "character": PropertyType.STRING,
    "nchar": PropertyType.STRING,
    "bpchar": PropertyType.STRING,
    "text": PropertyType.STRING,
    "ntext": PropertyType.STRING,
    "tinytext": PropertyType.STRING,
    "mediumtext": PropertyType.STRING,
    "longtext": PropertyType.STRING,
    "longvarchar": PropertyType.STRING,
    "clob": PropertyType.STRING,
    "nclob": PropertyType.STRING,
    "string": PropertyType.STRING,
    "uuid": PropertyType.STRING,
    "boolean": PropertyType.BOOLEAN,
    "bool": PropertyType.BOOLEAN,
    "bit": PropertyType.BOOLEAN,
    "date": PropertyType.DATE,
    "time": PropertyType.DATETIME,
    "time with time zone": PropertyType.DATETIME,
    "timestamp": PropertyType.DATETIME,
    "timestamptz": PropertyType.DATETIME,
    "timestamp with time zone": PropertyType.DATETIME,
    "timestamp without time zone": PropertyType.DATETIME,
    "datetime": PropertyType.DATETIME,
    "datetime2": PropertyType.DATETIME,
    "smalldatetime": PropertyType.DATETIME,
    "datetimeoffset": PropertyType.DATETIME,
    "json": PropertyType.JSON,
    "jsonb": PropertyType.JSON,
    "blob": PropertyType.BINARY,
    "tinyblob": PropertyType.BINARY,
    "mediumblob": PropertyType.BINARY,
    "longblob": PropertyType.BINARY,
    "bytea": PropertyType.BINARY,
    "binary": PropertyType.BINARY,
    "varbinary": PropertyType.BINARY,
}

# Whole-word matches, longest first: "long varchar" is a string, "interval" is not an int
FAMILY_PATTERNS = sorted(TYPE_MAPPING, key=len, reverse=True)

TypeMapper = Callable[[str], str]


def map_type(sql_type: str) -> str:
    """
    Map a relational type name to a graph property type

    Length/precision modifiers and the XML Schema namespace are ignored,
    so "VARCHAR(255)" and "http://www.w3.org/2001/XMLSchema#string" both
    map to "string". Unknown types fall back to "string".
    """
    normalized = (sql_type or "").strip().lower()
    if normalized.startswith(XML_SCHEMA_PREFIX):
        normalized = normalized[len(XML_SCHEMA_PREFIX):]
    normalized = re.sub(r"\(.*?\)", "", normalized).strip()
    normalized = re.sub(r"\s+unsigned$", "", normalized)

    if normalized in TYPE_MAPPING:
        return TYPE_MAPPING[normalized].value

    for sql_pattern in FAMILY_PATTERNS:
        if re.search(rf"\b{re.escape(sql_pattern)}\b", normalized):
            return TYPE_MAPPING[sql_pattern].value

    logger.debug(f"Type '{sql_type}' not mapped, falling back to {PropertyType.STRING.value}")
    return PropertyType.STRING.value
