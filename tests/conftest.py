"""Shared fixtures for the schema mapping tests"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pytest
from loguru import logger

from rdbms_graph.connectors.base import DatabaseConnector, DatabaseInfo
from rdbms_graph.connectors.data_source import DataSourceInfo, VendorType
from rdbms_graph.connectors.sqlite import SQLiteConnector
from rdbms_graph.schema_mapper.factory import run_schema_mapping


SCENARIO_A = """
CREATE TABLE BOOK_AUTHOR (ID varchar(256) PRIMARY KEY, NAME varchar(256), AGE integer);
CREATE TABLE BOOK (
    ID varchar(256) PRIMARY KEY,
    TITLE varchar(256),
    AUTHOR_ID varchar(256),
    FOREIGN KEY (AUTHOR_ID) REFERENCES BOOK_AUTHOR(ID)
);
"""

SCENARIO_B = """
CREATE TABLE AUTHOR (ID varchar(256) PRIMARY KEY, NAME varchar(256));
CREATE TABLE BOOK (
    ID varchar(256) PRIMARY KEY,
    TITLE varchar(256),
    AUTHOR_ID varchar(256),
    FOREIGN KEY (AUTHOR_ID) REFERENCES AUTHOR(ID)
);
CREATE TABLE ARTICLE (
    ID varchar(256) PRIMARY KEY,
    TITLE varchar(256),
    AUTHOR_ID varchar(256),
    FOREIGN KEY (AUTHOR_ID) REFERENCES AUTHOR(ID)
);
"""

SCENARIO_C = """
CREATE TABLE FILM (ID integer PRIMARY KEY, TITLE varchar(256));
CREATE TABLE ACTOR (ID integer PRIMARY KEY, NAME varchar(256));
CREATE TABLE FILM_ACTOR (
    FILM_ID integer NOT NULL,
    ACTOR_ID integer NOT NULL,
    PAYMENT decimal(10, 2),
    PRIMARY KEY (FILM_ID, ACTOR_ID),
    FOREIGN KEY (FILM_ID) REFERENCES FILM(ID),
    FOREIGN KEY (ACTOR_ID) REFERENCES ACTOR(ID)
);
"""

SELF_REFERENCING = """
CREATE TABLE EMPLOYEE (
    EMP_ID integer PRIMARY KEY,
    NAME varchar(256),
    MGR_ID integer,
    FOREIGN KEY (MGR_ID) REFERENCES EMPLOYEE(EMP_ID)
);
CREATE TABLE PROJECT (
    ID integer PRIMARY KEY,
    TITLE varchar(256),
    PROJECT_MANAGER integer,
    FOREIGN KEY (PROJECT_MANAGER) REFERENCES EMPLOYEE(EMP_ID)
);
"""


def sqlite_data_source(path: str = ":memory:", aggregation_enabled: bool = True) -> DataSourceInfo:
    return DataSourceInfo(
        vendor=VendorType.SQLITE,
        connection_string=path,
        aggregation_enabled=aggregation_enabled,
        name="test"
    )


@pytest.fixture
def sqlite_connector():
    """Open in-memory SQLite connectors created from DDL scripts, closed after the test"""
    connectors: List[SQLiteConnector] = []

    def _create(ddl: str) -> SQLiteConnector:
        connector = SQLiteConnector(":memory:")
        connector.connect()
        connector.execute_script(ddl)
        connectors.append(connector)
        return connector

    yield _create
    for connector in connectors:
        connector.disconnect()


@pytest.fixture
def map_schema(sqlite_connector):
    """Run the whole mapping over an in-memory database"""

    def _map(ddl: str, aggregate: bool = False, naming_convention: Optional[str] = "java", **options: Any):
        connector = sqlite_connector(ddl)
        data_source = sqlite_data_source(aggregation_enabled=aggregate)
        return run_schema_mapping(data_source, connector, naming_convention=naming_convention, **options)

    return _map


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during the test"""
    messages: List[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


class StubConnector(DatabaseConnector):
    """
    In-memory metadata source

    tables maps a table name to a dict with "columns" ((name, type) pairs),
    "pk" (key column names) and "fks" (imported-key rows).
    """

    def __init__(self, tables: Dict[str, Dict[str, Any]], schema: Optional[str] = None, fail_on: Optional[str] = None):
        super().__init__("stub://")
        self.tables = tables
        self.schema = schema
        self.fail_on = fail_on
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.database = None

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if self.fail_on == name:
            raise RuntimeError(f"{name} failed")

    def connect(self) -> None:
        self._record("connect")

    def disconnect(self) -> None:
        self._record("disconnect")

    def get_database_info(self) -> DatabaseInfo:
        self._record("get_database_info")
        return DatabaseInfo("Stub", "1.2", 1, 2)

    def get_schemas(self) -> List[str]:
        self._record("get_schemas")
        return ["SYS", "SCOTT"]

    def get_tables(self, catalog=None, schema_pattern=None):
        self._record("get_tables", catalog, schema_pattern)
        return [(self.schema, name) for name in sorted(self.tables)]

    def get_columns(self, table_name, schema=None):
        self._record("get_columns", table_name, schema)
        return [
            {"column_name": name, "ordinal_position": position, "data_type": data_type, "is_nullable": True}
            for position, (name, data_type) in enumerate(self.tables[table_name]["columns"], start=1)
        ]

    def get_primary_keys(self, table_name, schema=None):
        self._record("get_primary_keys", table_name, schema)
        return list(self.tables[table_name].get("pk", []))

    def get_imported_keys(self, table_name, schema=None):
        self._record("get_imported_keys", table_name, schema)
        return [dict(row) for row in self.tables[table_name].get("fks", [])]

    def execute_query(self, query, params=None):
        self._record("execute_query", query)
        return [{"count": 0}]


def fk_row(pktable: str, fkcolumn: str, key_seq: int = 1, pkcolumn: str = "ID", fk_name: Optional[str] = None) -> dict:
    return {
        "pktable_name": pktable,
        "pkcolumn_name": pkcolumn,
        "fkcolumn_name": fkcolumn,
        "key_seq": key_seq,
        "fk_name": fk_name
    }
