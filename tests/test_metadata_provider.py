"""Tests for the data source metadata provider"""

from __future__ import annotations

import pytest

from conftest import SCENARIO_B, SCENARIO_C, sqlite_data_source
from rdbms_graph.connectors.data_source import DataSourceInfo, VendorType
from rdbms_graph.connectors.sqlite import SQLiteConnector
from rdbms_graph.exceptions import UnsupportedDataSourceError
from rdbms_graph.metadata.provider import MetadataProvider


FILM_ROWS = """
INSERT INTO FILM VALUES (1, 'Alien'), (2, 'Heat'), (3, 'Ronin');
INSERT INTO ACTOR VALUES (1, 'Weaver'), (2, 'De Niro');
INSERT INTO FILM_ACTOR VALUES (1, 1, 10.0), (2, 2, 20.0), (3, 2, 30.0), (3, 1, NULL);
"""

AUTHOR_ROWS = """
INSERT INTO AUTHOR VALUES ('a1', 'Ann'), ('a2', 'Bob');
INSERT INTO BOOK VALUES ('b1', 'First', 'a1'), ('b2', 'Second', 'a2'), ('b3', 'Orphan', NULL);
INSERT INTO ARTICLE VALUES ('r1', 'Note', 'a1');
"""

HIERARCHY = """
CREATE TABLE EMPLOYEE (ID integer PRIMARY KEY, NAME varchar(50), TYPE varchar(10), SALARY integer);
INSERT INTO EMPLOYEE VALUES (1, 'Ann', 'reg', 100), (2, 'Bob', 'reg', 200), (3, 'Cid', 'emp', NULL);
"""

HIERARCHY_DESCRIPTOR = """<hibernate-mapping>
  <class name="Employee" table="EMPLOYEE" discriminator-value="emp">
    <discriminator column="TYPE"/>
    <subclass name="Regular_Employee" discriminator-value="reg">
      <property name="salary" column="SALARY"/>
    </subclass>
  </class>
</hibernate-mapping>
"""


@pytest.fixture
def database_file(tmp_path):
    """Create a SQLite database file from a script"""

    def _create(script: str) -> str:
        path = str(tmp_path / "source.db")
        with SQLiteConnector(path) as connector:
            connector.execute_script(script)
        return path

    return _create


def _by_name(classes):
    return {c["name"]: c for c in classes}


class TestMetadataProvider:

    def test_aggregated_many_to_many(self, database_file):
        path = database_file(SCENARIO_C + FILM_ROWS)
        provider = MetadataProvider(naming_convention="java")

        metadata = provider.fetch_metadata(sqlite_data_source(path, aggregation_enabled=True)).to_dict()

        nodes = _by_name(metadata["nodes_classes"])
        edges = _by_name(metadata["edges_classes"])
        assert set(nodes) == {"Actor", "Film"}
        assert nodes["Film"]["cardinality"] == 3
        assert nodes["Actor"]["cardinality"] == 2
        assert nodes["Film"]["properties"] == {"id": "integer", "title": "string"}
        assert set(edges) == {"FilmActor"}
        assert edges["FilmActor"]["cardinality"] == 4
        assert edges["FilmActor"]["properties"] == {"payment": "float"}

    def test_without_aggregation(self, database_file):
        path = database_file(SCENARIO_C + FILM_ROWS)
        provider = MetadataProvider(naming_convention="java")

        metadata = provider.fetch_metadata(sqlite_data_source(path, aggregation_enabled=False)).to_dict()

        nodes = _by_name(metadata["nodes_classes"])
        edges = _by_name(metadata["edges_classes"])
        assert nodes["FilmActor"]["cardinality"] == 4
        assert edges["HasFilm"]["cardinality"] == 4
        assert edges["HasActor"]["cardinality"] == 4

    def test_edge_cardinality_skips_null_foreign_keys(self, database_file):
        path = database_file(SCENARIO_B + AUTHOR_ROWS)
        provider = MetadataProvider(naming_convention="java")

        metadata = provider.fetch_metadata(sqlite_data_source(path)).to_dict()

        edges = _by_name(metadata["edges_classes"])
        assert edges["HasAuthor"]["cardinality"] == 3
        assert _by_name(metadata["nodes_classes"])["Book"]["cardinality"] == 3

    def test_split_entities_count_their_physical_table(self, database_file, tmp_path):
        path = database_file(HIERARCHY)
        xml_path = tmp_path / "employee.hbm.xml"
        xml_path.write_text(HIERARCHY_DESCRIPTOR)
        provider = MetadataProvider(naming_convention="java", hibernate_xml_path=str(xml_path))

        metadata = provider.fetch_metadata(sqlite_data_source(path)).to_dict()

        nodes = _by_name(metadata["nodes_classes"])
        assert nodes["Employee"]["cardinality"] == 3
        assert nodes["RegularEmployee"]["cardinality"] == 3
        assert nodes["RegularEmployee"]["properties"] == {"id": "integer", "name": "string", "salary": "integer"}

    def test_unsupported_vendor(self):
        provider = MetadataProvider()
        data_source = DataSourceInfo(VendorType.ORACLE, "oracle://scott@db")

        with pytest.raises(UnsupportedDataSourceError):
            provider.fetch_metadata(data_source)

    def test_connector_is_closed(self, database_file):
        path = database_file(SCENARIO_B)
        opened = []

        def factory(data_source):
            connector = SQLiteConnector(data_source.connection_string)
            opened.append(connector)
            return connector

        MetadataProvider(connector_factory=factory).fetch_metadata(sqlite_data_source(path))

        assert len(opened) == 1
        assert opened[0].connection is None
