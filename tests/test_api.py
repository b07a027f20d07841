"""Tests for the HTTP API"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from conftest import SCENARIO_A
from rdbms_graph.api.main import app
from rdbms_graph.connectors.sqlite import SQLiteConnector


ROWS = """
INSERT INTO BOOK_AUTHOR VALUES ('a1', 'Ann', 40);
INSERT INTO BOOK VALUES ('b1', 'First', 'a1'), ('b2', 'Second', 'a1');
"""


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def database_path(tmp_path):
    path = str(tmp_path / "books.db")
    with SQLiteConnector(path) as connector:
        connector.execute_script(SCENARIO_A + ROWS)
    return path


class TestApi:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_map_schema(self, client, database_path):
        response = client.post("/schema/map", json={
            "db_type": "sqlite",
            "connection_string": database_path,
            "naming_convention": "java"
        })

        assert response.status_code == 200
        body = response.json()
        assert [v["name"] for v in body["vertex_types"]] == ["Book", "BookAuthor"]
        assert [e["name"] for e in body["edge_types"]] == ["HasAuthor"]
        assert body["edge_types"][0]["in_vertex_type"] == "BookAuthor"
        assert body["aggregator_edges"] == {}
        assert body["statistics"]["built_entities"] == 2
        assert body["statistics"]["running_step_number"] == 2

    def test_map_schema_with_filters(self, client, database_path):
        response = client.post("/schema/map", json={
            "db_type": "sqlite",
            "connection_string": database_path,
            "naming_convention": "original",
            "included_tables": ["BOOK_AUTHOR"]
        })

        assert response.status_code == 200
        body = response.json()
        assert [v["name"] for v in body["vertex_types"]] == ["BOOK_AUTHOR"]
        assert body["edge_types"] == []

    def test_metadata(self, client, database_path):
        response = client.post("/schema/metadata", json={
            "db_type": "sqlite",
            "connection_string": database_path,
            "naming_convention": "java"
        })

        assert response.status_code == 200
        body = response.json()
        nodes = {c["name"]: c["cardinality"] for c in body["nodes_classes"]}
        edges = {c["name"]: c["cardinality"] for c in body["edges_classes"]}
        assert nodes == {"Book": 2, "BookAuthor": 1}
        assert edges == {"HasAuthor": 2}

    def test_unsupported_database_type(self, client):
        response = client.post("/schema/map", json={"db_type": "db2", "connection_string": "db2://"})

        assert response.status_code == 400

    def test_unknown_naming_convention(self, client, database_path):
        response = client.post("/schema/map", json={
            "db_type": "sqlite",
            "connection_string": database_path,
            "naming_convention": "pascal"
        })

        assert response.status_code == 400

    def test_missing_descriptor(self, client, database_path, tmp_path):
        response = client.post("/schema/map", json={
            "db_type": "sqlite",
            "connection_string": database_path,
            "hibernate_xml_path": str(tmp_path / "missing.hbm.xml")
        })

        assert response.status_code == 400
