"""Tests for the many-to-many aggregation"""

from __future__ import annotations

import pytest

from conftest import SCENARIO_C


SHARED_EDGES = """
CREATE TABLE DEPARTMENT (DEPT_NO varchar(4) PRIMARY KEY, DEPT_NAME varchar(40));
CREATE TABLE EMPLOYEE (EMP_NO integer PRIMARY KEY, NAME varchar(40));
CREATE TABLE DEPT_EMP (
    EMP_NO integer,
    DEPT_NO varchar(4),
    PRIMARY KEY (EMP_NO, DEPT_NO),
    FOREIGN KEY (EMP_NO) REFERENCES EMPLOYEE(EMP_NO),
    FOREIGN KEY (DEPT_NO) REFERENCES DEPARTMENT(DEPT_NO)
);
CREATE TABLE DEPT_MANAGER (
    EMP_NO integer,
    DEPT_NO varchar(4),
    PRIMARY KEY (EMP_NO, DEPT_NO),
    FOREIGN KEY (EMP_NO) REFERENCES EMPLOYEE(EMP_NO),
    FOREIGN KEY (DEPT_NO) REFERENCES DEPARTMENT(DEPT_NO)
);
CREATE TABLE BRANCH (
    ID integer PRIMARY KEY,
    DEPT_NO varchar(4),
    FOREIGN KEY (DEPT_NO) REFERENCES DEPARTMENT(DEPT_NO)
);
"""

REFERENCED_JOIN_TABLE = SCENARIO_C + """
CREATE TABLE ROYALTY (
    ID integer PRIMARY KEY,
    FILM_ID integer,
    ACTOR_ID integer,
    FOREIGN KEY (FILM_ID, ACTOR_ID) REFERENCES FILM_ACTOR(FILM_ID, ACTOR_ID)
);
"""


class TestJoinTableDetection:

    def test_join_vertex_is_flagged(self, map_schema):
        mapper = map_schema(SCENARIO_C)
        film_actor = mapper.graph_model.get_vertex_type_by_name("FilmActor")
        entity = mapper.database_schema.get_entity_by_name("FILM_ACTOR")

        assert film_actor.is_from_join_table is True
        assert entity.direction_of_n2n_relationship == "direct"
        assert mapper.graph_model.get_vertex_type_by_name("Film").is_from_join_table is False

    def test_no_aggregation_when_disabled(self, map_schema):
        graph = map_schema(SCENARIO_C, aggregate=False).graph_model

        assert [v.name for v in graph.vertices_type] == ["Actor", "Film", "FilmActor"]
        assert sorted(e.name for e in graph.edges_type) == ["HasActor", "HasFilm"]

    def test_referenced_join_table_is_not_aggregated(self, map_schema):
        graph = map_schema(REFERENCED_JOIN_TABLE, aggregate=True).graph_model

        film_actor = graph.get_vertex_type_by_name("FilmActor")
        assert film_actor is not None
        assert film_actor.is_from_join_table is False
        assert all(not e.is_aggregator_edge for e in graph.edges_type)


class TestScenarioC:

    def test_join_vertex_becomes_an_edge(self, map_schema):
        mapper = map_schema(SCENARIO_C, aggregate=True)
        graph = mapper.graph_model

        assert [v.name for v in graph.vertices_type] == ["Actor", "Film"]
        assert [e.name for e in graph.edges_type] == ["FilmActor"]

        edge_type = graph.edges_type[0]
        actor = graph.get_vertex_type_by_name("Actor")
        film = graph.get_vertex_type_by_name("Film")
        assert edge_type.is_aggregator_edge is True
        assert edge_type.out_vertex_type is actor
        assert edge_type.in_vertex_type is film
        assert actor.out_edges_type == [edge_type]
        assert film.in_edges_type == [edge_type]
        assert actor.in_edges_type == []

    def test_non_key_properties_are_carried_over(self, map_schema):
        mapper = map_schema(SCENARIO_C, aggregate=True)
        edge_type = mapper.graph_model.get_edge_type_by_name("FilmActor")

        assert [(p.name, p.ordinal_position) for p in edge_type.properties] == [("payment", 1)]
        payment = edge_type.properties[0]
        assert payment.graph_type == "float"
        assert payment.belonging_element_type is edge_type

    def test_registries(self, map_schema):
        mapper = map_schema(SCENARIO_C, aggregate=True)
        edge_type = mapper.graph_model.get_edge_type_by_name("FilmActor")

        aggregator_edge = mapper.get_aggregator_edge_by_join_vertex_type_name("FilmActor")
        assert aggregator_edge.edge_type is edge_type
        assert (aggregator_edge.out_vertex_class_name, aggregator_edge.in_vertex_class_name) == ("Actor", "Film")
        assert mapper.get_aggregator_edge_by_edge_type_name("FilmActor") is aggregator_edge
        assert mapper.get_join_vertex_type_by_aggregator_edge_name("FilmActor").name == "FilmActor"
        assert mapper.get_attribute_name_by_edge_type_and_property(edge_type, "payment") == "PAYMENT"
        assert mapper.to_dict()["aggregator_edges"] == {
            "FilmActor": {"out_vertex_type": "Actor", "in_vertex_type": "Film", "edge_type": "FilmActor"}
        }

    def test_entity_lookup_still_resolves_the_join_vertex(self, map_schema):
        mapper = map_schema(SCENARIO_C, aggregate=True)
        entity = mapper.database_schema.get_entity_by_name("FILM_ACTOR")

        join_vertex_type = mapper.get_vertex_type_by_entity(entity)
        assert join_vertex_type.name == "FilmActor"
        assert mapper.get_property_name_by_entity_and_attribute(entity, "PAYMENT") == "payment"

    def test_statistics(self, map_schema):
        statistics = map_schema(SCENARIO_C, aggregate=True).statistics

        assert statistics.built_model_vertex_types == 2
        assert statistics.total_number_of_model_vertices == 2
        assert statistics.built_model_edge_types == 1
        assert statistics.total_number_of_model_edges == 1


class TestSharedEdgeTypes:

    def test_edge_types_survive_while_they_represent_relationships(self, map_schema):
        mapper = map_schema(SHARED_EDGES, aggregate=True)
        graph = mapper.graph_model

        assert [v.name for v in graph.vertices_type] == ["Branch", "Department", "Employee"]
        assert sorted(e.name for e in graph.edges_type) == ["DeptEmp", "DeptManager", "HasDeptNo"]

        has_dept_no = graph.get_edge_type_by_name("HasDeptNo")
        assert has_dept_no.number_relationships_represented == 1
        department = graph.get_vertex_type_by_name("Department")
        employee = graph.get_vertex_type_by_name("Employee")
        assert has_dept_no in department.in_edges_type
        assert [e.name for e in employee.in_edges_type] == ["DeptEmp", "DeptManager"]
        assert graph.get_vertex_type_by_name("Branch").out_edges_type == [has_dept_no]

    def test_counts_are_conserved(self, map_schema):
        before = map_schema(SHARED_EDGES, aggregate=False)
        after = map_schema(SHARED_EDGES, aggregate=True)

        represented_before = sum(e.number_relationships_represented for e in before.graph_model.edges_type)
        represented_after = sum(
            e.number_relationships_represented for e in after.graph_model.edges_type if not e.is_aggregator_edge
        )
        aggregated = len(after.rules.join_vertex2aggregator_edges)
        assert aggregated == 2
        assert represented_before - represented_after == 2 * aggregated
        assert len(after.graph_model.vertices_type) == len(before.graph_model.vertices_type) - aggregated
        assert after.statistics.total_number_of_model_edges == len(after.graph_model.edges_type)


class TestJoinTableOverrides:

    def test_configured_name_and_direction(self, map_schema):
        config = {"join_tables": {"film_actor": {"name": "ActsIn", "direction": "inverse"}}}
        mapper = map_schema(SCENARIO_C, aggregate=True, join_table_config=config)
        graph = mapper.graph_model

        assert [e.name for e in graph.edges_type] == ["ActsIn"]
        acts_in = graph.edges_type[0]
        assert acts_in.out_vertex_type.name == "Film"
        assert acts_in.in_vertex_type.name == "Actor"
        assert mapper.get_join_vertex_type_by_aggregator_edge_name("ActsIn").name == "FilmActor"

    def test_invalid_direction(self, map_schema):
        config = {"join_tables": {"FILM_ACTOR": {"name": "ActsIn", "direction": "sideways"}}}

        with pytest.raises(ValueError):
            map_schema(SCENARIO_C, aggregate=True, join_table_config=config)
