"""Tests for the naming conventions"""

from __future__ import annotations

import pytest

from rdbms_graph.schema_mapper.db_schema import Attribute, CanonicalRelationship, Entity, ForeignKey
from rdbms_graph.schema_mapper.name_resolver import (
    JavaConventionNameResolver,
    OriginalConventionNameResolver,
    build_name_resolver,
)


def _relationship(foreign: str, parent: str, *columns: str) -> CanonicalRelationship:
    foreign_entity = Entity(foreign)
    parent_entity = Entity(parent)
    for position, column in enumerate(columns, start=1):
        foreign_entity.add_attribute(Attribute(column, position, "varchar"))
        parent_entity.add_attribute(Attribute(f"P{position}", position, "varchar"))
        parent_entity.primary_key.add_attribute(parent_entity.attributes[-1])
    foreign_key = ForeignKey(foreign_entity, list(foreign_entity.attributes))
    return CanonicalRelationship(foreign_entity, parent_entity, foreign_key, parent_entity.primary_key)


class TestJavaConvention:
    resolver = JavaConventionNameResolver()

    @pytest.mark.parametrize("name, expected", [
        ("BOOK_AUTHOR", "BookAuthor"),
        ("book_author", "BookAuthor"),
        ("Book", "Book"),
        ("BOOK", "Book"),
        ("film actor", "FilmActor"),
        ("order-line", "OrderLine"),
        ("BookAuthor", "BookAuthor"),
        ("bookAuthor", "BookAuthor"),
        ("EMPLOYEE_", "Employee"),
    ])
    def test_vertex_names(self, name, expected):
        assert self.resolver.resolve_vertex_name(name) == expected

    @pytest.mark.parametrize("name, expected", [
        ("AUTHOR_ID", "authorId"),
        ("ID", "id"),
        ("title", "title"),
        ("Title", "title"),
        ("first name", "firstName"),
        ("authorId", "authorId"),
    ])
    def test_property_names(self, name, expected):
        assert self.resolver.resolve_vertex_property(name) == expected

    @pytest.mark.parametrize("name", ["BOOK_AUTHOR", "film actor", "X", "already_Mixed-case", "Book"])
    def test_vertex_name_is_idempotent(self, name):
        once = self.resolver.resolve_vertex_name(name)
        assert self.resolver.resolve_vertex_name(once) == once

    @pytest.mark.parametrize("column, expected", [
        ("AUTHOR_ID", "HasAuthor"),
        ("author_id", "HasAuthor"),
        ("MGR_ID", "HasMgr"),
        ("PROJECT_MANAGER", "HasProjectManager"),
        ("OWNER_OID", "HasOwner"),
        ("ITEM_Eid", "HasItem"),
        ("IDENTITY", "HasIdentity"),
        ("ID_CARD", "HasIdCard"),
    ])
    def test_single_column_edge_names(self, column, expected):
        assert self.resolver.resolve_edge_name(_relationship("BOOK", "AUTHOR", column)) == expected

    def test_multi_column_edge_name(self):
        relationship = _relationship("ORDER_LINE", "PRODUCT", "PRODUCT_CODE", "PRODUCT_VERSION")
        assert self.resolver.resolve_edge_name(relationship) == "OrderLine2Product"


class TestOriginalConvention:
    resolver = OriginalConventionNameResolver()

    def test_names_keep_their_case(self):
        assert self.resolver.resolve_vertex_name("BOOK_AUTHOR") == "BOOK_AUTHOR"
        assert self.resolver.resolve_vertex_property("AUTHOR_ID") == "AUTHOR_ID"

    def test_spaces_become_underscores(self):
        assert self.resolver.resolve_vertex_name("film actor") == "film_actor"
        assert self.resolver.resolve_vertex_property("first name") == "first_name"

    def test_edge_names(self):
        assert self.resolver.resolve_edge_name(_relationship("BOOK", "AUTHOR", "AUTHOR_ID")) == "has_AUTHOR"
        relationship = _relationship("ORDER_LINE", "PRODUCT", "A", "B")
        assert self.resolver.resolve_edge_name(relationship) == "ORDER_LINE2PRODUCT"


class TestBuildNameResolver:

    def test_known_conventions(self):
        assert isinstance(build_name_resolver("java"), JavaConventionNameResolver)
        assert isinstance(build_name_resolver("original"), OriginalConventionNameResolver)
        assert isinstance(build_name_resolver(None), OriginalConventionNameResolver)

    def test_unknown_convention(self):
        with pytest.raises(ValueError):
            build_name_resolver("pascal")
