"""Schema mapper for converting RDBMS schemas to graph schemas"""

from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Sequence
from loguru import logger

from ..connectors.base import DatabaseConnector
from ..connectors.data_source import DataSourceInfo
from .aggregator import Many2ManyAggregator
from .class_mapper import EEClassMapper, EVClassMapper, MappingRules
from .db_schema import DIRECT, INVERSE, CanonicalRelationship, DataBaseSchema, Entity
from .graph_schema import AggregatorEdge, EdgeType, ElementType, GraphModel, ModelProperty, VertexType
from .name_resolver import NameResolver, OriginalConventionNameResolver
from .schema_builder import SourceSchemaBuilder, is_table_allowed
from .statistics import Statistics
from .type_mapper import TypeMapper, map_type


class SchemaMapper:
    """Maps a relational database schema to a graph model plus mapping rules"""

    def __init__(
        self,
        data_source: DataSourceInfo,
        connector: DatabaseConnector,
        included_tables: Optional[Sequence[str]] = None,
        excluded_tables: Optional[Sequence[str]] = None,
        name_resolver: Optional[NameResolver] = None,
        type_mapper: TypeMapper = map_type,
        statistics: Optional[Statistics] = None,
        join_table_config: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize schema mapper

        Args:
            data_source: Descriptor of the source database
            connector: Open connector used as metadata source
            included_tables: Only these tables are mapped when non-empty
            excluded_tables: Tables skipped when no include list is given
            name_resolver: Naming convention used for the graph model
            type_mapper: Function mapping relational type names to graph types
            statistics: Counters updated while mapping
            join_table_config: Per join table "name"/"direction" overrides,
                under a "join_tables" key
        """
        self.data_source = data_source
        self.connector = connector
        self.included_tables = list(included_tables or [])
        self.excluded_tables = list(excluded_tables or [])
        self.name_resolver = name_resolver or OriginalConventionNameResolver()
        self.type_mapper = type_mapper
        self.statistics = statistics or Statistics()
        self.join_table_config = join_table_config or {}

        self.database_schema = DataBaseSchema()
        self.graph_model = GraphModel()
        self.rules = MappingRules()

    def is_table_allowed(self, table_name: str) -> bool:
        return is_table_allowed(table_name, self.included_tables, self.excluded_tables)

    # Step 1: source database schema

    def build_source_database_schema(self) -> DataBaseSchema:
        """Introspect the source database into a fresh relational schema"""
        builder = SourceSchemaBuilder(
            self.data_source,
            self.connector,
            statistics=self.statistics,
            included_tables=self.included_tables,
            excluded_tables=self.excluded_tables
        )
        self.database_schema = builder.build()
        self.apply_join_table_config()
        return self.database_schema

    def apply_join_table_config(self) -> None:
        """Apply configured many-to-many names and directions to join entities"""
        overrides = {name.lower(): value for name, value in self.join_table_config.get("join_tables", {}).items()}
        for entity in self.database_schema.entities:
            override = overrides.get(entity.name.lower())
            if not override:
                continue
            entity.name_of_n2n_relationship = override.get("name")
            direction = override.get("direction")
            if direction is not None:
                if direction not in (DIRECT, INVERSE):
                    raise ValueError(f"Invalid direction '{direction}' for join table {entity.name}")
                entity.direction_of_n2n_relationship = direction

    # Step 2: graph model

    def build_graph_model(self, name_resolver: Optional[NameResolver] = None) -> GraphModel:
        """
        Build vertex types, then edge types

        Args:
            name_resolver: Overrides the resolver given at construction

        Returns:
            The graph model
        """
        if name_resolver is not None:
            self.name_resolver = name_resolver
        self.statistics.running_step_number = 2
        self.statistics.start_work2_time = datetime.now()

        logger.info(f"Mapping {len(self.database_schema.entities)} entities to graph model")
        self.build_vertex_types()
        self.build_edge_types()
        logger.info(
            f"Created graph model with {len(self.graph_model.vertices_type)} vertex types "
            f"and {len(self.graph_model.edges_type)} edge types"
        )
        return self.graph_model

    def build_vertex_types(self) -> None:
        self.statistics.total_number_of_model_vertices = len(self.database_schema.entities)

        for entity in self.database_schema.entities:
            vertex_name = self.name_resolver.resolve_vertex_name(entity.name)
            vertex_type = self.graph_model.get_vertex_type_by_name(vertex_name)
            is_new_vertex = vertex_type is None
            if is_new_vertex:
                vertex_type = VertexType(vertex_name)

            if entity.is_aggregable_join_table():
                vertex_type.is_from_join_table = True
                if entity.direction_of_n2n_relationship is None:
                    entity.direction_of_n2n_relationship = DIRECT

            class_mapper = self._ev_class_mapper(entity, vertex_type)
            for attribute in entity.attributes:
                property_name = self.name_resolver.resolve_vertex_property(attribute.name)
                if vertex_type.get_property_by_name(property_name) is None:
                    vertex_type.add_property(self._attribute_to_property(entity, attribute, property_name))
                class_mapper.map_attribute(attribute.name, property_name)

            for attribute in entity.inherited_attributes:
                property_name = self.name_resolver.resolve_vertex_property(attribute.name)
                if vertex_type.get_inherited_property_by_name(property_name) is None:
                    model_property = self._attribute_to_property(entity, attribute, property_name)
                    model_property.belonging_element_type = vertex_type
                    vertex_type.inherited_properties.append(model_property)

            for model_property in vertex_type.all_properties:
                if model_property.from_primary_key and model_property.name not in vertex_type.external_key:
                    vertex_type.external_key.append(model_property.name)

            if entity.parent_entity is not None:
                parent_type = self.get_vertex_type_by_entity(entity.parent_entity)
                if parent_type is None:
                    self._error(f"Parent vertex type of {entity.name} not built, inheritance link lost")
                else:
                    vertex_type.parent_type = parent_type
                    vertex_type.inheritance_level = entity.inheritance_level

            if is_new_vertex:
                self.graph_model.add_vertex_type(vertex_type)
                self.statistics.built_model_vertex_types += 1
            self.rules.upsert_ev_class_mapper(class_mapper)

        self.graph_model.sort_vertex_types()

    def _ev_class_mapper(self, entity: Entity, vertex_type: VertexType) -> EVClassMapper:
        for class_mapper in self.rules.get_ev_class_mappers_by_entity(entity):
            if class_mapper.vertex_type is vertex_type:
                return class_mapper
        return EVClassMapper(entity=entity, vertex_type=vertex_type)

    def _attribute_to_property(self, entity: Entity, attribute, property_name: str) -> ModelProperty:
        not_null = None if attribute.is_nullable is None else not attribute.is_nullable
        return ModelProperty(
            name=property_name,
            ordinal_position=attribute.ordinal_position,
            original_type=attribute.data_type,
            graph_type=self.type_mapper(attribute.data_type),
            from_primary_key=attribute in (attribute.belonging_entity or entity).primary_key,
            not_null=not_null
        )

    def build_edge_types(self) -> None:
        for entity in self.database_schema.entities:
            for relationship in entity.out_canonical_relationships:
                out_vertex_type = self.get_vertex_type_by_entity(relationship.foreign_entity)
                in_vertex_type = self.get_vertex_type_by_entity(relationship.parent_entity)
                if out_vertex_type is None or in_vertex_type is None:
                    self._error(
                        f"Vertex types of {relationship!r} not found: "
                        f"information loss, relationship missed. Edge-type not built."
                    )
                    continue

                if self.rules.is_relationship_mapped(relationship):
                    continue
                if entity.parent_entity is not None and entity.parent_entity.name == relationship.parent_entity.name:
                    continue

                edge_name = self.name_resolver.resolve_edge_name(relationship)
                edge_type = self.graph_model.get_edge_type_by_name(edge_name)
                if edge_type is None:
                    edge_type = EdgeType(edge_name, in_vertex_type=in_vertex_type)
                    self.graph_model.add_edge_type(edge_type)
                    self.statistics.built_model_edge_types += 1
                else:
                    edge_type.number_relationships_represented += 1

                self._attach_edge_type(edge_type, out_vertex_type, in_vertex_type)
                self.rules.upsert_relationship_edge_rules(relationship, edge_type)

            for relationship in entity.inherited_out_canonical_relationships:
                edge_type = self.rules.get_edge_type_by_relationship(relationship)
                if edge_type is None:
                    continue
                out_vertex_type = self.get_vertex_type_by_entity(entity)
                in_vertex_type = self.get_vertex_type_by_entity(relationship.parent_entity)
                if out_vertex_type is None or in_vertex_type is None:
                    continue
                self._attach_edge_type(edge_type, out_vertex_type, in_vertex_type)

        self.statistics.total_number_of_model_edges = self.statistics.built_model_edge_types

    @staticmethod
    def _attach_edge_type(edge_type: EdgeType, out_vertex_type: VertexType, in_vertex_type: VertexType) -> None:
        if all(e is not edge_type for e in out_vertex_type.out_edges_type):
            out_vertex_type.out_edges_type.append(edge_type)
        if all(e is not edge_type for e in in_vertex_type.in_edges_type):
            in_vertex_type.in_edges_type.append(edge_type)

    # Step 3: aggregation

    def perform_aggregations(self) -> None:
        self.perform_many2many_aggregation()

    def perform_many2many_aggregation(self) -> None:
        """Collapse two-column join vertex types into aggregator edges"""
        Many2ManyAggregator(self).aggregate()

    # Queries

    def get_entity_by_vertex_type(self, vertex_type: VertexType, index: int = 0) -> Optional[Entity]:
        class_mappers = self.rules.get_ev_class_mappers_by_vertex_type(vertex_type)
        return class_mappers[index].entity if len(class_mappers) > index else None

    def get_vertex_type_by_entity(self, entity: Entity, index: int = 0) -> Optional[VertexType]:
        class_mappers = self.rules.get_ev_class_mappers_by_entity(entity)
        return class_mappers[index].vertex_type if len(class_mappers) > index else None

    def get_entity_by_name_ignore_case(self, name: str) -> Optional[Entity]:
        return self.database_schema.get_entity_by_name_ignore_case(name)

    def get_vertex_type_by_entity_name_ignore_case(self, entity_name: str) -> Optional[VertexType]:
        lowered = entity_name.lower()
        for class_mapper in self.rules.iter_ev_class_mappers():
            if class_mapper.entity.name.lower() == lowered:
                return class_mapper.vertex_type
        return None

    def get_vertex_type_by_entity_and_relationship(
        self,
        entity: Entity,
        relationship: CanonicalRelationship
    ) -> Optional[VertexType]:
        """Get the vertex type at the end of a relationship that is not the given entity"""
        if relationship.foreign_entity is entity:
            return self.get_vertex_type_by_entity(relationship.parent_entity)
        if relationship.parent_entity is entity:
            return self.get_vertex_type_by_entity(relationship.foreign_entity)
        return None

    def _iter_type_chain(self, element_type: ElementType) -> Iterator[ElementType]:
        """Yield a type and its ancestors, stopping on a cyclic parent link"""
        max_depth = max((e.inheritance_level for e in self.database_schema.entities), default=0) + 1
        current = element_type
        visited = set()
        while current is not None and len(visited) <= max_depth:
            if current.handle in visited:
                self._warn(f"Cyclic parent link found on {element_type.name}")
                return
            visited.add(current.handle)
            yield current
            current = current.parent_type

    def get_attribute_name_by_vertex_type_and_property(self, vertex_type: VertexType, property_name: str) -> Optional[str]:
        for current in self._iter_type_chain(vertex_type):
            for class_mapper in self.rules.get_ev_class_mappers_by_vertex_type(current):
                attribute_name = class_mapper.property2attribute.get(property_name)
                if attribute_name is not None:
                    return attribute_name
        return None

    def get_property_name_by_vertex_type_and_attribute(self, vertex_type: VertexType, attribute_name: str) -> Optional[str]:
        for current in self._iter_type_chain(vertex_type):
            for class_mapper in self.rules.get_ev_class_mappers_by_vertex_type(current):
                property_name = class_mapper.attribute2property.get(attribute_name)
                if property_name is not None:
                    return property_name
        return None

    def get_attribute_name_by_edge_type_and_property(self, edge_type: EdgeType, property_name: str) -> Optional[str]:
        for class_mapper in self.rules.get_ee_class_mappers_by_edge_type(edge_type):
            attribute_name = class_mapper.property2attribute.get(property_name)
            if attribute_name is not None:
                return attribute_name
        return None

    def get_property_name_by_entity_and_attribute(self, entity: Entity, attribute_name: str) -> Optional[str]:
        class_mappers: List[Any] = list(self.rules.get_ev_class_mappers_by_entity(entity))
        class_mappers += self.rules.get_ee_class_mappers_by_entity(entity)
        for class_mapper in class_mappers:
            property_name = class_mapper.attribute2property.get(attribute_name)
            if property_name is not None:
                return property_name
        return None

    def get_relationships_by_foreign_and_parent_tables(
        self,
        foreign_table: str,
        parent_table: str
    ) -> List[CanonicalRelationship]:
        return [
            r for r in self.database_schema.canonical_relationships
            if r.foreign_entity.name == foreign_table and r.parent_entity.name == parent_table
        ]

    def get_join_vertex_type_by_aggregator_edge_name(self, edge_name: str) -> Optional[VertexType]:
        return self.rules.get_join_vertex_type_by_aggregator_edge_name(edge_name)

    def get_aggregator_edge_by_join_vertex_type_name(self, vertex_name: str) -> Optional[AggregatorEdge]:
        return self.rules.get_aggregator_edge_by_join_vertex_type_name(vertex_name)

    def get_aggregator_edge_by_edge_type_name(self, edge_name: str) -> Optional[AggregatorEdge]:
        return self.rules.get_aggregator_edge_by_edge_type_name(edge_name)

    def get_ee_class_mappers_by_edge_type(self, edge_type: EdgeType) -> List[EEClassMapper]:
        return self.rules.get_ee_class_mappers_by_edge_type(edge_type)

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.statistics.warning_messages.append(message)

    def _error(self, message: str) -> None:
        logger.error(message)
        self.statistics.error_messages.append(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the graph model and the aggregation registry to a dictionary"""
        result = self.graph_model.to_dict()
        result["aggregator_edges"] = {
            join_vertex_type.name: aggregator_edge.to_dict()
            for join_vertex_type, aggregator_edge in self.rules.join_vertex2aggregator_edges.values()
        }
        return result
