"""Data source metadata: graph classes with their properties and cardinalities"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional
from loguru import logger

from ..connectors.base import DatabaseConnector
from ..connectors.data_source import DataSourceInfo, VendorType, create_connector
from ..exceptions import UnsupportedDataSourceError
from ..schema_mapper.db_schema import Entity, InheritancePattern
from ..schema_mapper.factory import run_schema_mapping
from ..schema_mapper.graph_schema import EdgeType, VertexType
from ..schema_mapper.mapper import SchemaMapper


@dataclass
class TypeClass:
    """A vertex or edge class of the graph seen by clients"""
    name: str
    properties: Dict[str, Optional[str]] = field(default_factory=dict)
    cardinality: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {"name": self.name, "properties": dict(self.properties), "cardinality": self.cardinality}


@dataclass
class DataSourceMetadata:
    """Node and edge classes of one data source"""
    nodes_classes: Dict[str, TypeClass] = field(default_factory=dict)
    edges_classes: Dict[str, TypeClass] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "nodes_classes": [c.to_dict() for c in self.nodes_classes.values()],
            "edges_classes": [c.to_dict() for c in self.edges_classes.values()]
        }


class MetadataProvider:
    """Describes a relational data source as graph classes with record counts"""

    SUPPORTED_VENDORS = (VendorType.POSTGRESQL, VendorType.MYSQL, VendorType.SQLITE)

    def __init__(
        self,
        connector_factory: Callable[[DataSourceInfo], DatabaseConnector] = create_connector,
        **mapping_options: Any
    ):
        """
        Initialize the provider

        Args:
            connector_factory: Creates the connector for a data source
            **mapping_options: Passed to run_schema_mapping (naming convention,
                table filters, Hibernate descriptor path, ...)
        """
        self.connector_factory = connector_factory
        self.mapping_options = mapping_options

    def fetch_metadata(self, data_source: DataSourceInfo) -> DataSourceMetadata:
        """
        Map the data source and count the records behind every graph class

        Returns:
            DataSourceMetadata with one class per vertex and edge type
        """
        if data_source.vendor not in self.SUPPORTED_VENDORS:
            raise UnsupportedDataSourceError(f"Metadata not available for {data_source.vendor.value}")

        logger.info(f"Fetching metadata for {data_source.name or data_source.vendor.value}")
        with self.connector_factory(data_source) as connector:
            mapper = run_schema_mapping(data_source, connector, **self.mapping_options)
            metadata = DataSourceMetadata()

            for vertex_type in mapper.graph_model.vertices_type:
                if data_source.aggregation_enabled and vertex_type.is_from_join_table:
                    continue
                metadata.nodes_classes[vertex_type.name] = TypeClass(
                    vertex_type.name,
                    self._properties(vertex_type),
                    self._count_vertex_records(mapper, connector, vertex_type)
                )

            for edge_type in mapper.graph_model.edges_type:
                metadata.edges_classes[edge_type.name] = TypeClass(
                    edge_type.name,
                    self._properties(edge_type),
                    self._count_edge_records(mapper, connector, edge_type, data_source.aggregation_enabled)
                )
        return metadata

    @staticmethod
    def _properties(element_type) -> Dict[str, Optional[str]]:
        return {p.name: p.graph_type for p in element_type.all_properties}

    @staticmethod
    def _physical_entity(entity: Entity) -> Entity:
        """Table-per-hierarchy children live in the table of their root"""
        current = entity
        while current.is_split_entity and current.parent_entity is not None:
            current = current.parent_entity
        return current

    def _count_vertex_records(self, mapper: SchemaMapper, connector: DatabaseConnector, vertex_type: VertexType) -> int:
        entity = mapper.get_entity_by_vertex_type(vertex_type)
        if entity is None:
            return 0
        bag = entity.hierarchical_bag
        if bag is not None and bag.inheritance_pattern is InheritancePattern.TABLE_PER_HIERARCHY:
            entity = self._physical_entity(entity)
        return connector.get_row_count(entity.name, entity.schema_name)

    def _count_edge_records(
        self,
        mapper: SchemaMapper,
        connector: DatabaseConnector,
        edge_type: EdgeType,
        aggregation_enabled: bool
    ) -> int:
        if edge_type.is_aggregator_edge:
            join_vertex_type = mapper.get_join_vertex_type_by_aggregator_edge_name(edge_type.name)
            join_entity = mapper.get_entity_by_vertex_type(join_vertex_type) if join_vertex_type else None
            if join_entity is None:
                return 0
            return connector.count_records(join_entity.name, join_entity.schema_name)

        cardinality = 0
        for relationship in mapper.rules.get_relationships_by_edge_type(edge_type):
            foreign_entity = relationship.foreign_entity
            if aggregation_enabled and foreign_entity.is_aggregable_join_table():
                continue
            cardinality += connector.count_records(
                foreign_entity.name,
                foreign_entity.schema_name,
                not_null_columns=relationship.from_columns
            )
        return cardinality

