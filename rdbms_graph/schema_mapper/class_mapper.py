"""Rules mapping relational elements to graph schema elements"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .db_schema import CanonicalRelationship, Entity
from .graph_schema import AggregatorEdge, EdgeType, ElementType, VertexType


@dataclass(eq=False)
class ClassMapper:
    """Attribute/property name correspondence between an entity and a graph type"""
    entity: Entity
    attribute2property: Dict[str, str] = field(default_factory=dict)
    property2attribute: Dict[str, str] = field(default_factory=dict)

    def map_attribute(self, attribute_name: str, property_name: str) -> None:
        self.attribute2property[attribute_name] = property_name
        self.property2attribute[property_name] = attribute_name


@dataclass(eq=False)
class EVClassMapper(ClassMapper):
    """Entity to vertex type mapper"""
    vertex_type: Optional[VertexType] = None

    @property
    def graph_type(self) -> Optional[ElementType]:
        return self.vertex_type


@dataclass(eq=False)
class EEClassMapper(ClassMapper):
    """Entity to edge type mapper"""
    edge_type: Optional[EdgeType] = None

    @property
    def graph_type(self) -> Optional[ElementType]:
        return self.edge_type


class MappingRules:
    """
    Bidirectional registries between the relational and the graph model

    Entities, relationships and graph types are keyed by their handle, so
    two structurally identical relationships or two same-named entities
    never share a registry entry.
    """

    def __init__(self):
        self.entity2ev_class_mappers: Dict[int, List[EVClassMapper]] = {}
        self.vertex_type2ev_class_mappers: Dict[int, List[EVClassMapper]] = {}
        self.entity2ee_class_mappers: Dict[int, List[EEClassMapper]] = {}
        self.edge_type2ee_class_mappers: Dict[int, List[EEClassMapper]] = {}
        self.relationship2edge_type: Dict[int, Tuple[CanonicalRelationship, EdgeType]] = {}
        self.edge_type2relationships: Dict[int, List[CanonicalRelationship]] = {}
        self.join_vertex2aggregator_edges: Dict[int, Tuple[VertexType, AggregatorEdge]] = {}

    # Entity <-> vertex type

    def upsert_ev_class_mapper(self, class_mapper: EVClassMapper) -> None:
        by_entity = self.entity2ev_class_mappers.setdefault(class_mapper.entity.handle, [])
        if class_mapper not in by_entity:
            by_entity.append(class_mapper)
        by_vertex = self.vertex_type2ev_class_mappers.setdefault(class_mapper.vertex_type.handle, [])
        if class_mapper not in by_vertex:
            by_vertex.append(class_mapper)

    def get_ev_class_mappers_by_entity(self, entity: Entity) -> List[EVClassMapper]:
        return self.entity2ev_class_mappers.get(entity.handle, [])

    def get_ev_class_mappers_by_vertex_type(self, vertex_type: VertexType) -> List[EVClassMapper]:
        return self.vertex_type2ev_class_mappers.get(vertex_type.handle, [])

    def iter_ev_class_mappers(self):
        for class_mappers in self.entity2ev_class_mappers.values():
            yield from class_mappers

    # Entity <-> edge type

    def upsert_ee_class_mapper(self, class_mapper: EEClassMapper) -> None:
        by_entity = self.entity2ee_class_mappers.setdefault(class_mapper.entity.handle, [])
        if class_mapper not in by_entity:
            by_entity.append(class_mapper)
        by_edge = self.edge_type2ee_class_mappers.setdefault(class_mapper.edge_type.handle, [])
        if class_mapper not in by_edge:
            by_edge.append(class_mapper)

    def get_ee_class_mappers_by_entity(self, entity: Entity) -> List[EEClassMapper]:
        return self.entity2ee_class_mappers.get(entity.handle, [])

    def get_ee_class_mappers_by_edge_type(self, edge_type: EdgeType) -> List[EEClassMapper]:
        return self.edge_type2ee_class_mappers.get(edge_type.handle, [])

    # Relationship <-> edge type

    def upsert_relationship_edge_rules(self, relationship: CanonicalRelationship, edge_type: EdgeType) -> None:
        self.relationship2edge_type[relationship.handle] = (relationship, edge_type)
        relationships = self.edge_type2relationships.setdefault(edge_type.handle, [])
        if all(r is not relationship for r in relationships):
            relationships.append(relationship)

    def get_edge_type_by_relationship(self, relationship: CanonicalRelationship) -> Optional[EdgeType]:
        entry = self.relationship2edge_type.get(relationship.handle)
        return entry[1] if entry else None

    def get_relationships_by_edge_type(self, edge_type: EdgeType) -> List[CanonicalRelationship]:
        return self.edge_type2relationships.get(edge_type.handle, [])

    def is_relationship_mapped(self, relationship: CanonicalRelationship) -> bool:
        return relationship.handle in self.relationship2edge_type

    # Join vertex <-> aggregator edge

    def register_aggregator_edge(self, join_vertex_type: VertexType, aggregator_edge: AggregatorEdge) -> None:
        self.join_vertex2aggregator_edges[join_vertex_type.handle] = (join_vertex_type, aggregator_edge)

    def get_aggregator_edge_by_join_vertex_type_name(self, name: str) -> Optional[AggregatorEdge]:
        for join_vertex_type, aggregator_edge in self.join_vertex2aggregator_edges.values():
            if join_vertex_type.name == name:
                return aggregator_edge
        return None

    def get_join_vertex_type_by_aggregator_edge_name(self, edge_name: str) -> Optional[VertexType]:
        for join_vertex_type, aggregator_edge in self.join_vertex2aggregator_edges.values():
            if aggregator_edge.edge_type.name == edge_name:
                return join_vertex_type
        return None

    def get_aggregator_edge_by_edge_type_name(self, edge_name: str) -> Optional[AggregatorEdge]:
        for _, aggregator_edge in self.join_vertex2aggregator_edges.values():
            if aggregator_edge.edge_type.name == edge_name:
                return aggregator_edge
        return None
