"""Graph schema data structures"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum

from .db_schema import next_handle


class PropertyType(Enum):
    """Graph property types"""
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    JSON = "json"
    BINARY = "binary"


@dataclass(eq=False)
class ModelProperty:
    """Represents a property in a vertex or edge type"""
    name: str
    ordinal_position: int
    original_type: str
    graph_type: Optional[str] = None
    from_primary_key: bool = False
    mandatory: Optional[bool] = None
    read_only: Optional[bool] = None
    not_null: Optional[bool] = None
    belonging_element_type: Optional["ElementType"] = field(default=None, repr=False)

    def copy_to(self, owner: "ElementType", ordinal_position: int) -> "ModelProperty":
        """Copy this property into another owner at a new position"""
        return ModelProperty(
            name=self.name,
            ordinal_position=ordinal_position,
            original_type=self.original_type,
            graph_type=self.graph_type,
            from_primary_key=self.from_primary_key,
            mandatory=self.mandatory,
            read_only=self.read_only,
            not_null=self.not_null,
            belonging_element_type=owner
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "name": self.name,
            "ordinal_position": self.ordinal_position,
            "original_type": self.original_type,
            "type": self.graph_type,
            "from_primary_key": self.from_primary_key,
            "mandatory": self.mandatory,
            "read_only": self.read_only,
            "not_null": self.not_null
        }


@dataclass(eq=False)
class ElementType:
    """Common part of vertex and edge types"""
    name: str
    properties: List[ModelProperty] = field(default_factory=list)
    inherited_properties: List[ModelProperty] = field(default_factory=list)
    parent_type: Optional["ElementType"] = field(default=None, repr=False)
    inheritance_level: int = 0
    handle: int = field(default_factory=next_handle)

    def add_property(self, model_property: ModelProperty) -> None:
        model_property.belonging_element_type = self
        self.properties.append(model_property)

    @property
    def all_properties(self) -> List[ModelProperty]:
        """Inherited properties followed by own properties"""
        return self.inherited_properties + self.properties

    def get_property_by_name(self, name: str) -> Optional[ModelProperty]:
        for model_property in self.properties:
            if model_property.name == name:
                return model_property
        return None

    def get_inherited_property_by_name(self, name: str) -> Optional[ModelProperty]:
        for model_property in self.inherited_properties:
            if model_property.name == name:
                return model_property
        return None

    def get_property_by_ordinal_position(self, ordinal_position: int) -> Optional[ModelProperty]:
        for model_property in self.properties:
            if model_property.ordinal_position == ordinal_position:
                return model_property
        return None

    def remove_property_by_name(self, name: str) -> Optional[ModelProperty]:
        model_property = self.get_property_by_name(name)
        if model_property is not None:
            self.properties.remove(model_property)
        return model_property

    def _properties_to_dict(self) -> Dict[str, Any]:
        return {
            "properties": [p.to_dict() for p in self.properties],
            "inherited_properties": [p.to_dict() for p in self.inherited_properties],
            "parent_type": self.parent_type.name if self.parent_type else None,
            "inheritance_level": self.inheritance_level
        }


@dataclass(eq=False)
class VertexType(ElementType):
    """Represents a vertex type in the graph schema"""
    out_edges_type: List["EdgeType"] = field(default_factory=list, repr=False)
    in_edges_type: List["EdgeType"] = field(default_factory=list, repr=False)
    external_key: List[str] = field(default_factory=list)
    is_from_join_table: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        result = {"name": self.name}
        result.update(self._properties_to_dict())
        result.update({
            "external_key": list(self.external_key),
            "is_from_join_table": self.is_from_join_table,
            "out_edges": [e.name for e in self.out_edges_type],
            "in_edges": [e.name for e in self.in_edges_type]
        })
        return result


@dataclass(eq=False)
class EdgeType(ElementType):
    """Represents an edge type in the graph schema"""
    out_vertex_type: Optional[VertexType] = field(default=None, repr=False)
    in_vertex_type: Optional[VertexType] = field(default=None, repr=False)
    number_relationships_represented: int = 1
    is_aggregator_edge: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        result = {"name": self.name}
        result.update(self._properties_to_dict())
        result.update({
            "out_vertex_type": self.out_vertex_type.name if self.out_vertex_type else None,
            "in_vertex_type": self.in_vertex_type.name if self.in_vertex_type else None,
            "number_relationships_represented": self.number_relationships_represented,
            "is_aggregator_edge": self.is_aggregator_edge
        })
        return result


@dataclass(eq=False)
class AggregatorEdge:
    """Edge type that replaced a collapsed join vertex type"""
    out_vertex_class_name: str
    in_vertex_class_name: str
    edge_type: EdgeType

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "out_vertex_type": self.out_vertex_class_name,
            "in_vertex_type": self.in_vertex_class_name,
            "edge_type": self.edge_type.name
        }


@dataclass
class GraphModel:
    """Represents a complete graph schema"""
    vertices_type: List[VertexType] = field(default_factory=list)
    edges_type: List[EdgeType] = field(default_factory=list)

    def add_vertex_type(self, vertex_type: VertexType) -> None:
        """Add a vertex type to the model"""
        self.vertices_type.append(vertex_type)

    def add_edge_type(self, edge_type: EdgeType) -> None:
        """Add an edge type to the model"""
        self.edges_type.append(edge_type)

    def get_vertex_type_by_name(self, name: str) -> Optional[VertexType]:
        for vertex_type in self.vertices_type:
            if vertex_type.name == name:
                return vertex_type
        return None

    def get_edge_type_by_name(self, name: str) -> Optional[EdgeType]:
        for edge_type in self.edges_type:
            if edge_type.name == name:
                return edge_type
        return None

    def remove_vertex_type_by_name(self, name: str) -> Optional[VertexType]:
        vertex_type = self.get_vertex_type_by_name(name)
        if vertex_type is not None:
            self.vertices_type.remove(vertex_type)
        return vertex_type

    def remove_edge_type_by_name(self, name: str) -> Optional[EdgeType]:
        edge_type = self.get_edge_type_by_name(name)
        if edge_type is not None:
            self.edges_type.remove(edge_type)
        return edge_type

    def sort_vertex_types(self) -> None:
        """Order vertex types by inheritance level, then name"""
        self.vertices_type.sort(key=lambda v: (v.inheritance_level, v.name))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "vertex_types": [vt.to_dict() for vt in self.vertices_type],
            "edge_types": [et.to_dict() for et in self.edges_type]
        }

    def __str__(self) -> str:
        lines = [f"Vertex types ({len(self.vertices_type)}):"]
        for vertex_type in self.vertices_type:
            props = ", ".join(f"{p.ordinal_position}:{p.name}" for p in vertex_type.properties)
            lines.append(f"  {vertex_type.name} [{props}] key={vertex_type.external_key}")
        lines.append(f"Edge types ({len(self.edges_type)}):")
        for edge_type in self.edges_type:
            lines.append(f"  {edge_type.name} x{edge_type.number_relationships_represented}")
        return "\n".join(lines)
