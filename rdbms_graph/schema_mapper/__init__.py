"""Schema mapping module for converting RDBMS schemas to graph schemas"""

from .db_schema import (
    Attribute,
    CanonicalRelationship,
    DataBaseSchema,
    Entity,
    ForeignKey,
    HierarchicalBag,
    InheritancePattern,
    PrimaryKey,
)
from .graph_schema import AggregatorEdge, EdgeType, GraphModel, ModelProperty, PropertyType, VertexType
from .class_mapper import EEClassMapper, EVClassMapper, MappingRules
from .name_resolver import (
    JavaConventionNameResolver,
    NameResolver,
    NamingConvention,
    OriginalConventionNameResolver,
    build_name_resolver,
)
from .statistics import Statistics
from .type_mapper import map_type
from .schema_builder import SourceSchemaBuilder
from .mapper import SchemaMapper
from .hibernate import HibernateSchemaMapper
from .factory import create_schema_mapper, run_schema_mapping

__all__ = [
    "Attribute",
    "CanonicalRelationship",
    "DataBaseSchema",
    "Entity",
    "ForeignKey",
    "HierarchicalBag",
    "InheritancePattern",
    "PrimaryKey",
    "AggregatorEdge",
    "EdgeType",
    "GraphModel",
    "ModelProperty",
    "PropertyType",
    "VertexType",
    "EEClassMapper",
    "EVClassMapper",
    "MappingRules",
    "JavaConventionNameResolver",
    "NameResolver",
    "NamingConvention",
    "OriginalConventionNameResolver",
    "build_name_resolver",
    "Statistics",
    "map_type",
    "SourceSchemaBuilder",
    "SchemaMapper",
    "HibernateSchemaMapper",
    "create_schema_mapper",
    "run_schema_mapping",
]
