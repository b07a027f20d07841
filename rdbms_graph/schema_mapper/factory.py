"""Creation and execution of schema mappers"""

from typing import Any, Dict, Optional, Sequence
from loguru import logger

from ..connectors.base import DatabaseConnector
from ..connectors.data_source import DataSourceInfo
from .hibernate import HibernateSchemaMapper
from .mapper import SchemaMapper
from .name_resolver import build_name_resolver
from .statistics import Statistics
from .type_mapper import TypeMapper, map_type


def create_schema_mapper(
    data_source: DataSourceInfo,
    connector: DatabaseConnector,
    naming_convention: Optional[str] = None,
    included_tables: Optional[Sequence[str]] = None,
    excluded_tables: Optional[Sequence[str]] = None,
    hibernate_xml_path: Optional[str] = None,
    type_mapper: TypeMapper = map_type,
    statistics: Optional[Statistics] = None,
    join_table_config: Optional[Dict[str, Any]] = None
) -> SchemaMapper:
    """Create a Hibernate-aware mapper when a descriptor is given, a basic one otherwise"""
    kwargs = dict(
        included_tables=included_tables,
        excluded_tables=excluded_tables,
        name_resolver=build_name_resolver(naming_convention),
        type_mapper=type_mapper,
        statistics=statistics,
        join_table_config=join_table_config
    )
    if hibernate_xml_path:
        return HibernateSchemaMapper(data_source, connector, xml_path=hibernate_xml_path, **kwargs)
    return SchemaMapper(data_source, connector, **kwargs)


def run_schema_mapping(
    data_source: DataSourceInfo,
    connector: DatabaseConnector,
    **options: Any
) -> SchemaMapper:
    """
    Build the relational schema, the graph model and, if enabled, the aggregations

    Args:
        data_source: Descriptor of the source database
        connector: Open connector used as metadata source
        **options: Passed to create_schema_mapper

    Returns:
        The mapper holding the schema, the graph model and the mapping rules
    """
    mapper = create_schema_mapper(data_source, connector, **options)
    mapper.build_source_database_schema()
    mapper.build_graph_model()
    if data_source.aggregation_enabled:
        mapper.perform_aggregations()

    logger.info(mapper.statistics.source_db_schema_building_progress())
    logger.info(mapper.statistics.graph_model_building_progress())
    return mapper
