"""Builds the relational schema model from database metadata"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence
from loguru import logger

from ..connectors.base import DatabaseConnector
from ..connectors.data_source import DataSourceInfo, VendorType
from ..exceptions import SchemaIntrospectionError
from .db_schema import Attribute, CanonicalRelationship, DataBaseSchema, Entity, ForeignKey, PrimaryKey
from .statistics import Statistics

ROW_INDEX_ATTRIBUTE = "row_index"
ROW_INDEX_TYPE = "http://www.w3.org/2001/XMLSchema#integer"


@dataclass
class TableScope:
    """Where to look for tables, and which schema to assume when none is reported"""
    catalog: Optional[str] = None
    schema_pattern: Optional[str] = None
    default_schema: Optional[str] = None


def _generic_table_scope(data_source: DataSourceInfo, connector: DatabaseConnector) -> TableScope:
    return TableScope(schema_pattern=data_source.schema, default_schema=data_source.schema)


def _mysql_table_scope(data_source: DataSourceInfo, connector: DatabaseConnector) -> TableScope:
    database = data_source.database or getattr(connector, "database", None)
    return TableScope(catalog=database, schema_pattern=database, default_schema=database)


def _oracle_table_scope(data_source: DataSourceInfo, connector: DatabaseConnector) -> TableScope:
    username = data_source.username or ""
    schema = next((s for s in connector.get_schemas() if s.lower() == username.lower()), username.upper())
    return TableScope(schema_pattern=schema, default_schema=schema)


def _no_completion(entity: Entity) -> None:
    pass


def _add_row_index_key(entity: Entity) -> None:
    """Give the entity a surrogate row_index primary key"""
    next_position = max((a.ordinal_position for a in entity.attributes), default=0) + 1
    row_index = Attribute(ROW_INDEX_ATTRIBUTE, next_position, ROW_INDEX_TYPE, is_nullable=False)
    entity.add_attribute(row_index)
    entity.primary_key = PrimaryKey(entity, [row_index])


@dataclass(frozen=True)
class VendorAccommodation:
    """Vendor-specific special cases applied while building entities"""
    resolve_table_scope: Callable[[DataSourceInfo, DatabaseConnector], TableScope] = _generic_table_scope
    complete_entity: Callable[[Entity], None] = _no_completion


GENERIC_ACCOMMODATION = VendorAccommodation()

VENDOR_ACCOMMODATIONS: Dict[VendorType, VendorAccommodation] = {
    VendorType.MYSQL: VendorAccommodation(resolve_table_scope=_mysql_table_scope),
    VendorType.ORACLE: VendorAccommodation(resolve_table_scope=_oracle_table_scope),
    VendorType.DATA_WORLD: VendorAccommodation(complete_entity=_add_row_index_key),
}


def is_table_allowed(
    table_name: str,
    included_tables: Optional[Sequence[str]] = None,
    excluded_tables: Optional[Sequence[str]] = None
) -> bool:
    """A non-empty include list wins; otherwise the exclude list applies"""
    if included_tables:
        return table_name in included_tables
    if excluded_tables:
        return table_name not in excluded_tables
    return True


class SourceSchemaBuilder:
    """Introspects a database into a DataBaseSchema"""

    def __init__(
        self,
        data_source: DataSourceInfo,
        connector: DatabaseConnector,
        statistics: Optional[Statistics] = None,
        included_tables: Optional[Sequence[str]] = None,
        excluded_tables: Optional[Sequence[str]] = None
    ):
        """
        Initialize the builder

        Args:
            data_source: Descriptor of the database to introspect
            connector: Open connector used as metadata source
            statistics: Counters updated while building
            included_tables: Only these tables are mapped when non-empty
            excluded_tables: Tables skipped when no include list is given
        """
        self.data_source = data_source
        self.connector = connector
        self.statistics = statistics or Statistics()
        self.included_tables = list(included_tables or [])
        self.excluded_tables = list(excluded_tables or [])
        self.accommodation = VENDOR_ACCOMMODATIONS.get(data_source.vendor, GENERIC_ACCOMMODATION)

    def is_table_allowed(self, table_name: str) -> bool:
        return is_table_allowed(table_name, self.included_tables, self.excluded_tables)

    def build(self) -> DataBaseSchema:
        """
        Build entities, then outgoing relationships, then incoming relationships

        Returns:
            The populated DataBaseSchema

        Raises:
            SchemaIntrospectionError: if any metadata query fails
        """
        self.statistics.running_step_number = 1
        self.statistics.start_work1_time = datetime.now()
        logger.info(f"Building source database schema for {self.data_source.vendor.value}")

        schema = DataBaseSchema()
        try:
            self._read_database_info(schema)
            scope = self.accommodation.resolve_table_scope(self.data_source, self.connector)
            self._build_entities(schema, scope)
            self._build_out_relationships(schema)
            self._build_in_relationships(schema)
        except Exception as e:
            logger.error(f"Source database schema building failed: {e}")
            raise SchemaIntrospectionError(f"Unable to build the source database schema: {e}") from e

        logger.info(
            f"Built source database schema with {len(schema.entities)} entities "
            f"and {len(schema.canonical_relationships)} relationships"
        )
        return schema

    def _read_database_info(self, schema: DataBaseSchema) -> None:
        info = self.connector.get_database_info()
        schema.product_name = info.product_name
        schema.product_version = info.product_version
        schema.major_version = info.major_version
        schema.minor_version = info.minor_version
        schema.driver_name = info.driver_name
        schema.driver_major_version = info.driver_major_version
        schema.driver_minor_version = info.driver_minor_version

    def _build_entities(self, schema: DataBaseSchema, scope: TableScope) -> None:
        tables = [
            (table_schema, table_name)
            for table_schema, table_name in self.connector.get_tables(scope.catalog, scope.schema_pattern)
            if self.is_table_allowed(table_name)
        ]
        self.statistics.total_number_of_entities = len(tables)

        for position, (table_schema, table_name) in enumerate(tables, start=1):
            entity_schema = table_schema or scope.default_schema
            entity = Entity(table_name, entity_schema, self.data_source)
            entity.schema_position = position

            for column in self.connector.get_columns(table_name, entity_schema):
                entity.add_attribute(Attribute(
                    name=column["column_name"],
                    ordinal_position=int(column["ordinal_position"]),
                    data_type=column["data_type"],
                    is_nullable=column.get("is_nullable")
                ))

            for key_column in self.connector.get_primary_keys(table_name, entity_schema):
                attribute = entity.get_attribute_by_name(key_column)
                if attribute is not None:
                    entity.primary_key.add_attribute(attribute)

            self.accommodation.complete_entity(entity)

            if not entity.primary_key.involved_attributes:
                message = f"It's not declared a primary key for the Entity {entity.name}, might lead to issues"
                logger.warning(message)
                self.statistics.warning_messages.append(message)

            schema.entities.append(entity)
            self.statistics.built_entities += 1
            logger.debug(f"Built entity {entity.name} with {len(entity.attributes)} attributes")

    def _build_out_relationships(self, schema: DataBaseSchema) -> None:
        for entity in schema.entities:
            rows = [
                row for row in self.connector.get_imported_keys(entity.name, entity.schema_name)
                if self.is_table_allowed(row["pktable_name"])
                and schema.get_entity_by_name(row["pktable_name"]) is not None
            ]
            self.statistics.total_number_of_relationships += len({
                (row["pktable_name"], row.get("fk_name")) for row in rows
            })

            for columns in self._group_key_runs(rows):
                parent_entity = schema.get_entity_by_name(columns[0]["pktable_name"])
                relationship = self._create_relationship(entity, parent_entity, columns)
                if relationship is None:
                    continue
                entity.foreign_keys.append(relationship.foreign_key)
                entity.out_canonical_relationships.append(relationship)
                schema.canonical_relationships.append(relationship)
                self.statistics.built_relationships += 1

            self.statistics.entities_analyzed_for_relationship += 1

    @staticmethod
    def _group_key_runs(rows: List[Dict[str, Any]]) -> List[List[Dict[str, Any]]]:
        """
        Split imported-key rows into one run per foreign key

        A run starts at every row with key_seq 1 and collects the following
        sequence numbers for the same parent table (and the same constraint,
        when the metadata names it).
        """
        consumed = set()
        runs = []
        for start in rows:
            if id(start) in consumed or int(start["key_seq"]) != 1:
                continue
            parent_name = start["pktable_name"]
            fk_name = start.get("fk_name")
            run = []
            expected = 1
            for row in rows:
                if id(row) in consumed or row["pktable_name"] != parent_name:
                    continue
                if fk_name is not None and row.get("fk_name") != fk_name:
                    continue
                if int(row["key_seq"]) == expected:
                    run.append(row)
                    consumed.add(id(row))
                    expected += 1
            runs.append(run)
        return runs

    def _create_relationship(
        self,
        entity: Entity,
        parent_entity: Entity,
        columns: List[Dict[str, Any]]
    ) -> Optional[CanonicalRelationship]:
        if len(columns) != len(parent_entity.primary_key):
            self._warn(
                f"Foreign key {entity.name}{[row['fkcolumn_name'] for row in columns]} does not match "
                f"the primary key of {parent_entity.name}, relationship skipped"
            )
            return None

        columns = self._align_with_primary_key(entity, parent_entity, columns)
        if columns is None:
            return None

        foreign_key = ForeignKey(entity)
        for row in columns:
            attribute = entity.get_attribute_by_name(row["fkcolumn_name"])
            if attribute is None:
                self._warn(f"Column {row['fkcolumn_name']} of {entity.name} not found, foreign key skipped")
                return None
            foreign_key.add_attribute(attribute)

        return CanonicalRelationship(
            foreign_entity=entity,
            parent_entity=parent_entity,
            foreign_key=foreign_key,
            primary_key=parent_entity.primary_key
        )

    def _align_with_primary_key(
        self,
        entity: Entity,
        parent_entity: Entity,
        columns: List[Dict[str, Any]]
    ) -> Optional[List[Dict[str, Any]]]:
        """
        Order the rows of a foreign key like the primary key they reference

        Rows without a referenced column name keep their key_seq order.
        """
        if not all(row.get("pkcolumn_name") for row in columns):
            return columns

        key_positions = {
            attribute.name.lower(): position
            for position, attribute in enumerate(parent_entity.primary_key.involved_attributes)
        }
        unknown = [row["pkcolumn_name"] for row in columns if row["pkcolumn_name"].lower() not in key_positions]
        if unknown:
            self._warn(
                f"Foreign key of {entity.name} references {unknown}, not in the primary key "
                f"of {parent_entity.name}, relationship skipped"
            )
            return None
        return sorted(columns, key=lambda row: key_positions[row["pkcolumn_name"].lower()])

    @staticmethod
    def _build_in_relationships(schema: DataBaseSchema) -> None:
        for relationship in schema.canonical_relationships:
            relationship.parent_entity.in_canonical_relationships.append(relationship)

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.statistics.warning_messages.append(message)
