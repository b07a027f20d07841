"""PostgreSQL database connector"""

from typing import Any, Dict, List, Optional, Tuple
import psycopg2
from psycopg2.extras import RealDictCursor
from loguru import logger

from .base import DatabaseConnector, DatabaseInfo, parse_version


class PostgreSQLConnector(DatabaseConnector):
    """PostgreSQL database connector implementation"""

    default_schema = "public"

    def connect(self) -> None:
        """Establish PostgreSQL connection"""
        try:
            self.connection = psycopg2.connect(self.connection_string)
            logger.info("Successfully connected to PostgreSQL database")
        except Exception as e:
            logger.error(f"Failed to connect to PostgreSQL: {e}")
            raise

    def disconnect(self) -> None:
        """Close PostgreSQL connection"""
        if self.connection:
            self.connection.close()
            self.connection = None
            logger.info("PostgreSQL connection closed")

    def get_database_info(self) -> DatabaseInfo:
        """Get product and driver version information"""
        with self.connection.cursor() as cursor:
            cursor.execute("SHOW server_version")
            product_version = cursor.fetchone()[0]
        major, minor = parse_version(product_version)
        driver_major, driver_minor = parse_version(psycopg2.__version__.split(" ")[0])
        return DatabaseInfo(
            product_name="PostgreSQL",
            product_version=product_version,
            major_version=major,
            minor_version=minor,
            driver_name="psycopg2",
            driver_major_version=driver_major,
            driver_minor_version=driver_minor
        )

    def get_schemas(self) -> List[str]:
        """Get list of schema names"""
        query = "SELECT schema_name FROM information_schema.schemata ORDER BY schema_name"
        with self.connection.cursor() as cursor:
            cursor.execute(query)
            return [row[0] for row in cursor.fetchall()]

    def get_tables(
        self,
        catalog: Optional[str] = None,
        schema_pattern: Optional[str] = None
    ) -> List[Tuple[Optional[str], str]]:
        """Get (schema, table name) pairs of all base tables"""
        query = """
            SELECT table_schema, table_name
            FROM information_schema.tables
            WHERE table_type = 'BASE TABLE'
            AND table_schema NOT IN ('pg_catalog', 'information_schema')
            AND table_schema LIKE %s
            ORDER BY table_schema, table_name
        """
        with self.connection.cursor() as cursor:
            cursor.execute(query, (schema_pattern or "%",))
            return [(row[0], row[1]) for row in cursor.fetchall()]

    def get_columns(self, table_name: str, schema: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get column information for a table"""
        query = """
            SELECT
                column_name,
                ordinal_position,
                udt_name AS data_type,
                is_nullable = 'YES' AS is_nullable
            FROM information_schema.columns
            WHERE table_schema = %s AND table_name = %s
            ORDER BY ordinal_position
        """
        with self.connection.cursor(cursor_factory=RealDictCursor) as cursor:
            cursor.execute(query, (schema or self.default_schema, table_name))
            return [dict(row) for row in cursor.fetchall()]

    def get_primary_keys(self, table_name: str, schema: Optional[str] = None) -> List[str]:
        """Get primary key columns for a table in key order"""
        query = """
            SELECT kcu.column_name
            FROM information_schema.table_constraints AS tc
            JOIN information_schema.key_column_usage AS kcu
                ON tc.constraint_name = kcu.constraint_name
                AND tc.table_schema = kcu.table_schema
                AND tc.table_name = kcu.table_name
            WHERE tc.constraint_type = 'PRIMARY KEY'
            AND tc.table_schema = %s
            AND tc.table_name = %s
            ORDER BY kcu.ordinal_position
        """
        with self.connection.cursor() as cursor:
            cursor.execute(query, (schema or self.default_schema, table_name))
            return [row[0] for row in cursor.fetchall()]

    def get_imported_keys(self, table_name: str, schema: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get foreign key columns imported by a table"""
        query = """
            SELECT
                pk.table_name AS pktable_name,
                pk.column_name AS pkcolumn_name,
                kcu.column_name AS fkcolumn_name,
                kcu.ordinal_position AS key_seq,
                kcu.constraint_name AS fk_name
            FROM information_schema.referential_constraints AS rc
            JOIN information_schema.key_column_usage AS kcu
                ON kcu.constraint_name = rc.constraint_name
                AND kcu.constraint_schema = rc.constraint_schema
            JOIN information_schema.key_column_usage AS pk
                ON pk.constraint_name = rc.unique_constraint_name
                AND pk.constraint_schema = rc.unique_constraint_schema
                AND pk.ordinal_position = kcu.position_in_unique_constraint
            WHERE kcu.table_schema = %s AND kcu.table_name = %s
            ORDER BY pk.table_name, kcu.constraint_name, kcu.ordinal_position
        """
        with self.connection.cursor(cursor_factory=RealDictCursor) as cursor:
            cursor.execute(query, (schema or self.default_schema, table_name))
            return [dict(row) for row in cursor.fetchall()]

    def execute_query(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Execute a SQL query and return results"""
        with self.connection.cursor(cursor_factory=RealDictCursor) as cursor:
            cursor.execute(query, params)
            return [dict(row) for row in cursor.fetchall()]
