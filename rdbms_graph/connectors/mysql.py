"""MySQL database connector"""

from typing import Any, Dict, List, Optional, Tuple
import pymysql
from loguru import logger

from .base import DatabaseConnector, DatabaseInfo, parse_version


class MySQLConnector(DatabaseConnector):
    """MySQL database connector implementation"""

    identifier_quote = "`"

    def __init__(self, connection_string: str):
        super().__init__(connection_string)
        self.database = None

    def connect(self) -> None:
        """Establish MySQL connection"""
        try:
            parts = self.connection_string.replace("mysql+pymysql://", "").split("@")
            user_pass = parts[0].split(":")
            host_db = parts[1].split("/")
            host_port = host_db[0].split(":")
            self.database = host_db[1] if len(host_db) > 1 else ""

            self.connection = pymysql.connect(
                host=host_port[0],
                port=int(host_port[1]) if len(host_port) > 1 else 3306,
                user=user_pass[0],
                password=user_pass[1] if len(user_pass) > 1 else "",
                database=self.database,
                cursorclass=pymysql.cursors.DictCursor
            )
            logger.info("Successfully connected to MySQL database")
        except Exception as e:
            logger.error(f"Failed to connect to MySQL: {e}")
            raise

    def disconnect(self) -> None:
        """Close MySQL connection"""
        if self.connection:
            self.connection.close()
            self.connection = None
            logger.info("MySQL connection closed")

    def get_database_info(self) -> DatabaseInfo:
        """Get product and driver version information"""
        with self.connection.cursor() as cursor:
            cursor.execute("SELECT VERSION() AS version")
            product_version = cursor.fetchone()["version"]
        major, minor = parse_version(product_version)
        driver_major, driver_minor = parse_version(pymysql.__version__)
        return DatabaseInfo(
            product_name="MySQL",
            product_version=product_version,
            major_version=major,
            minor_version=minor,
            driver_name="pymysql",
            driver_major_version=driver_major,
            driver_minor_version=driver_minor
        )

    def get_schemas(self) -> List[str]:
        """Get list of database names"""
        with self.connection.cursor() as cursor:
            cursor.execute("SELECT SCHEMA_NAME AS schema_name FROM INFORMATION_SCHEMA.SCHEMATA ORDER BY SCHEMA_NAME")
            return [row["schema_name"] for row in cursor.fetchall()]

    def get_tables(
        self,
        catalog: Optional[str] = None,
        schema_pattern: Optional[str] = None
    ) -> List[Tuple[Optional[str], str]]:
        """Get (schema, table name) pairs of all base tables"""
        query = """
            SELECT TABLE_SCHEMA AS table_schema, TABLE_NAME AS table_name
            FROM INFORMATION_SCHEMA.TABLES
            WHERE TABLE_SCHEMA = COALESCE(%s, DATABASE())
            AND TABLE_TYPE = 'BASE TABLE'
            ORDER BY TABLE_NAME
        """
        with self.connection.cursor() as cursor:
            cursor.execute(query, (schema_pattern or catalog,))
            return [(row["table_schema"], row["table_name"]) for row in cursor.fetchall()]

    def get_columns(self, table_name: str, schema: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get column information for a table"""
        query = """
            SELECT
                COLUMN_NAME AS column_name,
                ORDINAL_POSITION AS ordinal_position,
                DATA_TYPE AS data_type,
                IS_NULLABLE AS is_nullable
            FROM INFORMATION_SCHEMA.COLUMNS
            WHERE TABLE_SCHEMA = COALESCE(%s, DATABASE())
            AND TABLE_NAME = %s
            ORDER BY ORDINAL_POSITION
        """
        with self.connection.cursor() as cursor:
            cursor.execute(query, (schema, table_name))
            return [
                {
                    "column_name": row["column_name"],
                    "ordinal_position": row["ordinal_position"],
                    "data_type": row["data_type"],
                    "is_nullable": row["is_nullable"] == "YES"
                }
                for row in cursor.fetchall()
            ]

    def get_primary_keys(self, table_name: str, schema: Optional[str] = None) -> List[str]:
        """Get primary key columns for a table in key order"""
        query = """
            SELECT COLUMN_NAME
            FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE
            WHERE TABLE_SCHEMA = COALESCE(%s, DATABASE())
            AND TABLE_NAME = %s
            AND CONSTRAINT_NAME = 'PRIMARY'
            ORDER BY ORDINAL_POSITION
        """
        with self.connection.cursor() as cursor:
            cursor.execute(query, (schema, table_name))
            return [row["COLUMN_NAME"] for row in cursor.fetchall()]

    def get_imported_keys(self, table_name: str, schema: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get foreign key columns imported by a table"""
        query = """
            SELECT
                REFERENCED_TABLE_NAME AS pktable_name,
                REFERENCED_COLUMN_NAME AS pkcolumn_name,
                COLUMN_NAME AS fkcolumn_name,
                ORDINAL_POSITION AS key_seq,
                CONSTRAINT_NAME AS fk_name
            FROM INFORMATION_SCHEMA.KEY_COLUMN_USAGE
            WHERE TABLE_SCHEMA = COALESCE(%s, DATABASE())
            AND TABLE_NAME = %s
            AND REFERENCED_TABLE_NAME IS NOT NULL
            ORDER BY REFERENCED_TABLE_NAME, CONSTRAINT_NAME, ORDINAL_POSITION
        """
        with self.connection.cursor() as cursor:
            cursor.execute(query, (schema, table_name))
            return list(cursor.fetchall())

    def execute_query(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Execute a SQL query and return results"""
        with self.connection.cursor() as cursor:
            cursor.execute(query, params)
            return list(cursor.fetchall())
