"""SQLite database connector"""

import sqlite3
import sys
from typing import Any, Dict, List, Optional, Tuple
from loguru import logger

from .base import DatabaseConnector, DatabaseInfo


class SQLiteConnector(DatabaseConnector):
    """SQLite database connector implementation"""

    def connect(self) -> None:
        """Establish SQLite connection"""
        try:
            self.connection = sqlite3.connect(self.connection_string)
            self.connection.row_factory = sqlite3.Row
            logger.info(f"Successfully connected to SQLite database: {self.connection_string}")
        except Exception as e:
            logger.error(f"Failed to connect to SQLite: {e}")
            raise

    def disconnect(self) -> None:
        """Close SQLite connection"""
        if self.connection:
            self.connection.close()
            self.connection = None
            logger.info("SQLite connection closed")

    def get_database_info(self) -> DatabaseInfo:
        """Get product and driver version information"""
        major, minor = sqlite3.sqlite_version_info[:2]
        return DatabaseInfo(
            product_name="SQLite",
            product_version=sqlite3.sqlite_version,
            major_version=major,
            minor_version=minor,
            driver_name="sqlite3",
            driver_major_version=sys.version_info.major,
            driver_minor_version=sys.version_info.minor
        )

    def get_schemas(self) -> List[str]:
        """Get list of attached database names"""
        cursor = self.connection.cursor()
        cursor.execute("PRAGMA database_list")
        return [row[1] for row in cursor.fetchall()]

    def get_tables(
        self,
        catalog: Optional[str] = None,
        schema_pattern: Optional[str] = None
    ) -> List[Tuple[Optional[str], str]]:
        """Get (schema, table name) pairs of all tables in the main database"""
        query = "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        cursor = self.connection.cursor()
        cursor.execute(query)
        return [("main", row[0]) for row in cursor.fetchall()]

    def get_columns(self, table_name: str, schema: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get column information for a table"""
        return [
            {
                "column_name": row[1],
                "ordinal_position": row[0] + 1,
                "data_type": row[2],
                "is_nullable": row[3] == 0 and row[5] == 0
            }
            for row in self._table_info(table_name)
        ]

    def get_primary_keys(self, table_name: str, schema: Optional[str] = None) -> List[str]:
        """Get primary key columns for a table in key order"""
        key_columns = [(row[5], row[1]) for row in self._table_info(table_name) if row[5] > 0]
        return [name for _, name in sorted(key_columns)]

    def get_imported_keys(self, table_name: str, schema: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get foreign key columns imported by a table"""
        query = f"PRAGMA foreign_key_list({self.quote_identifier(table_name)})"
        cursor = self.connection.cursor()
        cursor.execute(query)
        rows = [
            {
                "pktable_name": row[2],
                "pkcolumn_name": row[4],
                "fkcolumn_name": row[3],
                "key_seq": row[1] + 1,
                "fk_name": f"fk_{table_name}_{row[0]}"
            }
            for row in cursor.fetchall()
        ]
        return sorted(rows, key=lambda r: (r["pktable_name"], r["fk_name"], r["key_seq"]))

    def _table_info(self, table_name: str) -> List[Any]:
        """Run PRAGMA table_info for a table"""
        query = f"PRAGMA table_info({self.quote_identifier(table_name)})"
        cursor = self.connection.cursor()
        cursor.execute(query)
        return cursor.fetchall()

    def qualified_table_name(self, table_name: str, schema: Optional[str] = None) -> str:
        """SQLite tables are addressed without their database name"""
        return self.quote_identifier(table_name)

    def execute_query(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Execute a SQL query and return results"""
        cursor = self.connection.cursor()
        if params:
            cursor.execute(query, params)
        else:
            cursor.execute(query)
        return [dict(row) for row in cursor.fetchall()]

    def execute_script(self, script: str) -> None:
        """Execute several SQL statements at once"""
        self.connection.executescript(script)
        self.connection.commit()
