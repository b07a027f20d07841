"""Base database connector interface"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass


@dataclass
class DatabaseInfo:
    """Product and driver version information reported by a database"""
    product_name: str
    product_version: str
    major_version: int = 0
    minor_version: int = 0
    driver_name: Optional[str] = None
    driver_major_version: int = 0
    driver_minor_version: int = 0


def parse_version(version: str) -> Tuple[int, int]:
    """Extract (major, minor) from a version string such as '14.5' or '8.0.33-log'"""
    numbers = []
    for token in version.replace("-", ".").split("."):
        digits = "".join(ch for ch in token if ch.isdigit())
        if not digits:
            break
        numbers.append(int(digits))
        if len(numbers) == 2:
            break
    while len(numbers) < 2:
        numbers.append(0)
    return numbers[0], numbers[1]


class DatabaseConnector(ABC):
    """Abstract base class for database connectors"""

    identifier_quote = '"'

    def __init__(self, connection_string: str):
        self.connection_string = connection_string
        self.connection = None

    @abstractmethod
    def connect(self) -> None:
        """Establish database connection"""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close database connection"""
        pass

    @abstractmethod
    def get_database_info(self) -> DatabaseInfo:
        """Get product and driver version information"""
        pass

    @abstractmethod
    def get_schemas(self) -> List[str]:
        """Get list of schema names visible to the connection"""
        pass

    @abstractmethod
    def get_tables(
        self,
        catalog: Optional[str] = None,
        schema_pattern: Optional[str] = None
    ) -> List[Tuple[Optional[str], str]]:
        """Get (schema, table name) pairs of all base tables, ordered by schema and name"""
        pass

    @abstractmethod
    def get_columns(self, table_name: str, schema: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Get column information for a table

        Returns:
            Rows with column_name, ordinal_position, data_type and is_nullable
        """
        pass

    @abstractmethod
    def get_primary_keys(self, table_name: str, schema: Optional[str] = None) -> List[str]:
        """Get primary key column names in key order"""
        pass

    @abstractmethod
    def get_imported_keys(self, table_name: str, schema: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Get the foreign key columns a table imports from other tables

        Returns:
            Rows with pktable_name, pkcolumn_name, fkcolumn_name, key_seq (1-based)
            and fk_name, ordered by referenced table and key sequence
        """
        pass

    @abstractmethod
    def execute_query(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Execute a SQL query and return results"""
        pass

    def quote_identifier(self, name: str) -> str:
        """Quote a table or column name for use in generated SQL"""
        quote = self.identifier_quote
        return f"{quote}{name.replace(quote, quote * 2)}{quote}"

    def qualified_table_name(self, table_name: str, schema: Optional[str] = None) -> str:
        """Get the quoted, schema-qualified name of a table"""
        if schema:
            return f"{self.quote_identifier(schema)}.{self.quote_identifier(table_name)}"
        return self.quote_identifier(table_name)

    def count_records(
        self,
        table_name: str,
        schema: Optional[str] = None,
        not_null_columns: Sequence[str] = ()
    ) -> int:
        """Count the rows of a table, optionally only those whose given columns are all non-null"""
        query = f"SELECT COUNT(*) AS count FROM {self.qualified_table_name(table_name, schema)}"
        if not_null_columns:
            conditions = " AND ".join(f"{self.quote_identifier(column)} IS NOT NULL" for column in not_null_columns)
            query = f"{query} WHERE {conditions}"
        rows = self.execute_query(query)
        return int(rows[0]["count"]) if rows else 0

    def get_row_count(self, table_name: str, schema: Optional[str] = None) -> int:
        """Get total row count for a table"""
        return self.count_records(table_name, schema)

    def __enter__(self):
        """Context manager entry"""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.disconnect()
