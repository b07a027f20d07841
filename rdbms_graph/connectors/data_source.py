"""Data source descriptors and connector selection"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..exceptions import UnsupportedDataSourceError
from .base import DatabaseConnector
from .mysql import MySQLConnector
from .postgres import PostgreSQLConnector
from .sqlite import SQLiteConnector


class VendorType(Enum):
    """Supported relational database vendor families"""
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"
    ORACLE = "oracle"
    MSSQLSERVER = "mssqlserver"
    HSQLDB = "hsqldb"
    DATA_WORLD = "dataworld"

    @classmethod
    def from_name(cls, name: str) -> "VendorType":
        """Resolve a vendor from a database type name such as 'postgres' or 'MySQL'"""
        key = name.strip().lower().replace("_", "").replace("-", "").replace(".", "")
        aliases = {
            "postgres": cls.POSTGRESQL,
            "postgresql": cls.POSTGRESQL,
            "mysql": cls.MYSQL,
            "sqlite": cls.SQLITE,
            "oracle": cls.ORACLE,
            "sqlserver": cls.MSSQLSERVER,
            "mssqlserver": cls.MSSQLSERVER,
            "hsql": cls.HSQLDB,
            "hsqldb": cls.HSQLDB,
            "dataworld": cls.DATA_WORLD,
        }
        if key not in aliases:
            raise UnsupportedDataSourceError(f"Unsupported database type: {name}")
        return aliases[key]


@dataclass
class DataSourceInfo:
    """Describes the relational source to map"""
    vendor: VendorType
    connection_string: str
    database: Optional[str] = None
    username: Optional[str] = None
    schema: Optional[str] = None
    aggregation_enabled: bool = True
    name: Optional[str] = None


CONNECTOR_CLASSES = {
    VendorType.POSTGRESQL: PostgreSQLConnector,
    VendorType.MYSQL: MySQLConnector,
    VendorType.SQLITE: SQLiteConnector,
}


def create_connector(data_source: DataSourceInfo) -> DatabaseConnector:
    """Create a connector for the vendor of a data source"""
    connector_class = CONNECTOR_CLASSES.get(data_source.vendor)
    if connector_class is None:
        raise UnsupportedDataSourceError(f"No connector available for {data_source.vendor.value}")
    return connector_class(data_source.connection_string)
