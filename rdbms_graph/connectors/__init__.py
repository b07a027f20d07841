"""Database connectors module"""

from .base import DatabaseConnector, DatabaseInfo
from .postgres import PostgreSQLConnector
from .mysql import MySQLConnector
from .sqlite import SQLiteConnector
from .data_source import DataSourceInfo, VendorType, create_connector

__all__ = [
    "DatabaseConnector",
    "DatabaseInfo",
    "PostgreSQLConnector",
    "MySQLConnector",
    "SQLiteConnector",
    "DataSourceInfo",
    "VendorType",
    "create_connector",
]
