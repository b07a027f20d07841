"""Application settings and configuration"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment and config file"""

    source_db_type: str = Field("postgres", env="SOURCE_DB_TYPE")  # postgres, mysql or sqlite
    source_connection_string: Optional[str] = Field(None, env="SOURCE_CONNECTION_STRING")
    source_schema: Optional[str] = Field(None, env="SOURCE_SCHEMA")

    postgres_host: str = Field("localhost", env="POSTGRES_HOST")
    postgres_port: int = Field(5432, env="POSTGRES_PORT")
    postgres_user: str = Field("postgres", env="POSTGRES_USER")
    postgres_password: str = Field("postgres", env="POSTGRES_PASSWORD")
    postgres_db: str = Field("sample_db", env="POSTGRES_DB")

    mysql_host: str = Field("localhost", env="MYSQL_HOST")
    mysql_port: int = Field(3306, env="MYSQL_PORT")
    mysql_user: str = Field("root", env="MYSQL_USER")
    mysql_password: str = Field("mysql", env="MYSQL_PASSWORD")
    mysql_db: str = Field("sample_db", env="MYSQL_DB")

    sqlite_path: str = Field("./data/sample.db", env="SQLITE_PATH")

    naming_convention: str = Field("java", env="NAMING_CONVENTION")  # java or original
    included_tables: Optional[str] = Field(None, env="INCLUDED_TABLES")  # Comma-separated
    excluded_tables: Optional[str] = Field(None, env="EXCLUDED_TABLES")  # Comma-separated
    aggregation_enabled: bool = Field(True, env="AGGREGATION_ENABLED")
    hibernate_xml_path: Optional[str] = Field(None, env="HIBERNATE_XML_PATH")
    join_table_config_path: str = Field("config/join_tables.yaml", env="JOIN_TABLE_CONFIG_PATH")

    api_host: str = Field("0.0.0.0", env="API_HOST")
    api_port: int = Field(8000, env="API_PORT")
    api_reload: bool = Field(True, env="API_RELOAD")

    log_level: str = Field("INFO", env="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from .env

    @property
    def postgres_url(self) -> str:
        """Get PostgreSQL connection URL"""
        return f"postgresql://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    @property
    def mysql_url(self) -> str:
        """Get MySQL connection URL"""
        return f"mysql+pymysql://{self.mysql_user}:{self.mysql_password}@{self.mysql_host}:{self.mysql_port}/{self.mysql_db}"

    def default_connection_string(self, db_type: str) -> str:
        """Get the configured connection string for a database type"""
        if self.source_connection_string and db_type == self.source_db_type:
            return self.source_connection_string
        if db_type == "mysql":
            return self.mysql_url
        if db_type == "sqlite":
            return self.sqlite_path
        return self.postgres_url

    @property
    def included_table_list(self) -> List[str]:
        return parse_table_list(self.included_tables)

    @property
    def excluded_table_list(self) -> List[str]:
        return parse_table_list(self.excluded_tables)


def parse_table_list(value: Optional[str]) -> List[str]:
    """Split a comma-separated list of table names"""
    if not value:
        return []
    return [name.strip() for name in value.split(",") if name.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def load_yaml_config(config_path: str = "config/config.yaml") -> Dict[str, Any]:
    """Load YAML configuration file"""
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file, "r") as f:
            return yaml.safe_load(f) or {}
    return {}
