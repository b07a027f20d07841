"""Configuration module"""

from .settings import Settings, get_settings, load_yaml_config, parse_table_list

__all__ = ["Settings", "get_settings", "load_yaml_config", "parse_table_list"]
