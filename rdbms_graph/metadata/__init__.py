"""Data source metadata module"""

from .provider import DataSourceMetadata, MetadataProvider, TypeClass

__all__ = ["DataSourceMetadata", "MetadataProvider", "TypeClass"]
