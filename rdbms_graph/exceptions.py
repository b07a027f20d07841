"""Exceptions raised while mapping a relational schema to a graph schema"""


class MappingError(Exception):
    """Base exception for schema mapping errors"""
    pass


class SchemaIntrospectionError(MappingError):
    """Metadata could not be read from the source database"""
    pass


class DescriptorFormatError(MappingError):
    """The ORM inheritance descriptor is missing or malformed"""
    pass


class UnsupportedDataSourceError(MappingError):
    """No connector or accommodation exists for the requested vendor"""
    pass
