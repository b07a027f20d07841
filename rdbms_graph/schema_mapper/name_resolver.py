"""Name resolvers turning relational identifiers into graph schema names"""

import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from .db_schema import CanonicalRelationship

SEPARATORS = (" ", "_", "-")

# Suffixes stripped from single-column foreign keys when naming edges
EDGE_SUFFIX_PATTERN = re.compile(r"_(id|oid|eid)$", re.IGNORECASE)


class NamingConvention(Enum):
    """Available naming conventions"""
    JAVA = "java"
    ORIGINAL = "original"


class NameResolver(ABC):
    """Resolves vertex, property and edge names"""

    @abstractmethod
    def resolve_vertex_name(self, name: str) -> str:
        pass

    @abstractmethod
    def resolve_vertex_property(self, name: str) -> str:
        pass

    @abstractmethod
    def resolve_edge_name(self, relationship: CanonicalRelationship) -> str:
        pass

    @staticmethod
    def strip_key_suffix(column_name: str) -> str:
        """Remove a trailing _id, _oid or _eid (any case) from a column name"""
        stripped = EDGE_SUFFIX_PATTERN.sub("", column_name)
        return stripped or column_name


def _has_separator(name: str) -> bool:
    return any(separator in name for separator in SEPARATORS)


def _is_all_upper_case(name: str) -> bool:
    return bool(name) and all(ch.isupper() for ch in name)


def _camelize(name: str) -> str:
    """Turn every separator into a case boundary"""
    if not any(ch.islower() for ch in name):
        name = name.lower()
    chars = []
    upper_next = False
    for ch in name:
        if ch in SEPARATORS:
            upper_next = True
            continue
        chars.append(ch.upper() if upper_next else ch)
        upper_next = False
    return "".join(chars)


class JavaConventionNameResolver(NameResolver):
    """
    Normalized naming convention

    Type names become UpperCamelCase ("BOOK_AUTHOR" -> "BookAuthor"),
    property names lowerCamelCase ("AUTHOR_ID" -> "authorId"), and edges
    are named after the foreign key ("AUTHOR_ID" -> "HasAuthor").
    """

    def resolve_vertex_name(self, name: str) -> str:
        if self.is_compliant_to_class_convention(name):
            return name
        return self.to_class_convention(name)

    def resolve_vertex_property(self, name: str) -> str:
        if self.is_compliant_to_variable_convention(name):
            return name
        return self.to_variable_convention(name)

    def resolve_edge_name(self, relationship: CanonicalRelationship) -> str:
        fk_attributes = relationship.foreign_key.involved_attributes
        if len(fk_attributes) == 1:
            edge_name = self.strip_key_suffix(fk_attributes[0].name)
            if not self.is_compliant_to_class_convention(edge_name):
                edge_name = self.to_class_convention(edge_name)
            return f"Has{edge_name}"
        foreign_name = self.to_class_convention(relationship.foreign_entity.name)
        parent_name = self.to_class_convention(relationship.parent_entity.name)
        return f"{foreign_name}2{parent_name}"

    @staticmethod
    def is_compliant_to_class_convention(name: str) -> bool:
        if not name:
            return True
        return not _has_separator(name) and name[0].isupper() and not _is_all_upper_case(name)

    @staticmethod
    def is_compliant_to_variable_convention(name: str) -> bool:
        if not name:
            return True
        return not _has_separator(name) and not name[0].isupper() and not _is_all_upper_case(name)

    @staticmethod
    def to_class_convention(name: str) -> str:
        camelized = _camelize(name)
        return camelized[:1].upper() + camelized[1:]

    @staticmethod
    def to_variable_convention(name: str) -> str:
        camelized = _camelize(name)
        return camelized[:1].lower() + camelized[1:]


class OriginalConventionNameResolver(NameResolver):
    """Keeps relational names, only replacing spaces with underscores"""

    def resolve_vertex_name(self, name: str) -> str:
        return name.replace(" ", "_")

    def resolve_vertex_property(self, name: str) -> str:
        return name.replace(" ", "_")

    def resolve_edge_name(self, relationship: CanonicalRelationship) -> str:
        fk_attributes = relationship.foreign_key.involved_attributes
        if len(fk_attributes) == 1:
            edge_name = self.strip_key_suffix(fk_attributes[0].name)
            return f"has_{edge_name}".replace(" ", "_")
        foreign_name = relationship.foreign_entity.name
        parent_name = relationship.parent_entity.name
        return f"{foreign_name}2{parent_name}".replace(" ", "_")


def build_name_resolver(convention: Optional[str] = None) -> NameResolver:
    """
    Create the name resolver for a naming convention

    Args:
        convention: "java" for the normalized convention, "original" or None
            to keep relational names

    Returns:
        NameResolver instance
    """
    if convention is None or convention == NamingConvention.ORIGINAL.value:
        return OriginalConventionNameResolver()
    if convention == NamingConvention.JAVA.value:
        return JavaConventionNameResolver()
    raise ValueError(f"Unknown naming convention: {convention}")
