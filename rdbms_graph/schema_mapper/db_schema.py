"""Relational schema data structures"""

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

_handles = itertools.count(1)

DIRECT = "direct"
INVERSE = "inverse"


def next_handle() -> int:
    """Allocate a process-wide unique handle for identity-keyed registries"""
    return next(_handles)


class InheritancePattern(Enum):
    """Ways an ORM maps a class hierarchy onto tables"""
    TABLE_PER_HIERARCHY = "table-per-hierarchy"
    TABLE_PER_TYPE = "table-per-type"
    TABLE_PER_CONCRETE_TYPE = "table-per-concrete-type"


class Attribute:
    """
    A column of an entity

    Two attributes are equal when their names and type names are equal,
    regardless of the entity owning them.
    """

    def __init__(
        self,
        name: str,
        ordinal_position: int,
        data_type: str,
        belonging_entity: Optional["Entity"] = None,
        is_nullable: Optional[bool] = None
    ):
        self.name = name
        self.ordinal_position = ordinal_position
        self.data_type = data_type
        self.belonging_entity = belonging_entity
        self.is_nullable = is_nullable

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Attribute):
            return NotImplemented
        return self.name == other.name and self.data_type == other.data_type

    def __hash__(self) -> int:
        return hash((self.name, self.data_type))

    def __repr__(self) -> str:
        return f"Attribute({self.name!r}, {self.ordinal_position}, {self.data_type!r})"


class Key:
    """Ordered list of attributes of one entity"""

    def __init__(self, belonging_entity: "Entity", involved_attributes: Optional[List[Attribute]] = None):
        self.belonging_entity = belonging_entity
        self.involved_attributes: List[Attribute] = list(involved_attributes or [])

    def add_attribute(self, attribute: Attribute) -> None:
        self.involved_attributes.append(attribute)

    def __contains__(self, attribute: Attribute) -> bool:
        return attribute in self.involved_attributes

    def __len__(self) -> int:
        return len(self.involved_attributes)

    def __repr__(self) -> str:
        names = ", ".join(a.name for a in self.involved_attributes)
        return f"{type(self).__name__}({self.belonging_entity.name}: [{names}])"


class PrimaryKey(Key):
    pass


class ForeignKey(Key):
    pass


@dataclass(eq=False)
class CanonicalRelationship:
    """
    One foreign key of a foreign entity pointing at the primary key of a parent entity

    Relationships compare by identity; two relationships with the same content
    are still distinct.
    """
    foreign_entity: "Entity"
    parent_entity: "Entity"
    foreign_key: ForeignKey
    primary_key: PrimaryKey
    handle: int = field(default_factory=next_handle)

    @property
    def from_columns(self) -> List[str]:
        return [a.name for a in self.foreign_key.involved_attributes]

    @property
    def to_columns(self) -> List[str]:
        return [a.name for a in self.primary_key.involved_attributes]

    def __repr__(self) -> str:
        return (
            f"CanonicalRelationship({self.foreign_entity.name}{self.from_columns} -> "
            f"{self.parent_entity.name}{self.to_columns})"
        )


class Entity:
    """In-memory representation of a relational table"""

    def __init__(self, name: str, schema_name: Optional[str] = None, data_source: Any = None):
        self.handle = next_handle()
        self.name = name
        self.schema_name = schema_name
        self.data_source = data_source
        self.attributes: List[Attribute] = []
        self.primary_key = PrimaryKey(self)
        self.foreign_keys: List[ForeignKey] = []
        self.out_canonical_relationships: List[CanonicalRelationship] = []
        self.in_canonical_relationships: List[CanonicalRelationship] = []
        self._extra_inherited_attributes: List[Attribute] = []
        self.parent_entity: Optional[Entity] = None
        self.inheritance_level = 0
        self.hierarchical_bag: Optional["HierarchicalBag"] = None
        self.schema_position = 0
        self.is_split_entity = False
        self.direction_of_n2n_relationship: Optional[str] = None
        self.name_of_n2n_relationship: Optional[str] = None

    # Attributes

    def add_attribute(self, attribute: Attribute) -> None:
        """Insert an attribute keeping the list ordered by ordinal position"""
        attribute.belonging_entity = self
        index = len(self.attributes)
        while index > 0 and self.attributes[index - 1].ordinal_position > attribute.ordinal_position:
            index -= 1
        self.attributes.insert(index, attribute)

    def renumber_attributes(self) -> None:
        """Make ordinal positions contiguous from 1 following the current order"""
        for position, attribute in enumerate(self.attributes, start=1):
            attribute.ordinal_position = position

    def get_attribute_by_name(self, name: str) -> Optional[Attribute]:
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    def get_attribute_by_name_ignore_case(self, name: str) -> Optional[Attribute]:
        lowered = name.lower()
        for attribute in self.attributes:
            if attribute.name.lower() == lowered:
                return attribute
        return None

    def get_attribute_by_ordinal_position(self, ordinal_position: int) -> Optional[Attribute]:
        for attribute in self.attributes:
            if attribute.ordinal_position == ordinal_position:
                return attribute
        return None

    def remove_attribute_by_name_ignore_case(self, name: str) -> Optional[Attribute]:
        """Remove an own attribute and renumber the remaining ones"""
        attribute = self.get_attribute_by_name_ignore_case(name)
        if attribute is not None:
            self.attributes.remove(attribute)
            self.renumber_attributes()
        return attribute

    def add_inherited_attribute(self, attribute: Attribute) -> None:
        if attribute not in self._extra_inherited_attributes:
            self._extra_inherited_attributes.append(attribute)

    @property
    def inherited_attributes(self) -> List[Attribute]:
        """Attributes coming from the parent chain plus the ones moved here explicitly"""
        inherited = list(self.parent_entity.all_attributes) if self.parent_entity is not None else []
        return _unique(inherited + self._extra_inherited_attributes)

    @property
    def all_attributes(self) -> List[Attribute]:
        return _unique(self.inherited_attributes + self.attributes)

    # Relationships

    @property
    def inherited_out_canonical_relationships(self) -> List[CanonicalRelationship]:
        if self.parent_entity is None:
            return []
        return self.parent_entity.all_out_canonical_relationships

    @property
    def all_out_canonical_relationships(self) -> List[CanonicalRelationship]:
        return _unique_by_identity(self.inherited_out_canonical_relationships + self.out_canonical_relationships)

    @property
    def inherited_in_canonical_relationships(self) -> List[CanonicalRelationship]:
        if self.parent_entity is None:
            return []
        return self.parent_entity.all_in_canonical_relationships

    @property
    def all_in_canonical_relationships(self) -> List[CanonicalRelationship]:
        return _unique_by_identity(self.inherited_in_canonical_relationships + self.in_canonical_relationships)

    def is_aggregable_join_table(self) -> bool:
        """
        True when the entity is a pure two-column join table

        It must import exactly two foreign keys, their attributes together must
        be its primary key, and no other entity may reference it.
        """
        if len(self.foreign_keys) != 2 or not self.primary_key.involved_attributes:
            return False
        fk_attributes = [a for fk in self.foreign_keys for a in fk.involved_attributes]
        if any(a not in self.primary_key for a in fk_attributes):
            return False
        if any(a not in fk_attributes for a in self.primary_key.involved_attributes):
            return False
        return not self.all_in_canonical_relationships

    def __repr__(self) -> str:
        return f"Entity({self.name!r}, level={self.inheritance_level})"


@dataclass(eq=False)
class HierarchicalBag:
    """All entities of one inheritance root, grouped by depth"""
    inheritance_pattern: InheritancePattern
    depth2entities: Dict[int, List[Entity]] = field(default_factory=dict)
    discriminator_column: Optional[str] = None
    entity_name2discriminator_value: Dict[str, str] = field(default_factory=dict)

    def add_entity(self, entity: Entity) -> None:
        """Register an entity at its inheritance level"""
        members = self.depth2entities.setdefault(entity.inheritance_level, [])
        if entity not in members:
            members.append(entity)
        entity.hierarchical_bag = self

    @property
    def root(self) -> Optional[Entity]:
        roots = self.depth2entities.get(0)
        return roots[0] if roots else None


class DataBaseSchema:
    """Root aggregate of the relational model built for one mapping run"""

    def __init__(self):
        self.product_name: Optional[str] = None
        self.product_version: Optional[str] = None
        self.major_version = 0
        self.minor_version = 0
        self.driver_name: Optional[str] = None
        self.driver_major_version = 0
        self.driver_minor_version = 0
        self.entities: List[Entity] = []
        self.canonical_relationships: List[CanonicalRelationship] = []
        self.hierarchical_bags: List[HierarchicalBag] = []

    def get_entity_by_name(self, name: str) -> Optional[Entity]:
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None

    def get_entity_by_name_ignore_case(self, name: str) -> Optional[Entity]:
        lowered = name.lower()
        for entity in self.entities:
            if entity.name.lower() == lowered:
                return entity
        return None

    def get_entity_by_position(self, position: int) -> Optional[Entity]:
        for entity in self.entities:
            if entity.schema_position == position:
                return entity
        return None

    def get_relationship_by_involved_entities_and_attributes(
        self,
        foreign_entity: Entity,
        parent_entity: Entity,
        from_columns: List[str],
        to_columns: List[str]
    ) -> Optional[CanonicalRelationship]:
        for relationship in self.canonical_relationships:
            if (
                relationship.foreign_entity is foreign_entity
                and relationship.parent_entity is parent_entity
                and relationship.from_columns == list(from_columns)
                and relationship.to_columns == list(to_columns)
            ):
                return relationship
        return None

    def sort_entities(self) -> None:
        """Order entities by inheritance level, then name"""
        self.entities.sort(key=lambda e: (e.inheritance_level, e.name))

    def __str__(self) -> str:
        lines = [
            f"Source database: {self.product_name} {self.product_version}",
            f"Entities ({len(self.entities)}):",
        ]
        for entity in self.entities:
            columns = ", ".join(f"{a.ordinal_position}:{a.name}" for a in entity.attributes)
            pk = ", ".join(a.name for a in entity.primary_key.involved_attributes)
            lines.append(f"  {entity.name} [{columns}] pk=({pk})")
        lines.append(f"Relationships ({len(self.canonical_relationships)}):")
        for relationship in self.canonical_relationships:
            lines.append(f"  {relationship!r}")
        return "\n".join(lines)


def _unique(attributes: Iterable[Attribute]) -> List[Attribute]:
    result: List[Attribute] = []
    for attribute in attributes:
        if attribute not in result:
            result.append(attribute)
    return result


def _unique_by_identity(items: Iterable[Any]) -> List[Any]:
    seen = set()
    result = []
    for item in items:
        if id(item) not in seen:
            seen.add(id(item))
            result.append(item)
    return result
