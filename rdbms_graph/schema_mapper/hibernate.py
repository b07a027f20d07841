"""Inheritance detection from Hibernate XML mapping descriptors"""

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from loguru import logger

from ..exceptions import DescriptorFormatError
from .db_schema import Attribute, DataBaseSchema, Entity, HierarchicalBag, InheritancePattern
from .mapper import SchemaMapper


@dataclass
class InheritanceDescriptor:
    """Classified inheritance mapping of one descriptor element"""
    pattern: InheritancePattern
    parent_entity: Entity
    element: ET.Element
    children: List[ET.Element] = field(default_factory=list)


def classify(parent_entity: Entity, element: ET.Element) -> Optional[InheritanceDescriptor]:
    """
    Detect the inheritance pattern used by the direct children of an element

    A subclass without join is table-per-hierarchy, a subclass with join or a
    joined-subclass is table-per-type, and a union-subclass is
    table-per-concrete-type.
    """
    subclasses = element.findall("subclass")
    if subclasses:
        joined = [subclass for subclass in subclasses if subclass.find("join") is not None]
        if joined:
            return InheritanceDescriptor(InheritancePattern.TABLE_PER_TYPE, parent_entity, element, joined)
        return InheritanceDescriptor(InheritancePattern.TABLE_PER_HIERARCHY, parent_entity, element, subclasses)

    joined_subclasses = element.findall("joined-subclass")
    if joined_subclasses:
        return InheritanceDescriptor(InheritancePattern.TABLE_PER_TYPE, parent_entity, element, joined_subclasses)

    union_subclasses = element.findall("union-subclass")
    if union_subclasses:
        return InheritanceDescriptor(
            InheritancePattern.TABLE_PER_CONCRETE_TYPE, parent_entity, element, union_subclasses
        )
    return None


def _required_attribute(element: ET.Element, name: str) -> str:
    value = element.get(name)
    if not value:
        raise DescriptorFormatError(f"Element <{element.tag}> has no '{name}' attribute")
    return value


class HibernateSchemaMapper(SchemaMapper):
    """Schema mapper that reshapes the relational schema following a Hibernate descriptor"""

    def __init__(self, *args, xml_path: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.xml_path = xml_path

    def build_source_database_schema(self) -> DataBaseSchema:
        """
        Introspect the database, then apply the inheritance found in the descriptor

        The mapper keeps its previous schema when the descriptor is malformed.
        """
        if not self.xml_path:
            raise DescriptorFormatError("No Hibernate descriptor given")
        previous_schema = self.database_schema
        schema = super().build_source_database_schema()
        try:
            self.detect_inheritance(self._parse_descriptor())
        except DescriptorFormatError:
            self.database_schema = previous_schema
            raise
        return schema

    def _parse_descriptor(self) -> ET.Element:
        try:
            return ET.parse(self.xml_path).getroot()
        except (ET.ParseError, OSError) as e:
            raise DescriptorFormatError(f"Unable to read Hibernate descriptor {self.xml_path}: {e}") from e

    def detect_inheritance(self, root: ET.Element) -> None:
        """
        Rewrite the relational schema following the class elements of a descriptor

        Args:
            root: Root element of the descriptor (usually hibernate-mapping)

        Raises:
            DescriptorFormatError: if a required attribute is missing
        """
        logger.info("Detecting inheritance from Hibernate descriptor")
        class_elements = [root] if root.tag == "class" else root.iter("class")
        for class_element in class_elements:
            table_name = _required_attribute(class_element, "table")
            entity = self.database_schema.get_entity_by_name_ignore_case(table_name)
            if entity is None:
                self._warn(f"Table {table_name} declared in the Hibernate descriptor is not in the schema")
                continue
            self._detect_hierarchy(entity, class_element)

        self.database_schema.sort_entities()

    def _detect_hierarchy(self, root_entity: Entity, class_element: ET.Element) -> None:
        bag: Optional[HierarchicalBag] = None
        worklist: List[Tuple[Entity, ET.Element]] = [(root_entity, class_element)]
        while worklist:
            parent_entity, element = worklist.pop()
            descriptor = classify(parent_entity, element)
            if descriptor is None:
                continue
            if bag is None:
                bag = HierarchicalBag(descriptor.pattern)
                bag.add_entity(root_entity)
                self.database_schema.hierarchical_bags.append(bag)

            if descriptor.pattern is InheritancePattern.TABLE_PER_HIERARCHY:
                children = self._apply_table_per_hierarchy(bag, descriptor)
            else:
                children = self._apply_table_per_type(bag, descriptor)
            worklist.extend(reversed(children))

    def _apply_table_per_hierarchy(
        self,
        bag: HierarchicalBag,
        descriptor: InheritanceDescriptor
    ) -> List[Tuple[Entity, ET.Element]]:
        parent_entity = descriptor.parent_entity
        element = descriptor.element

        discriminator = element.find("discriminator")
        if discriminator is not None and discriminator.get("column"):
            bag.discriminator_column = discriminator.get("column")
            parent_entity.remove_attribute_by_name_ignore_case(bag.discriminator_column)
        if element.get("discriminator-value"):
            bag.entity_name2discriminator_value[parent_entity.name] = element.get("discriminator-value")

        children = []
        for subclass in descriptor.children:
            child = Entity(
                _required_attribute(subclass, "name"),
                parent_entity.schema_name,
                parent_entity.data_source
            )
            child.is_split_entity = True
            child.primary_key = parent_entity.primary_key

            for position, property_element in enumerate(subclass.findall("property"), start=1):
                column = property_element.get("column") or _required_attribute(property_element, "name")
                attribute = self._claim_attribute(parent_entity, column)
                child.add_attribute(Attribute(
                    attribute.name,
                    position,
                    attribute.data_type,
                    is_nullable=attribute.is_nullable
                ))
            child.renumber_attributes()

            child.parent_entity = parent_entity
            child.inheritance_level = parent_entity.inheritance_level + 1
            child.schema_position = len(self.database_schema.entities) + 1
            self.database_schema.entities.append(child)
            bag.add_entity(child)
            if subclass.get("discriminator-value"):
                bag.entity_name2discriminator_value[child.name] = subclass.get("discriminator-value")
            children.append((child, subclass))
        return children

    def _claim_attribute(self, parent_entity: Entity, column: str) -> Attribute:
        """Remove a column from the closest ancestor holding it"""
        current = parent_entity
        while current is not None:
            attribute = current.remove_attribute_by_name_ignore_case(column)
            if attribute is not None:
                return attribute
            current = current.parent_entity
        raise DescriptorFormatError(f"Column {column} not found in {parent_entity.name} or its ancestors")

    def _apply_table_per_type(
        self,
        bag: HierarchicalBag,
        descriptor: InheritanceDescriptor
    ) -> List[Tuple[Entity, ET.Element]]:
        parent_entity = descriptor.parent_entity
        children = []
        for child_element in descriptor.children:
            table_element = child_element.find("join") if child_element.tag == "subclass" else child_element
            table_name = _required_attribute(table_element, "table")
            child = self.database_schema.get_entity_by_name_ignore_case(table_name)
            if child is None:
                self._warn(f"Table {table_name} declared in the Hibernate descriptor is not in the schema")
                continue
            if self._is_ancestor_or_self(child, parent_entity):
                raise DescriptorFormatError(f"Table {table_name} cannot inherit from itself")

            child.parent_entity = parent_entity
            child.inheritance_level = parent_entity.inheritance_level + 1
            child.attributes = [a for a in child.attributes if a not in child.primary_key]
            child.renumber_attributes()
            bag.add_entity(child)

            if descriptor.pattern is InheritancePattern.TABLE_PER_CONCRETE_TYPE:
                parent_attributes = parent_entity.all_attributes
                for attribute in list(child.attributes):
                    if attribute in parent_attributes:
                        child.attributes.remove(attribute)
                        child.add_inherited_attribute(attribute)
                child.renumber_attributes()

            children.append((child, child_element))
        return children

    @staticmethod
    def _is_ancestor_or_self(entity: Entity, candidate_descendant: Entity) -> bool:
        current = candidate_descendant
        while current is not None:
            if current is entity:
                return True
            current = current.parent_entity
        return False
