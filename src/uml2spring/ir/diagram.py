"""DiagramIR model: the normalized class diagram consumed by the generators."""

from functools import cached_property
from typing import Any, Dict, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ASSOCIATION_TABLE_STEREOTYPE = "association_table"

RELATIONSHIP_TYPES = (
    "association",
    "aggregation",
    "composition",
    "dependency",
    "inheritance",
    "implementation",
    "many-to-many-direct",
)


class IRModel(BaseModel):
    """Base for IR models: immutable, accepts camelCase or snake_case keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Attribute(IRModel):
    """An attribute of a class node."""

    name: str
    type: str = "String"
    sql_type: Optional[str] = None
    visibility: str = "private"
    is_static: bool = False
    is_primary_key: bool = False
    is_foreign_key: bool = False
    referenced_entity: Optional[str] = None
    referenced_field: Optional[str] = None
    referenced_type: Optional[str] = None
    is_relationship_attribute: bool = False
    default_value: Optional[Any] = None

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, value: Any) -> Any:
        return value or "String"

    @field_validator("visibility", mode="before")
    @classmethod
    def _default_visibility(cls, value: Any) -> Any:
        return value or "private"

    @field_validator(
        "is_static", "is_primary_key", "is_foreign_key", "is_relationship_attribute", mode="before"
    )
    @classmethod
    def _null_flag(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("referenced_entity", "referenced_field", "referenced_type", "sql_type", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return value

    @property
    def is_reference(self) -> bool:
        """True for a foreign key that names the entity it points to."""
        return self.is_foreign_key and bool(self.referenced_entity)


class ClassNode(IRModel):
    """A class element of the diagram."""

    id: str
    name: str
    attributes: Tuple[Attribute, ...] = ()
    methods: Tuple[str, ...] = ()
    stereotype: Optional[str] = None
    visibility: Optional[str] = None
    description: str = ""

    @field_validator("methods", mode="before")
    @classmethod
    def _stringify_methods(cls, value: Any) -> Any:
        if value is None:
            return ()
        return tuple(m if isinstance(m, str) else str(m) for m in value)

    @field_validator("description", mode="before")
    @classmethod
    def _default_description(cls, value: Any) -> Any:
        return value or ""

    @property
    def primary_key_attributes(self) -> Tuple[Attribute, ...]:
        return tuple(a for a in self.attributes if a.is_primary_key)

    @property
    def foreign_keys(self) -> Tuple[Attribute, ...]:
        return tuple(a for a in self.attributes if a.is_reference)

    def has_reference_to(self, class_name: str) -> bool:
        """Check whether any foreign key of this class references class_name."""
        return any(a.referenced_entity == class_name for a in self.foreign_keys)


class Relationship(IRModel):
    """A connection between two class nodes."""

    id: str
    source: str
    target: str
    type: str = "association"
    source_multiplicity: str = ""
    target_multiplicity: str = ""
    label: str = ""
    association_table: Optional[str] = None
    many_to_many_group: Optional[str] = None

    @field_validator("source_multiplicity", "target_multiplicity", "label", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        return str(value)

    @property
    def is_source_many(self) -> bool:
        return "*" in self.source_multiplicity

    @property
    def is_target_many(self) -> bool:
        return "*" in self.target_multiplicity

    def other_end(self, class_id: str) -> str:
        """Return the id at the opposite end from class_id."""
        return self.target if self.source == class_id else self.source


class AssociationTable(IRModel):
    """A class stereotyped as association_table, realized as a join entity."""

    id: str
    name: str
    table_name: str
    attributes: Tuple[Attribute, ...] = ()
    foreign_keys: Tuple[Attribute, ...] = ()
    additional_attributes: Tuple[Attribute, ...] = ()

    @property
    def referenced_entities(self) -> Tuple[str, ...]:
        return tuple(fk.referenced_entity for fk in self.foreign_keys)


class DiagramIR(BaseModel):
    """Complete intermediate representation of a class diagram."""

    model_config = ConfigDict(frozen=True)

    classes: Tuple[ClassNode, ...] = Field(default_factory=tuple)
    relationships: Tuple[Relationship, ...] = Field(default_factory=tuple)
    association_tables: Tuple[AssociationTable, ...] = Field(default_factory=tuple)

    @cached_property
    def classes_by_id(self) -> Dict[str, ClassNode]:
        return {c.id: c for c in self.classes}

    @cached_property
    def classes_by_name(self) -> Dict[str, ClassNode]:
        by_name: Dict[str, ClassNode] = {}
        for c in self.classes:
            # First declaration wins for duplicated names
            by_name.setdefault(c.name, c)
        return by_name

    def class_by_id(self, class_id: str) -> Optional[ClassNode]:
        return self.classes_by_id.get(class_id)

    def class_by_name(self, name: Optional[str]) -> Optional[ClassNode]:
        if not name:
            return None
        return self.classes_by_name.get(name)
