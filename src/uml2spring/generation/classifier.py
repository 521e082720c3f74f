"""Relationship classification and derived collection links."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple
from uml2spring.config.logging import get_logger
from uml2spring.generation.inheritance import InheritanceResolver
from uml2spring.generation.naming import Naming
from uml2spring.ir.diagnostics import DiagnosticsCollector
from uml2spring.ir.diagram import (
    RELATIONSHIP_TYPES,
    AssociationTable,
    ClassNode,
    DiagramIR,
    Relationship,
)

logger = get_logger(__name__)


class RelationKind(str, Enum):
    """Persistence relation category, read from the source end."""

    ONE_TO_ONE = "one-to-one"
    MANY_TO_ONE = "many-to-one"
    ONE_TO_MANY = "one-to-many"
    MANY_TO_MANY = "many-to-many"
    INHERITANCE = "inheritance"
    DEPENDENCY = "dependency"


@dataclass(frozen=True)
class ClassifiedRelationship:
    """A relationship with its effective category."""

    relationship: Relationship
    kind: RelationKind
    declared_type: str
    # The "many" end for one-to-many / many-to-one, else None
    many_side_id: Optional[str] = None
    # Join entity realizing a many-to-many edge, if any
    join_table: Optional[AssociationTable] = None

    @property
    def is_transparent_many_to_many(self) -> bool:
        return self.kind is RelationKind.MANY_TO_MANY and self.join_table is None


@dataclass(frozen=True)
class OneToManyLink:
    """Collection on ``owner`` of the ``related`` instances whose FK points at it."""

    owner: ClassNode
    related: ClassNode
    field_name: str
    mapped_by: str
    fk_name: str


@dataclass(frozen=True)
class ManyToManyLink:
    """One end of a transparent many-to-many collection pair."""

    owner: ClassNode
    related: ClassNode
    field_name: str
    is_owner: bool
    mapped_by: Optional[str]
    join_table_name: Optional[str]
    join_column: Optional[str]
    inverse_join_column: Optional[str]
    relationship_id: str


class RelationshipClassifier:
    """
    Determines the relation category of each edge.

    Decision order: inheritance and implementation are terminal; dependency
    edges never carry fields; many-to-many-direct with "*" on both ends and
    no foreign key either way is many-to-many; otherwise a "*" on one end
    orients a one-to-many / many-to-one; otherwise one-to-one.
    """

    def __init__(
        self,
        ir: DiagramIR,
        resolver: InheritanceResolver,
        naming: Naming,
        diagnostics: Optional[DiagnosticsCollector] = None,
    ):
        self.ir = ir
        self.resolver = resolver
        self.naming = naming
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticsCollector()
        self._classified: Dict[str, ClassifiedRelationship] = {}
        self._one_to_many: Dict[str, Tuple[OneToManyLink, ...]] = {}
        self._many_to_many: Dict[str, Tuple[ManyToManyLink, ...]] = {}

        for rel in ir.relationships:
            self._classified[rel.id] = self._classify(rel)
        for cls in ir.classes:
            self._one_to_many[cls.id] = tuple(self._derive_one_to_many(cls))
            self._many_to_many[cls.id] = tuple(self._derive_many_to_many(cls))

        counts: Dict[str, int] = {}
        for item in self._classified.values():
            counts[item.kind.value] = counts.get(item.kind.value, 0) + 1
        logger.debug(f"Relationship categories: {counts}")

    # Classification

    def classify(self, rel: Relationship) -> ClassifiedRelationship:
        return self._classified[rel.id]

    @property
    def classified(self) -> List[ClassifiedRelationship]:
        return [self._classified[r.id] for r in self.ir.relationships]

    def _classify(self, rel: Relationship) -> ClassifiedRelationship:
        declared = rel.type
        if declared not in RELATIONSHIP_TYPES:
            self.diagnostics.classification(
                f"relationship {rel.id} has unknown type '{declared}', treated as association",
                class_id=rel.source,
            )
            declared = "association"

        if declared in ("inheritance", "implementation"):
            return ClassifiedRelationship(rel, RelationKind.INHERITANCE, declared)
        if declared == "dependency":
            return ClassifiedRelationship(rel, RelationKind.DEPENDENCY, declared)

        source = self.ir.class_by_id(rel.source)
        target = self.ir.class_by_id(rel.target)
        source_fk = bool(source and target and source.has_reference_to(target.name))
        target_fk = bool(source and target and target.has_reference_to(source.name))

        if declared == "many-to-many-direct" and rel.is_source_many and rel.is_target_many:
            if not source_fk and not target_fk:
                join_table = self._find_join_table(rel, source, target)
                return ClassifiedRelationship(rel, RelationKind.MANY_TO_MANY, declared, join_table=join_table)

        if rel.is_source_many and rel.is_target_many:
            if source_fk:
                return ClassifiedRelationship(rel, RelationKind.MANY_TO_ONE, declared, many_side_id=rel.source)
            if target_fk:
                return ClassifiedRelationship(rel, RelationKind.ONE_TO_MANY, declared, many_side_id=rel.target)
            self.diagnostics.classification(
                f"relationship {rel.id} is '*' on both ends with no foreign key; "
                f"treated as many-to-one from the source",
                class_id=rel.source,
            )
            return ClassifiedRelationship(rel, RelationKind.MANY_TO_ONE, declared, many_side_id=rel.source)
        if rel.is_target_many:
            return ClassifiedRelationship(rel, RelationKind.ONE_TO_MANY, declared, many_side_id=rel.target)
        if rel.is_source_many:
            return ClassifiedRelationship(rel, RelationKind.MANY_TO_ONE, declared, many_side_id=rel.source)
        return ClassifiedRelationship(rel, RelationKind.ONE_TO_ONE, declared)

    def _find_join_table(
        self, rel: Relationship, source: Optional[ClassNode], target: Optional[ClassNode]
    ) -> Optional[AssociationTable]:
        if rel.association_table:
            for table in self.ir.association_tables:
                if rel.association_table in (table.id, table.name):
                    return table
        if source is None or target is None:
            return None
        pair = {source.name, target.name}
        for table in self.ir.association_tables:
            if set(table.referenced_entities) == pair:
                return table
        return None

    # Collection links

    def one_to_many_links(self, cls: ClassNode) -> Tuple[OneToManyLink, ...]:
        return self._one_to_many.get(cls.id, ())

    def many_to_many_links(self, cls: ClassNode) -> Tuple[ManyToManyLink, ...]:
        return self._many_to_many.get(cls.id, ())

    def _derive_one_to_many(self, cls: ClassNode) -> List[OneToManyLink]:
        links: List[OneToManyLink] = []
        seen_fields = set()
        for other in self.ir.classes:
            if other.id == cls.id:
                continue
            fk = next((a for a in other.foreign_keys if a.referenced_entity == cls.name), None)
            if fk is None:
                continue
            if self.resolver.related_by_inheritance(cls, other):
                continue
            field_name = self.naming.collection_field(other.name)
            if field_name in seen_fields:
                continue
            seen_fields.add(field_name)
            links.append(
                OneToManyLink(
                    owner=cls,
                    related=other,
                    field_name=field_name,
                    mapped_by=self.naming.fk_field(fk.name),
                    fk_name=fk.name,
                )
            )
        return links

    def _derive_many_to_many(self, cls: ClassNode) -> List[ManyToManyLink]:
        links: List[ManyToManyLink] = []
        seen_fields = set()
        for item in self.classified:
            if not item.is_transparent_many_to_many:
                continue
            rel = item.relationship
            if cls.id not in (rel.source, rel.target):
                continue
            if rel.source == rel.target:
                self.diagnostics.classification(
                    f"self-referencing many-to-many {rel.id} is not supported, edge ignored",
                    class_id=cls.id,
                )
                continue
            other = self.ir.class_by_id(rel.other_end(cls.id))
            if other is None:
                continue
            field_name = self.naming.collection_field(other.name)
            if field_name in seen_fields:
                continue
            seen_fields.add(field_name)

            is_owner = rel.source == cls.id
            if is_owner:
                links.append(
                    ManyToManyLink(
                        owner=cls,
                        related=other,
                        field_name=field_name,
                        is_owner=True,
                        mapped_by=None,
                        join_table_name=self._join_table_name(rel, cls, other),
                        join_column=f"{self.naming.snake_case(cls.name)}_id",
                        inverse_join_column=f"{self.naming.snake_case(other.name)}_id",
                        relationship_id=rel.id,
                    )
                )
            else:
                links.append(
                    ManyToManyLink(
                        owner=cls,
                        related=other,
                        field_name=field_name,
                        is_owner=False,
                        mapped_by=self.naming.collection_field(cls.name),
                        join_table_name=None,
                        join_column=None,
                        inverse_join_column=None,
                        relationship_id=rel.id,
                    )
                )
        return links

    def _join_table_name(self, rel: Relationship, owner: ClassNode, other: ClassNode) -> str:
        default = f"{self.naming.snake_case(owner.name)}_{self.naming.snake_case(other.name)}"
        if rel.association_table:
            self.diagnostics.classification(
                f"relationship {rel.id} names association table '{rel.association_table}' "
                f"which does not exist; using join table '{default}'",
                class_id=owner.id,
            )
        return default
