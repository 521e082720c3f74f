"""Which attributes of a class become fields, shared by every generator."""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Set, Tuple
from uml2spring.generation.inheritance import DEFAULT_PK_NAME, DEFAULT_PK_TYPE, InheritanceResolver, PrimaryKey
from uml2spring.generation.naming import Naming, capitalize
from uml2spring.ir.diagnostics import DiagnosticsCollector
from uml2spring.ir.diagram import Attribute, ClassNode, DiagramIR


@dataclass(frozen=True)
class ScalarMember:
    """A column field of an entity (and the matching DTO field)."""

    attribute: Attribute
    field_name: str
    java_type: str
    synthesized: bool = False

    @property
    def is_primary_key(self) -> bool:
        return self.attribute.is_primary_key


@dataclass(frozen=True)
class ReferenceMember:
    """
    A foreign key realized as a many-to-one field and a DTO id field.

    ``dto_field_name`` is None when the DTO id field would clash with another
    DTO field; ``id_field`` is the property path of the ``findBy<Fk><Key>``
    query, None when that query would clash with a column's own query.
    """

    attribute: Attribute
    target: ClassNode
    field_name: str
    dto_field_name: Optional[str]
    target_pk: PrimaryKey
    id_field: Optional[str] = None

    @property
    def id_query(self) -> Optional[str]:
        return f"findBy{capitalize(self.id_field)}" if self.id_field else None


class MemberResolver:
    """
    Splits each class's attributes into scalar and reference members.

    A child class drops its own primary key and any attribute named like one
    of the immediate parent's own attributes; a foreign key to the class's
    own parent is expressed by the inheritance join and is dropped too. A
    root class without a primary key gets a synthesized ``id: Long``.
    """

    def __init__(
        self,
        ir: DiagramIR,
        resolver: InheritanceResolver,
        naming: Naming,
        diagnostics: Optional[DiagnosticsCollector] = None,
        max_derived_queries: int = 3,
    ):
        self.ir = ir
        self.resolver = resolver
        self.naming = naming
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticsCollector()
        self.max_derived_queries = max_derived_queries
        self._cache: Dict[str, Tuple[Tuple[ScalarMember, ...], Tuple[ReferenceMember, ...]]] = {}

    def scalars(self, cls: ClassNode) -> Tuple[ScalarMember, ...]:
        return self._resolve(cls)[0]

    def references(self, cls: ClassNode) -> Tuple[ReferenceMember, ...]:
        return self._resolve(cls)[1]

    def queryable_scalars(self, cls: ClassNode) -> Tuple[ScalarMember, ...]:
        """Own non-key scalars that derived queries may filter on."""
        return tuple(m for m in self.scalars(cls) if not m.is_primary_key)

    def derived_query_members(self, cls: ClassNode) -> Tuple[ScalarMember, ...]:
        """Scalars that get findBy/existsBy/countBy methods."""
        return self.queryable_scalars(cls)[: self.max_derived_queries]

    def _resolve(self, cls: ClassNode) -> Tuple[Tuple[ScalarMember, ...], Tuple[ReferenceMember, ...]]:
        cached = self._cache.get(cls.id)
        if cached is not None:
            return cached

        parent = self.resolver.parent_of(cls)
        parent_names: Set[str] = self.resolver.parent_attribute_names(cls)
        scalars: List[ScalarMember] = []
        references: List[ReferenceMember] = []
        used: Set[str] = set()

        if parent is None and not cls.primary_key_attributes:
            synthesized = Attribute(name=DEFAULT_PK_NAME, type=DEFAULT_PK_TYPE, is_primary_key=True)
            scalars.append(ScalarMember(synthesized, DEFAULT_PK_NAME, DEFAULT_PK_TYPE, synthesized=True))
            used.add(DEFAULT_PK_NAME)

        for attr in cls.attributes:
            if attr.is_relationship_attribute:
                continue
            if parent is not None:
                if attr.is_primary_key or attr.name in parent_names:
                    continue
                if attr.is_reference and attr.referenced_entity == parent.name:
                    continue

            # Key columns stay scalar even when they also reference another class
            target = None
            if attr.is_reference and not attr.is_primary_key:
                target = self.ir.class_by_name(attr.referenced_entity)
            if attr.is_primary_key:
                field_name = self.resolver.primary_key(cls).field_name
            else:
                field_name = self.naming.field_name(attr.name)
            if field_name in used:
                self.diagnostics.consistency(
                    f"{cls.name}.{attr.name} maps to field '{field_name}', which is already declared; "
                    f"attribute skipped",
                    class_id=cls.id,
                    field_name=attr.name,
                )
                continue
            used.add(field_name)

            if target is not None:
                references.append(
                    ReferenceMember(
                        attribute=attr,
                        target=target,
                        field_name=self.naming.fk_field(attr.name),
                        dto_field_name=self.naming.dto_fk_field(attr.name),
                        target_pk=self.resolver.entity_key(target),
                    )
                )
            else:
                scalars.append(ScalarMember(attr, field_name, self.naming.java_type(attr.type)))

        dto_taken = {m.field_name for m in scalars} | self._inherited_dto_fields(cls)
        references = [self._derived_names(cls, ref, dto_taken, used) for ref in references]

        resolved = (tuple(scalars), tuple(references))
        self._cache[cls.id] = resolved
        return resolved

    def _inherited_dto_fields(self, cls: ClassNode) -> Set[str]:
        names: Set[str] = set()
        for ancestor in self.resolver.ancestors(cls):
            names.update(m.field_name for m in self.scalars(ancestor))
            names.update(r.dto_field_name for r in self.references(ancestor) if r.dto_field_name)
        return names

    def _derived_names(
        self, cls: ClassNode, ref: ReferenceMember, dto_taken: Set[str], entity_fields: Set[str]
    ) -> ReferenceMember:
        """Name the DTO id field and the id query of a reference, dropping whichever would clash."""
        dto_field = ref.dto_field_name
        if dto_field in dto_taken:
            self.diagnostics.consistency(
                f"DTO id field '{dto_field}' of {cls.name}.{ref.field_name} clashes with an existing "
                f"DTO field; id field and its mapping skipped",
                class_id=cls.id,
                field_name=ref.attribute.name,
            )
            dto_field = None
        else:
            dto_taken.add(dto_field)

        id_field = f"{ref.field_name}{capitalize(ref.target_pk.field_name)}"
        if id_field in entity_fields:
            self.diagnostics.consistency(
                f"findBy{capitalize(id_field)} for {cls.name}.{ref.field_name} clashes with the query "
                f"on field '{id_field}'; reference id query skipped",
                class_id=cls.id,
                field_name=ref.attribute.name,
            )
            id_field = None
        return replace(ref, dto_field_name=dto_field, id_field=id_field)

    def chain_scalars(self, cls: ClassNode) -> Tuple[ScalarMember, ...]:
        """Scalars declared along the inheritance chain, root first."""
        result: List[ScalarMember] = []
        seen: Set[str] = set()
        for member_cls in self.resolver.chain(cls):
            for member in self.scalars(member_cls):
                if member.field_name not in seen:
                    seen.add(member.field_name)
                    result.append(member)
        return tuple(result)

    def chain_references(self, cls: ClassNode) -> Tuple[ReferenceMember, ...]:
        """References declared along the inheritance chain, root first."""
        result: List[ReferenceMember] = []
        seen: Set[str] = set()
        for member_cls in self.resolver.chain(cls):
            for member in self.references(member_cls):
                if member.field_name not in seen:
                    seen.add(member.field_name)
                    result.append(member)
        return tuple(result)
