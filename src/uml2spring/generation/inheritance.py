"""Inheritance resolution: parent pointers and primary keys along the chain."""

from typing import Dict, List, NamedTuple, Optional, Set
from uml2spring.config.logging import get_logger
from uml2spring.generation.naming import camel_case, java_type
from uml2spring.ir.diagnostics import DiagnosticsCollector
from uml2spring.ir.diagram import Attribute, ClassNode, DiagramIR

logger = get_logger(__name__)

INHERITANCE = "inheritance"

# Synthesized key for classes with no primary key anywhere in their chain
DEFAULT_PK_NAME = "id"
DEFAULT_PK_TYPE = "Long"


class PrimaryKey(NamedTuple):
    """Resolved primary key: attribute name and Java type."""

    name: str
    java_type: str
    synthesized: bool = False

    @property
    def field_name(self) -> str:
        return camel_case(self.name)


class InheritanceResolver:
    """
    Computes the parent-pointer map once from the inheritance edges.

    For an inheritance edge the end whose multiplicity is exactly "1" is the
    parent and the end whose multiplicity contains "*" is the child. The
    first qualifying edge for a child wins.
    """

    def __init__(self, ir: DiagramIR, diagnostics: Optional[DiagnosticsCollector] = None):
        self.ir = ir
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticsCollector()
        self._parent_ids: Dict[str, str] = {}
        self._parents: Set[str] = set()
        self._pk_cache: Dict[str, PrimaryKey] = {}
        self._build()

    def _build(self) -> None:
        for rel in self.ir.relationships:
            if rel.type != INHERITANCE:
                continue
            src_mult = rel.source_multiplicity
            tgt_mult = rel.target_multiplicity
            if src_mult == "1" and "*" in tgt_mult:
                parent_id, child_id = rel.source, rel.target
            elif tgt_mult == "1" and "*" in src_mult:
                parent_id, child_id = rel.target, rel.source
            else:
                self.diagnostics.classification(
                    f"inheritance edge {rel.id} has multiplicities "
                    f"'{src_mult}'/'{tgt_mult}'; expected '1' on the parent and '*' on the child, edge ignored",
                    class_id=rel.source,
                )
                continue

            if self.ir.class_by_id(parent_id) is None or self.ir.class_by_id(child_id) is None:
                self.diagnostics.classification(
                    f"inheritance edge {rel.id} references a missing class, edge ignored",
                    class_id=child_id,
                )
                continue
            if child_id in self._parent_ids:
                logger.debug(
                    f"Class {child_id} already has parent {self._parent_ids[child_id]}; "
                    f"ignoring inheritance edge {rel.id}"
                )
                continue
            if parent_id == child_id or self._would_cycle(child_id, parent_id):
                self.diagnostics.classification(
                    f"inheritance edge {rel.id} would create a cycle, edge ignored",
                    class_id=child_id,
                )
                continue
            self._parent_ids[child_id] = parent_id
            self._parents.add(parent_id)

        logger.debug(f"Resolved {len(self._parent_ids)} inheritance link(s)")

    def _would_cycle(self, child_id: str, parent_id: str) -> bool:
        current: Optional[str] = parent_id
        while current is not None:
            if current == child_id:
                return True
            current = self._parent_ids.get(current)
        return False

    def parent_of(self, cls: ClassNode) -> Optional[ClassNode]:
        """Nearest parent class, or None."""
        parent_id = self._parent_ids.get(cls.id)
        return self.ir.class_by_id(parent_id) if parent_id else None

    def is_parent(self, cls: ClassNode) -> bool:
        return cls.id in self._parents

    def is_child(self, cls: ClassNode) -> bool:
        return cls.id in self._parent_ids

    @property
    def child_ids(self) -> Set[str]:
        return set(self._parent_ids)

    def ancestors(self, cls: ClassNode) -> List[ClassNode]:
        """Ancestors from the nearest parent up to the root."""
        chain: List[ClassNode] = []
        parent = self.parent_of(cls)
        while parent is not None:
            chain.append(parent)
            parent = self.parent_of(parent)
        return chain

    def chain(self, cls: ClassNode) -> List[ClassNode]:
        """Root first, ending with cls itself."""
        return list(reversed(self.ancestors(cls))) + [cls]

    def related_by_inheritance(self, a: ClassNode, b: ClassNode) -> bool:
        """True when one class is an ancestor of the other."""
        return any(c.id == a.id for c in self.ancestors(b)) or any(c.id == b.id for c in self.ancestors(a))

    def parent_attribute_names(self, cls: ClassNode) -> Set[str]:
        """Names of the immediate parent's own attributes."""
        parent = self.parent_of(cls)
        return {a.name for a in parent.attributes} if parent else set()

    def primary_key(self, cls: ClassNode) -> PrimaryKey:
        """
        Resolve the primary key of a class.

        Uses the class's own primary key attribute, or walks one parent at a
        time to the nearest ancestor that declares one. A key that is also a
        foreign key with a referenced field takes the referenced field's name.
        Falls back to a synthesized ``id: Long``.
        """
        cached = self._pk_cache.get(cls.id)
        if cached is not None:
            return cached

        own = _own_pk(cls)
        if own is not None:
            name = own.referenced_field if own.is_foreign_key and own.referenced_field else own.name
            resolved = PrimaryKey(name, java_type(own.type))
        else:
            parent = self.parent_of(cls)
            if parent is not None:
                resolved = self.primary_key(parent)
            else:
                resolved = PrimaryKey(DEFAULT_PK_NAME, DEFAULT_PK_TYPE, synthesized=True)

        self._pk_cache[cls.id] = resolved
        return resolved

    def entity_key(self, cls: ClassNode) -> PrimaryKey:
        """
        Key field the generated entity actually exposes.

        A JOINED child declares no id field of its own and inherits the
        root's, so its own key attribute only names the join column.
        """
        return self.primary_key(self.chain(cls)[0])


def _own_pk(cls: ClassNode) -> Optional[Attribute]:
    pks = cls.primary_key_attributes
    return pks[0] if pks else None
