"""Method-surface prediction for every generated artifact.

Entities, DTOs, mappers, repositories, services and controllers are emitted
independently. Before any of them runs, the builder predicts the accessor
and method names each artifact will expose, using the same naming rules the
generators use. Generators consult the prediction before emitting a call
into another artifact and skip the call when it is absent.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping, Optional, Set, Tuple
from uml2spring.config.logging import get_logger
from uml2spring.generation.classifier import ManyToManyLink, OneToManyLink, RelationshipClassifier
from uml2spring.generation.inheritance import InheritanceResolver, PrimaryKey
from uml2spring.generation.members import MemberResolver
from uml2spring.generation.naming import Naming
from uml2spring.ir.diagnostics import DiagnosticsCollector
from uml2spring.ir.diagram import ClassNode, DiagramIR

logger = get_logger(__name__)

Accessors = Tuple[str, str]

CRUD_REPOSITORY_METHODS = ("findAll", "findById", "save", "deleteById", "existsById", "count")
CRUD_SERVICE_METHODS = (
    "findAll",
    "findById",
    "create",
    "update",
    "partialUpdate",
    "delete",
    "existsById",
    "count",
)


@dataclass(frozen=True)
class ClassMetadata:
    """Predicted method surface of the artifacts generated for one class."""

    class_id: str
    class_name: str
    primary_key: PrimaryKey
    entity_own: Mapping[str, Accessors]
    entity_all: Mapping[str, Accessors]
    dto_own: Mapping[str, Accessors]
    dto_all: Mapping[str, Accessors]
    one_to_many: Tuple[OneToManyLink, ...] = ()
    many_to_many: Tuple[ManyToManyLink, ...] = ()
    repository_methods: frozenset = field(default_factory=frozenset)
    service_methods: frozenset = field(default_factory=frozenset)

    def has_entity_getter(self, field_name: str, getter: str) -> bool:
        accessors = self.entity_all.get(field_name)
        return accessors is not None and accessors[0] == getter

    def has_entity_setter(self, field_name: str, setter: str) -> bool:
        accessors = self.entity_all.get(field_name)
        return accessors is not None and accessors[1] == setter

    def has_dto_getter(self, field_name: str, getter: str) -> bool:
        accessors = self.dto_all.get(field_name)
        return accessors is not None and accessors[0] == getter

    def has_dto_setter(self, field_name: str, setter: str) -> bool:
        accessors = self.dto_all.get(field_name)
        return accessors is not None and accessors[1] == setter


class MetadataBuilder:
    """Builds the read-only prediction map, keyed by class id."""

    def __init__(
        self,
        ir: DiagramIR,
        resolver: InheritanceResolver,
        classifier: RelationshipClassifier,
        members: MemberResolver,
        naming: Naming,
        diagnostics: Optional[DiagnosticsCollector] = None,
    ):
        self.ir = ir
        self.resolver = resolver
        self.classifier = classifier
        self.members = members
        self.naming = naming
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticsCollector()

    def build(self) -> Dict[str, ClassMetadata]:
        """
        Predict the method surface of every class.

        Returns:
            Mapping from class id to its ClassMetadata
        """
        own_entity: Dict[str, Dict[str, Accessors]] = {}
        own_dto: Dict[str, Dict[str, Accessors]] = {}
        collections: Dict[str, Tuple[Tuple[OneToManyLink, ...], Tuple[ManyToManyLink, ...]]] = {}

        for cls in self.ir.classes:
            predicted = self._predict_entity(cls)
            one_to_many, many_to_many = self._collections(cls, predicted)
            for link in one_to_many + many_to_many:
                predicted[link.field_name] = self.naming.accessors(link.field_name)
            collections[cls.id] = (one_to_many, many_to_many)
            own_entity[cls.id] = predicted
            own_dto[cls.id] = self._predict_dto(cls)

        self._drop_orphan_inverse_ends(collections, own_entity)

        partial: Dict[str, ClassMetadata] = {}
        for cls in self.ir.classes:
            one_to_many, many_to_many = collections[cls.id]
            partial[cls.id] = ClassMetadata(
                class_id=cls.id,
                class_name=cls.name,
                primary_key=self.resolver.entity_key(cls),
                entity_own=own_entity[cls.id],
                entity_all=self._merge_chain(cls, own_entity),
                dto_own=own_dto[cls.id],
                dto_all=self._merge_chain(cls, own_dto),
                one_to_many=one_to_many,
                many_to_many=many_to_many,
            )

        result: Dict[str, ClassMetadata] = {}
        for cls in self.ir.classes:
            repository = self._predict_repository(cls, partial)
            service = self._predict_service(cls, repository)
            meta = partial[cls.id]
            result[cls.id] = replace(
                meta,
                repository_methods=frozenset(repository),
                service_methods=frozenset(service),
            )
            logger.debug(
                f"Predicted {cls.name}: {len(meta.entity_all)} entity fields, "
                f"{len(meta.dto_all)} DTO fields, {len(repository)} repository methods"
            )

        logger.info(f"Built method-surface predictions for {len(result)} classes")
        return result

    def _collections(
        self, cls: ClassNode, predicted: Dict[str, Accessors]
    ) -> Tuple[Tuple[OneToManyLink, ...], Tuple[ManyToManyLink, ...]]:
        """
        Keep the collection links the entity can actually declare.

        A one-to-many link needs the related entity to declare its mappedBy
        field; no collection may reuse the name of a column or reference field,
        including the fields the class inherits.
        """
        inherited = self._inherited_fields(cls)
        one_to_many: List[OneToManyLink] = []
        for link in self.classifier.one_to_many_links(cls):
            related_fields = {r.field_name for r in self.members.references(link.related)}
            if link.mapped_by not in related_fields:
                self.diagnostics.consistency(
                    f"{link.related.name} declares no '{link.mapped_by}' field; "
                    f"collection {cls.name}.{link.field_name} skipped",
                    class_id=cls.id,
                    field_name=link.field_name,
                )
                continue
            if link.field_name in predicted or link.field_name in inherited:
                self._report_collision(cls, link.field_name)
                continue
            one_to_many.append(link)

        taken = set(predicted) | inherited | {link.field_name for link in one_to_many}
        many_to_many: List[ManyToManyLink] = []
        for link in self.classifier.many_to_many_links(cls):
            if link.field_name in taken:
                self._report_collision(cls, link.field_name)
                continue
            many_to_many.append(link)
        return tuple(one_to_many), tuple(many_to_many)

    def _inherited_fields(self, cls: ClassNode) -> Set[str]:
        """Field names the entity inherits from its ancestors, collections included."""
        names: Set[str] = set()
        for ancestor in self.resolver.ancestors(cls):
            names.update(self._predict_entity(ancestor))
            names.update(link.field_name for link in self.classifier.one_to_many_links(ancestor))
            names.update(link.field_name for link in self.classifier.many_to_many_links(ancestor))
        return names

    def _drop_orphan_inverse_ends(
        self,
        collections: Dict[str, Tuple[Tuple[OneToManyLink, ...], Tuple[ManyToManyLink, ...]]],
        own_entity: Dict[str, Dict[str, Accessors]],
    ) -> None:
        """An inverse many-to-many end needs the owning end it is mapped by."""
        for class_id, (one_to_many, many_to_many) in list(collections.items()):
            kept: List[ManyToManyLink] = []
            for link in many_to_many:
                if not link.is_owner:
                    owner_links = collections[link.related.id][1]
                    if not any(o.is_owner and o.field_name == link.mapped_by for o in owner_links):
                        self.diagnostics.consistency(
                            f"{link.related.name} declares no owning collection '{link.mapped_by}'; "
                            f"collection {link.owner.name}.{link.field_name} skipped",
                            class_id=class_id,
                            field_name=link.field_name,
                        )
                        own_entity[class_id].pop(link.field_name, None)
                        continue
                kept.append(link)
            collections[class_id] = (one_to_many, tuple(kept))

    def _report_collision(self, cls: ClassNode, field_name: str) -> None:
        self.diagnostics.consistency(
            f"collection {cls.name}.{field_name} clashes with an existing field and was skipped",
            class_id=cls.id,
            field_name=field_name,
        )

    def _predict_entity(self, cls: ClassNode) -> Dict[str, Accessors]:
        predicted: Dict[str, Accessors] = {}
        for member in self.members.scalars(cls):
            predicted[member.field_name] = self.naming.accessors(member.field_name)
        for ref in self.members.references(cls):
            predicted[ref.field_name] = self.naming.accessors(ref.field_name)
        return predicted

    def _predict_dto(self, cls: ClassNode) -> Dict[str, Accessors]:
        predicted: Dict[str, Accessors] = {}
        for member in self.members.scalars(cls):
            predicted[member.field_name] = self.naming.accessors(member.field_name)
        for ref in self.members.references(cls):
            if ref.dto_field_name:
                predicted[ref.dto_field_name] = self.naming.accessors(ref.dto_field_name)
        return predicted

    def _merge_chain(self, cls: ClassNode, own: Dict[str, Dict[str, Accessors]]) -> Dict[str, Accessors]:
        merged: Dict[str, Accessors] = {}
        for member_cls in self.resolver.chain(cls):
            merged.update(own[member_cls.id])
        return merged

    def _predict_repository(self, cls: ClassNode, partial: Dict[str, ClassMetadata]) -> Set[str]:
        methods: Set[str] = set(CRUD_REPOSITORY_METHODS)
        meta = partial[cls.id]
        for member in self.members.derived_query_members(cls):
            if member.field_name not in meta.entity_all:
                continue
            cap = self.naming.capitalize(member.field_name)
            methods.update({f"findBy{cap}", f"existsBy{cap}", f"countBy{cap}"})
        for ref in self.members.references(cls):
            cap = self.naming.capitalize(ref.field_name)
            methods.update({f"findBy{cap}", f"existsBy{cap}", f"countBy{cap}"})
            target_meta = partial.get(ref.target.id)
            if ref.id_query and target_meta is not None and ref.target_pk.field_name in target_meta.entity_all:
                methods.add(ref.id_query)
        return methods

    def _predict_service(self, cls: ClassNode, repository: Set[str]) -> Set[str]:
        methods: Set[str] = set(CRUD_SERVICE_METHODS)
        for member in self.members.derived_query_members(cls):
            cap = self.naming.capitalize(member.field_name)
            for name in (f"findBy{cap}", f"existsBy{cap}", f"countBy{cap}"):
                if name in repository:
                    methods.add(name)
        for ref in self.members.references(cls):
            cap = self.naming.capitalize(ref.field_name)
            for name in (f"findBy{cap}", ref.id_query, f"countBy{cap}"):
                if name and name in repository:
                    methods.add(name)
        return methods

