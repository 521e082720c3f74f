"""Shared, read-only state handed to every generator for one run."""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from uml2spring.config.logging import get_logger
from uml2spring.generation.classifier import RelationshipClassifier
from uml2spring.generation.inheritance import InheritanceResolver, PrimaryKey
from uml2spring.generation.members import MemberResolver, ScalarMember
from uml2spring.generation.metadata import ClassMetadata, MetadataBuilder
from uml2spring.generation.naming import Naming
from uml2spring.ir.diagnostics import DiagnosticsCollector
from uml2spring.ir.diagram import ClassNode, DiagramIR

logger = get_logger(__name__)


@dataclass
class GenerationContext:
    """Everything derived from the IR before the first artifact is emitted."""

    ir: DiagramIR
    naming: Naming
    diagnostics: DiagnosticsCollector
    resolver: InheritanceResolver
    classifier: RelationshipClassifier
    members: MemberResolver
    metadata: Dict[str, ClassMetadata]
    base_package: str

    @classmethod
    def build(
        cls,
        ir: DiagramIR,
        base_package: str,
        max_derived_queries: int = 3,
        diagnostics: Optional[DiagnosticsCollector] = None,
    ) -> "GenerationContext":
        """
        Run the analysis stages: inheritance, classification, prediction.

        Args:
            ir: Parsed diagram
            base_package: Java package the artifacts are generated under
            max_derived_queries: Scalar attributes per class that get
                findBy/existsBy/countBy methods
            diagnostics: Collector shared with the rest of the run

        Returns:
            A fully populated GenerationContext
        """
        diagnostics = diagnostics if diagnostics is not None else DiagnosticsCollector()
        naming = Naming()

        logger.debug("Resolving inheritance")
        resolver = InheritanceResolver(ir, diagnostics)
        logger.debug("Classifying relationships")
        classifier = RelationshipClassifier(ir, resolver, naming, diagnostics)
        members = MemberResolver(ir, resolver, naming, diagnostics, max_derived_queries)
        logger.debug("Predicting method surfaces")
        metadata = MetadataBuilder(
            ir,
            resolver,
            classifier,
            members,
            naming,
            diagnostics,
        ).build()

        return cls(
            ir=ir,
            naming=naming,
            diagnostics=diagnostics,
            resolver=resolver,
            classifier=classifier,
            members=members,
            metadata=metadata,
            base_package=base_package,
        )

    def meta(self, cls: ClassNode) -> ClassMetadata:
        return self.metadata[cls.id]

    def package(self, group: str) -> str:
        return f"{self.base_package}.{group}"

    def import_of(self, group: str, name: str) -> str:
        return f"import {self.package(group)}.{name};"

    def primary_key(self, cls: ClassNode) -> PrimaryKey:
        """Key field the class's entity exposes, inherited for JOINED children."""
        return self.resolver.entity_key(cls)

    def derived_query_members(self, cls: ClassNode) -> Tuple[ScalarMember, ...]:
        """Scalars that get findBy/existsBy/countBy methods."""
        return self.members.derived_query_members(cls)

    def pk_accessors(self, cls: ClassNode) -> Optional[Tuple[str, str]]:
        """Getter/setter of the class's primary key, if its entity declares them."""
        pk = self.primary_key(cls)
        return self.meta(cls).entity_all.get(pk.field_name)
