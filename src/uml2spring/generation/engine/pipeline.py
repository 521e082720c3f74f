"""Main pipeline for diagram → Spring Boot backend generation."""

import time
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Union
from uml2spring.config.logging import get_logger
from uml2spring.config.settings import get_settings
from uml2spring.generation.constants import CONTROLLERS, DTO, ENTITIES, MAPPERS, REPOSITORIES, SERVICES
from uml2spring.generation.context import GenerationContext
from uml2spring.ir.diagnostics import Diagnostic, DiagnosticsCollector
from uml2spring.ir.diagram import DiagramIR
from uml2spring.ir.parser import parse_diagram
from uml2spring.ir.validators import validate_diagram
from .controller_generator import generate_controller
from .dto_generator import generate_dto
from .entity_generator import generate_entity
from .join_entity_generator import generate_join_entity
from .mapper_generator import generate_mapper
from .repository_generator import generate_repository
from .service_generator import generate_service_impl, generate_service_interface

logger = get_logger(__name__)


@dataclass(frozen=True)
class Artifact:
    """One generated source file."""

    relative_path: str
    content: str
    kind: str


@dataclass
class GenerationResult:
    """Artifacts in emission order plus the diagnostics of the run."""

    artifacts: List[Artifact] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def by_kind(self, kind: str) -> List[Artifact]:
        return [a for a in self.artifacts if a.kind == kind]

    def get(self, relative_path: str) -> Optional[Artifact]:
        return next((a for a in self.artifacts if a.relative_path == relative_path), None)


def _artifact(group: str, name: str, content: str) -> Artifact:
    return Artifact(relative_path=f"{group}/{name}.java", content=content, kind=group)


def generate_backend(
    ir: DiagramIR,
    base_package: Optional[str] = None,
    max_derived_queries: Optional[int] = None,
    diagnostics: Optional[DiagnosticsCollector] = None,
) -> GenerationResult:
    """
    Generate every backend artifact for a parsed diagram.

    Args:
        ir: Diagram intermediate representation
        base_package: Java base package (defaults to settings)
        max_derived_queries: Scalars per class with derived queries (defaults to settings)
        diagnostics: Collector to append to; a new one is created if omitted

    Returns:
        GenerationResult with artifacts grouped entities, dto, mappers,
        repositories, services, controllers
    """
    settings = get_settings()
    base_package = base_package or settings.base_package
    if max_derived_queries is None:
        max_derived_queries = settings.max_derived_queries
    diagnostics = diagnostics if diagnostics is not None else DiagnosticsCollector()

    pipeline_start = time.time()
    logger.info(
        f"Starting backend generation (package={base_package}, classes={len(ir.classes)}, "
        f"association_tables={len(ir.association_tables)})"
    )

    ctx = GenerationContext.build(ir, base_package, max_derived_queries, diagnostics)
    validate_diagram(ir, diagnostics, child_ids=ctx.resolver.child_ids)

    artifacts: List[Artifact] = []

    logger.info(f"Generating {len(ir.classes)} entities and {len(ir.association_tables)} join entities")
    for cls in ir.classes:
        artifacts.append(_artifact(ENTITIES, cls.name, generate_entity(cls, ctx)))
    for table in ir.association_tables:
        artifacts.append(_artifact(ENTITIES, table.name, generate_join_entity(table, ctx)))

    logger.info("Generating DTOs and mappers")
    for cls in ir.classes:
        artifacts.append(_artifact(DTO, ctx.naming.dto_name(cls.name), generate_dto(cls, ctx)))
    for cls in ir.classes:
        artifacts.append(_artifact(MAPPERS, f"{cls.name}Mapper", generate_mapper(cls, ctx)))

    logger.info("Generating repositories, services and controllers")
    for cls in ir.classes:
        artifacts.append(_artifact(REPOSITORIES, f"{cls.name}Repository", generate_repository(cls, ctx)))
    for cls in ir.classes:
        artifacts.append(_artifact(SERVICES, f"{cls.name}Service", generate_service_interface(cls, ctx)))
        artifacts.append(_artifact(SERVICES, f"{cls.name}ServiceImpl", generate_service_impl(cls, ctx)))
    for cls in ir.classes:
        artifacts.append(_artifact(CONTROLLERS, f"{cls.name}Controller", generate_controller(cls, ctx)))

    elapsed = time.time() - pipeline_start
    logger.info(
        f"Backend generation completed: {len(artifacts)} artifacts, "
        f"{len(diagnostics)} diagnostics (total time: {elapsed:.3f}s)"
    )
    return GenerationResult(artifacts=artifacts, diagnostics=list(diagnostics.items))


def compile_diagram(
    source: Union[str, bytes, Mapping[str, Any]],
    base_package: Optional[str] = None,
    max_derived_queries: Optional[int] = None,
) -> GenerationResult:
    """
    Parse a diagram document and generate its backend.

    Raises:
        ParseError: If the document is malformed; nothing is generated
    """
    diagnostics = DiagnosticsCollector()
    ir = parse_diagram(source, diagnostics)
    return generate_backend(ir, base_package, max_derived_queries, diagnostics)
