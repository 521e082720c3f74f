"""Structural validation of a DiagramIR."""

from typing import Dict, List, Optional
from uml2spring.config.logging import get_logger
from uml2spring.ir.diagnostics import Diagnostic, DiagnosticsCollector
from uml2spring.ir.diagram import DiagramIR

logger = get_logger(__name__)


def validate_diagram(
    ir: DiagramIR,
    diagnostics: Optional[DiagnosticsCollector] = None,
    child_ids: Optional[set] = None,
) -> List[Diagnostic]:
    """
    Lint a diagram for problems that generation recovers from.

    Args:
        ir: DiagramIR to validate
        diagnostics: Collector the findings are added to
        child_ids: Ids of inheritance children; they borrow their parent's
            primary key, so a missing key is not reported for them

    Returns:
        List of ValidationWarning diagnostics found by this pass
    """
    diagnostics = diagnostics if diagnostics is not None else DiagnosticsCollector()
    child_ids = child_ids or set()
    start = len(diagnostics.items)

    seen_names: Dict[str, str] = {}
    for cls in ir.classes:
        if cls.name in seen_names:
            diagnostics.validation(
                f"class name '{cls.name}' is also used by '{seen_names[cls.name]}'; "
                f"generated files will collide",
                class_id=cls.id,
            )
        else:
            seen_names[cls.name] = cls.id

        if not cls.primary_key_attributes and cls.id not in child_ids:
            diagnostics.validation(
                f"{cls.name}: missing primary key; a generated 'id: Long' is used",
                class_id=cls.id,
            )

        for attr in cls.attributes:
            if attr.is_foreign_key and not attr.referenced_entity:
                diagnostics.validation(
                    f"{cls.name}.{attr.name}: foreign key without referencedEntity is treated as a plain column",
                    class_id=cls.id,
                    field_name=attr.name,
                )
            elif attr.is_reference and ir.class_by_name(attr.referenced_entity) is None:
                diagnostics.validation(
                    f"{cls.name}.{attr.name}: references unknown class '{attr.referenced_entity}'",
                    class_id=cls.id,
                    field_name=attr.name,
                )

    for rel in ir.relationships:
        for end in (rel.source, rel.target):
            if ir.class_by_id(end) is None and not _is_table(ir, end):
                diagnostics.validation(
                    f"relationship {rel.id}: endpoint '{end}' does not exist",
                    class_id=end,
                )

    for table in ir.association_tables:
        if len(table.foreign_keys) < 2:
            diagnostics.validation(
                f"association table {table.name} has {len(table.foreign_keys)} foreign key(s); "
                f"a join entity needs one per side",
                class_id=table.id,
            )

    found = diagnostics.items[start:]
    if found:
        logger.info(f"Diagram validation found {len(found)} issue(s)")
    else:
        logger.debug("Diagram validation passed")
    return list(found)


def _is_table(ir: DiagramIR, element_id: str) -> bool:
    return any(t.id == element_id for t in ir.association_tables)
