"""Diagram ingestion: raw JSON document -> DiagramIR."""

import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from pydantic import ValidationError
from uml2spring.config.logging import get_logger
from uml2spring.generation.naming import snake_case
from uml2spring.ir.diagnostics import DiagnosticsCollector, ParseError
from uml2spring.ir.diagram import (
    ASSOCIATION_TABLE_STEREOTYPE,
    AssociationTable,
    Attribute,
    ClassNode,
    DiagramIR,
    Relationship,
)
from uml2spring.utils.ids import stable_id

logger = get_logger(__name__)

DiagramSource = Union[str, bytes, Mapping[str, Any]]


def parse_diagram(
    source: DiagramSource, diagnostics: Optional[DiagnosticsCollector] = None
) -> DiagramIR:
    """
    Parse a diagram document into a DiagramIR.

    Args:
        source: JSON text, bytes or an already-decoded mapping with
            ``elements`` and ``connections``
        diagnostics: Collector receiving recoverable problems

    Returns:
        Normalized DiagramIR

    Raises:
        ParseError: If the document is malformed. Nothing is returned in
            that case, partial diagrams are never produced.
    """
    diagnostics = diagnostics if diagnostics is not None else DiagnosticsCollector()
    document = _decode(source)

    elements = _as_list(document.get("elements"), "elements")
    connections = _as_list(document.get("connections"), "connections")
    logger.debug(f"Decoded diagram with {len(elements)} elements and {len(connections)} connections")

    classes: List[ClassNode] = []
    tables: List[AssociationTable] = []
    for index, element in enumerate(elements):
        if not isinstance(element, Mapping):
            raise ParseError(f"elements[{index}] must be an object, got {type(element).__name__}")
        element_type = element.get("type", "class")
        if element_type != "class":
            logger.debug(f"Skipping non-class element {element.get('id')!r} of type {element_type!r}")
            continue
        node = _parse_class(element, index, diagnostics)
        if node.stereotype == ASSOCIATION_TABLE_STEREOTYPE:
            tables.append(_to_association_table(node))
        else:
            classes.append(node)

    relationships = _parse_relationships(connections, diagnostics)

    try:
        ir = DiagramIR(
            classes=tuple(classes),
            relationships=tuple(relationships),
            association_tables=tuple(tables),
        )
    except ValidationError as e:
        raise ParseError(f"Diagram failed validation: {e}") from e

    logger.info(
        f"Parsed diagram: {len(ir.classes)} classes, {len(ir.relationships)} relationships, "
        f"{len(ir.association_tables)} association tables"
    )
    return ir


def _decode(source: DiagramSource) -> Mapping[str, Any]:
    if isinstance(source, Mapping):
        return source
    try:
        document = json.loads(source)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"Diagram is not valid JSON: {e}") from e
    if not isinstance(document, dict):
        raise ParseError(f"Diagram must be a JSON object, got {type(document).__name__}")
    return document


def _as_list(container: Any, key: str) -> List[Any]:
    """Accept either an id-keyed object map or an array."""
    if container is None:
        return []
    if isinstance(container, Mapping):
        return list(container.values())
    if isinstance(container, list):
        return container
    raise ParseError(f"'{key}' must be an object or an array, got {type(container).__name__}")


def parse_attribute_shorthand(text: str) -> Optional[Dict[str, str]]:
    """
    Parse the ``"name: type"`` attribute shorthand.

    A bare name gets type String. Returns None for a blank name.
    """
    name, sep, declared = text.partition(":")
    name = name.strip()
    if not name:
        return None
    declared = declared.strip() if sep else ""
    return {"name": name, "type": declared or "String"}


def _parse_attributes(raw: Any, class_label: str, diagnostics: DiagnosticsCollector) -> List[Attribute]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ParseError(f"{class_label}: 'attributes' must be an array")

    attributes: List[Attribute] = []
    for index, item in enumerate(raw):
        if isinstance(item, str):
            data = parse_attribute_shorthand(item)
        elif isinstance(item, Mapping):
            data = dict(item) if item.get("name") else None
        else:
            raise ParseError(f"{class_label}: attribute #{index} must be a string or an object")

        if data is None:
            diagnostics.validation(
                f"attribute #{index} has no name and was ignored", class_id=class_label
            )
            continue
        try:
            attributes.append(Attribute.model_validate(data))
        except ValidationError as e:
            raise ParseError(f"{class_label}: invalid attribute #{index}: {e}") from e
    return attributes


def _blank(value: Any) -> bool:
    """Missing or empty. Numeric ids such as 0 are valid."""
    return value is None or str(value).strip() == ""


def _parse_class(element: Mapping[str, Any], index: int, diagnostics: DiagnosticsCollector) -> ClassNode:
    class_id = element.get("id")
    name = element.get("name")
    if _blank(class_id) or not name:
        raise ParseError(f"Class element #{index} is missing 'id' or 'name'")

    label = str(class_id)
    attributes = _parse_attributes(element.get("attributes"), label, diagnostics)
    try:
        return ClassNode(
            id=str(class_id),
            name=str(name),
            attributes=tuple(attributes),
            methods=element.get("methods") or (),
            stereotype=element.get("stereotype"),
            visibility=element.get("visibility"),
            description=element.get("description"),
        )
    except ValidationError as e:
        raise ParseError(f"Class element {label!r} is invalid: {e}") from e


def _to_association_table(node: ClassNode) -> AssociationTable:
    foreign_keys = tuple(a for a in node.attributes if a.is_foreign_key)
    additional = tuple(
        a for a in node.attributes if not a.is_foreign_key and not a.is_primary_key
    )
    return AssociationTable(
        id=node.id,
        name=node.name,
        table_name=snake_case(node.name),
        attributes=node.attributes,
        foreign_keys=foreign_keys,
        additional_attributes=additional,
    )


def _parse_relationships(connections: Iterable[Any], diagnostics: DiagnosticsCollector) -> List[Relationship]:
    relationships: List[Relationship] = []
    seen_ids: Dict[str, int] = {}
    for index, conn in enumerate(connections):
        if not isinstance(conn, Mapping):
            raise ParseError(f"connections[{index}] must be an object, got {type(conn).__name__}")

        source = conn.get("source")
        target = conn.get("target")
        if _blank(source) or _blank(target):
            present = target if _blank(source) else source
            diagnostics.classification(
                f"connection #{index} is missing an endpoint and was dropped",
                class_id=None if _blank(present) else str(present),
            )
            continue

        data = dict(conn)
        data["source"] = str(source)
        data["target"] = str(target)
        if not data.get("type"):
            data["type"] = "association"
        if not _blank(data.get("id")):
            data["id"] = str(data["id"])
        else:
            data["id"] = _synthetic_id(data, seen_ids)

        try:
            relationships.append(Relationship.model_validate(data))
        except ValidationError as e:
            raise ParseError(f"Connection #{index} is invalid: {e}") from e
    return relationships


def _synthetic_id(data: Mapping[str, Any], seen_ids: Dict[str, int]) -> str:
    """Derive a connection id from its endpoints, type and label."""
    ends = sorted([data["source"], data["target"]])
    base = stable_id(*ends, str(data.get("type", "")), str(data.get("label") or ""), prefix="rel_")
    count = seen_ids.get(base, 0)
    seen_ids[base] = count + 1
    return base if count == 0 else f"{base}_{count}"
