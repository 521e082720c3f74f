"""Utilities for loading and saving diagrams from/to JSON files."""

import json
from pathlib import Path
from typing import Optional
from uml2spring.ir.diagnostics import DiagnosticsCollector, ParseError
from uml2spring.ir.diagram import DiagramIR
from uml2spring.ir.parser import parse_diagram


def load_diagram_from_json(
    diagram_path: Path, diagnostics: Optional[DiagnosticsCollector] = None
) -> DiagramIR:
    """
    Load a DiagramIR from a diagram JSON file.

    Args:
        diagram_path: Path to the JSON file
        diagnostics: Collector receiving recoverable problems

    Returns:
        Parsed DiagramIR instance

    Raises:
        FileNotFoundError: If the file doesn't exist
        ParseError: If the file is empty or the diagram is malformed
    """
    diagram_path = Path(diagram_path)
    if not diagram_path.exists():
        raise FileNotFoundError(f"Diagram file not found: {diagram_path}")

    file_content = diagram_path.read_text(encoding="utf-8").strip()
    if not file_content:
        raise ParseError(f"Diagram file is empty: {diagram_path}")

    return parse_diagram(file_content, diagnostics)


def save_diagram_to_json(ir: DiagramIR, diagram_path: Path) -> None:
    """
    Save a DiagramIR back to the diagram document format.

    Args:
        ir: DiagramIR instance to save
        diagram_path: Path where to save the JSON file

    Note:
        Association tables are written back as classes with the
        association_table stereotype. Creates parent directories if needed.
    """
    elements = [c.model_dump(by_alias=True, exclude_none=True) for c in ir.classes]
    for table in ir.association_tables:
        elements.append(
            {
                "id": table.id,
                "name": table.name,
                "type": "class",
                "stereotype": "association_table",
                "attributes": [a.model_dump(by_alias=True, exclude_none=True) for a in table.attributes],
            }
        )
    for element in elements:
        element.setdefault("type", "class")
    document = {
        "elements": elements,
        "connections": [r.model_dump(by_alias=True, exclude_none=True) for r in ir.relationships],
    }

    diagram_path = Path(diagram_path)
    diagram_path.parent.mkdir(parents=True, exist_ok=True)
    diagram_path.write_text(json.dumps(document, indent=2), encoding="utf-8")
