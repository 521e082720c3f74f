"""Typer CLI application."""

import typer
from pathlib import Path
from typing import Optional

from uml2spring.config import get_settings, is_java_package, setup_logging
from uml2spring.generation.context import GenerationContext
from uml2spring.generation.engine.pipeline import generate_backend
from uml2spring.generation.engine.writer import java_source_root, write_artifacts
from uml2spring.ir.diagnostics import DiagnosticsCollector, ParseError
from uml2spring.ir.validators import validate_diagram
from uml2spring.utils.ir_io import load_diagram_from_json

app = typer.Typer(help="uml2spring: UML class diagrams to Spring Boot / JPA backends")

VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr")


def _load(diagram: Path, diagnostics: DiagnosticsCollector):
    try:
        return load_diagram_from_json(diagram, diagnostics)
    except (ParseError, FileNotFoundError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def generate(
    diagram: Path,
    out_dir: Optional[Path] = typer.Argument(None, help="Output directory (defaults to the output_dir setting)"),
    package: Optional[str] = typer.Option(None, "--package", "-p", help="Java base package"),
    max_queries: Optional[int] = typer.Option(
        None, "--max-queries", help="Scalar attributes per class with derived queries"
    ),
    maven_layout: bool = typer.Option(
        False, "--maven-layout", help="Write under src/main/java/<package>"
    ),
    verbose: bool = VERBOSE_OPTION,
):
    """
    Generate entities, DTOs, mappers, repositories, services and controllers.

    Args:
        diagram: Path to the diagram JSON file
        out_dir: Output directory for the generated Java sources, or the
            configured output_dir when omitted
    """
    setup_logging(verbose=verbose)
    settings = get_settings()
    base_package = package or settings.base_package
    out_dir = out_dir or settings.output_dir
    if not is_java_package(base_package):
        typer.echo(f"Error: '{base_package}' is not a valid Java package name", err=True)
        raise typer.Exit(1)
    diagnostics = DiagnosticsCollector()

    typer.echo(f"Loading diagram from {diagram}")
    ir = _load(diagram, diagnostics)

    typer.echo("Generating backend...")
    result = generate_backend(ir, base_package, max_queries, diagnostics)

    target = java_source_root(out_dir, base_package) if maven_layout else Path(out_dir)
    written = write_artifacts(result.artifacts, target)

    for diagnostic in result.diagnostics:
        typer.echo(f"  {diagnostic.format()}")
    typer.echo(f"✓ Complete! {len(written)} files written to {target} ({len(result.diagnostics)} warnings)")


@app.command()
def inspect(diagram: Path, verbose: bool = VERBOSE_OPTION):
    """
    Show how the diagram is interpreted: keys, inheritance and relationships.

    Args:
        diagram: Path to the diagram JSON file
    """
    setup_logging(verbose=verbose)
    settings = get_settings()
    diagnostics = DiagnosticsCollector()
    ir = _load(diagram, diagnostics)
    ctx = GenerationContext.build(ir, settings.base_package, settings.max_derived_queries, diagnostics)

    typer.echo(f"Classes ({len(ir.classes)}):")
    for cls in ir.classes:
        pk = ctx.primary_key(cls)
        parent = ctx.resolver.parent_of(cls)
        extends = f" extends {parent.name}" if parent else ""
        generated = " (generated)" if pk.synthesized else ""
        typer.echo(f"  {cls.name}{extends}  key: {pk.name}: {pk.java_type}{generated}")
        meta = ctx.meta(cls)
        for link in meta.one_to_many:
            typer.echo(f"    one-to-many {link.field_name} -> {link.related.name} (mappedBy {link.mapped_by})")
        for link in meta.many_to_many:
            side = "owner" if link.is_owner else "inverse"
            typer.echo(f"    many-to-many {link.field_name} -> {link.related.name} ({side})")

    if ir.association_tables:
        typer.echo(f"Association tables ({len(ir.association_tables)}):")
        for table in ir.association_tables:
            typer.echo(f"  {table.name} -> {', '.join(table.referenced_entities)}")

    typer.echo(f"Relationships ({len(ir.relationships)}):")
    for item in ctx.classifier.classified:
        rel = item.relationship
        source = ir.class_by_id(rel.source)
        target = ir.class_by_id(rel.target)
        source_name = source.name if source else rel.source
        target_name = target.name if target else rel.target
        typer.echo(f"  {source_name} -> {target_name}: {item.kind.value} (declared {item.declared_type})")

    if diagnostics.items:
        typer.echo(f"Warnings ({len(diagnostics)}):")
        for diagnostic in diagnostics.items:
            typer.echo(f"  {diagnostic.format()}")


@app.command()
def validate(
    diagram: Path,
    strict: bool = typer.Option(False, "--strict", help="Exit with status 1 on any warning"),
    verbose: bool = VERBOSE_OPTION,
):
    """
    Check a diagram for problems without generating code.

    Args:
        diagram: Path to the diagram JSON file
    """
    setup_logging(verbose=verbose)
    diagnostics = DiagnosticsCollector()
    ir = _load(diagram, diagnostics)
    ctx = GenerationContext.build(ir, get_settings().base_package, diagnostics=diagnostics)
    validate_diagram(ir, diagnostics, child_ids=ctx.resolver.child_ids)

    for diagnostic in diagnostics.items:
        typer.echo(diagnostic.format())

    if not diagnostics.items:
        typer.echo("✓ No problems found")
        return
    typer.echo(f"{len(diagnostics)} warning(s)")
    if strict:
        raise typer.Exit(1)


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
