"""DTO generation: flat transfer objects carrying ids instead of relations."""

from uml2spring.config.logging import get_logger
from uml2spring.generation.constants import DTO, INDENT
from uml2spring.generation.context import GenerationContext
from uml2spring.generation.java import accessors, header, render
from uml2spring.ir.diagram import ClassNode

logger = get_logger(__name__)


def generate_dto(cls: ClassNode, ctx: GenerationContext) -> str:
    """
    Generate the DTO for a class.

    A child DTO extends its parent's DTO. Each foreign key becomes a
    ``<fk>Id`` field typed as the referenced class's primary key.
    """
    dto_name = ctx.naming.dto_name(cls.name)
    parent = ctx.resolver.parent_of(cls)
    scalars = ctx.members.scalars(cls)
    references = [r for r in ctx.members.references(cls) if r.dto_field_name]

    java_types = {m.java_type for m in scalars} | {r.target_pk.java_type for r in references}
    imports = ["java.io.Serializable", *ctx.naming.imports_for(java_types)]

    lines = header(ctx.package(DTO), imports)
    if parent is not None:
        lines.append(f"public class {dto_name} extends {ctx.naming.dto_name(parent.name)} implements Serializable {{")
    else:
        lines.append(f"public class {dto_name} implements Serializable {{")
    lines.append("")
    lines.append(f"{INDENT}private static final long serialVersionUID = 1L;")
    lines.append("")

    for member in scalars:
        lines.append(f"{INDENT}private {member.java_type} {member.field_name};")
    for ref in references:
        lines.append(f"{INDENT}private {ref.target_pk.java_type} {ref.dto_field_name}; // FK to {ref.target.name}")
    lines.append("")

    lines.append(f"{INDENT}public {dto_name}() {{")
    lines.append(f"{INDENT}}}")
    lines.append("")

    for member in scalars:
        getter, setter = ctx.naming.accessors(member.field_name)
        lines.extend(accessors(member.field_name, member.java_type, getter, setter))
    for ref in references:
        getter, setter = ctx.naming.accessors(ref.dto_field_name)
        lines.extend(accessors(ref.dto_field_name, ref.target_pk.java_type, getter, setter))

    lines.append("}")
    logger.debug(f"Generated {dto_name}: {len(scalars) + len(references)} fields")
    return render(lines)
