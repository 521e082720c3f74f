"""Spring Data repository interfaces."""

from typing import List, Set
from uml2spring.config.logging import get_logger
from uml2spring.generation.constants import ENTITIES, INDENT, REPOSITORIES
from uml2spring.generation.context import GenerationContext
from uml2spring.generation.java import header, render
from uml2spring.ir.diagram import ClassNode

logger = get_logger(__name__)


def generate_repository(cls: ClassNode, ctx: GenerationContext) -> str:
    """
    Generate the repository interface for a class.

    Derived queries are emitted for the first scalar attributes and for
    every foreign key, restricted to the predicted repository methods.
    """
    meta = ctx.meta(cls)
    entity = cls.name
    pk = ctx.primary_key(cls)
    methods: List[str] = []
    java_types: Set[str] = {pk.java_type}
    imports = [
        ctx.import_of(ENTITIES, entity),
        "org.springframework.data.jpa.repository.JpaRepository",
        "org.springframework.stereotype.Repository",
    ]

    for member in ctx.derived_query_members(cls):
        cap = ctx.naming.capitalize(member.field_name)
        param = f"{member.java_type} {member.field_name}"
        java_types.add(member.java_type)
        methods.extend(
            _declared(
                meta.repository_methods,
                [
                    (f"findBy{cap}", f"List<{entity}> findBy{cap}({param});"),
                    (f"existsBy{cap}", f"boolean existsBy{cap}({param});"),
                    (f"countBy{cap}", f"long countBy{cap}({param});"),
                ],
            )
        )

    for ref in ctx.members.references(cls):
        cap = ctx.naming.capitalize(ref.field_name)
        target = ref.target.name
        imports.append(ctx.import_of(ENTITIES, target))
        java_types.add(ref.target_pk.java_type)
        candidates = [(f"findBy{cap}", f"List<{entity}> findBy{cap}({target} {ref.field_name});")]
        if ref.id_query:
            by_id = ref.id_query
            candidates.append((by_id, f"List<{entity}> {by_id}({ref.target_pk.java_type} {ref.id_field});"))
        candidates.append((f"existsBy{cap}", f"boolean existsBy{cap}({target} {ref.field_name});"))
        candidates.append((f"countBy{cap}", f"long countBy{cap}({target} {ref.field_name});"))
        methods.extend(_declared(meta.repository_methods, candidates))

    if any(d.startswith("List<") for d in methods):
        imports.append("java.util.List")
    imports.extend(ctx.naming.imports_for(java_types))

    lines = header(ctx.package(REPOSITORIES), imports)
    lines.append("@Repository")
    lines.append(f"public interface {entity}Repository extends JpaRepository<{entity}, {pk.java_type}> {{")
    lines.append("")
    for declaration in methods:
        lines.append(f"{INDENT}{declaration}")
        lines.append("")
    lines.append("}")

    logger.debug(f"Generated {entity}Repository with {len(methods)} derived queries")
    return render(lines)


def _declared(predicted, candidates) -> List[str]:
    return [declaration for name, declaration in candidates if name in predicted]
