"""Service interfaces and their transactional implementations."""

from typing import Dict, List, Set, Tuple
from uml2spring.config.logging import get_logger
from uml2spring.generation.constants import ENTITIES, INDENT, REPOSITORIES, SERVICES
from uml2spring.generation.context import GenerationContext
from uml2spring.generation.java import block, header, render
from uml2spring.generation.members import ReferenceMember
from uml2spring.ir.diagram import ClassNode

logger = get_logger(__name__)


def _derived_signatures(cls: ClassNode, ctx: GenerationContext) -> Tuple[List[Tuple[str, str, str]], Set[str]]:
    """
    Derived query signatures the service exposes.

    Returns:
        ``(name, return type, parameter)`` triples limited to the predicted
        service methods, and the Java types their parameters need
    """
    meta = ctx.meta(cls)
    entity = cls.name
    signatures: List[Tuple[str, str, str]] = []
    java_types: Set[str] = set()

    for member in ctx.derived_query_members(cls):
        cap = ctx.naming.capitalize(member.field_name)
        param = f"{member.java_type} {member.field_name}"
        java_types.add(member.java_type)
        signatures.extend(
            [
                (f"findBy{cap}", f"List<{entity}>", param),
                (f"existsBy{cap}", "boolean", param),
                (f"countBy{cap}", "long", param),
            ]
        )
    for ref in ctx.members.references(cls):
        cap = ctx.naming.capitalize(ref.field_name)
        param = f"{ref.target.name} {ref.field_name}"
        java_types.add(ref.target_pk.java_type)
        signatures.append((f"findBy{cap}", f"List<{entity}>", param))
        if ref.id_query:
            signatures.append((ref.id_query, f"List<{entity}>", f"{ref.target_pk.java_type} {ref.id_field}"))
        signatures.append((f"countBy{cap}", "long", param))
    return [s for s in signatures if s[0] in meta.service_methods], java_types


def _entity_imports(cls: ClassNode, ctx: GenerationContext) -> List[str]:
    imports = [ctx.import_of(ENTITIES, cls.name)]
    imports.extend(ctx.import_of(ENTITIES, r.target.name) for r in ctx.members.references(cls))
    return imports


def generate_service_interface(cls: ClassNode, ctx: GenerationContext) -> str:
    """Generate ``<Name>Service``: the CRUD contract plus derived queries."""
    entity = cls.name
    pk = ctx.primary_key(cls)
    derived, java_types = _derived_signatures(cls, ctx)

    imports = _entity_imports(cls, ctx) + ["java.util.List", "java.util.Optional"]
    imports.extend(ctx.naming.imports_for(java_types | {pk.java_type}))

    lines = header(ctx.package(SERVICES), imports)
    lines.append(f"public interface {entity}Service {{")
    lines.append("")
    lines.extend(
        block(
            f"""
            List<{entity}> findAll();

            Optional<{entity}> findById({pk.java_type} id);

            {entity} create({entity} entity);

            {entity} update({pk.java_type} id, {entity} entity);

            {entity} partialUpdate({pk.java_type} id, {entity} entity);

            void delete({pk.java_type} id);

            boolean existsById({pk.java_type} id);

            long count();
            """,
            level=1,
        )
    )
    for name, returns, param in derived:
        lines.append("")
        lines.append(f"{INDENT}{returns} {name}({param});")
    lines.append("}")
    return render(lines)


def generate_service_impl(cls: ClassNode, ctx: GenerationContext) -> str:
    """
    Generate ``<Name>ServiceImpl``.

    Foreign keys are resolved to loaded entities through the referenced
    class's repository before every save; an unknown id fails with
    EntityNotFoundException.
    """
    entity = cls.name
    meta = ctx.meta(cls)
    pk = ctx.primary_key(cls)
    repo = f"{ctx.naming.camel_case(entity)}Repository"
    derived, java_types = _derived_signatures(cls, ctx)
    references = _resolvable_references(cls, ctx)

    # Repositories of referenced classes, one per class
    related_repos: Dict[str, str] = {}
    for ref in references:
        if ref.target.name != entity:
            related_repos.setdefault(ref.target.name, f"{ctx.naming.camel_case(ref.target.name)}Repository")

    imports = _entity_imports(cls, ctx) + [ctx.import_of(ENTITIES, r.target.name) for r in references]
    imports.append(ctx.import_of(REPOSITORIES, f"{entity}Repository"))
    imports.extend(ctx.import_of(REPOSITORIES, f"{target}Repository") for target in related_repos)
    imports.extend(
        [
            "jakarta.persistence.EntityNotFoundException",
            "org.springframework.stereotype.Service",
            "org.springframework.transaction.annotation.Transactional",
            "java.util.List",
            "java.util.Optional",
        ]
    )
    imports.extend(ctx.naming.imports_for(java_types | {pk.java_type}))

    lines = header(ctx.package(SERVICES), imports)
    lines.extend(["@Service", "@Transactional", f"public class {entity}ServiceImpl implements {entity}Service {{", ""])

    fields = [(f"{entity}Repository", repo)] + [(f"{t}Repository", v) for t, v in related_repos.items()]
    for type_name, var in fields:
        lines.append(f"{INDENT}private final {type_name} {var};")
    lines.append("")
    params = ", ".join(f"{t} {v}" for t, v in fields)
    lines.append(f"{INDENT}public {entity}ServiceImpl({params}) {{")
    lines.extend(f"{INDENT * 2}this.{v} = {v};" for _, v in fields)
    lines.extend([f"{INDENT}}}", ""])

    not_found = f'"{entity} not found with id " + id'
    lines.extend(
        block(
            f"""
            @Override
            @Transactional(readOnly = true)
            public List<{entity}> findAll() {{
                return {repo}.findAll();
            }}

            @Override
            @Transactional(readOnly = true)
            public Optional<{entity}> findById({pk.java_type} id) {{
                return {repo}.findById(id);
            }}

            @Override
            public {entity} create({entity} entity) {{
                validateEntity(entity);
                resolveForeignKeys(entity);
                return {repo}.save(entity);
            }}

            @Override
            public {entity} update({pk.java_type} id, {entity} entity) {{
                validateEntity(entity);
                return {repo}.findById(id)
                        .map(existing -> {{
                            updateEntityFields(existing, entity, false);
                            resolveForeignKeys(existing);
                            return {repo}.save(existing);
                        }})
                        .orElseThrow(() -> new EntityNotFoundException({not_found}));
            }}

            @Override
            public {entity} partialUpdate({pk.java_type} id, {entity} entity) {{
                validateEntity(entity);
                return {repo}.findById(id)
                        .map(existing -> {{
                            updateEntityFields(existing, entity, true);
                            resolveForeignKeys(existing);
                            return {repo}.save(existing);
                        }})
                        .orElseThrow(() -> new EntityNotFoundException({not_found}));
            }}

            @Override
            public void delete({pk.java_type} id) {{
                if (!{repo}.existsById(id)) {{
                    throw new EntityNotFoundException({not_found});
                }}
                {repo}.deleteById(id);
            }}

            @Override
            @Transactional(readOnly = true)
            public boolean existsById({pk.java_type} id) {{
                return {repo}.existsById(id);
            }}

            @Override
            @Transactional(readOnly = true)
            public long count() {{
                return {repo}.count();
            }}
            """,
            level=1,
        )
    )

    for name, returns, param in derived:
        arg = param.split(" ", 1)[1]
        lines.extend(
            [
                "",
                f"{INDENT}@Override",
                f"{INDENT}@Transactional(readOnly = true)",
                f"{INDENT}public {returns} {name}({param}) {{",
                f"{INDENT * 2}return {repo}.{name}({arg});",
                f"{INDENT}}}",
            ]
        )
    lines.append("")

    lines.extend(
        block(
            f"""
            private void validateEntity({entity} entity) {{
                if (entity == null) {{
                    throw new IllegalArgumentException("{entity} must not be null");
                }}
            }}
            """,
            level=1,
        )
    )
    lines.append("")
    lines.extend(_update_entity_fields(cls, ctx))
    lines.append("")
    lines.extend(_resolve_foreign_keys(cls, references, repo, related_repos, ctx))
    lines.append("}")

    logger.debug(
        f"Generated {entity}ServiceImpl: {len(derived)} derived queries, "
        f"{len(references)} foreign keys resolved, {len(meta.service_methods)} service methods"
    )
    return render(lines)


def _resolvable_references(cls: ClassNode, ctx: GenerationContext) -> List[ReferenceMember]:
    """References along the chain whose accessors and target repository exist."""
    meta = ctx.meta(cls)
    resolvable: List[ReferenceMember] = []
    for ref in ctx.members.chain_references(cls):
        getter, setter = ctx.naming.accessors(ref.field_name)
        pk_getter = ctx.naming.getter(ref.target_pk.field_name)
        target_meta = ctx.meta(ref.target)
        if not (
            meta.has_entity_getter(ref.field_name, getter)
            and meta.has_entity_setter(ref.field_name, setter)
            and target_meta.has_entity_getter(ref.target_pk.field_name, pk_getter)
            and "findById" in target_meta.repository_methods
        ):
            ctx.diagnostics.consistency(
                f"cannot resolve {cls.name}.{ref.field_name} before saving; accessors were not predicted",
                class_id=cls.id,
                field_name=ref.field_name,
            )
            continue
        resolvable.append(ref)
    return resolvable


def _update_entity_fields(cls: ClassNode, ctx: GenerationContext) -> List[str]:
    """Copy incoming values onto the loaded entity; partial skips nulls."""
    entity = cls.name
    meta = ctx.meta(cls)
    pad = INDENT * 2
    lines = [f"{INDENT}private void updateEntityFields({entity} existing, {entity} incoming, boolean partial) {{"]
    names = [m.field_name for m in ctx.members.chain_scalars(cls) if not m.is_primary_key]
    names.extend(r.field_name for r in ctx.members.chain_references(cls))
    for name in names:
        getter, setter = ctx.naming.accessors(name)
        if not (meta.has_entity_getter(name, getter) and meta.has_entity_setter(name, setter)):
            ctx.diagnostics.consistency(
                f"{cls.name}.{name} is not copied on update; accessors were not predicted",
                class_id=cls.id,
                field_name=name,
            )
            continue
        lines.extend(
            [
                f"{pad}if (!partial || incoming.{getter}() != null) {{",
                f"{pad}{INDENT}existing.{setter}(incoming.{getter}());",
                f"{pad}}}",
            ]
        )
    lines.append(f"{INDENT}}}")
    return lines


def _resolve_foreign_keys(
    cls: ClassNode,
    references: List[ReferenceMember],
    repo: str,
    related_repos: Dict[str, str],
    ctx: GenerationContext,
) -> List[str]:
    entity = cls.name
    lines = [f"{INDENT}private void resolveForeignKeys({entity} entity) {{"]
    for ref in references:
        getter, setter = ctx.naming.accessors(ref.field_name)
        pk_getter = ctx.naming.getter(ref.target_pk.field_name)
        target = ref.target.name
        target_repo = related_repos.get(target, repo)
        local = f"{ref.field_name}Ref"
        lines.extend(
            block(
                f"""
                {target} {local} = entity.{getter}();
                if ({local} != null) {{
                    if ({local}.{pk_getter}() != null) {{
                        {target} loaded = {target_repo}.findById({local}.{pk_getter}())
                                .orElseThrow(() -> new EntityNotFoundException(
                                        "Related {target} not found with id " + {local}.{pk_getter}()));
                        entity.{setter}(loaded);
                    }} else {{
                        entity.{setter}(null);
                    }}
                }}
                """,
                level=2,
            )
        )
    lines.append(f"{INDENT}}}")
    return lines
