"""Join entities with an embedded composite key for association tables."""

from dataclasses import dataclass
from typing import List, Optional, Set
from uml2spring.config.logging import get_logger
from uml2spring.generation.constants import ENTITIES, INDENT
from uml2spring.generation.context import GenerationContext
from uml2spring.generation.java import accessors, equals_hash, header, json_ignore, render
from uml2spring.generation.inheritance import DEFAULT_PK_TYPE
from uml2spring.ir.diagram import AssociationTable, Attribute, ClassNode

logger = get_logger(__name__)


@dataclass(frozen=True)
class KeyColumn:
    """One foreign key of an association table, realized as a key sub-field."""

    attribute: Attribute
    target: Optional[ClassNode]
    relation_field: str
    key_field: str
    java_type: str


def key_columns(table: AssociationTable, ctx: GenerationContext) -> List[KeyColumn]:
    """
    Resolve the composite-key columns of an association table.

    The key type comes from the attribute's referencedType, then a non-String
    declared type, then the referenced class's primary key type, else Long.
    """
    columns: List[KeyColumn] = []
    used: Set[str] = set()
    for fk in table.foreign_keys:
        target = ctx.ir.class_by_name(fk.referenced_entity)
        relation_field = ctx.naming.camel_case(fk.referenced_entity or fk.name)
        if relation_field in used:
            relation_field = ctx.naming.fk_field(fk.name)
        used.add(relation_field)
        columns.append(
            KeyColumn(
                attribute=fk,
                target=target,
                relation_field=relation_field,
                key_field=f"{relation_field}Id",
                java_type=_key_type(fk, target, ctx),
            )
        )
    return columns


def _key_type(fk: Attribute, target: Optional[ClassNode], ctx: GenerationContext) -> str:
    if fk.referenced_type:
        return ctx.naming.java_type(fk.referenced_type)
    declared = ctx.naming.java_type(fk.type)
    if declared != "String":
        return declared
    if target is not None:
        return ctx.primary_key(target).java_type
    return DEFAULT_PK_TYPE


def generate_join_entity(table: AssociationTable, ctx: GenerationContext) -> str:
    """
    Generate the entity and its @Embeddable key class for an association table.

    Args:
        table: Association table view of the join class
        ctx: Generation context

    Returns:
        Java source of the join entity
    """
    name = table.name
    key_class = f"{name}Id"
    columns = key_columns(table, ctx)
    extras = [
        (a, ctx.naming.field_name(a.name), ctx.naming.java_type(a.type))
        for a in table.additional_attributes
    ]

    java_types = {c.java_type for c in columns} | {t for _, _, t in extras}
    imports = [
        "jakarta.persistence.*",
        "jakarta.validation.constraints.*",
        "java.io.Serializable",
        "java.util.Objects",
        "com.fasterxml.jackson.annotation.JsonIgnoreProperties",
        *ctx.naming.imports_for(java_types),
    ]

    lines = header(ctx.package(ENTITIES), imports)
    lines.extend(
        [
            "@Entity",
            f'@Table(name = "{table.table_name}")',
            f"public class {name} {{",
            "",
            f"{INDENT}@EmbeddedId",
            f"{INDENT}private {key_class} id;",
            "",
        ]
    )

    related = [c for c in columns if c.target is not None]
    for column in columns:
        if column.target is None:
            ctx.diagnostics.consistency(
                f"association table {name} references unknown class "
                f"'{column.attribute.referenced_entity}'; only the key column is generated",
                class_id=table.id,
                field_name=column.attribute.name,
            )

    for column in related:
        lines.extend(
            [
                f"{INDENT}@ManyToOne(fetch = FetchType.LAZY)",
                f'{INDENT}@MapsId("{column.key_field}")',
                f'{INDENT}@JoinColumn(name = "{ctx.naming.column_name(column.attribute.name)}")',
                json_ignore(),
                f"{INDENT}private {column.target.name} {column.relation_field};",
                "",
            ]
        )

    for attr, field_name, java_type in extras:
        constraint = "@NotBlank" if java_type == "String" else "@NotNull"
        lines.extend(
            [
                f"{INDENT}{constraint}",
                f'{INDENT}@Column(name = "{ctx.naming.column_name(attr.name)}")',
                f"{INDENT}private {java_type} {field_name};",
                "",
            ]
        )

    lines.extend(
        [
            f"{INDENT}public {name}() {{",
            f"{INDENT}}}",
            "",
            f"{INDENT}public {name}({key_class} id) {{",
            f"{INDENT * 2}this.id = id;",
            f"{INDENT}}}",
            "",
        ]
    )
    lines.extend(accessors("id", key_class, "getId", "setId"))

    for column in related:
        lines.extend(_relation_accessors(table, column, key_class, ctx))
    for _, field_name, java_type in extras:
        getter, setter = ctx.naming.accessors(field_name)
        lines.extend(accessors(field_name, java_type, getter, setter))

    lines.extend(equals_hash(name, ["id"]))
    lines.extend(_key_class(key_class, columns, ctx))
    lines.append("}")

    logger.debug(f"Generated join entity {name}: {len(columns)} key columns, {len(extras)} extra columns")
    return render(lines)


def _relation_accessors(
    table: AssociationTable, column: KeyColumn, key_class: str, ctx: GenerationContext
) -> List[str]:
    """Relation getter and a setter that keeps the key sub-field in sync."""
    target = column.target
    field_name = column.relation_field
    getter, setter = ctx.naming.accessors(field_name)
    lines = [
        f"{INDENT}public {target.name} {getter}() {{",
        f"{INDENT * 2}return {field_name};",
        f"{INDENT}}}",
        "",
        f"{INDENT}public void {setter}({target.name} {field_name}) {{",
        f"{INDENT * 2}this.{field_name} = {field_name};",
    ]

    pk = ctx.primary_key(target)
    pk_getter = ctx.naming.getter(pk.field_name)
    if ctx.meta(target).has_entity_getter(pk.field_name, pk_getter):
        key_setter = ctx.naming.setter(column.key_field)
        lines.extend(
            [
                f"{INDENT * 2}if ({field_name} != null) {{",
                f"{INDENT * 3}if (this.id == null) {{",
                f"{INDENT * 4}this.id = new {key_class}();",
                f"{INDENT * 3}}}",
                f"{INDENT * 3}this.id.{key_setter}({field_name}.{pk_getter}());",
                f"{INDENT * 2}}}",
            ]
        )
    else:
        ctx.diagnostics.consistency(
            f"{target.name} entity has no {pk_getter}(); key of {table.name}.{field_name} is not synchronized",
            class_id=table.id,
            field_name=field_name,
        )
    lines.extend([f"{INDENT}}}", ""])
    return lines


def _key_class(key_class: str, columns: List[KeyColumn], ctx: GenerationContext) -> List[str]:
    pad = INDENT
    lines = [
        f"{pad}@Embeddable",
        f"{pad}public static class {key_class} implements Serializable {{",
        "",
        f"{pad * 2}private static final long serialVersionUID = 1L;",
        "",
    ]
    for column in columns:
        lines.extend(
            [
                f'{pad * 2}@Column(name = "{ctx.naming.column_name(column.attribute.name)}")',
                f"{pad * 2}private {column.java_type} {column.key_field};",
                "",
            ]
        )

    params = ", ".join(f"{c.java_type} {c.key_field}" for c in columns)
    lines.extend([f"{pad * 2}public {key_class}() {{", f"{pad * 2}}}", ""])
    if columns:
        lines.append(f"{pad * 2}public {key_class}({params}) {{")
        lines.extend(f"{pad * 3}this.{c.key_field} = {c.key_field};" for c in columns)
        lines.extend([f"{pad * 2}}}", ""])

    for column in columns:
        getter, setter = ctx.naming.accessors(column.key_field)
        lines.extend(accessors(column.key_field, column.java_type, getter, setter, level=2))
    lines.extend(equals_hash(key_class, [c.key_field for c in columns], level=2))
    lines.append(f"{pad}}}")
    return lines
