"""JPA entity generation for diagram classes."""

from typing import List
from uml2spring.config.logging import get_logger
from uml2spring.generation.classifier import ManyToManyLink, OneToManyLink
from uml2spring.generation.constants import ENTITIES, INDENT
from uml2spring.generation.context import GenerationContext
from uml2spring.generation.java import (
    accessors,
    equals_hash,
    header,
    id_conversion,
    json_ignore,
    literal,
    render,
)
from uml2spring.generation.members import ReferenceMember, ScalarMember
from uml2spring.generation.validation import column_length, validation_annotations
from uml2spring.ir.diagram import ClassNode

logger = get_logger(__name__)

_GENERATED_KEY_TYPES = ("Long", "Integer")


def generate_entity(cls: ClassNode, ctx: GenerationContext) -> str:
    """
    Generate the JPA entity for a class.

    Args:
        cls: Class node to generate
        ctx: Generation context

    Returns:
        Java source of the entity
    """
    meta = ctx.meta(cls)
    parent = ctx.resolver.parent_of(cls)
    scalars = ctx.members.scalars(cls)
    references = ctx.members.references(cls)
    has_collections = bool(meta.one_to_many or meta.many_to_many)

    imports = [
        "jakarta.persistence.*",
        "jakarta.validation.constraints.*",
        "java.util.Objects",
        "com.fasterxml.jackson.annotation.JsonIgnoreProperties",
        "com.fasterxml.jackson.annotation.JsonSetter",
    ]
    if has_collections:
        imports.extend(["java.util.List", "java.util.ArrayList"])
    java_types = {m.java_type for m in scalars} | {r.target_pk.java_type for r in references}
    imports.extend(ctx.naming.imports_for(java_types))

    lines = header(ctx.package(ENTITIES), imports)
    lines.append("@Entity")
    lines.append(f'@Table(name = "{ctx.naming.table_name(cls.name)}")')
    if ctx.resolver.is_parent(cls):
        lines.append("@Inheritance(strategy = InheritanceType.JOINED)")
    if parent is not None and cls.primary_key_attributes:
        own_pk = cls.primary_key_attributes[0]
        lines.append(f'@PrimaryKeyJoinColumn(name = "{ctx.naming.column_name(own_pk.name)}")')
    extends = f" extends {parent.name}" if parent is not None else ""
    lines.append(f"public class {cls.name}{extends} {{")
    lines.append("")

    for member in scalars:
        lines.extend(_scalar_field(cls, member, ctx))
    for ref in references:
        lines.extend(_reference_field(ref, ctx))
    for link in meta.one_to_many:
        lines.extend(_one_to_many_field(link))
    for link in meta.many_to_many:
        lines.extend(_many_to_many_field(link, ctx))

    lines.append(f"{INDENT}public {cls.name}() {{")
    lines.append(f"{INDENT}}}")
    lines.append("")

    for member in scalars:
        getter, setter = ctx.naming.accessors(member.field_name)
        lines.extend(accessors(member.field_name, member.java_type, getter, setter))
    for ref in references:
        getter, setter = ctx.naming.accessors(ref.field_name)
        lines.extend(accessors(ref.field_name, ref.target.name, getter, setter))
    for link in (*meta.one_to_many, *meta.many_to_many):
        getter, setter = ctx.naming.accessors(link.field_name)
        lines.extend(accessors(link.field_name, f"List<{link.related.name}>", getter, setter))
    for ref in references:
        lines.extend(_from_id_setter(cls, ref, ctx))

    if parent is None:
        pk_fields = [m.field_name for m in scalars if m.is_primary_key]
        lines.extend(equals_hash(cls.name, pk_fields))
    else:
        lines.extend(equals_hash(cls.name, []))

    lines.append("}")
    logger.debug(
        f"Generated entity {cls.name}: {len(scalars)} columns, {len(references)} references, "
        f"{len(meta.one_to_many) + len(meta.many_to_many)} collections"
    )
    return render(lines)


def _scalar_field(cls: ClassNode, member: ScalarMember, ctx: GenerationContext) -> List[str]:
    attr = member.attribute
    lines: List[str] = []
    if member.is_primary_key:
        lines.append(f"{INDENT}@Id")
        if member.java_type in _GENERATED_KEY_TYPES:
            lines.append(f"{INDENT}@GeneratedValue(strategy = GenerationType.IDENTITY)")
    else:
        label = ctx.naming.snake_case(member.field_name).replace("_", " ")
        lines.extend(f"{INDENT}{a}" for a in validation_annotations(member.java_type, attr.sql_type, label))

    column = [f'name = "{ctx.naming.column_name(attr.name)}"']
    if member.is_primary_key:
        column.append("nullable = false")
    length = column_length(member.java_type, attr.sql_type)
    if length is not None:
        column.append(f"length = {length}")
    lines.append(f"{INDENT}@Column({', '.join(column)})")

    declaration = f"{INDENT}private {member.java_type} {member.field_name}"
    if attr.default_value is not None and not member.is_primary_key:
        value = literal(member.java_type, attr.default_value)
        if value is None:
            ctx.diagnostics.validation(
                f"default value {attr.default_value!r} does not fit type {member.java_type}, ignored",
                class_id=cls.id,
                field_name=attr.name,
            )
        else:
            declaration += f" = {value}"
    lines.append(f"{declaration};")
    lines.append("")
    return lines


def _reference_field(ref: ReferenceMember, ctx: GenerationContext) -> List[str]:
    return [
        f"{INDENT}@ManyToOne(fetch = FetchType.LAZY)",
        f'{INDENT}@JoinColumn(name = "{ctx.naming.column_name(ref.attribute.name)}", nullable = true)',
        json_ignore(),
        f"{INDENT}private {ref.target.name} {ref.field_name};",
        "",
    ]


def _one_to_many_field(link: OneToManyLink) -> List[str]:
    return [
        f'{INDENT}@OneToMany(mappedBy = "{link.mapped_by}", fetch = FetchType.LAZY, cascade = CascadeType.ALL)',
        json_ignore([link.mapped_by]),
        f"{INDENT}private List<{link.related.name}> {link.field_name} = new ArrayList<>();",
        "",
    ]


def _many_to_many_field(link: ManyToManyLink, ctx: GenerationContext) -> List[str]:
    back_reference = ctx.naming.collection_field(link.owner.name)
    lines: List[str] = []
    if link.is_owner:
        lines.extend(
            [
                f"{INDENT}@ManyToMany(fetch = FetchType.LAZY, cascade = {{CascadeType.PERSIST, CascadeType.MERGE}})",
                f"{INDENT}@JoinTable(",
                f'{INDENT * 2}name = "{link.join_table_name}",',
                f'{INDENT * 2}joinColumns = @JoinColumn(name = "{link.join_column}"),',
                f'{INDENT * 2}inverseJoinColumns = @JoinColumn(name = "{link.inverse_join_column}")',
                f"{INDENT})",
            ]
        )
    else:
        lines.append(f'{INDENT}@ManyToMany(mappedBy = "{link.mapped_by}", fetch = FetchType.LAZY)')
    lines.append(json_ignore([back_reference]))
    lines.append(f"{INDENT}private List<{link.related.name}> {link.field_name} = new ArrayList<>();")
    lines.append("")
    return lines


def _from_id_setter(cls: ClassNode, ref: ReferenceMember, ctx: GenerationContext) -> List[str]:
    """JSON setter accepting either a bare id or an object for a reference."""
    target_meta = ctx.meta(ref.target)
    pk_field = ref.target_pk.field_name
    pk_setter = ctx.naming.setter(pk_field)
    if not target_meta.has_entity_setter(pk_field, pk_setter):
        ctx.diagnostics.consistency(
            f"{ref.target.name} entity has no {pk_setter}(); {ref.field_name}FromId setter skipped",
            class_id=cls.id,
            field_name=ref.field_name,
        )
        return []

    method = f"{ctx.naming.setter(ref.field_name)}FromId"
    conversion = id_conversion(ref.target_pk.java_type, "idOrEntity")
    if conversion is None:
        ctx.diagnostics.consistency(
            f"no id conversion for key type {ref.target_pk.java_type}; {method} skipped",
            class_id=cls.id,
            field_name=ref.field_name,
        )
        return []

    return [
        f'{INDENT}@JsonSetter("{ref.field_name}FromId")',
        f"{INDENT}public void {method}(Object idOrEntity) {{",
        f"{INDENT * 2}if (idOrEntity == null) {{",
        f"{INDENT * 3}this.{ref.field_name} = null;",
        f"{INDENT * 3}return;",
        f"{INDENT * 2}}}",
        f"{INDENT * 2}{ref.target.name} related = new {ref.target.name}();",
        f"{INDENT * 2}related.{pk_setter}({conversion});",
        f"{INDENT * 2}this.{ref.field_name} = related;",
        f"{INDENT}}}",
        "",
    ]
