"""Mapper generation between entities and DTOs."""

from dataclasses import dataclass
from typing import List
from uml2spring.config.logging import get_logger
from uml2spring.generation.constants import DTO, ENTITIES, INDENT, MAPPERS
from uml2spring.generation.context import GenerationContext
from uml2spring.generation.java import block, header, render
from uml2spring.generation.metadata import ClassMetadata
from uml2spring.ir.diagram import ClassNode

logger = get_logger(__name__)


@dataclass(frozen=True)
class _ScalarMapping:
    field_name: str
    entity_getter: str
    entity_setter: str
    dto_getter: str
    dto_setter: str
    is_primary_key: bool
    to_dto: bool
    to_entity: bool


@dataclass(frozen=True)
class _ReferenceMapping:
    target: str
    local: str
    entity_getter: str
    entity_setter: str
    dto_getter: str
    dto_setter: str
    target_getter: str
    target_setter: str
    to_dto: bool
    to_entity: bool


def _scalar_mappings(cls: ClassNode, meta: ClassMetadata, ctx: GenerationContext) -> List[_ScalarMapping]:
    mappings: List[_ScalarMapping] = []
    for member in ctx.members.chain_scalars(cls):
        name = member.field_name
        entity_getter, entity_setter = ctx.naming.accessors(name)
        dto_getter, dto_setter = entity_getter, entity_setter
        to_dto = meta.has_entity_getter(name, entity_getter) and meta.has_dto_setter(name, dto_setter)
        to_entity = meta.has_dto_getter(name, dto_getter) and meta.has_entity_setter(name, entity_setter)
        _report_gaps(cls, name, to_dto, to_entity, ctx)
        mappings.append(
            _ScalarMapping(
                field_name=name,
                entity_getter=entity_getter,
                entity_setter=entity_setter,
                dto_getter=dto_getter,
                dto_setter=dto_setter,
                is_primary_key=member.is_primary_key,
                to_dto=to_dto,
                to_entity=to_entity,
            )
        )
    return mappings


def _reference_mappings(cls: ClassNode, meta: ClassMetadata, ctx: GenerationContext) -> List[_ReferenceMapping]:
    mappings: List[_ReferenceMapping] = []
    for ref in ctx.members.chain_references(cls):
        if ref.dto_field_name is None:
            _report_gaps(cls, ref.field_name, False, False, ctx)
            continue
        target_meta = ctx.meta(ref.target)
        pk_field = ref.target_pk.field_name
        entity_getter, entity_setter = ctx.naming.accessors(ref.field_name)
        dto_getter, dto_setter = ctx.naming.accessors(ref.dto_field_name)
        target_getter, target_setter = ctx.naming.accessors(pk_field)
        to_dto = (
            meta.has_entity_getter(ref.field_name, entity_getter)
            and target_meta.has_entity_getter(pk_field, target_getter)
            and meta.has_dto_setter(ref.dto_field_name, dto_setter)
        )
        to_entity = (
            meta.has_dto_getter(ref.dto_field_name, dto_getter)
            and target_meta.has_entity_setter(pk_field, target_setter)
            and meta.has_entity_setter(ref.field_name, entity_setter)
        )
        _report_gaps(cls, ref.field_name, to_dto, to_entity, ctx)
        mappings.append(
            _ReferenceMapping(
                target=ref.target.name,
                local=f"{ref.field_name}Temp",
                entity_getter=entity_getter,
                entity_setter=entity_setter,
                dto_getter=dto_getter,
                dto_setter=dto_setter,
                target_getter=target_getter,
                target_setter=target_setter,
                to_dto=to_dto,
                to_entity=to_entity,
            )
        )
    return mappings


def _report_gaps(cls: ClassNode, field_name: str, to_dto: bool, to_entity: bool, ctx: GenerationContext) -> None:
    if not to_dto:
        ctx.diagnostics.consistency(
            f"accessors for {cls.name}.{field_name} were not predicted; entity-to-DTO mapping skipped",
            class_id=cls.id,
            field_name=field_name,
        )
    if not to_entity:
        ctx.diagnostics.consistency(
            f"accessors for {cls.name}.{field_name} were not predicted; DTO-to-entity mapping skipped",
            class_id=cls.id,
            field_name=field_name,
        )


def generate_mapper(cls: ClassNode, ctx: GenerationContext) -> str:
    """
    Generate the mapper component for a class.

    Inherited fields are mapped too; every call into the entity or the DTO
    is checked against the predicted accessors first.
    """
    meta = ctx.meta(cls)
    entity = cls.name
    dto = ctx.naming.dto_name(entity)
    scalars = _scalar_mappings(cls, meta, ctx)
    references = _reference_mappings(cls, meta, ctx)

    imports = [
        ctx.import_of(ENTITIES, entity),
        ctx.import_of(DTO, dto),
        "org.springframework.stereotype.Component",
        "java.util.List",
        "java.util.stream.Collectors",
    ]
    imports.extend(ctx.import_of(ENTITIES, r.target) for r in references)

    lines = header(ctx.package(MAPPERS), imports)
    lines.append("@Component")
    lines.append(f"public class {entity}Mapper {{")
    lines.append("")

    # toDTO
    lines.extend(
        block(
            f"""
            public {dto} toDTO({entity} entity) {{
                if (entity == null) {{
                    return null;
                }}
                {dto} dto = new {dto}();
            """,
            level=1,
        )
    )
    for m in scalars:
        if m.to_dto:
            lines.append(f"{INDENT * 2}dto.{m.dto_setter}(entity.{m.entity_getter}());")
    for r in references:
        if r.to_dto:
            lines.extend(
                [
                    f"{INDENT * 2}if (entity.{r.entity_getter}() != null) {{",
                    f"{INDENT * 3}dto.{r.dto_setter}(entity.{r.entity_getter}().{r.target_getter}());",
                    f"{INDENT * 2}}}",
                ]
            )
    lines.extend([f"{INDENT * 2}return dto;", f"{INDENT}}}", ""])

    # toEntity
    lines.extend(
        block(
            f"""
            public {entity} toEntity({dto} dto) {{
                if (dto == null) {{
                    return null;
                }}
                {entity} entity = new {entity}();
            """,
            level=1,
        )
    )
    for m in scalars:
        if m.to_entity:
            lines.append(f"{INDENT * 2}entity.{m.entity_setter}(dto.{m.dto_getter}());")
    for r in references:
        if r.to_entity:
            lines.extend(_reference_to_entity(r, level=2))
    lines.extend([f"{INDENT * 2}return entity;", f"{INDENT}}}", ""])

    # updateEntityFromDTO: null means unchanged, the key is never overwritten
    lines.extend(
        block(
            f"""
            public void updateEntityFromDTO({entity} entity, {dto} dto) {{
                if (dto == null || entity == null) {{
                    return;
                }}
            """,
            level=1,
        )
    )
    for m in scalars:
        if m.to_entity and not m.is_primary_key:
            lines.extend(
                [
                    f"{INDENT * 2}if (dto.{m.dto_getter}() != null) {{",
                    f"{INDENT * 3}entity.{m.entity_setter}(dto.{m.dto_getter}());",
                    f"{INDENT * 2}}}",
                ]
            )
    for r in references:
        if r.to_entity:
            lines.extend(_reference_to_entity(r, level=2))
    lines.extend([f"{INDENT}}}", ""])

    lines.extend(
        block(
            f"""
            public List<{dto}> toDTOList(List<{entity}> entities) {{
                if (entities == null) {{
                    return List.of();
                }}
                return entities.stream().map(this::toDTO).collect(Collectors.toList());
            }}

            public List<{entity}> toEntityList(List<{dto}> dtos) {{
                if (dtos == null) {{
                    return List.of();
                }}
                return dtos.stream().map(this::toEntity).collect(Collectors.toList());
            }}
            """,
            level=1,
        )
    )
    lines.append("}")

    logger.debug(
        f"Generated {entity}Mapper: {sum(m.to_dto for m in scalars)} scalar and "
        f"{sum(r.to_dto for r in references)} reference mappings"
    )
    return render(lines)


def _reference_to_entity(r: _ReferenceMapping, level: int) -> List[str]:
    pad = INDENT * level
    return [
        f"{pad}if (dto.{r.dto_getter}() != null) {{",
        f"{pad}{INDENT}{r.target} {r.local} = new {r.target}();",
        f"{pad}{INDENT}{r.local}.{r.target_setter}(dto.{r.dto_getter}());",
        f"{pad}{INDENT}entity.{r.entity_setter}({r.local});",
        f"{pad}}}",
    ]
