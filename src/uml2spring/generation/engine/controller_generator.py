"""REST controllers exposing the service contract."""

from typing import List
from uml2spring.config.logging import get_logger
from uml2spring.generation.constants import API_PREFIX, CONTROLLERS, DTO, ENTITIES, MAPPERS, SERVICES
from uml2spring.generation.context import GenerationContext
from uml2spring.generation.java import block, header, render
from uml2spring.ir.diagram import ClassNode

logger = get_logger(__name__)

_DATE_FORMATS = {
    "LocalDate": "@DateTimeFormat(iso = DateTimeFormat.ISO.DATE) ",
    "LocalDateTime": "@DateTimeFormat(iso = DateTimeFormat.ISO.DATE_TIME) ",
}


def generate_controller(cls: ClassNode, ctx: GenerationContext) -> str:
    """
    Generate the REST controller for a class.

    Every response is a JSON envelope ``{success, data, message}``. Search
    and relationship-navigation endpoints are emitted only for predicted
    service methods and entity accessors.
    """
    entity = cls.name
    dto = ctx.naming.dto_name(entity)
    meta = ctx.meta(cls)
    pk = ctx.primary_key(cls)
    service = f"{ctx.naming.camel_case(entity)}Service"
    mapper = f"{ctx.naming.camel_case(entity)}Mapper"
    path = f"{API_PREFIX}/{ctx.naming.resource_path(entity)}"
    java_types = {pk.java_type}

    imports = [
        ctx.import_of(ENTITIES, entity),
        ctx.import_of(DTO, dto),
        ctx.import_of(MAPPERS, f"{entity}Mapper"),
        ctx.import_of(SERVICES, f"{entity}Service"),
        "jakarta.persistence.EntityNotFoundException",
        "org.springframework.http.HttpStatus",
        "org.springframework.http.ResponseEntity",
        "org.springframework.web.bind.annotation.*",
        "java.util.HashMap",
        "java.util.List",
        "java.util.Map",
    ]

    # Body first; the header needs the imports collected while emitting it
    lines: List[str] = []
    not_found = f'"{entity} not found with id " + id'
    lines.extend(
        block(
            f"""
            @RestController
            @RequestMapping("{path}")
            @CrossOrigin(origins = "*")
            public class {entity}Controller {{

                private final {entity}Service {service};
                private final {entity}Mapper {mapper};

                public {entity}Controller({entity}Service {service}, {entity}Mapper {mapper}) {{
                    this.{service} = {service};
                    this.{mapper} = {mapper};
                }}

                @GetMapping
                public ResponseEntity<Map<String, Object>> getAll() {{
                    try {{
                        List<{dto}> items = {mapper}.toDTOList({service}.findAll());
                        return respond(HttpStatus.OK, items, "{entity} list retrieved successfully");
                    }} catch (Exception e) {{
                        return handleError(e);
                    }}
                }}

                @GetMapping("/{{id}}")
                public ResponseEntity<Map<String, Object>> getById(@PathVariable {pk.java_type} id) {{
                    try {{
                        return {service}.findById(id)
                                .map(found -> respond(HttpStatus.OK, {mapper}.toDTO(found), "{entity} found"))
                                .orElseGet(() -> respond(HttpStatus.NOT_FOUND, null, {not_found}));
                    }} catch (Exception e) {{
                        return handleError(e);
                    }}
                }}

                @PostMapping
                public ResponseEntity<Map<String, Object>> create(@RequestBody {dto} dto) {{
                    try {{
                        {entity} saved = {service}.create({mapper}.toEntity(dto));
                        return respond(HttpStatus.CREATED, {mapper}.toDTO(saved), "{entity} created successfully");
                    }} catch (Exception e) {{
                        return handleError(e);
                    }}
                }}

                @PutMapping("/{{id}}")
                public ResponseEntity<Map<String, Object>> update(@PathVariable {pk.java_type} id, @RequestBody {dto} dto) {{
                    try {{
                        {entity} saved = {service}.update(id, {mapper}.toEntity(dto));
                        return respond(HttpStatus.OK, {mapper}.toDTO(saved), "{entity} updated successfully");
                    }} catch (Exception e) {{
                        return handleError(e);
                    }}
                }}

                @PatchMapping("/{{id}}")
                public ResponseEntity<Map<String, Object>> partialUpdate(@PathVariable {pk.java_type} id, @RequestBody {dto} dto) {{
                    try {{
                        {entity} saved = {service}.partialUpdate(id, {mapper}.toEntity(dto));
                        return respond(HttpStatus.OK, {mapper}.toDTO(saved), "{entity} updated successfully");
                    }} catch (Exception e) {{
                        return handleError(e);
                    }}
                }}

                @DeleteMapping("/{{id}}")
                public ResponseEntity<Map<String, Object>> delete(@PathVariable {pk.java_type} id) {{
                    try {{
                        {service}.delete(id);
                        return respond(HttpStatus.OK, null, "{entity} deleted successfully");
                    }} catch (Exception e) {{
                        return handleError(e);
                    }}
                }}

                @DeleteMapping("/batch")
                public ResponseEntity<Map<String, Object>> deleteBatch(@RequestBody List<{pk.java_type}> ids) {{
                    try {{
                        for ({pk.java_type} id : ids) {{
                            {service}.delete(id);
                        }}
                        return respond(HttpStatus.OK, ids.size(), "{entity} batch deleted successfully");
                    }} catch (Exception e) {{
                        return handleError(e);
                    }}
                }}

                @GetMapping("/count")
                public ResponseEntity<Map<String, Object>> count() {{
                    try {{
                        return respond(HttpStatus.OK, {service}.count(), "{entity} count retrieved successfully");
                    }} catch (Exception e) {{
                        return handleError(e);
                    }}
                }}

                @GetMapping("/exists/{{id}}")
                public ResponseEntity<Map<String, Object>> exists(@PathVariable {pk.java_type} id) {{
                    try {{
                        return respond(HttpStatus.OK, {service}.existsById(id), "{entity} existence checked");
                    }} catch (Exception e) {{
                        return handleError(e);
                    }}
                }}
            """
        )
    )

    for member in ctx.derived_query_members(cls):
        name = f"findBy{ctx.naming.capitalize(member.field_name)}"
        if name not in meta.service_methods:
            continue
        java_types.add(member.java_type)
        fmt = _DATE_FORMATS.get(member.java_type, "")
        if fmt:
            imports.append("org.springframework.format.annotation.DateTimeFormat")
        lines.append("")
        lines.extend(
            _search_endpoint(
                f"/search/{ctx.naming.kebab_case(member.field_name)}",
                name,
                f"@RequestParam {fmt}{member.java_type} value",
                f"{service}.{name}(value)",
                mapper,
                entity,
            )
        )

    for ref in ctx.members.references(cls):
        name = ref.id_query
        if name is None or name not in meta.service_methods:
            continue
        java_types.add(ref.target_pk.java_type)
        lines.append("")
        lines.extend(
            _search_endpoint(
                f"/by-{ctx.naming.kebab_case(ref.field_name)}/{{relatedId}}",
                name,
                f"@PathVariable {ref.target_pk.java_type} relatedId",
                f"{service}.{name}(relatedId)",
                mapper,
                entity,
            )
        )

    for ref in ctx.members.chain_references(cls):
        getter = ctx.naming.getter(ref.field_name)
        pk_getter = ctx.naming.getter(ref.target_pk.field_name)
        if not (
            meta.has_entity_getter(ref.field_name, getter)
            and ctx.meta(ref.target).has_entity_getter(ref.target_pk.field_name, pk_getter)
        ):
            ctx.diagnostics.consistency(
                f"navigation endpoint for {entity}.{ref.field_name} skipped; accessors were not predicted",
                class_id=cls.id,
                field_name=ref.field_name,
            )
            continue
        imports.append(ctx.import_of(ENTITIES, ref.target.name))
        lines.append("")
        lines.extend(
            block(
                f"""
                @GetMapping("/{{id}}/{ctx.naming.kebab_case(ref.field_name)}")
                public ResponseEntity<Map<String, Object>> {getter}(@PathVariable {pk.java_type} id) {{
                    try {{
                        {entity} found = {service}.findById(id)
                                .orElseThrow(() -> new EntityNotFoundException({not_found}));
                        {ref.target.name} related = found.{getter}();
                        if (related == null) {{
                            return respond(HttpStatus.NOT_FOUND, null, "{entity} " + id + " has no {ref.field_name}");
                        }}
                        Map<String, Object> data = new HashMap<>();
                        data.put("id", related.{pk_getter}());
                        return respond(HttpStatus.OK, data, "{ref.target.name} retrieved successfully");
                    }} catch (Exception e) {{
                        return handleError(e);
                    }}
                }}
                """,
                level=1,
            )
        )

    lines.append("")
    lines.extend(
        block(
            """
            private ResponseEntity<Map<String, Object>> respond(HttpStatus status, Object data, String message) {
                Map<String, Object> body = new HashMap<>();
                body.put("success", status.is2xxSuccessful());
                body.put("data", data);
                body.put("message", message);
                return ResponseEntity.status(status).body(body);
            }

            private ResponseEntity<Map<String, Object>> handleError(Exception e) {
                HttpStatus status = HttpStatus.INTERNAL_SERVER_ERROR;
                if (e instanceof EntityNotFoundException) {
                    status = HttpStatus.NOT_FOUND;
                } else if (e instanceof IllegalArgumentException) {
                    status = HttpStatus.BAD_REQUEST;
                }
                return respond(status, null, e.getMessage());
            }
            """,
            level=1,
        )
    )
    lines.append("}")

    imports.extend(ctx.naming.imports_for(java_types))

    logger.debug(f"Generated {entity}Controller at {path}")
    return render(header(ctx.package(CONTROLLERS), imports) + lines)


def _search_endpoint(route: str, name: str, param: str, call: str, mapper: str, entity: str) -> List[str]:
    return block(
        f"""
        @GetMapping("{route}")
        public ResponseEntity<Map<String, Object>> {name}({param}) {{
            try {{
                return respond(HttpStatus.OK, {mapper}.toDTOList({call}), "{entity} search completed");
            }} catch (Exception e) {{
                return handleError(e);
            }}
        }}
        """,
        level=1,
    )
