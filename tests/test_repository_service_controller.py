"""Tests for repository, service and controller generation."""

from dataclasses import replace
from conftest import BASE_PACKAGE, build_context, diagram, element, fk, pk
from uml2spring.generation.engine.controller_generator import generate_controller
from uml2spring.generation.engine.dto_generator import generate_dto
from uml2spring.generation.engine.mapper_generator import generate_mapper
from uml2spring.generation.engine.repository_generator import generate_repository
from uml2spring.generation.engine.service_generator import (
    generate_service_impl,
    generate_service_interface,
)
from uml2spring.ir.diagnostics import CONSISTENCY_WARNING


def _book(ctx, generator):
    return generator(ctx.ir.class_by_name("Book"), ctx)


def test_repository_declarations(library_ctx):
    """Test the repository interface and its derived queries."""
    source = _book(library_ctx, generate_repository)
    assert source.startswith(f"package {BASE_PACKAGE}.repositories;\n")
    assert "import java.util.List;" in source
    assert "@Repository\npublic interface BookRepository extends JpaRepository<Book, Long> {" in source
    for declaration in (
        "List<Book> findByTitle(String title);",
        "boolean existsByTitle(String title);",
        "long countByTitle(String title);",
        "List<Book> findByAuthor(Author author);",
        "List<Book> findByAuthorId(Long authorId);",
        "boolean existsByAuthor(Author author);",
        "long countByAuthor(Author author);",
    ):
        assert f"    {declaration}" in source


def test_repository_without_queries_skips_list_import():
    """Test a key-only class gets a bare repository."""
    ctx = build_context(diagram([element("t", "Token", [pk("value", "String")])]))
    source = generate_repository(ctx.ir.class_by_name("Token"), ctx)
    assert "extends JpaRepository<Token, String> {" in source
    assert "java.util.List" not in source


def test_repository_query_limit():
    """Test that derived queries stop at the configured number of attributes."""
    doc = diagram([element("p", "Product", [pk(), "name: String", "sku: String", "price: Double"])])
    ctx = build_context(doc, max_derived_queries=1)
    source = generate_repository(ctx.ir.class_by_name("Product"), ctx)
    assert "findByName(String name);" in source
    assert "findBySku" not in source
    assert "findByPrice" not in source


def test_service_interface(library_ctx):
    """Test the service contract."""
    source = _book(library_ctx, generate_service_interface)
    assert "public interface BookService {" in source
    assert "    Optional<Book> findById(Long id);" in source
    assert "    Book partialUpdate(Long id, Book entity);" in source
    assert "    void delete(Long id);" in source
    assert "    List<Book> findByAuthorId(Long authorId);" in source
    assert "    long countByAuthor(Author author);" in source
    assert "existsByAuthor" not in source


def test_service_impl_wiring(library_ctx):
    """Test transactional wiring and constructor injection."""
    source = _book(library_ctx, generate_service_impl)
    assert "@Service\n@Transactional\npublic class BookServiceImpl implements BookService {" in source
    assert "    private final BookRepository bookRepository;" in source
    assert "    private final AuthorRepository authorRepository;" in source
    assert "    public BookServiceImpl(BookRepository bookRepository, AuthorRepository authorRepository) {" in source
    assert f"import {BASE_PACKAGE}.repositories.AuthorRepository;" in source
    assert "    @Transactional(readOnly = true)\n    public List<Book> findAll() {" in source
    assert "        return bookRepository.findByTitle(title);" in source


def test_service_impl_crud_semantics(library_ctx):
    """Test update, partial update and delete bodies."""
    source = _book(library_ctx, generate_service_impl)
    assert "updateEntityFields(existing, entity, false);" in source
    assert "updateEntityFields(existing, entity, true);" in source
    assert '.orElseThrow(() -> new EntityNotFoundException("Book not found with id " + id));' in source
    assert "        if (!bookRepository.existsById(id)) {" in source
    assert 'throw new IllegalArgumentException("Book must not be null");' in source
    assert "        if (!partial || incoming.getTitle() != null) {\n            existing.setTitle(incoming.getTitle());" in source
    assert "existing.setId(" not in source


def test_service_impl_resolves_foreign_keys(library_ctx):
    """Test that references are loaded through the related repository."""
    source = _book(library_ctx, generate_service_impl)
    assert "        Author authorRef = entity.getAuthor();" in source
    assert "Author loaded = authorRepository.findById(authorRef.getId())" in source
    assert '"Related Author not found with id " + authorRef.getId()' in source
    assert "entity.setAuthor(loaded);" in source
    assert "entity.setAuthor(null);" in source


def test_self_reference_uses_own_repository():
    """Test that a self reference is resolved through the class's own repository."""
    doc = diagram([element("e", "Employee", [pk(), fk("manager", "Employee")])])
    ctx = build_context(doc)
    source = generate_service_impl(ctx.ir.class_by_name("Employee"), ctx)
    assert "public EmployeeServiceImpl(EmployeeRepository employeeRepository) {" in source
    assert "Employee loaded = employeeRepository.findById(managerRef.getId())" in source


def test_controller_endpoints(library_ctx):
    """Test the fixed CRUD endpoints and the response envelope."""
    source = _book(library_ctx, generate_controller)
    assert source.startswith(f"package {BASE_PACKAGE}.controllers;\n")
    assert '@RestController\n@RequestMapping("/api/book")\n@CrossOrigin(origins = "*")\npublic class BookController {' in source
    assert "    public BookController(BookService bookService, BookMapper bookMapper) {" in source
    assert '    @GetMapping("/{id}")\n    public ResponseEntity<Map<String, Object>> getById(@PathVariable Long id) {' in source
    assert "return respond(HttpStatus.CREATED, bookMapper.toDTO(saved), \"Book created successfully\");" in source
    assert '    @PatchMapping("/{id}")' in source
    assert '    @DeleteMapping("/batch")' in source
    assert '    @GetMapping("/count")' in source
    assert '    @GetMapping("/exists/{id}")' in source
    assert 'body.put("success", status.is2xxSuccessful());' in source
    assert "status = HttpStatus.NOT_FOUND;" in source
    assert "status = HttpStatus.BAD_REQUEST;" in source


def test_controller_search_and_navigation(library_ctx):
    """Test endpoints emitted for predicted queries and relations."""
    source = _book(library_ctx, generate_controller)
    assert '    @GetMapping("/search/title")' in source
    assert "findByTitle(@RequestParam String value)" in source
    assert '    @GetMapping("/by-author/{relatedId}")' in source
    assert "bookMapper.toDTOList(bookService.findByAuthorId(relatedId))" in source
    assert '    @GetMapping("/{id}/author")' in source
    assert "Author related = found.getAuthor();" in source
    assert 'data.put("id", related.getId());' in source


def test_controller_path_and_date_search():
    """Test kebab-case resource paths and date-typed search parameters."""
    doc = diagram([element("o", "OrderLine", [pk(), "shippedOn: Date"])])
    ctx = build_context(doc)
    source = generate_controller(ctx.ir.class_by_name("OrderLine"), ctx)
    assert '@RequestMapping("/api/order-line")' in source
    assert '@GetMapping("/search/shipped-on")' in source
    assert "@RequestParam @DateTimeFormat(iso = DateTimeFormat.ISO.DATE) LocalDate value" in source
    assert "import org.springframework.format.annotation.DateTimeFormat;" in source
    assert "import java.time.LocalDate;" in source


def _without_entity_field(ctx, class_name, field_name):
    """Withhold one predicted entity accessor pair of a class."""
    cls = ctx.ir.class_by_name(class_name)
    meta = ctx.meta(cls)
    entity_all = {k: v for k, v in meta.entity_all.items() if k != field_name}
    ctx.metadata[cls.id] = replace(meta, entity_all=entity_all)


def test_foreign_key_id_clashing_with_column():
    """Test that a column named like a foreign key's id field keeps its declarations unique."""
    doc = diagram(
        [
            element("author", "Author", [pk(), "name: String"]),
            element("book", "Book", [pk(), "authorId: Long", fk("author", "Author")]),
        ]
    )
    ctx = build_context(doc)

    dto = _book(ctx, generate_dto)
    assert dto.count("private Long authorId;") == 1
    assert "// FK to Author" not in dto
    assert dto.count("public Long getAuthorId() {") == 1

    repository = _book(ctx, generate_repository)
    assert repository.count("findByAuthorId(") == 1
    assert "    List<Book> findByAuthorId(Long authorId);" in repository
    assert "    List<Book> findByAuthor(Author author);" in repository

    assert _book(ctx, generate_service_interface).count("findByAuthorId(") == 1
    assert _book(ctx, generate_service_impl).count("public List<Book> findByAuthorId(") == 1

    controller = _book(ctx, generate_controller)
    assert controller.count("public ResponseEntity<Map<String, Object>> findByAuthorId(") == 1
    assert '@GetMapping("/by-author/{relatedId}")' not in controller

    mapper = _book(ctx, generate_mapper)
    assert "dto.setAuthorId(entity.getAuthorId());" in mapper
    assert "entity.getAuthor().getId()" not in mapper
    assert "authorTemp" not in mapper

    warnings = ctx.diagnostics.by_code(CONSISTENCY_WARNING)
    messages = [w.message for w in warnings if w.field == "author"]
    assert any("DTO id field 'authorId'" in m for m in messages)
    assert any("findByAuthorId" in m for m in messages)


def test_calls_skipped_when_target_key_is_not_predicted(library_ctx):
    """Test that mapper, service and controller skip calls into an undeclared key accessor."""
    _without_entity_field(library_ctx, "Author", "id")

    mapper = _book(library_ctx, generate_mapper)
    assert "getAuthor().getId()" not in mapper
    assert "setAuthor(" not in mapper
    service = _book(library_ctx, generate_service_impl)
    assert "authorRef" not in service
    assert "setAuthor(loaded)" not in service
    controller = _book(library_ctx, generate_controller)
    assert '@GetMapping("/{id}/author")' not in controller

    messages = [w.message for w in library_ctx.diagnostics.by_code(CONSISTENCY_WARNING) if w.field == "author"]
    assert any("entity-to-DTO mapping skipped" in m for m in messages)
    assert any("DTO-to-entity mapping skipped" in m for m in messages)
    assert any("cannot resolve Book.author" in m for m in messages)
    assert any("navigation endpoint for Book.author skipped" in m for m in messages)


def test_update_skips_field_without_accessors(library_ctx):
    """Test that updateEntityFields omits a field whose accessors are not predicted."""
    _without_entity_field(library_ctx, "Book", "title")
    service = _book(library_ctx, generate_service_impl)
    assert "existing.setTitle(" not in service
    warnings = [w for w in library_ctx.diagnostics.by_code(CONSISTENCY_WARNING) if w.field == "title"]
    assert any("not copied on update" in w.message for w in warnings)
