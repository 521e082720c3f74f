"""Tests for JPA entity generation."""

from conftest import build_context, connection, diagram, element, fk, pk
from uml2spring.generation.engine.entity_generator import generate_entity
from uml2spring.ir.diagnostics import VALIDATION_WARNING


def _entity(ctx, name):
    return generate_entity(ctx.ir.class_by_name(name), ctx)


def test_entity_header_and_key(library_ctx):
    """Test package, annotations and the generated identity key."""
    source = _entity(library_ctx, "Book")
    assert source.startswith("package com.example.demo.entities;\n")
    assert "import jakarta.persistence.*;" in source
    assert '@Entity\n@Table(name = "book")\npublic class Book {' in source
    assert "    @Id\n    @GeneratedValue(strategy = GenerationType.IDENTITY)\n" in source
    assert '    @Column(name = "id", nullable = false)\n    private Long id;' in source
    assert source.endswith("}\n")


def test_scalar_columns_carry_validation(library_ctx):
    """Test column and bean-validation annotations for a String field."""
    source = _entity(library_ctx, "Book")
    assert '@NotBlank(message = "title is required")' in source
    assert '@Column(name = "title", length = 255)\n    private String title;' in source
    assert "public String getTitle() {" in source
    assert "public void setTitle(String title) {" in source


def test_many_to_one_field(library_ctx):
    """Test the reference field and its id-accepting JSON setter."""
    source = _entity(library_ctx, "Book")
    assert "    @ManyToOne(fetch = FetchType.LAZY)\n" in source
    assert '@JoinColumn(name = "author", nullable = true)' in source
    assert '@JsonIgnoreProperties(value = {"hibernateLazyInitializer", "handler"}, allowSetters = true)' in source
    assert "    private Author author;" in source
    assert '@JsonSetter("authorFromId")' in source
    assert "public void setAuthorFromId(Object idOrEntity) {" in source
    assert (
        "related.setId(idOrEntity instanceof Number ? ((Number) idOrEntity).longValue() "
        ": Long.parseLong(idOrEntity.toString()));"
    ) in source


def test_one_to_many_collection(library_ctx):
    """Test the inverse collection of inbound foreign keys."""
    source = _entity(library_ctx, "Author")
    assert '@OneToMany(mappedBy = "author", fetch = FetchType.LAZY, cascade = CascadeType.ALL)' in source
    assert '@JsonIgnoreProperties(value = {"author", "hibernateLazyInitializer", "handler"}, allowSetters = true)' in source
    assert "private List<Book> books = new ArrayList<>();" in source
    assert "import java.util.List;" in source
    assert "import java.util.ArrayList;" in source
    assert "public List<Book> getBooks() {" in source


def test_equality_uses_primary_key(library_ctx):
    """Test equals/hashCode over the key of a root entity."""
    source = _entity(library_ctx, "Book")
    assert "return Objects.equals(id, that.id);" in source
    assert "return Objects.hash(id);" in source


def test_type_specific_annotations():
    """Test validation annotations and imports driven by types and SQL hints."""
    doc = diagram(
        [
            element(
                "e",
                "Event",
                [
                    pk("code", "String"),
                    {"name": "title", "type": "String", "sqlType": "VARCHAR(80)"},
                    "seats: Integer",
                    "price: Double",
                    "day: Date",
                    "active: Boolean",
                ],
            )
        ]
    )
    ctx = build_context(doc)
    source = _entity(ctx, "Event")
    assert "@GeneratedValue" not in source
    assert '@Column(name = "code", nullable = false, length = 255)\n    private String code;' in source
    assert '@Size(max = 80, message = "title must be at most 80 characters")' in source
    assert '@Column(name = "title", length = 80)' in source
    assert '@Min(value = 0, message = "seats must be zero or positive")' in source
    assert '@DecimalMin(value = "0.0", message = "price must be zero or positive")' in source
    assert '@PastOrPresent(message = "day cannot be in the future")' in source
    assert "import java.time.LocalDate;" in source
    assert "private LocalDate day;" in source
    assert '@NotNull(message = "active is required")\n    @Column(name = "active")' in source


def test_default_values():
    """Test literal defaults and rejected defaults."""
    doc = diagram(
        [
            element(
                "t",
                "Ticket",
                [
                    pk(),
                    {"name": "status", "type": "String", "defaultValue": "open"},
                    {"name": "priority", "type": "Integer", "defaultValue": 3},
                    {"name": "budget", "type": "Long", "defaultValue": "100"},
                    {"name": "weight", "type": "Integer", "defaultValue": "heavy"},
                ],
            )
        ]
    )
    ctx = build_context(doc)
    source = _entity(ctx, "Ticket")
    assert 'private String status = "open";' in source
    assert "private Integer priority = 3;" in source
    assert "private Long budget = 100L;" in source
    assert "private Integer weight;" in source
    warnings = ctx.diagnostics.by_code(VALIDATION_WARNING)
    assert len(warnings) == 1 and warnings[0].field == "weight"


def test_synthesized_key_for_class_without_one():
    """Test that a class without a key gets a generated id."""
    ctx = build_context(diagram([element("t", "Tag", ["label: String"])]))
    source = _entity(ctx, "Tag")
    assert "    @Id\n    @GeneratedValue(strategy = GenerationType.IDENTITY)\n" in source
    assert "private Long id;" in source
    assert "return Objects.hash(id);" in source


def test_parent_and_child_entities(zoo_ctx):
    """Test JOINED inheritance on the parent and the child's key join."""
    animal = _entity(zoo_ctx, "Animal")
    dog = _entity(zoo_ctx, "Dog")
    assert "@Inheritance(strategy = InheritanceType.JOINED)" in animal
    assert "@Inheritance" not in dog
    assert '@PrimaryKeyJoinColumn(name = "id")\npublic class Dog extends Animal {' in dog
    assert "private String breed;" in dog
    assert "private Long id;" not in dog
    assert "private String name;" not in dog
    assert "getId()" not in dog
    assert "getName()" not in dog
    assert "return super.equals(o);" in dog
    assert "return super.hashCode();" in dog


def test_child_with_own_key_joins_on_it():
    """Test that a child's own key names the join column while references use the inherited id."""
    doc = diagram(
        [
            element("animal", "Animal", [pk()]),
            element("dog", "Dog", [pk("dog_id"), "breed: String"]),
            element("owner", "Owner", [pk(), fk("dog", "Dog")]),
        ],
        [connection("c1", "animal", "dog", "inheritance", "1", "*")],
    )
    ctx = build_context(doc)
    dog = _entity(ctx, "Dog")
    assert '@PrimaryKeyJoinColumn(name = "dog_id")\npublic class Dog extends Animal {' in dog
    assert "dogId" not in dog
    owner = _entity(ctx, "Owner")
    assert "public void setDogFromId(Object idOrEntity) {" in owner
    assert "        related.setId(" in owner


def test_self_reference():
    """Test a class referencing itself."""
    doc = diagram([element("e", "Employee", [pk(), fk("manager", "Employee")])])
    ctx = build_context(doc)
    source = _entity(ctx, "Employee")
    assert "private Employee manager;" in source
    assert "private List<Employee> employees = new ArrayList<>();" not in source
