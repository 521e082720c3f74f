"""Tests for DTO and mapper generation."""

from conftest import BASE_PACKAGE, build_context, connection, diagram, element, fk, pk
from uml2spring.generation.engine.dto_generator import generate_dto
from uml2spring.generation.engine.mapper_generator import generate_mapper
from uml2spring.ir.diagnostics import CONSISTENCY_WARNING


def test_dto_fields(library_ctx):
    """Test that a DTO carries scalars and the referenced key."""
    source = generate_dto(library_ctx.ir.class_by_name("Book"), library_ctx)
    assert source.startswith(f"package {BASE_PACKAGE}.dto;\n")
    assert "import java.io.Serializable;" in source
    assert "public class BookDTO implements Serializable {" in source
    assert "    private static final long serialVersionUID = 1L;" in source
    assert "    private Long id;\n    private String title;\n    private Long authorId; // FK to Author" in source
    assert "private Author author" not in source
    assert "public Long getAuthorId() {" in source
    assert "public void setAuthorId(Long authorId) {" in source


def test_dto_has_no_collections(library_ctx):
    """Test that inverse collections stay out of the DTO."""
    source = generate_dto(library_ctx.ir.class_by_name("Author"), library_ctx)
    assert "List" not in source
    assert "books" not in source


def test_child_dto_extends_parent(zoo_ctx):
    """Test DTO inheritance mirrors the entity hierarchy."""
    source = generate_dto(zoo_ctx.ir.class_by_name("Dog"), zoo_ctx)
    assert "public class DogDTO extends AnimalDTO implements Serializable {" in source
    assert "private String breed;" in source
    assert "private Long id;" not in source


def test_dto_uses_target_key_type():
    """Test that the id field takes the referenced key's type."""
    doc = diagram(
        [
            element("c", "Country", [pk("code", "String")]),
            element("city", "City", [pk(), fk("country", "Country", type_="Long")]),
        ]
    )
    ctx = build_context(doc)
    source = generate_dto(ctx.ir.class_by_name("City"), ctx)
    assert "private String countryId; // FK to Country" in source


def test_mapper_to_dto(library_ctx):
    """Test entity-to-DTO statements."""
    source = generate_mapper(library_ctx.ir.class_by_name("Book"), library_ctx)
    assert source.startswith(f"package {BASE_PACKAGE}.mappers;\n")
    assert f"import {BASE_PACKAGE}.entities.Book;" in source
    assert f"import {BASE_PACKAGE}.entities.Author;" in source
    assert f"import {BASE_PACKAGE}.dto.BookDTO;" in source
    assert "@Component\npublic class BookMapper {" in source
    assert "    public BookDTO toDTO(Book entity) {" in source
    assert "        dto.setTitle(entity.getTitle());" in source
    assert (
        "        if (entity.getAuthor() != null) {\n"
        "            dto.setAuthorId(entity.getAuthor().getId());\n"
        "        }"
    ) in source
    assert not library_ctx.diagnostics.by_code(CONSISTENCY_WARNING)


def test_mapper_to_entity(library_ctx):
    """Test DTO-to-entity statements and the reference placeholder."""
    source = generate_mapper(library_ctx.ir.class_by_name("Book"), library_ctx)
    assert "    public Book toEntity(BookDTO dto) {" in source
    assert "        entity.setId(dto.getId());" in source
    assert (
        "        if (dto.getAuthorId() != null) {\n"
        "            Author authorTemp = new Author();\n"
        "            authorTemp.setId(dto.getAuthorId());\n"
        "            entity.setAuthor(authorTemp);\n"
        "        }"
    ) in source
    assert "return dtos.stream().map(this::toEntity).collect(Collectors.toList());" in source


def test_update_from_dto_skips_primary_key(library_ctx):
    """Test that updateEntityFromDTO never overwrites the key."""
    source = generate_mapper(library_ctx.ir.class_by_name("Book"), library_ctx)
    update = source.split("public void updateEntityFromDTO(Book entity, BookDTO dto) {")[1]
    update = update.split("public List<BookDTO> toDTOList")[0]
    assert "if (dto.getTitle() != null) {" in update
    assert "entity.setTitle(dto.getTitle());" in update
    assert "setId(" not in update.replace("authorTemp.setId(", "")
    assert "entity.setAuthor(authorTemp);" in update


def test_child_mapper_maps_inherited_fields(zoo_ctx):
    """Test that a child's mapper covers the whole chain."""
    source = generate_mapper(zoo_ctx.ir.class_by_name("Dog"), zoo_ctx)
    assert "dto.setId(entity.getId());" in source
    assert "dto.setName(entity.getName());" in source
    assert "dto.setBreed(entity.getBreed());" in source
    assert "entity.setBreed(dto.getBreed());" in source
    assert not zoo_ctx.diagnostics.by_code(CONSISTENCY_WARNING)


def test_reference_to_child_with_own_key_uses_inherited_key():
    """Test that a reference to a JOINED child maps through the root's id accessor."""
    doc = diagram(
        [
            element("animal", "Animal", [pk()]),
            element("dog", "Dog", [pk("dog_id"), "breed: String"]),
            element("owner", "Owner", [pk(), fk("dog", "Dog")]),
        ],
        [connection("c1", "animal", "dog", "inheritance", "1", "*")],
    )
    ctx = build_context(doc)
    source = generate_mapper(ctx.ir.class_by_name("Owner"), ctx)
    assert "            dto.setDogId(entity.getDog().getId());" in source
    assert "            dogTemp.setId(dto.getDogId());" in source
    assert "getDog().getDogId()" not in source
    assert "    private Long dogId; // FK to Dog" in generate_dto(ctx.ir.class_by_name("Owner"), ctx)
    assert not ctx.diagnostics.by_code(CONSISTENCY_WARNING)
