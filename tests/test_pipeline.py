"""End-to-end tests for the generation pipeline and file writer."""

import json
import pytest
from conftest import BASE_PACKAGE
from uml2spring.generation.engine import (
    compile_diagram,
    generate_backend,
    java_source_root,
    write_artifacts,
)
from uml2spring.ir.diagnostics import ParseError
from uml2spring.ir.parser import parse_diagram


def test_artifact_order_and_count(library_doc):
    """Test the emission order of the artifact groups."""
    result = compile_diagram(library_doc, base_package=BASE_PACKAGE)
    assert [a.relative_path for a in result.artifacts] == [
        "entities/Author.java",
        "entities/Book.java",
        "dto/AuthorDTO.java",
        "dto/BookDTO.java",
        "mappers/AuthorMapper.java",
        "mappers/BookMapper.java",
        "repositories/AuthorRepository.java",
        "repositories/BookRepository.java",
        "services/AuthorService.java",
        "services/AuthorServiceImpl.java",
        "services/BookService.java",
        "services/BookServiceImpl.java",
        "controllers/AuthorController.java",
        "controllers/BookController.java",
    ]
    assert [a.kind for a in result.by_kind("services")] == ["services"] * 4
    assert result.diagnostics == []


def test_join_entities_follow_class_entities(enrollment_doc):
    """Test that join entities come after the class entities."""
    result = compile_diagram(enrollment_doc, base_package=BASE_PACKAGE)
    entities = [a.relative_path for a in result.by_kind("entities")]
    assert entities == ["entities/Student.java", "entities/Course.java", "entities/Enrollment.java"]
    # Join entities get no DTO, mapper, repository, service or controller
    assert len(result.artifacts) == 3 + 2 * 6


def test_generation_is_deterministic(library_doc, zoo_doc):
    """Test that the same diagram always yields identical files."""
    for doc in (library_doc, zoo_doc):
        first = compile_diagram(json.dumps(doc), base_package=BASE_PACKAGE)
        second = compile_diagram(json.dumps(doc), base_package=BASE_PACKAGE)
        assert first.artifacts == second.artifacts


def test_every_file_ends_with_single_newline(library_doc):
    """Test file formatting shared by all generators."""
    result = compile_diagram(library_doc, base_package=BASE_PACKAGE)
    for artifact in result.artifacts:
        assert artifact.content.endswith("}\n")
        assert not artifact.content.endswith("\n\n")
        assert all(line == line.rstrip() for line in artifact.content.splitlines())


def test_inheritance_scenario_is_clean(zoo_doc):
    """Test the parent/child diagram compiles without diagnostics."""
    result = compile_diagram(zoo_doc, base_package=BASE_PACKAGE)
    assert result.diagnostics == []
    assert "public class Dog extends Animal {" in result.get("entities/Dog.java").content
    assert "public class DogDTO extends AnimalDTO implements Serializable {" in result.get("dto/DogDTO.java").content


def test_malformed_document_produces_nothing():
    """Test that a parse error aborts before any artifact exists."""
    with pytest.raises(ParseError):
        compile_diagram("{not json", base_package=BASE_PACKAGE)
    with pytest.raises(ParseError):
        compile_diagram("[]", base_package=BASE_PACKAGE)


def test_generate_backend_accepts_parsed_diagram(library_doc):
    """Test the IR entry point and the configured package."""
    ir = parse_diagram(library_doc)
    result = generate_backend(ir, base_package="org.acme.shop")
    assert result.get("entities/Book.java").content.startswith("package org.acme.shop.entities;\n")
    assert "import org.acme.shop.entities.Book;" in result.get("controllers/BookController.java").content


def test_warnings_do_not_stop_generation():
    """Test that recoverable problems are reported alongside the output."""
    doc = {
        "elements": [
            {"id": "t", "type": "class", "name": "Tag", "attributes": ["label: String"]},
            {
                "id": "p",
                "type": "class",
                "name": "Post",
                "attributes": [
                    {"name": "id", "type": "Long", "isPrimaryKey": True},
                    {"name": "owner", "type": "Long", "isForeignKey": True, "referencedEntity": "Ghost"},
                ],
            },
        ],
        "connections": [],
    }
    result = compile_diagram(doc, base_package=BASE_PACKAGE)
    messages = [d.message for d in result.diagnostics]
    assert any("missing primary key" in m for m in messages)
    assert any("unknown class 'Ghost'" in m for m in messages)
    assert result.get("entities/Tag.java") is not None
    assert "private Long owner;" in result.get("entities/Post.java").content


def test_write_artifacts(tmp_path, library_doc):
    """Test writing files under a Maven source root."""
    result = compile_diagram(library_doc, base_package=BASE_PACKAGE)
    root = java_source_root(tmp_path, BASE_PACKAGE)
    assert root == tmp_path / "src" / "main" / "java" / "com" / "example" / "demo"

    written = write_artifacts(result.artifacts, root)
    assert len(written) == 14
    book = root / "entities" / "Book.java"
    assert book.read_text(encoding="utf-8") == result.get("entities/Book.java").content
    assert (root / "controllers" / "AuthorController.java").exists()
