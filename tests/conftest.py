"""Shared diagram fixtures."""

import copy
import pytest
from uml2spring.generation.context import GenerationContext
from uml2spring.ir.diagnostics import DiagnosticsCollector
from uml2spring.ir.parser import parse_diagram

BASE_PACKAGE = "com.example.demo"


def pk(name="id", type_="Long"):
    return {"name": name, "type": type_, "isPrimaryKey": True}


def fk(name, entity, type_="Long", **extra):
    return {"name": name, "type": type_, "isForeignKey": True, "referencedEntity": entity, **extra}


def element(id_, name, attributes, **extra):
    return {"id": id_, "type": "class", "name": name, "attributes": attributes, **extra}


def connection(id_, source, target, type_="association", source_mult="1", target_mult="*", **extra):
    return {
        "id": id_,
        "source": source,
        "target": target,
        "type": type_,
        "sourceMultiplicity": source_mult,
        "targetMultiplicity": target_mult,
        **extra,
    }


def diagram(elements, connections=()):
    return {"elements": list(elements), "connections": list(connections)}


LIBRARY = diagram(
    [
        element("author", "Author", [pk(), "name: String"]),
        element("book", "Book", [pk(), "title: String", fk("author", "Author")]),
    ],
    [connection("c1", "author", "book")],
)

CAMPUS = diagram(
    [
        element("student", "Student", [pk(), "name: String"]),
        element("course", "Course", [pk(), "title: String"]),
    ],
    [connection("c1", "student", "course", "many-to-many-direct", "*", "*")],
)

ENROLLMENT = element(
    "enrollment",
    "Enrollment",
    [fk("student_id", "Student"), fk("course_id", "Course"), "grade: Double"],
    stereotype="association_table",
)

ZOO = diagram(
    [
        element("animal", "Animal", [pk(), "name: String"]),
        element("dog", "Dog", [pk(), "name: String", "breed: String"]),
    ],
    [connection("c1", "animal", "dog", "inheritance", "1", "*")],
)


def build_context(document, max_derived_queries=3):
    """Parse a document and run the analysis stages."""
    diagnostics = DiagnosticsCollector()
    ir = parse_diagram(copy.deepcopy(document), diagnostics)
    return GenerationContext.build(ir, BASE_PACKAGE, max_derived_queries, diagnostics)


@pytest.fixture
def library_doc():
    """Author 1 --- * Book with a foreign key on Book."""
    return copy.deepcopy(LIBRARY)


@pytest.fixture
def campus_doc():
    """Student * --- * Course with no association table."""
    return copy.deepcopy(CAMPUS)


@pytest.fixture
def enrollment_doc():
    """Student * --- * Course realized by an Enrollment association table."""
    doc = copy.deepcopy(CAMPUS)
    doc["elements"].append(copy.deepcopy(ENROLLMENT))
    return doc


@pytest.fixture
def zoo_doc():
    """Animal parent with a Dog child."""
    return copy.deepcopy(ZOO)


@pytest.fixture
def library_ctx(library_doc):
    return build_context(library_doc)


@pytest.fixture
def zoo_ctx(zoo_doc):
    return build_context(zoo_doc)
