"""Tests for many-to-many collections and association-table join entities."""

from conftest import BASE_PACKAGE, build_context, diagram, element, fk, pk
from uml2spring.generation.engine.entity_generator import generate_entity
from uml2spring.generation.engine.join_entity_generator import generate_join_entity, key_columns
from uml2spring.generation.engine.pipeline import compile_diagram
from uml2spring.ir.diagnostics import CONSISTENCY_WARNING


def test_owner_side_declares_join_table(campus_doc):
    """Test the owning collection and its @JoinTable."""
    ctx = build_context(campus_doc)
    source = generate_entity(ctx.ir.class_by_name("Student"), ctx)
    expected = "\n".join(
        [
            "    @ManyToMany(fetch = FetchType.LAZY, cascade = {CascadeType.PERSIST, CascadeType.MERGE})",
            "    @JoinTable(",
            '        name = "student_course",',
            '        joinColumns = @JoinColumn(name = "student_id"),',
            '        inverseJoinColumns = @JoinColumn(name = "course_id")',
            "    )",
            '    @JsonIgnoreProperties(value = {"students", "hibernateLazyInitializer", "handler"}, allowSetters = true)',
            "    private List<Course> courses = new ArrayList<>();",
        ]
    )
    assert expected in source
    assert "public List<Course> getCourses() {" in source


def test_inverse_side_is_mapped_by_owner(campus_doc):
    """Test that the target end maps onto the owner's collection."""
    ctx = build_context(campus_doc)
    source = generate_entity(ctx.ir.class_by_name("Course"), ctx)
    assert '@ManyToMany(mappedBy = "courses", fetch = FetchType.LAZY)' in source
    assert "private List<Student> students = new ArrayList<>();" in source
    assert "@JoinTable" not in source


def test_join_entity_with_embedded_key(enrollment_doc):
    """Test the join entity built for an association table."""
    ctx = build_context(enrollment_doc)
    source = generate_join_entity(ctx.ir.association_tables[0], ctx)

    assert source.startswith(f"package {BASE_PACKAGE}.entities;\n")
    assert '@Entity\n@Table(name = "enrollment")\npublic class Enrollment {' in source
    assert "    @EmbeddedId\n    private EnrollmentId id;" in source
    assert '    @MapsId("studentId")\n    @JoinColumn(name = "student_id")' in source
    assert '    @MapsId("courseId")\n    @JoinColumn(name = "course_id")' in source
    assert "    private Student student;" in source
    assert "    private Course course;" in source
    assert '    @NotNull\n    @Column(name = "grade")\n    private Double grade;' in source
    assert "public Enrollment(EnrollmentId id) {" in source
    assert "this.id.setStudentId(student.getId());" in source
    assert "return Objects.hash(id);" in source

    assert "    @Embeddable\n    public static class EnrollmentId implements Serializable {" in source
    assert "private static final long serialVersionUID = 1L;" in source
    assert "        private Long studentId;" in source
    assert "        public EnrollmentId(Long studentId, Long courseId) {" in source
    assert "            return Objects.equals(studentId, that.studentId) && Objects.equals(courseId, that.courseId);" in source
    assert "            return Objects.hash(studentId, courseId);" in source
    assert len(ctx.diagnostics) == 0


def test_key_column_types():
    """Test the precedence used to pick each key sub-field type."""
    doc = diagram(
        [
            element("a", "Account", [pk("code", "String")]),
            element("r", "Region", [pk("id", "Integer")]),
            element(
                "link",
                "AccountRegion",
                [
                    fk("account_code", "Account", type_="String"),
                    fk("region_id", "Region", type_="String"),
                    fk("other_id", "Ghost", type_="String", referencedType="Long"),
                ],
                stereotype="association_table",
            ),
        ]
    )
    ctx = build_context(doc)
    columns = key_columns(ctx.ir.association_tables[0], ctx)
    assert [(c.key_field, c.java_type) for c in columns] == [
        ("accountId", "String"),
        ("regionId", "Integer"),
        ("ghostId", "Long"),
    ]


def test_unknown_target_keeps_key_column_only():
    """Test that an FK to an unknown class yields only its key sub-field."""
    doc = diagram(
        [
            element("a", "Account", [pk()]),
            element(
                "link",
                "AccountGhost",
                [fk("account_id", "Account"), fk("ghost_id", "Ghost")],
                stereotype="association_table",
            ),
        ]
    )
    ctx = build_context(doc)
    source = generate_join_entity(ctx.ir.association_tables[0], ctx)
    assert "private Account account;" in source
    assert "private Ghost ghost;" not in source
    assert "        private Long ghostId;" in source
    assert any("unknown class 'Ghost'" in d.message for d in ctx.diagnostics.by_code(CONSISTENCY_WARNING))


def test_duplicate_referenced_class_uses_fk_names():
    """Test that two keys to the same class get distinct relation fields."""
    doc = diagram(
        [
            element("p", "Person", [pk()]),
            element(
                "f",
                "Friendship",
                [fk("requester", "Person"), fk("addressee", "Person")],
                stereotype="association_table",
            ),
        ]
    )
    ctx = build_context(doc)
    columns = key_columns(ctx.ir.association_tables[0], ctx)
    assert [c.relation_field for c in columns] == ["person", "addressee"]
    assert [c.key_field for c in columns] == ["personId", "addresseeId"]


def test_edge_realized_once(campus_doc, enrollment_doc):
    """Test that a many-to-many edge becomes collections or a join entity, never both."""
    direct = compile_diagram(campus_doc, base_package=BASE_PACKAGE)
    assert direct.get("entities/Enrollment.java") is None
    assert "List<Course> courses" in direct.get("entities/Student.java").content
    assert "List<Student> students" in direct.get("entities/Course.java").content

    joined = compile_diagram(enrollment_doc, base_package=BASE_PACKAGE)
    assert joined.get("entities/Enrollment.java") is not None
    assert "List<" not in joined.get("entities/Student.java").content
    assert "List<" not in joined.get("entities/Course.java").content
    assert joined.diagnostics == []
