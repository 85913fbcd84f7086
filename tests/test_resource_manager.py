import pytest

from core.exceptions import ConflictError, ForbiddenError, InvalidArgumentError, NotFoundError


def _add(resources, contributor_id, role="teacher", **overrides):
    fields = dict(
        course_id="CS101",
        title="Big-O cheat sheet",
        description="Common complexities",
        resource_type="pdf",
        content="https://files/bigo.pdf",
    )
    fields.update(overrides)
    return resources.add_resource(contributor_id, role, **fields)


def test_resource_ids_follow_course_sequence(resources, teacher, course):
    first = _add(resources, teacher.teacher_id)
    second = _add(resources, teacher.teacher_id, title="Second")
    assert first.resource_id == "RES_CS101_001"
    assert second.resource_id == "RES_CS101_002"
    assert first.access_level == "enrolled_only"
    assert first.added_by_role == "teacher"


def test_ta_can_add(resources, ta, course):
    resource = _add(resources, ta.student_id, role="student")
    assert resource.added_by_role == "ta"


def test_non_ta_student_cannot_add(resources, enrolled, course):
    with pytest.raises(ForbiddenError):
        _add(resources, enrolled.student_id, role="student")


def test_foreign_teacher_cannot_add(resources, other_teacher, course):
    with pytest.raises(ForbiddenError):
        _add(resources, other_teacher.teacher_id)


def test_add_validates_kind_and_lectures(resources, teacher, course, lecture):
    with pytest.raises(InvalidArgumentError):
        _add(resources, teacher.teacher_id, resource_type="spreadsheet")
    with pytest.raises(InvalidArgumentError):
        _add(resources, teacher.teacher_id, lecture_ids=["LEC_elsewhere"])
    linked = _add(resources, teacher.teacher_id, lecture_ids=[lecture.lecture_id])
    assert linked.lecture_ids == [lecture.lecture_id]


def test_course_resources_grouped_by_topic(resources, teacher, course, enrolled):
    _add(resources, teacher.teacher_id, title="Stacks", topic="Linear")
    _add(resources, teacher.teacher_id, title="Syllabus")

    result = resources.get_course_resources(enrolled.student_id, "student", "CS101")
    assert [r.title for r in result["resources"]] == ["Syllabus", "Stacks"]
    assert [r.title for r in result["by_topic"]["General"]] == ["Syllabus"]
    assert [r.title for r in result["by_topic"]["Linear"]] == ["Stacks"]


def test_course_resources_require_relation(resources, teacher, course, student2):
    _add(resources, teacher.teacher_id)
    with pytest.raises(ForbiddenError):
        resources.get_course_resources(student2.student_id, "student", "CS101")
    with pytest.raises(NotFoundError):
        resources.get_course_resources(teacher.teacher_id, "teacher", "NOPE")


def test_lecture_resources(resources, teacher, course, lecture):
    linked = _add(resources, teacher.teacher_id, lecture_ids=[lecture.lecture_id])
    _add(resources, teacher.teacher_id, title="Unlinked")
    found = resources.get_lecture_resources("CS101", lecture.lecture_id)
    assert [r.resource_id for r in found] == [linked.resource_id]


def test_lecture_resources_exclude_soft_deleted(resources, teacher, course, lecture):
    kept = _add(resources, teacher.teacher_id, title="Kept", lecture_ids=[lecture.lecture_id])
    gone = _add(resources, teacher.teacher_id, title="Gone", lecture_ids=[lecture.lecture_id])
    resources.delete_resource(teacher.teacher_id, "teacher", gone.resource_id)

    found = resources.get_lecture_resources("CS101", lecture.lecture_id)
    assert [r.resource_id for r in found] == [kept.resource_id]


def test_delete_limited_to_contributor_and_owner(
    resources, courses, new_student, teacher, ta, other_teacher, course
):
    resource = _add(resources, ta.student_id, role="student")
    second_ta = new_student(batch="M.Tech")
    courses.make_ta(teacher.teacher_id, "CS101", second_ta.student_id)

    with pytest.raises(ForbiddenError):
        resources.delete_resource(second_ta.student_id, "student", resource.resource_id)
    with pytest.raises(ForbiddenError):
        resources.delete_resource(other_teacher.teacher_id, "teacher", resource.resource_id)
    assert resources.get_resource(resource.resource_id).is_active is True

    assert resources.delete_resource(teacher.teacher_id, "teacher", resource.resource_id).is_active is False


def test_update_rejects_clearing_required_fields(resources, teacher, course):
    resource = _add(resources, teacher.teacher_id)
    for field in ("description", "content", "resource_type"):
        with pytest.raises(InvalidArgumentError):
            resources.update_resource(teacher.teacher_id, "teacher", resource.resource_id, {field: None})
    assert resources.get_resource(resource.resource_id).description == "Common complexities"


def test_update_by_contributor_and_owner(resources, teacher, ta, other_teacher, course):
    resource = _add(resources, ta.student_id, role="student")

    updated = resources.update_resource(ta.student_id, "student", resource.resource_id, {"title": "Renamed"})
    assert updated.title == "Renamed"
    updated = resources.update_resource(teacher.teacher_id, "teacher", resource.resource_id, {"topic": "Intro"})
    assert updated.topic == "Intro"

    with pytest.raises(ForbiddenError):
        resources.update_resource(other_teacher.teacher_id, "teacher", resource.resource_id, {"title": "X"})


def test_update_rejects_unknown_fields(resources, teacher, course):
    resource = _add(resources, teacher.teacher_id)
    with pytest.raises(InvalidArgumentError):
        resources.update_resource(teacher.teacher_id, "teacher", resource.resource_id, {"added_by": "me"})


def test_soft_delete_keeps_record_but_hides_it(resources, teacher, course, enrolled):
    resource = _add(resources, teacher.teacher_id)
    before = resource.updated_at

    deleted = resources.delete_resource(teacher.teacher_id, "teacher", resource.resource_id)
    assert deleted.is_active is False
    assert deleted.updated_at >= before
    assert resources.get_resource(resource.resource_id).resource_id == "RES_CS101_001"
    assert resources.get_course_resources(enrolled.student_id, "student", "CS101")["resources"] == []
    assert resources.search_resources("CS101") == []

    with pytest.raises(ConflictError):
        resources.update_resource(teacher.teacher_id, "teacher", resource.resource_id, {"title": "Back"})

    # Deleting again is a no-op
    assert resources.delete_resource(teacher.teacher_id, "teacher", resource.resource_id).is_active is False


def test_search_by_tags_excludes_soft_deleted(resources, teacher, course):
    keep = _add(resources, teacher.teacher_id, title="Dijkstra", tags=["algorithms", "graphs"])
    gone = _add(resources, teacher.teacher_id, title="Old sorting", tags=["algorithms"])
    _add(resources, teacher.teacher_id, title="Style guide", tags=["writing"])
    resources.delete_resource(teacher.teacher_id, "teacher", gone.resource_id)

    found = resources.search_resources("CS101", tags=["algorithms"])
    assert [r.resource_id for r in found] == [keep.resource_id]


def test_search_filters_combine(resources, teacher, course):
    _add(resources, teacher.teacher_id, title="Heap VIDEO", resource_type="video", topic="Trees")
    _add(resources, teacher.teacher_id, title="Heap notes", resource_type="pdf", topic="Trees")
    _add(resources, teacher.teacher_id, title="Hash notes", resource_type="pdf", topic="Hashing")

    assert [r.title for r in resources.search_resources("CS101", query="heap")] == ["Heap notes", "Heap VIDEO"]
    assert [r.title for r in resources.search_resources("CS101", query="heap", resource_type="video")] == [
        "Heap VIDEO"
    ]
    assert [r.title for r in resources.search_resources("CS101", resource_type="pdf", topic="Hashing")] == [
        "Hash notes"
    ]
    assert len(resources.search_resources("CS101")) == 3
