from datetime import timedelta

import pytest

from core.exceptions import ConflictError, ForbiddenError, InvalidArgumentError, NotFoundError
from utils.lecture_manager import LectureStatus, lecture_status, status_of


def test_past_window_is_ended_without_teacher_action(now):
    status = lecture_status(now - timedelta(hours=2), now - timedelta(hours=1), False, now)
    assert status == LectureStatus.ENDED


def test_inside_window_is_live(now):
    status = lecture_status(now - timedelta(minutes=10), now + timedelta(minutes=50), False, now)
    assert status == LectureStatus.LIVE


def test_before_window_is_scheduled(now):
    status = lecture_status(now + timedelta(minutes=5), now + timedelta(hours=1), False, now)
    assert status == LectureStatus.SCHEDULED


def test_teacher_end_overrides_window(now):
    status = lecture_status(now - timedelta(minutes=10), now + timedelta(minutes=50), True, now)
    assert status == LectureStatus.ENDED


def test_create_lecture_appends_to_course(lecture, course):
    assert lecture.lecture_id.startswith("LEC_CS101_")
    assert lecture.lec_num == 1
    assert course.lecture_ids == [lecture.lecture_id]


def test_create_lecture_requires_ownership(lectures, other_teacher, course, now):
    with pytest.raises(ForbiddenError):
        lectures.create_lecture(other_teacher.teacher_id, "CS101", "Trees", now, now + timedelta(hours=1))


def test_create_lecture_rejects_inverted_window(lectures, teacher, course, now):
    with pytest.raises(InvalidArgumentError):
        lectures.create_lecture(teacher.teacher_id, "CS101", "Trees", now, now)
    with pytest.raises(InvalidArgumentError):
        lectures.create_lecture(teacher.teacher_id, "CS101", "Trees", now, now - timedelta(minutes=1))


def test_lecture_numbers(lectures, teacher, course, lecture, now):
    second = lectures.create_lecture(teacher.teacher_id, "CS101", "Trees", now, now + timedelta(hours=1))
    assert second.lec_num == 2
    with pytest.raises(ConflictError):
        lectures.create_lecture(
            teacher.teacher_id, "CS101", "Graphs", now, now + timedelta(hours=1), lec_num=2
        )


def test_join_twice_records_student_once(lectures, lecture, student):
    lectures.join_lecture(student.student_id, lecture.lecture_id)
    joined = lectures.join_lecture(student.student_id, lecture.lecture_id)
    assert joined.joined_students.count(student.student_id) == 1


def test_join_unknown_lecture(lectures, student):
    with pytest.raises(NotFoundError):
        lectures.join_lecture(student.student_id, "LEC_missing")


def test_join_is_not_gated_by_liveness(lectures, teacher, course, student, now):
    later = lectures.create_lecture(
        teacher.teacher_id, "CS101", "Heaps", now + timedelta(days=1), now + timedelta(days=1, hours=1)
    )
    assert lectures.join_lecture(student.student_id, later.lecture_id).joined_students == [student.student_id]


def test_end_lecture_is_permanent(lectures, teacher, lecture, now):
    ended = lectures.end_lecture(teacher.teacher_id, lecture.lecture_id)
    assert ended.is_teacher_ended is True
    assert ended.teacher_ended_at is not None
    assert status_of(ended, now) == LectureStatus.ENDED
    with pytest.raises(ConflictError):
        lectures.end_lecture(teacher.teacher_id, lecture.lecture_id)


def test_end_lecture_requires_owner(lectures, other_teacher, lecture):
    with pytest.raises(ForbiddenError):
        lectures.end_lecture(other_teacher.teacher_id, lecture.lecture_id)


def test_list_live_recomputes_each_call(lectures, teacher, course, lecture, now):
    lectures.create_lecture(
        teacher.teacher_id, "CS101", "Old", now - timedelta(hours=2), now - timedelta(hours=1)
    )
    assert [l.lecture_id for l in lectures.list_live(teacher.teacher_id, now)] == [lecture.lecture_id]
    assert lectures.list_live(teacher.teacher_id, now + timedelta(hours=2)) == []

    lectures.end_lecture(teacher.teacher_id, lecture.lecture_id)
    assert lectures.list_live(teacher.teacher_id, now) == []


def test_list_completed_newest_first(lectures, teacher, course, now):
    older = lectures.create_lecture(
        teacher.teacher_id, "CS101", "Intro", now - timedelta(days=2), now - timedelta(days=2, minutes=-60)
    )
    newer = lectures.create_lecture(
        teacher.teacher_id, "CS101", "Arrays", now - timedelta(days=1), now - timedelta(days=1, minutes=-60)
    )
    completed = lectures.list_completed(teacher.teacher_id, now=now)
    assert [l.lecture_id for l in completed] == [newer.lecture_id, older.lecture_id]


def test_list_lectures_for_course_access(lectures, teacher, course, lecture, enrolled, ta, student2):
    for subject_id, role in [
        (teacher.teacher_id, "teacher"),
        (enrolled.student_id, "student"),
        (ta.student_id, "student"),
    ]:
        found = lectures.list_lectures_for_course(subject_id, role, "CS101")
        assert [l.lecture_id for l in found] == [lecture.lecture_id]

    with pytest.raises(ForbiddenError):
        lectures.list_lectures_for_course(student2.student_id, "student", "CS101")


def test_upcoming_for_student(lectures, teacher, course, lecture, enrolled, now):
    soon = lectures.create_lecture(
        teacher.teacher_id, "CS101", "Soon", now + timedelta(minutes=10), now + timedelta(minutes=70)
    )
    lectures.create_lecture(
        teacher.teacher_id, "CS101", "Tomorrow", now + timedelta(days=1), now + timedelta(days=1, hours=1)
    )
    upcoming = lectures.list_upcoming_for_student(enrolled.student_id, now)
    assert [l.lecture_id for l in upcoming] == [lecture.lecture_id, soon.lecture_id]


def test_past_lectures_for_student(lectures, teacher, course, lecture, enrolled, student2, now):
    older = lectures.create_lecture(
        teacher.teacher_id, "CS101", "Intro", now - timedelta(days=2), now - timedelta(days=2, minutes=-60)
    )
    newer = lectures.create_lecture(
        teacher.teacher_id, "CS101", "Arrays", now - timedelta(days=1), now - timedelta(days=1, minutes=-60)
    )
    past = lectures.list_past_for_student(enrolled.student_id, now)
    assert [l.lecture_id for l in past] == [newer.lecture_id, older.lecture_id]

    lectures.end_lecture(teacher.teacher_id, lecture.lecture_id)
    past = lectures.list_past_for_student(enrolled.student_id, now)
    assert lecture.lecture_id in [l.lecture_id for l in past]

    # Not enrolled, nothing to show
    assert lectures.list_past_for_student(student2.student_id, now) == []


def test_view_lecture_requires_course_role(
    lectures, teacher, other_teacher, lecture, enrolled, new_student
):
    outsider = new_student(batch="PhD", branch="ECE")
    with pytest.raises(ForbiddenError):
        lectures.view_lecture(outsider.student_id, "student", lecture.lecture_id)
    with pytest.raises(ForbiddenError):
        lectures.view_lecture(other_teacher.teacher_id, "teacher", lecture.lecture_id)
    assert lectures.view_lecture(enrolled.student_id, "student", lecture.lecture_id) is lecture
    assert lectures.view_lecture(teacher.teacher_id, "teacher", lecture.lecture_id) is lecture


def test_delete_lecture(lectures, teacher, other_teacher, lecture, course):
    with pytest.raises(ForbiddenError):
        lectures.delete_lecture(other_teacher.teacher_id, lecture.lecture_id)
    lectures.delete_lecture(teacher.teacher_id, lecture.lecture_id)
    assert course.lecture_ids == []
