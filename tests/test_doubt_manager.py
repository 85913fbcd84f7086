import pytest

from core.exceptions import ForbiddenError, InvalidArgumentError, NotFoundError


@pytest.fixture
def question(doubts, lecture, enrolled):
    return doubts.ask_question(enrolled.student_id, lecture.lecture_id, "Why use a dummy head?")


def test_ask_question_starts_unanswered(question, lecture):
    assert question.question_id.startswith(f"Q_{lecture.lecture_id}_")
    assert question.is_answered is False
    assert question.upvotes == 0
    assert question.upvoted_by == []
    assert lecture.query_ids == [question.question_id]


def test_ask_question_unknown_lecture(doubts, student):
    with pytest.raises(NotFoundError):
        doubts.ask_question(student.student_id, "LEC_missing", "Hello?")


def test_ask_question_blank_text(doubts, lecture, student):
    with pytest.raises(InvalidArgumentError):
        doubts.ask_question(student.student_id, lecture.lecture_id, "   ")


def test_ask_question_with_resources(doubts, resources, teacher, lecture, enrolled):
    notes = resources.add_resource(
        teacher.teacher_id, "teacher", "CS101", "Notes", "Lecture notes", "pdf", "https://x/notes.pdf"
    )
    question = doubts.ask_question(
        enrolled.student_id,
        lecture.lecture_id,
        "Slide 4 is unclear",
        resource_ids=[notes.resource_id],
        resource_context="Second diagram",
    )
    assert question.referenced_resources == [notes.resource_id]
    assert question.resource_context == "Second diagram"


def test_cross_course_resource_reference_rejected(
    doubts, resources, courses, teacher, lecture, enrolled, now
):
    courses.create_course(teacher.teacher_id, "CS102", "Algorithms", "B.Tech", "CSE", now)
    foreign = resources.add_resource(
        teacher.teacher_id, "teacher", "CS102", "Sorting", "", "text", "Merge sort"
    )
    with pytest.raises(InvalidArgumentError):
        doubts.ask_question(
            enrolled.student_id, lecture.lecture_id, "Related?", resource_ids=[foreign.resource_id]
        )


def test_first_answer_flips_flag_and_later_answers_append(doubts, teacher, ta, question):
    first = doubts.answer_question(teacher.teacher_id, "teacher", question.question_id, "It avoids edge cases")
    assert first.answerer_role == "teacher"
    assert first.answerer_name == "Prof. Rao"
    assert doubts.get_question(question.question_id).is_answered is True

    second = doubts.answer_question(ta.student_id, "student", question.question_id, "See slide 6")
    assert second.answerer_role == "ta"

    refreshed = doubts.get_question(question.question_id)
    assert refreshed.is_answered is True
    assert [a.answer_id for a in refreshed.answers] == [first.answer_id, second.answer_id]
    listed = doubts.list_answers(teacher.teacher_id, "teacher", question.question_id)
    assert [a.answer_id for a in listed] == [first.answer_id, second.answer_id]


def test_answer_forbidden_for_plain_student_and_foreign_teacher(
    doubts, other_teacher, enrolled, question
):
    with pytest.raises(ForbiddenError):
        doubts.answer_question(enrolled.student_id, "student", question.question_id, "I think...")
    with pytest.raises(ForbiddenError):
        doubts.answer_question(other_teacher.teacher_id, "teacher", question.question_id, "Hmm")


def test_ta_flag_without_roster_cannot_answer(doubts, courses, teacher, question, student2, now):
    # A TA of a different course has no standing here
    courses.create_course(teacher.teacher_id, "CS102", "Algorithms", "B.Tech", "CSE", now)
    courses.make_ta(teacher.teacher_id, "CS102", student2.student_id)
    with pytest.raises(ForbiddenError):
        doubts.answer_question(student2.student_id, "student", question.question_id, "Answer")


def test_answer_rejects_unknown_kind(doubts, teacher, question):
    with pytest.raises(InvalidArgumentError):
        doubts.answer_question(teacher.teacher_id, "teacher", question.question_id, "x", "video")


def test_upvote_three_times_counts_once(doubts, question, student2):
    for _ in range(3):
        voted = doubts.upvote(student2.student_id, question.question_id)
    assert voted.upvotes == 1
    assert voted.upvoted_by == [student2.student_id]


def test_upvotes_from_different_students(doubts, question, student2, enrolled):
    doubts.upvote(student2.student_id, question.question_id)
    assert doubts.upvote(enrolled.student_id, question.question_id).upvotes == 2


def test_mark_important_toggles(doubts, teacher, other_teacher, question):
    assert doubts.mark_important(teacher.teacher_id, question.question_id).is_important is True
    assert doubts.mark_important(teacher.teacher_id, question.question_id).is_important is False
    with pytest.raises(ForbiddenError):
        doubts.mark_important(other_teacher.teacher_id, question.question_id)


def test_doubt_projections(doubts, teacher, lecture, enrolled, question):
    other = doubts.ask_question(enrolled.student_id, lecture.lecture_id, "Complexity of insert?")
    doubts.answer_question(teacher.teacher_id, "teacher", other.question_id, "O(1) at the head")

    all_ids = {q.question_id for q in doubts.all_doubts_for_course(teacher.teacher_id, "teacher", "CS101")}
    assert all_ids == {question.question_id, other.question_id}

    unanswered = doubts.unanswered_doubts(enrolled.student_id, "student", "CS101")
    assert [q.question_id for q in unanswered] == [question.question_id]

    answered = doubts.answered_doubts_with_answers(teacher.teacher_id, "teacher")
    assert [q.question_id for q in answered] == [other.question_id]
    assert answered[0].answers[0].answer == "O(1) at the head"


def test_doubt_projections_forbidden_outside_course(doubts, other_teacher, student2, question):
    with pytest.raises(ForbiddenError):
        doubts.all_doubts_for_course(other_teacher.teacher_id, "teacher", "CS101")
    with pytest.raises(ForbiddenError):
        doubts.unanswered_doubts(student2.student_id, "student", "CS101")
    # Without a course filter the scope is simply empty
    assert doubts.all_doubts_for_course(student2.student_id, "student") == []


def test_my_questions_and_lecture_doubts(doubts, lecture, enrolled, student2, question):
    mine_other = doubts.ask_question(student2.student_id, lecture.lecture_id, "Doubly linked?")
    assert [q.question_id for q in doubts.my_questions(enrolled.student_id, lecture.lecture_id)] == [
        question.question_id
    ]
    found = doubts.lecture_doubts(enrolled.student_id, "student", lecture.lecture_id)
    assert {q.question_id for q in found} == {question.question_id, mine_other.question_id}


def test_lecture_reads_require_course_role(
    doubts, teacher, ta, other_teacher, new_student, lecture, question
):
    outsider = new_student(batch="PhD", branch="ECE")
    doubts.answer_question(teacher.teacher_id, "teacher", question.question_id, "It avoids edge cases")

    with pytest.raises(ForbiddenError):
        doubts.lecture_doubts(outsider.student_id, "student", lecture.lecture_id)
    with pytest.raises(ForbiddenError):
        doubts.list_answers(outsider.student_id, "student", question.question_id)
    with pytest.raises(ForbiddenError):
        doubts.lecture_doubts(other_teacher.teacher_id, "teacher", lecture.lecture_id)

    assert len(doubts.lecture_doubts(ta.student_id, "student", lecture.lecture_id)) == 1
    assert len(doubts.list_answers(teacher.teacher_id, "teacher", question.question_id)) == 1


def test_answer_order_survives_deletion(doubts, teacher, question):
    first = doubts.answer_question(teacher.teacher_id, "teacher", question.question_id, "First")
    second = doubts.answer_question(teacher.teacher_id, "teacher", question.question_id, "Second")
    doubts.delete_answer(teacher.teacher_id, first.answer_id)
    third = doubts.answer_question(teacher.teacher_id, "teacher", question.question_id, "Third")

    assert third.position > second.position
    answers = doubts.list_answers(teacher.teacher_id, "teacher", question.question_id)
    assert [a.answer_id for a in answers] == [second.answer_id, third.answer_id]


def test_delete_last_answer_reopens_question(doubts, teacher, question):
    answer = doubts.answer_question(teacher.teacher_id, "teacher", question.question_id, "Done")
    reopened = doubts.delete_answer(teacher.teacher_id, answer.answer_id)
    assert reopened.is_answered is False
    assert reopened.answers == []


def test_delete_question(doubts, teacher, lecture, question):
    question_id = question.question_id
    doubts.delete_question(teacher.teacher_id, question_id)
    with pytest.raises(NotFoundError):
        doubts.get_question(question_id)
    assert lecture.query_ids == []
