"""Question and answer workflow for live lectures."""

import logging
import secrets
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from config import ANSWER_TYPES, ROLE_TEACHER
from core.database import unit_of_work
from core.exceptions import ConflictError, ForbiddenError, InvalidArgumentError, NotFoundError
from models.answer import AnswerModel
from models.course import CourseModel, CourseTAModel
from models.lecture import LectureModel
from models.question import QuestionModel, QuestionResourceModel, QuestionUpvoteModel
from models.resource import ResourceModel
from models.student import StudentModel
from models.teacher import TeacherModel
from utils.permissions import can_contribute, is_course_owner, resolve_course_role
from utils.time_utils import utc_now

logger = logging.getLogger(__name__)


class DoubtManager:
    """Manages questions raised in lectures and the answers attached to them."""

    def __init__(self, db: Session):
        self.db = db

    def get_question(self, question_id: str) -> QuestionModel:
        question = self.db.get(QuestionModel, question_id)
        if question is None:
            raise NotFoundError("Question", question_id)
        return question

    def _get_lecture(self, lecture_id: str) -> LectureModel:
        lecture = self.db.get(LectureModel, lecture_id)
        if lecture is None:
            raise NotFoundError("Lecture", lecture_id)
        return lecture

    def _get_course(self, course_id: str) -> CourseModel:
        course = self.db.get(CourseModel, course_id)
        if course is None:
            raise NotFoundError("Course", course_id)
        return course

    def _require_course_owner(self, teacher_id: str, question: QuestionModel) -> None:
        if not is_course_owner(question.lecture.course, teacher_id):
            raise ForbiddenError("Only the course's teachers can manage its questions.")

    def _require_course_access(
        self, requester_id: str, requester_role: str, lecture: LectureModel
    ) -> None:
        if resolve_course_role(self.db, lecture.course, requester_id, requester_role) is None:
            raise ForbiddenError("You do not have access to this course's doubts")

    def ask_question(
        self,
        student_id: str,
        lecture_id: str,
        question_text: str,
        resource_ids: Optional[List[str]] = None,
        resource_context: Optional[str] = None,
    ) -> QuestionModel:
        """Raise a question in a lecture.

        Args:
            student_id: Asking student.
            lecture_id: Lecture the question belongs to.
            question_text: Non-empty question body.
            resource_ids: Active resources of the lecture's course the
                question refers to.
            resource_context: Free text on how the question relates to them.

        Returns:
            The created, unanswered QuestionModel.

        Raises:
            NotFoundError: If the lecture, student or a resource is missing.
            InvalidArgumentError: If the text is blank or a resource belongs
                to another course or has been deleted.
        """
        lecture = self._get_lecture(lecture_id)
        if self.db.get(StudentModel, student_id) is None:
            raise NotFoundError("Student", student_id)

        question_text = (question_text or "").strip()
        if not question_text:
            raise InvalidArgumentError("question_text is required.")

        resource_ids = list(dict.fromkeys(resource_ids or []))
        for resource_id in resource_ids:
            resource = self.db.get(ResourceModel, resource_id)
            if resource is None:
                raise NotFoundError("Resource", resource_id)
            if resource.course_id != lecture.course_id:
                raise InvalidArgumentError(
                    f"Resource '{resource_id}' does not belong to course '{lecture.course_id}'"
                )
            if not resource.is_active:
                raise InvalidArgumentError(f"Resource '{resource_id}' has been deleted")

        question_id = f"Q_{lecture_id}_{secrets.token_hex(4)}"
        with unit_of_work(self.db):
            question = QuestionModel(
                question_id=question_id,
                question_text=question_text,
                student_id=student_id,
                lecture_id=lecture_id,
                timestamp=utc_now().isoformat(),
                is_answered=False,
                is_important=False,
                upvotes=0,
                resource_context=resource_context,
            )
            self.db.add(question)
            for resource_id in resource_ids:
                self.db.add(QuestionResourceModel(question_id=question_id, resource_id=resource_id))

        self.db.refresh(question)
        logger.info("Student %s asked %s in %s", student_id, question_id, lecture_id)
        return question

    def answer_question(
        self,
        responder_id: str,
        responder_role: str,
        question_id: str,
        content: str,
        content_kind: str = "text",
    ) -> AnswerModel:
        """Attach an answer from the course's teacher or one of its TAs.

        The first answer marks the question answered; later answers are
        appended without touching the flag.

        Raises:
            NotFoundError: If the question does not exist.
            ForbiddenError: If the responder is neither owner nor course TA.
            InvalidArgumentError: If the content is blank or the kind unknown.
        """
        question = self.get_question(question_id)
        course = question.lecture.course
        answerer_role = can_contribute(self.db, course, responder_id, responder_role)
        if answerer_role is None:
            raise ForbiddenError("Only the course's teachers or TAs can answer questions.")

        if content_kind not in ANSWER_TYPES:
            raise InvalidArgumentError(
                f"Invalid answer_type: {content_kind}. Must be one of {', '.join(ANSWER_TYPES)}."
            )
        if not content or not str(content).strip():
            raise InvalidArgumentError("Answer content cannot be empty.")

        if responder_role == ROLE_TEACHER:
            answerer_name = self.db.get(TeacherModel, responder_id).name
        else:
            answerer_name = self.db.get(StudentModel, responder_id).name

        # Positions are never reused, even after an answer is deleted
        last_position = (
            self.db.query(func.max(AnswerModel.position))
            .filter(AnswerModel.question_id == question_id)
            .scalar()
        )
        position = 0 if last_position is None else last_position + 1

        with unit_of_work(self.db):
            answer = AnswerModel(
                answer_id=f"ANS_{secrets.token_hex(6)}",
                question_id=question_id,
                answerer_id=responder_id,
                answerer_role=answerer_role,
                answerer_name=answerer_name,
                answer=content,
                answer_type=content_kind,
                answered_at=utc_now().isoformat(),
                position=position,
            )
            self.db.add(answer)
            if not question.is_answered:
                question.is_answered = True

        self.db.refresh(answer)
        logger.info("%s %s answered %s", answerer_role, responder_id, question_id)
        return answer

    def upvote(self, student_id: str, question_id: str) -> QuestionModel:
        """Upvote once per student; repeated votes are silently ignored."""
        question = self.get_question(question_id)
        if self.db.get(StudentModel, student_id) is None:
            raise NotFoundError("Student", student_id)
        if student_id in question.upvoted_by:
            return question

        try:
            with unit_of_work(self.db):
                self.db.add(
                    QuestionUpvoteModel(
                        question_id=question_id,
                        student_id=student_id,
                        voted_at=utc_now().isoformat(),
                    )
                )
                question.upvotes = QuestionModel.upvotes + 1
        except ConflictError:
            # A concurrent retry recorded this vote first; the counter was rolled back with it
            logger.debug("Duplicate upvote by %s on %s ignored", student_id, question_id)
        self.db.refresh(question)
        return question

    def mark_important(self, teacher_id: str, question_id: str) -> QuestionModel:
        """Toggle the importance flag."""
        question = self.get_question(question_id)
        self._require_course_owner(teacher_id, question)
        with unit_of_work(self.db):
            question.is_important = not question.is_important
        self.db.refresh(question)
        logger.info("Question %s important=%s", question_id, question.is_important)
        return question

    def delete_question(self, teacher_id: str, question_id: str) -> None:
        question = self.get_question(question_id)
        self._require_course_owner(teacher_id, question)
        with unit_of_work(self.db):
            self.db.delete(question)
        logger.info("Deleted question %s", question_id)

    def delete_answer(self, teacher_id: str, answer_id: str) -> QuestionModel:
        """Remove an answer; a question left without answers is unanswered again."""
        answer = self.db.get(AnswerModel, answer_id)
        if answer is None:
            raise NotFoundError("Answer", answer_id)
        question = answer.question
        self._require_course_owner(teacher_id, question)
        with unit_of_work(self.db):
            question.answers.remove(answer)
            if not question.answers:
                question.is_answered = False
        self.db.refresh(question)
        logger.info("Deleted answer %s from %s", answer_id, question.question_id)
        return question

    # --- read projections ---

    def list_answers(
        self, requester_id: str, requester_role: str, question_id: str
    ) -> List[AnswerModel]:
        question = self.get_question(question_id)
        self._require_course_access(requester_id, requester_role, question.lecture)
        return list(question.answers)

    def lecture_doubts(
        self, requester_id: str, requester_role: str, lecture_id: str
    ) -> List[QuestionModel]:
        """Questions of a lecture, visible to the course's owners, TAs and students.

        Raises:
            NotFoundError: If the lecture does not exist.
            ForbiddenError: If the requester has no role in the lecture's course.
        """
        lecture = self._get_lecture(lecture_id)
        self._require_course_access(requester_id, requester_role, lecture)
        return list(lecture.questions)

    def my_questions(self, student_id: str, lecture_id: str) -> List[QuestionModel]:
        self._get_lecture(lecture_id)
        return (
            self.db.query(QuestionModel)
            .filter(
                QuestionModel.lecture_id == lecture_id,
                QuestionModel.student_id == student_id,
            )
            .order_by(QuestionModel.timestamp)
            .all()
        )

    def _scoped_course_ids(
        self, requester_id: str, requester_role: str, course_id: Optional[str]
    ) -> List[str]:
        if course_id is not None:
            course = self._get_course(course_id)
            if resolve_course_role(self.db, course, requester_id, requester_role) is None:
                raise ForbiddenError("You do not have access to this course's doubts")
            return [course_id]

        if requester_role == ROLE_TEACHER:
            teacher = self.db.get(TeacherModel, requester_id)
            if teacher is None:
                raise NotFoundError("Teacher", requester_id)
            return teacher.course_ids

        student = self.db.get(StudentModel, requester_id)
        if student is None:
            raise NotFoundError("Student", requester_id)
        ta_course_ids = (
            [
                link.course_id
                for link in self.db.query(CourseTAModel)
                .filter(CourseTAModel.student_id == requester_id)
                .all()
            ]
            if student.is_ta
            else []
        )
        return list(dict.fromkeys(student.enrolled_course_ids + ta_course_ids))

    def _doubts(
        self,
        requester_id: str,
        requester_role: str,
        course_id: Optional[str],
        is_answered: Optional[bool],
    ) -> List[QuestionModel]:
        course_ids = self._scoped_course_ids(requester_id, requester_role, course_id)
        query = (
            self.db.query(QuestionModel)
            .join(LectureModel, LectureModel.lecture_id == QuestionModel.lecture_id)
            .filter(LectureModel.course_id.in_(course_ids))
        )
        if is_answered is not None:
            query = query.filter(QuestionModel.is_answered.is_(is_answered))
        return query.order_by(QuestionModel.timestamp.desc()).all()

    def all_doubts_for_course(
        self, requester_id: str, requester_role: str, course_id: Optional[str] = None
    ) -> List[QuestionModel]:
        """Every question in the requester's course, or all their courses."""
        return self._doubts(requester_id, requester_role, course_id, None)

    def unanswered_doubts(
        self, requester_id: str, requester_role: str, course_id: Optional[str] = None
    ) -> List[QuestionModel]:
        return self._doubts(requester_id, requester_role, course_id, False)

    def answered_doubts_with_answers(
        self, requester_id: str, requester_role: str, course_id: Optional[str] = None
    ) -> List[QuestionModel]:
        """Answered questions; each carries its ordered ``answers``."""
        return self._doubts(requester_id, requester_role, course_id, True)

