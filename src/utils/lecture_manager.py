"""Lecture scheduling and liveness.

A lecture is SCHEDULED before its start, LIVE inside its window and ENDED
once the window has passed or its teacher ends it explicitly. Status is
always computed from the stored timestamps and the end flag; it is never
persisted.
"""

import enum
import logging
import re
import secrets
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from config import UPCOMING_LECTURE_WINDOW_MINUTES
from core.database import unit_of_work
from core.exceptions import ConflictError, ForbiddenError, InvalidArgumentError, NotFoundError
from models.course import CourseModel
from models.enrollment import EnrollmentModel, EnrollmentStatus
from models.lecture import LectureAttendanceModel, LectureModel
from models.student import StudentModel
from models.teacher import TeacherModel
from utils.permissions import is_course_owner, resolve_course_role
from utils.time_utils import parse_iso, to_iso, utc_now

logger = logging.getLogger(__name__)


class LectureStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    LIVE = "live"
    ENDED = "ended"


def lecture_status(
    class_start: datetime,
    class_end: datetime,
    is_teacher_ended: bool,
    now: datetime,
) -> LectureStatus:
    """Classify a lecture window at ``now``.

    ENDED if the teacher ended it or ``now`` is past the end; LIVE if
    ``start <= now <= end``; SCHEDULED otherwise.
    """
    if is_teacher_ended or now > class_end:
        return LectureStatus.ENDED
    if now >= class_start:
        return LectureStatus.LIVE
    return LectureStatus.SCHEDULED


def status_of(lecture: LectureModel, now: Optional[datetime] = None) -> LectureStatus:
    return lecture_status(
        parse_iso(lecture.class_start),
        parse_iso(lecture.class_end),
        lecture.is_teacher_ended,
        now or utc_now(),
    )


def _new_lecture_id(course_id: str) -> str:
    safe_course_id = re.sub(r"[^a-zA-Z0-9]", "", course_id)
    return f"LEC_{safe_course_id}_{secrets.token_hex(4)}"


class LectureManager:
    """Manages lecture creation, attendance and ending."""

    def __init__(self, db: Session):
        self.db = db

    def get_lecture(self, lecture_id: str) -> LectureModel:
        lecture = self.db.get(LectureModel, lecture_id)
        if lecture is None:
            raise NotFoundError("Lecture", lecture_id)
        return lecture

    def view_lecture(self, requester_id: str, requester_role: str, lecture_id: str) -> LectureModel:
        """Lecture details for someone with a role in its course.

        Raises:
            NotFoundError: If the lecture does not exist.
            ForbiddenError: Unless the requester owns, is enrolled in, or TAs
                the lecture's course.
        """
        lecture = self.get_lecture(lecture_id)
        if resolve_course_role(self.db, lecture.course, requester_id, requester_role) is None:
            raise ForbiddenError("You do not have access to this lecture")
        return lecture

    def _get_course(self, course_id: str) -> CourseModel:
        course = self.db.get(CourseModel, course_id)
        if course is None:
            raise NotFoundError("Course", course_id)
        return course

    def create_lecture(
        self,
        teacher_id: str,
        course_id: str,
        lecture_title: str,
        class_start: datetime,
        class_end: datetime,
        lec_num: Optional[int] = None,
        topic: Optional[str] = None,
    ) -> LectureModel:
        """Schedule a lecture in a course the teacher owns.

        Args:
            teacher_id: Teacher creating (and owning) the lecture.
            course_id: Course the lecture belongs to.
            lecture_title: Non-empty title.
            class_start: Scheduled start; naive values are taken as UTC.
            class_end: Scheduled end, strictly after ``class_start``.
            lec_num: Sequence number within the course. Defaults to the next
                free number.
            topic: Optional topic label.

        Returns:
            The created LectureModel.

        Raises:
            NotFoundError: If the course does not exist.
            ForbiddenError: If the teacher does not own the course.
            InvalidArgumentError: If the title is blank, ``end <= start`` or
                ``lec_num`` is not positive.
            ConflictError: If ``lec_num`` is already used in the course.
        """
        course = self._get_course(course_id)
        if not is_course_owner(course, teacher_id):
            raise ForbiddenError("Only the course's teachers can create lectures.")

        lecture_title = (lecture_title or "").strip()
        if not lecture_title:
            raise InvalidArgumentError("lecture_title is required.")

        start_iso, end_iso = to_iso(class_start), to_iso(class_end)
        if parse_iso(end_iso) <= parse_iso(start_iso):
            raise InvalidArgumentError("class_start must be before class_end.")

        if lec_num is None:
            last = (
                self.db.query(func.max(LectureModel.lec_num))
                .filter(LectureModel.course_id == course_id)
                .scalar()
            )
            lec_num = (last or 0) + 1
        elif lec_num < 1:
            raise InvalidArgumentError("lec_num must be a positive integer.")
        elif lec_num in {lecture.lec_num for lecture in course.lectures}:
            raise ConflictError(f"Lecture number {lec_num} already exists in {course_id}")

        with unit_of_work(self.db):
            lecture = LectureModel(
                lecture_id=_new_lecture_id(course_id),
                lecture_title=lecture_title,
                course_id=course_id,
                teacher_id=teacher_id,
                class_start=start_iso,
                class_end=end_iso,
                lec_num=lec_num,
                topic=topic,
                is_teacher_ended=False,
                created_at=utc_now().isoformat(),
            )
            self.db.add(lecture)

        self.db.refresh(lecture)
        logger.info("Created lecture %s (#%d) in %s", lecture.lecture_id, lec_num, course_id)
        return lecture

    def join_lecture(self, student_id: str, lecture_id: str) -> LectureModel:
        """Record that a student joined. Joining twice has no further effect."""
        lecture = self.get_lecture(lecture_id)
        if self.db.get(StudentModel, student_id) is None:
            raise NotFoundError("Student", student_id)

        if student_id in lecture.joined_students:
            return lecture
        try:
            with unit_of_work(self.db):
                self.db.add(
                    LectureAttendanceModel(
                        lecture_id=lecture_id,
                        student_id=student_id,
                        joined_at=utc_now().isoformat(),
                    )
                )
        except ConflictError:
            # A concurrent retry inserted the same attendance row first
            logger.debug("Student %s already joined lecture %s", student_id, lecture_id)
        else:
            logger.info("Student %s joined lecture %s", student_id, lecture_id)
        self.db.refresh(lecture)
        return lecture

    def end_lecture(self, teacher_id: str, lecture_id: str) -> LectureModel:
        """End a lecture explicitly. The end flag can never be cleared.

        Raises:
            NotFoundError: If the lecture does not exist.
            ForbiddenError: If the teacher does not own the lecture.
            ConflictError: If the lecture was already ended by its teacher.
        """
        lecture = self.get_lecture(lecture_id)
        if lecture.teacher_id != teacher_id:
            raise ForbiddenError("You do not have permission to end this lecture")
        if lecture.is_teacher_ended:
            raise ConflictError("Lecture has already been ended")

        with unit_of_work(self.db):
            lecture.is_teacher_ended = True
            lecture.teacher_ended_at = utc_now().isoformat()

        self.db.refresh(lecture)
        logger.info("Lecture %s ended by %s", lecture_id, teacher_id)
        return lecture

    def delete_lecture(self, teacher_id: str, lecture_id: str) -> None:
        """Delete a lecture together with its attendance and questions."""
        lecture = self.get_lecture(lecture_id)
        if not is_course_owner(lecture.course, teacher_id):
            raise ForbiddenError("Only the course's teachers can delete lectures.")
        with unit_of_work(self.db):
            self.db.delete(lecture)
        logger.info("Deleted lecture %s", lecture_id)

    # --- read projections ---

    def _teacher_lectures(self, teacher_id: str) -> List[LectureModel]:
        teacher = self.db.get(TeacherModel, teacher_id)
        if teacher is None:
            raise NotFoundError("Teacher", teacher_id)
        return (
            self.db.query(LectureModel)
            .filter(LectureModel.course_id.in_(teacher.course_ids))
            .order_by(LectureModel.class_start)
            .all()
        )

    def list_live(self, teacher_id: str, now: Optional[datetime] = None) -> List[LectureModel]:
        """Lectures in the teacher's courses that are live right now."""
        now = now or utc_now()
        return [
            lecture
            for lecture in self._teacher_lectures(teacher_id)
            if status_of(lecture, now) == LectureStatus.LIVE
        ]

    def list_completed(
        self,
        teacher_id: str,
        course_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[LectureModel]:
        """Ended lectures of the teacher's courses, most recent first."""
        now = now or utc_now()
        if course_id is not None:
            course = self._get_course(course_id)
            if not is_course_owner(course, teacher_id):
                raise ForbiddenError("Access denied. You are not teaching this course.")
        lectures = [
            lecture
            for lecture in self._teacher_lectures(teacher_id)
            if status_of(lecture, now) == LectureStatus.ENDED
            and (course_id is None or lecture.course_id == course_id)
        ]
        return sorted(lectures, key=lambda lecture: parse_iso(lecture.class_end), reverse=True)

    def list_lectures_for_course(
        self, requester_id: str, requester_role: str, course_id: str
    ) -> List[LectureModel]:
        """All lectures of a course in sequence order.

        Raises:
            ForbiddenError: Unless the requester owns, is enrolled in, or TAs
                the course.
        """
        course = self._get_course(course_id)
        if resolve_course_role(self.db, course, requester_id, requester_role) is None:
            raise ForbiddenError("You do not have access to this course's lectures")
        return list(course.lectures)

    def _student_lectures(self, student_id: str) -> List[LectureModel]:
        if self.db.get(StudentModel, student_id) is None:
            raise NotFoundError("Student", student_id)
        return (
            self.db.query(LectureModel)
            .join(EnrollmentModel, EnrollmentModel.course_id == LectureModel.course_id)
            .filter(
                EnrollmentModel.student_id == student_id,
                EnrollmentModel.status == EnrollmentStatus.ENROLLED.value,
            )
            .order_by(LectureModel.class_start)
            .all()
        )

    def list_past_for_student(
        self, student_id: str, now: Optional[datetime] = None
    ) -> List[LectureModel]:
        """Ended lectures of enrolled courses, most recent first."""
        now = now or utc_now()
        lectures = [
            lecture
            for lecture in self._student_lectures(student_id)
            if status_of(lecture, now) == LectureStatus.ENDED
        ]
        return sorted(lectures, key=lambda lecture: parse_iso(lecture.class_end), reverse=True)

    def list_upcoming_for_student(
        self, student_id: str, now: Optional[datetime] = None
    ) -> List[LectureModel]:
        """Lectures of enrolled courses that are live or about to start."""
        now = now or utc_now()
        lectures = self._student_lectures(student_id)
        soon = now + timedelta(minutes=UPCOMING_LECTURE_WINDOW_MINUTES)
        return [
            lecture
            for lecture in lectures
            if status_of(lecture, now) == LectureStatus.LIVE
            or (
                status_of(lecture, now) == LectureStatus.SCHEDULED
                and parse_iso(lecture.class_start) <= soon
            )
        ]

