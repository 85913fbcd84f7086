"""Course registry and enrollment state machine.

Each (student, course) pair moves NONE -> REQUESTED -> ENROLLED. Rejecting a
request or removing a student returns the pair to NONE. The state is a
single ``EnrollmentModel`` row, so the course roster and the student's
course sets can never disagree and each transition is one commit.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from core.database import unit_of_work
from core.exceptions import ConflictError, ForbiddenError, InvalidArgumentError, NotFoundError
from models.course import CourseModel, CourseTAModel, CourseTeacherModel
from models.enrollment import EnrollmentModel, EnrollmentStatus
from models.student import StudentModel
from models.teacher import TeacherModel
from utils.permissions import is_course_owner
from utils.time_utils import to_iso, utc_now
from utils.user_manager import validate_batch_branch

logger = logging.getLogger(__name__)


class CourseManager:
    """Manages courses, TA rosters and enrollment transitions."""

    def __init__(self, db: Session):
        self.db = db

    # --- lookups ---

    def get_course(self, course_id: str) -> CourseModel:
        course = self.db.get(CourseModel, course_id)
        if course is None:
            raise NotFoundError("Course", course_id)
        return course

    def _get_student(self, student_id: str) -> StudentModel:
        student = self.db.get(StudentModel, student_id)
        if student is None:
            raise NotFoundError("Student", student_id)
        return student

    def _get_owned_course(self, teacher_id: str, course_id: str) -> CourseModel:
        course = self.get_course(course_id)
        if not is_course_owner(course, teacher_id):
            raise ForbiddenError("Only the course's teachers can manage this course.")
        return course

    def _get_enrollment(self, course_id: str, student_id: str) -> Optional[EnrollmentModel]:
        return (
            self.db.query(EnrollmentModel)
            .filter(
                EnrollmentModel.course_id == course_id,
                EnrollmentModel.student_id == student_id,
            )
            .first()
        )

    # --- course definition ---

    def create_course(
        self,
        teacher_id: str,
        course_id: str,
        course_name: str,
        batch: str,
        branch: str,
        valid_time: datetime,
        additional_teacher_ids: Optional[Iterable[str]] = None,
        ta_ids: Optional[Iterable[str]] = None,
    ) -> CourseModel:
        """Create a course owned by the calling teacher.

        Args:
            teacher_id: Creating teacher; always the first owner.
            course_id: Business key of the course, e.g. ``"CS101"``.
            course_name: Human readable course name.
            batch: One of ``BATCH_OPTIONS``.
            branch: One of ``BRANCH_OPTIONS``.
            valid_time: Deadline until which the course is offered.
            additional_teacher_ids: Co-owning teachers.
            ta_ids: Students to put on the TA roster; they are flagged ``is_ta``.

        Returns:
            The created CourseModel.

        Raises:
            InvalidArgumentError: If a field is blank or batch/branch is invalid.
            ConflictError: If course_id is already taken.
            NotFoundError: If a listed teacher or TA does not exist.
        """
        course_id = course_id.strip()
        course_name = course_name.strip()
        if not course_id or not course_name:
            raise InvalidArgumentError("course_id and course_name are required.")
        validate_batch_branch(batch, branch)

        if self.db.get(CourseModel, course_id) is not None:
            raise ConflictError(f"Course '{course_id}' already exists")

        teacher_ids = [teacher_id]
        for extra in additional_teacher_ids or []:
            if extra not in teacher_ids:
                teacher_ids.append(extra)
        for tid in teacher_ids:
            if self.db.get(TeacherModel, tid) is None:
                raise NotFoundError("Teacher", tid)

        tas = [self._get_student(sid) for sid in dict.fromkeys(ta_ids or [])]

        now = utc_now().isoformat()
        with unit_of_work(self.db):
            course = CourseModel(
                course_id=course_id,
                course_name=course_name,
                batch=batch,
                branch=branch,
                valid_time=to_iso(valid_time),
                created_at=now,
            )
            self.db.add(course)
            self.db.flush()
            for tid in teacher_ids:
                self.db.add(CourseTeacherModel(course_id=course_id, teacher_id=tid, assigned_at=now))
            for student in tas:
                student.is_ta = True
                self.db.add(
                    CourseTAModel(course_id=course_id, student_id=student.student_id, assigned_at=now)
                )

        self.db.refresh(course)
        logger.info("Created course %s owned by %s", course_id, ", ".join(teacher_ids))
        return course

    def make_ta(self, teacher_id: str, course_id: str, student_id: str) -> StudentModel:
        """Flag a student as TA and add them to the course roster. Idempotent."""
        course = self._get_owned_course(teacher_id, course_id)
        student = self._get_student(student_id)
        with unit_of_work(self.db):
            student.is_ta = True
            if student_id not in course.ta_ids:
                self.db.add(
                    CourseTAModel(
                        course_id=course_id,
                        student_id=student_id,
                        assigned_at=utc_now().isoformat(),
                    )
                )
        self.db.refresh(course)
        logger.info("Student %s is now a TA for %s", student_id, course_id)
        return student

    # --- enrollment state machine ---

    def request_enrollment(self, student_id: str, course_id: str) -> EnrollmentModel:
        """Move the pair NONE -> REQUESTED.

        Raises:
            NotFoundError: If the course or student does not exist.
            ConflictError: If the student already requested or is enrolled.
        """
        course = self.get_course(course_id)
        self._get_student(student_id)

        existing = self._get_enrollment(course_id, student_id)
        if existing is not None:
            if existing.status == EnrollmentStatus.ENROLLED.value:
                raise ConflictError("Already enrolled in this course")
            raise ConflictError("Already requested to join this course")

        now = utc_now().isoformat()
        with unit_of_work(self.db):
            enrollment = EnrollmentModel(
                course_id=course.course_id,
                student_id=student_id,
                status=EnrollmentStatus.REQUESTED.value,
                requested_at=now,
                updated_at=now,
            )
            self.db.add(enrollment)

        self.db.refresh(enrollment)
        logger.info("Student %s requested enrollment in %s", student_id, course_id)
        return enrollment

    def _get_pending(self, course_id: str, student_id: str) -> EnrollmentModel:
        enrollment = self._get_enrollment(course_id, student_id)
        if enrollment is None or enrollment.status != EnrollmentStatus.REQUESTED.value:
            raise NotFoundError("Enrollment request", f"{course_id}/{student_id}")
        return enrollment

    def approve_request(self, teacher_id: str, course_id: str, student_id: str) -> EnrollmentModel:
        """Move the pair REQUESTED -> ENROLLED.

        Raises:
            NotFoundError: If the course is missing or the student has no
                pending request (even if previously enrolled).
            ForbiddenError: If the teacher does not own the course.
        """
        return self.accept_requests(teacher_id, course_id, [student_id])[0]

    def reject_request(self, teacher_id: str, course_id: str, student_id: str) -> None:
        """Move the pair REQUESTED -> NONE."""
        self.reject_requests(teacher_id, course_id, [student_id])

    def accept_requests(
        self, teacher_id: str, course_id: str, student_ids: List[str]
    ) -> List[EnrollmentModel]:
        """Approve several pending requests in one commit.

        Either every listed student is enrolled or none is.
        """
        if not student_ids:
            raise InvalidArgumentError("student_ids cannot be empty.")
        self._get_owned_course(teacher_id, course_id)
        pending = [self._get_pending(course_id, sid) for sid in dict.fromkeys(student_ids)]

        now = utc_now().isoformat()
        with unit_of_work(self.db):
            for enrollment in pending:
                enrollment.status = EnrollmentStatus.ENROLLED.value
                enrollment.updated_at = now

        for enrollment in pending:
            self.db.refresh(enrollment)
            logger.info("Approved %s for %s", enrollment.student_id, course_id)
        return pending

    def reject_requests(self, teacher_id: str, course_id: str, student_ids: List[str]) -> List[str]:
        """Reject several pending requests in one commit.

        Returns:
            The rejected student ids.
        """
        if not student_ids:
            raise InvalidArgumentError("student_ids cannot be empty.")
        self._get_owned_course(teacher_id, course_id)
        unique_ids = list(dict.fromkeys(student_ids))
        pending = [self._get_pending(course_id, sid) for sid in unique_ids]

        with unit_of_work(self.db):
            for enrollment in pending:
                self.db.delete(enrollment)

        logger.info("Rejected %d request(s) for %s", len(pending), course_id)
        return unique_ids

    def remove_student(self, teacher_id: str, course_id: str, student_id: str) -> None:
        """Move the pair ENROLLED -> NONE."""
        self._get_owned_course(teacher_id, course_id)
        enrollment = self._get_enrollment(course_id, student_id)
        if enrollment is None or enrollment.status != EnrollmentStatus.ENROLLED.value:
            raise NotFoundError("Enrollment", f"{course_id}/{student_id}")
        with unit_of_work(self.db):
            self.db.delete(enrollment)
        logger.info("Removed student %s from %s", student_id, course_id)

    # --- read projections ---

    def list_available_courses(self, student_id: str) -> List[CourseModel]:
        """Courses matching the student's batch and branch with no enrollment row."""
        student = self._get_student(student_id)
        taken = {e.course_id for e in student.enrollments}
        courses = (
            self.db.query(CourseModel)
            .filter(
                CourseModel.batch == student.batch,
                CourseModel.branch == student.branch,
            )
            .order_by(CourseModel.course_id)
            .all()
        )
        return [c for c in courses if c.course_id not in taken]

    def _courses_for_student(self, student_id: str, status: EnrollmentStatus) -> List[CourseModel]:
        self._get_student(student_id)
        return (
            self.db.query(CourseModel)
            .join(EnrollmentModel, EnrollmentModel.course_id == CourseModel.course_id)
            .filter(
                EnrollmentModel.student_id == student_id,
                EnrollmentModel.status == status.value,
            )
            .order_by(CourseModel.course_id)
            .all()
        )

    def list_enrolled_courses(self, student_id: str) -> List[CourseModel]:
        return self._courses_for_student(student_id, EnrollmentStatus.ENROLLED)

    def list_pending_courses(self, student_id: str) -> List[CourseModel]:
        return self._courses_for_student(student_id, EnrollmentStatus.REQUESTED)

    def list_teacher_courses(self, teacher_id: str) -> List[CourseModel]:
        teacher = self.db.get(TeacherModel, teacher_id)
        if teacher is None:
            raise NotFoundError("Teacher", teacher_id)
        return [link.course for link in teacher.course_links]

    def list_pending_requests(self, teacher_id: str, course_id: str) -> List[StudentModel]:
        """Students waiting for approval, oldest request first."""
        self._get_owned_course(teacher_id, course_id)
        return (
            self.db.query(StudentModel)
            .join(EnrollmentModel, EnrollmentModel.student_id == StudentModel.student_id)
            .filter(
                EnrollmentModel.course_id == course_id,
                EnrollmentModel.status == EnrollmentStatus.REQUESTED.value,
            )
            .order_by(EnrollmentModel.requested_at, EnrollmentModel.id)
            .all()
        )

    def list_enrolled_students(self, teacher_id: str, course_id: str) -> List[StudentModel]:
        self._get_owned_course(teacher_id, course_id)
        return (
            self.db.query(StudentModel)
            .join(EnrollmentModel, EnrollmentModel.student_id == StudentModel.student_id)
            .filter(
                EnrollmentModel.course_id == course_id,
                EnrollmentModel.status == EnrollmentStatus.ENROLLED.value,
            )
            .order_by(StudentModel.roll_no)
            .all()
        )

    # --- maintenance ---

    def reconcile_enrollments(self) -> int:
        """Delete enrollment rows whose course or student no longer exists.

        Returns:
            Number of rows removed.
        """
        orphans = (
            self.db.query(EnrollmentModel)
            .outerjoin(CourseModel, CourseModel.course_id == EnrollmentModel.course_id)
            .outerjoin(StudentModel, StudentModel.student_id == EnrollmentModel.student_id)
            .filter((CourseModel.course_id.is_(None)) | (StudentModel.student_id.is_(None)))
            .all()
        )
        with unit_of_work(self.db):
            for enrollment in orphans:
                self.db.delete(enrollment)
        if orphans:
            logger.warning("Reconciliation removed %d orphan enrollment row(s)", len(orphans))
        return len(orphans)
