"""Identity directory.

This module provides student and teacher registration, password hashing,
credential checks and the small dashboard overviews built on top of them.
"""

import logging
import secrets
from typing import Optional, Union

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import BATCH_OPTIONS, BCRYPT_ROUNDS, BRANCH_OPTIONS, ROLE_STUDENT, ROLE_TEACHER
from core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from models.question import QuestionModel
from models.student import StudentModel
from models.teacher import TeacherModel
from utils.time_utils import utc_now

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72

Identity = Union[StudentModel, TeacherModel]


def validate_batch_branch(batch: str, branch: str) -> None:
    """Reject batch/branch values outside the academic enumerations.

    Raises:
        InvalidArgumentError: If either value is not an allowed option.
    """
    if batch not in BATCH_OPTIONS:
        raise InvalidArgumentError(
            f"Invalid batch: {batch}. Must be one of {', '.join(BATCH_OPTIONS)}."
        )
    if branch not in BRANCH_OPTIONS:
        raise InvalidArgumentError(
            f"Invalid branch: {branch}. Must be one of {', '.join(BRANCH_OPTIONS)}."
        )


class UserManager:
    """Manages student and teacher identities using SQLAlchemy."""

    def __init__(self, db: Session):
        """Initialize UserManager.

        Args:
            db: SQLAlchemy Session.
        """
        self.db = db

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt.

        Args:
            password: Plain text password.

        Returns:
            Hashed password (bcrypt hash string).
        """
        password_bytes = password.encode("utf-8")
        if len(password_bytes) > _BCRYPT_MAX_BYTES:
            logger.warning(
                "Password exceeds %d bytes (%d bytes), truncating",
                _BCRYPT_MAX_BYTES,
                len(password_bytes),
            )
            password_bytes = password_bytes[:_BCRYPT_MAX_BYTES]

        salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
        return bcrypt.hashpw(password_bytes, salt).decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against a bcrypt hash.

        Args:
            plain_password: Plain text password to verify.
            hashed_password: Bcrypt hash string to verify against.

        Returns:
            True if password matches, False otherwise.
        """
        password_bytes = plain_password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
        try:
            return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))
        except ValueError as e:
            logger.error("Password verification error: %s", e)
            return False

    def _save(self, model: Identity, duplicate_message: str) -> None:
        # Two requests may pass the pre-checks at the same time; the unique
        # constraints catch the loser.
        try:
            self.db.add(model)
            self.db.commit()
            self.db.refresh(model)
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(duplicate_message) from e

    def register_student(
        self,
        username: str,
        password: str,
        name: str,
        roll_no: str,
        batch: str,
        branch: str,
    ) -> StudentModel:
        """Create a new student.

        Args:
            username: Login name (email address).
            password: Plain text password.
            name: Display name.
            roll_no: University roll number, unique across students.
            batch: Academic batch, one of ``BATCH_OPTIONS``.
            branch: Academic branch, one of ``BRANCH_OPTIONS``.

        Returns:
            Created StudentModel.

        Raises:
            InvalidArgumentError: If batch or branch is not allowed.
            ConflictError: If username or roll number is already registered.
        """
        validate_batch_branch(batch, branch)

        existing = (
            self.db.query(StudentModel)
            .filter((StudentModel.username == username) | (StudentModel.roll_no == roll_no))
            .first()
        )
        if existing:
            raise ConflictError("Student already exists with this username or roll number")

        student = StudentModel(
            student_id=secrets.token_hex(8),
            username=username,
            password_hash=self.hash_password(password),
            name=name,
            roll_no=roll_no,
            is_ta=False,
            batch=batch,
            branch=branch,
            create_at=utc_now().isoformat(),
        )
        self._save(student, "Student already exists with this username or roll number")
        logger.info("Registered student: %s (%s)", username, student.student_id)
        return student

    def register_teacher(
        self,
        teacher_id: str,
        username: str,
        password: str,
        name: str,
    ) -> TeacherModel:
        """Create a new teacher.

        Raises:
            InvalidArgumentError: If teacher_id is blank.
            ConflictError: If teacher_id or username is already registered.
        """
        teacher_id = teacher_id.strip()
        if not teacher_id:
            raise InvalidArgumentError("teacher_id cannot be empty.")

        existing = (
            self.db.query(TeacherModel)
            .filter((TeacherModel.teacher_id == teacher_id) | (TeacherModel.username == username))
            .first()
        )
        if existing:
            raise ConflictError("Teacher already exists with this teacher_id or username")

        teacher = TeacherModel(
            teacher_id=teacher_id,
            username=username,
            password_hash=self.hash_password(password),
            name=name,
            create_at=utc_now().isoformat(),
        )
        self._save(teacher, "Teacher already exists with this teacher_id or username")
        logger.info("Registered teacher: %s (%s)", username, teacher_id)
        return teacher

    def authenticate(self, role: str, username: str, password: str) -> Optional[Identity]:
        """Check credentials for the given role.

        Returns:
            The matching identity, or None if the credentials are wrong.
        """
        model_cls = StudentModel if role == ROLE_STUDENT else TeacherModel
        model = self.db.query(model_cls).filter(model_cls.username == username).first()
        if model is None or not self.verify_password(password, model.password_hash):
            return None
        return model

    def get_student(self, student_id: str) -> StudentModel:
        student = self.db.get(StudentModel, student_id)
        if student is None:
            raise NotFoundError("Student", student_id)
        return student

    def get_teacher(self, teacher_id: str) -> TeacherModel:
        teacher = self.db.get(TeacherModel, teacher_id)
        if teacher is None:
            raise NotFoundError("Teacher", teacher_id)
        return teacher

    def get_identity(self, subject_id: str, role: str) -> Identity:
        """Look up the identity behind an authenticated ``(subject_id, role)`` pair."""
        if role == ROLE_STUDENT:
            return self.get_student(subject_id)
        if role == ROLE_TEACHER:
            return self.get_teacher(subject_id)
        raise InvalidArgumentError(f"Invalid role: {role}")

    def student_overview(self, student_id: str) -> dict:
        student = self.get_student(student_id)
        unanswered = (
            self.db.query(QuestionModel)
            .filter(
                QuestionModel.student_id == student_id,
                QuestionModel.is_answered.is_(False),
            )
            .count()
        )
        return {
            "student_id": student.student_id,
            "name": student.name,
            "roll_no": student.roll_no,
            "batch": student.batch,
            "branch": student.branch,
            "is_ta": student.is_ta,
            "num_courses_enrolled": len(student.enrolled_course_ids),
            "num_pending_courses": len(student.requested_course_ids),
            "unanswered_questions": unanswered,
        }

    def teacher_overview(self, teacher_id: str) -> dict:
        teacher = self.get_teacher(teacher_id)
        total_pending = sum(len(link.course.request_list) for link in teacher.course_links)
        return {
            "teacher_id": teacher.teacher_id,
            "username": teacher.username,
            "name": teacher.name,
            "course_ids": teacher.course_ids,
            "total_pending_requests": total_pending,
        }
