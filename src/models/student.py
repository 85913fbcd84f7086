"""Student database model.

This module defines the Student database model using SQLAlchemy.
"""

from typing import List

from sqlalchemy import Boolean, Column, String
from sqlalchemy.orm import relationship

from .base import Base


class StudentModel(Base):
    """Student database model."""

    __tablename__ = "students"

    student_id = Column(String, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    roll_no = Column(String, unique=True, index=True, nullable=False)
    is_ta = Column(Boolean, default=False, nullable=False)
    batch = Column(String, nullable=False)  # one of config.BATCH_OPTIONS
    branch = Column(String, nullable=False)  # one of config.BRANCH_OPTIONS
    create_at = Column(String, nullable=False)  # ISO format string

    enrollments = relationship(
        "EnrollmentModel",
        back_populates="student",
        cascade="all, delete-orphan",
    )

    def _course_ids_with_status(self, status: str) -> List[str]:
        return [e.course_id for e in self.enrollments if e.status == status]

    @property
    def requested_course_ids(self) -> List[str]:
        return self._course_ids_with_status("requested")

    @property
    def enrolled_course_ids(self) -> List[str]:
        return self._course_ids_with_status("enrolled")
