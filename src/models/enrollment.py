"""Enrollment database model.

One row per (course, student) pair. The row's status is the enrollment
state: ``requested`` or ``enrolled``. No row means the pair is in NONE.
"""

import enum

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class EnrollmentStatus(str, enum.Enum):
    REQUESTED = "requested"
    ENROLLED = "enrolled"


class EnrollmentModel(Base):
    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint("course_id", "student_id", name="uq_enrollments_course_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(String, ForeignKey("courses.course_id", ondelete="CASCADE"), index=True)
    student_id = Column(String, ForeignKey("students.student_id", ondelete="CASCADE"), index=True)
    status = Column(String, nullable=False, default=EnrollmentStatus.REQUESTED.value)
    requested_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)

    course = relationship("CourseModel", back_populates="enrollments")
    student = relationship("StudentModel", back_populates="enrollments")
