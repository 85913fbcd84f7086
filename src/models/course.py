"""Course database models.

A course is owned by one or more teachers and has a TA roster. Enrollment
state lives in ``EnrollmentModel``; the request and student lists exposed
here are projections of those rows.
"""

from typing import List

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class CourseModel(Base):
    __tablename__ = "courses"

    course_id = Column(String, primary_key=True, index=True)
    course_name = Column(String, nullable=False)
    batch = Column(String, nullable=False)
    branch = Column(String, nullable=False)
    valid_time = Column(String, nullable=False)  # ISO format deadline
    created_at = Column(String, nullable=False)

    teacher_links = relationship(
        "CourseTeacherModel",
        back_populates="course",
        order_by="CourseTeacherModel.id",
        cascade="all, delete-orphan",
    )
    ta_links = relationship(
        "CourseTAModel",
        back_populates="course",
        order_by="CourseTAModel.id",
        cascade="all, delete-orphan",
    )
    enrollments = relationship(
        "EnrollmentModel",
        back_populates="course",
        order_by="EnrollmentModel.id",
        cascade="all, delete-orphan",
    )
    lectures = relationship(
        "LectureModel",
        back_populates="course",
        order_by="LectureModel.lec_num",
        cascade="all, delete-orphan",
    )

    @property
    def teacher_ids(self) -> List[str]:
        return [link.teacher_id for link in self.teacher_links]

    @property
    def ta_ids(self) -> List[str]:
        return [link.student_id for link in self.ta_links]

    @property
    def request_list(self) -> List[str]:
        return [e.student_id for e in self.enrollments if e.status == "requested"]

    @property
    def student_list(self) -> List[str]:
        return [e.student_id for e in self.enrollments if e.status == "enrolled"]

    @property
    def lecture_ids(self) -> List[str]:
        return [lecture.lecture_id for lecture in self.lectures]


class CourseTeacherModel(Base):
    __tablename__ = "course_teachers"
    __table_args__ = (
        UniqueConstraint("course_id", "teacher_id", name="uq_course_teachers_course_teacher"),
    )

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(String, ForeignKey("courses.course_id", ondelete="CASCADE"), index=True)
    teacher_id = Column(String, ForeignKey("teachers.teacher_id", ondelete="CASCADE"), index=True)
    assigned_at = Column(String, nullable=False)

    course = relationship("CourseModel", back_populates="teacher_links")
    teacher = relationship("TeacherModel", back_populates="course_links")


class CourseTAModel(Base):
    __tablename__ = "course_tas"
    __table_args__ = (
        UniqueConstraint("course_id", "student_id", name="uq_course_tas_course_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(String, ForeignKey("courses.course_id", ondelete="CASCADE"), index=True)
    student_id = Column(String, ForeignKey("students.student_id", ondelete="CASCADE"), index=True)
    assigned_at = Column(String, nullable=False)

    course = relationship("CourseModel", back_populates="ta_links")
