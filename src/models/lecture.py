"""Lecture database models.

Liveness is not stored here; it is derived from ``class_start``,
``class_end`` and ``is_teacher_ended`` at read time.
"""

from typing import List

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class LectureModel(Base):
    __tablename__ = "lectures"
    __table_args__ = (
        UniqueConstraint("course_id", "lec_num", name="uq_lectures_course_lec_num"),
    )

    lecture_id = Column(String, primary_key=True, index=True)
    lecture_title = Column(String, nullable=False)
    course_id = Column(String, ForeignKey("courses.course_id", ondelete="CASCADE"), index=True)
    teacher_id = Column(String, ForeignKey("teachers.teacher_id"), index=True, nullable=False)
    class_start = Column(String, nullable=False)  # ISO format, UTC
    class_end = Column(String, nullable=False)  # ISO format, UTC
    lec_num = Column(Integer, nullable=False)
    topic = Column(String, nullable=True)
    is_teacher_ended = Column(Boolean, default=False, nullable=False)
    teacher_ended_at = Column(String, nullable=True)
    created_at = Column(String, nullable=False)

    course = relationship("CourseModel", back_populates="lectures")
    attendance = relationship(
        "LectureAttendanceModel",
        back_populates="lecture",
        order_by="LectureAttendanceModel.id",
        cascade="all, delete-orphan",
    )
    questions = relationship(
        "QuestionModel",
        back_populates="lecture",
        order_by="QuestionModel.timestamp",
        cascade="all, delete-orphan",
    )

    @property
    def joined_students(self) -> List[str]:
        return [a.student_id for a in self.attendance]

    @property
    def query_ids(self) -> List[str]:
        return [q.question_id for q in self.questions]


class LectureAttendanceModel(Base):
    __tablename__ = "lecture_attendance"
    __table_args__ = (
        UniqueConstraint("lecture_id", "student_id", name="uq_lecture_attendance_lecture_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    lecture_id = Column(String, ForeignKey("lectures.lecture_id", ondelete="CASCADE"), index=True)
    student_id = Column(String, ForeignKey("students.student_id", ondelete="CASCADE"), index=True)
    joined_at = Column(String, nullable=False)

    lecture = relationship("LectureModel", back_populates="attendance")
