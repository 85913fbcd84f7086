"""Teacher database model."""

from typing import List

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from .base import Base


class TeacherModel(Base):
    """Teacher database model."""

    __tablename__ = "teachers"

    teacher_id = Column(String, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    create_at = Column(String, nullable=False)

    course_links = relationship(
        "CourseTeacherModel",
        back_populates="teacher",
        order_by="CourseTeacherModel.id",
        cascade="all, delete-orphan",
    )

    @property
    def course_ids(self) -> List[str]:
        """Owned course ids in the order they were assigned."""
        return [link.course_id for link in self.course_links]
