"""Question (doubt) database models."""

from typing import List

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class QuestionModel(Base):
    __tablename__ = "questions"

    question_id = Column(String, primary_key=True, index=True)
    question_text = Column(Text, nullable=False)
    student_id = Column(String, ForeignKey("students.student_id"), index=True, nullable=False)
    lecture_id = Column(String, ForeignKey("lectures.lecture_id", ondelete="CASCADE"), index=True)
    timestamp = Column(String, nullable=False)
    is_answered = Column(Boolean, default=False, nullable=False)
    is_important = Column(Boolean, default=False, nullable=False)
    upvotes = Column(Integer, default=0, nullable=False)
    resource_context = Column(Text, nullable=True)

    lecture = relationship("LectureModel", back_populates="questions")
    upvote_links = relationship(
        "QuestionUpvoteModel",
        order_by="QuestionUpvoteModel.id",
        cascade="all, delete-orphan",
    )
    answers = relationship(
        "AnswerModel",
        back_populates="question",
        order_by="AnswerModel.position",
        cascade="all, delete-orphan",
    )
    resource_links = relationship(
        "QuestionResourceModel",
        order_by="QuestionResourceModel.id",
        cascade="all, delete-orphan",
    )

    @property
    def upvoted_by(self) -> List[str]:
        return [link.student_id for link in self.upvote_links]

    @property
    def referenced_resources(self) -> List[str]:
        return [link.resource_id for link in self.resource_links]


class QuestionUpvoteModel(Base):
    __tablename__ = "question_upvotes"
    __table_args__ = (
        UniqueConstraint("question_id", "student_id", name="uq_question_upvotes_question_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(String, ForeignKey("questions.question_id", ondelete="CASCADE"), index=True)
    student_id = Column(String, ForeignKey("students.student_id", ondelete="CASCADE"), index=True)
    voted_at = Column(String, nullable=False)


class QuestionResourceModel(Base):
    __tablename__ = "question_resources"
    __table_args__ = (
        UniqueConstraint("question_id", "resource_id", name="uq_question_resources_question_resource"),
    )

    id = Column(Integer, primary_key=True, index=True)
    question_id = Column(String, ForeignKey("questions.question_id", ondelete="CASCADE"), index=True)
    resource_id = Column(String, ForeignKey("resources.resource_id"), index=True)
