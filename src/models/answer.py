"""Answer database model.

Answers belong to exactly one question and are never edited after creation.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .base import Base


class AnswerModel(Base):
    __tablename__ = "answers"

    answer_id = Column(String, primary_key=True, index=True)
    question_id = Column(String, ForeignKey("questions.question_id", ondelete="CASCADE"), index=True)
    answerer_id = Column(String, nullable=False)
    answerer_role = Column(String, nullable=False)  # 'teacher' or 'ta'
    answerer_name = Column(String, nullable=False)
    answer = Column(Text, nullable=False)  # text body or uploaded file URL
    answer_type = Column(String, nullable=False)  # 'text' or 'file'
    answered_at = Column(String, nullable=False)
    position = Column(Integer, nullable=False)  # order within the question

    question = relationship("QuestionModel", back_populates="answers")
