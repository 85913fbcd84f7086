"""Question and answer schemas."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class AskQuestionRequest(BaseModel):
    lecture_id: str
    question_text: str = Field(min_length=1)
    resource_ids: List[str] = Field(default_factory=list, description="Referenced course resources")
    resource_context: Optional[str] = None


class AnswerRequest(BaseModel):
    answer: str = Field(min_length=1, description="Text body or file URL")
    answer_type: Literal["text", "file"] = "text"


class AnswerInfo(BaseModel):
    answer_id: str
    question_id: str
    answerer_id: str
    answerer_role: str
    answerer_name: str
    answer: str
    answer_type: str
    answered_at: str


class QuestionInfo(BaseModel):
    question_id: str
    question_text: str
    student_id: str
    lecture_id: str
    timestamp: str
    is_answered: bool
    is_important: bool
    upvotes: int
    upvoted_by: List[str]
    referenced_resources: List[str]
    resource_context: Optional[str] = None
    answers: List[AnswerInfo] = Field(default_factory=list)
