"""Lecture schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class CreateLectureRequest(BaseModel):
    course_id: str
    lecture_title: str = Field(min_length=1)
    class_start: datetime = Field(description="Scheduled start; naive values are UTC")
    class_end: datetime = Field(description="Scheduled end, after class_start")
    lec_num: Optional[int] = Field(default=None, description="Defaults to the next number in the course")
    topic: Optional[str] = None


class LectureInfo(BaseModel):
    lecture_id: str
    lecture_title: str
    course_id: str
    teacher_id: str
    class_start: str
    class_end: str
    lec_num: int
    topic: Optional[str] = None
    is_teacher_ended: bool
    teacher_ended_at: Optional[str] = None
    status: str = Field(description="'scheduled', 'live' or 'ended' at response time")
    joined_students: List[str]
    query_ids: List[str]
    created_at: str
