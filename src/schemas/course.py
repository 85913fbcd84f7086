"""Course and enrollment schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class CreateCourseRequest(BaseModel):
    course_id: str = Field(min_length=1, description="Business key, e.g. 'CS101'")
    course_name: str = Field(min_length=1, description="Course title")
    batch: str = Field(description="Target batch")
    branch: str = Field(description="Target branch")
    valid_time: datetime = Field(description="Date until which the course is offered")
    additional_teacher_ids: List[str] = Field(
        default_factory=list, description="Co-owning teachers besides the caller"
    )
    ta_ids: List[str] = Field(default_factory=list, description="Students on the TA roster")


class CourseInfo(BaseModel):
    course_id: str
    course_name: str
    batch: str
    branch: str
    valid_time: str
    teacher_ids: List[str]
    ta_ids: List[str]
    lecture_ids: List[str]
    created_at: str
    # Only filled in for the course's teachers
    request_list: Optional[List[str]] = None
    student_list: Optional[List[str]] = None


class EnrollmentInfo(BaseModel):
    course_id: str
    student_id: str
    status: str = Field(description="'requested' or 'enrolled'")
    requested_at: str
    updated_at: str


class StudentIdsRequest(BaseModel):
    student_ids: List[str] = Field(min_length=1, description="Students to act on")


class StudentIdsResponse(BaseModel):
    success: bool = True
    student_ids: List[str]


class CourseStudentInfo(BaseModel):
    student_id: str
    name: str
    roll_no: str
    batch: str
    branch: str
    is_ta: bool
