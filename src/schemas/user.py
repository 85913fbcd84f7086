"""Identity request and response schemas."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class CurrentUser(BaseModel):
    """Authenticated caller resolved from the bearer token."""

    subject_id: str = Field(description="student_id or teacher_id of the caller")
    role: Literal["student", "teacher"] = Field(description="Authenticated role")
    name: str = Field(description="Display name")
    username: str = Field(description="Login name")


class StudentRegisterRequest(BaseModel):
    username: str = Field(min_length=1, description="Login name (email address)")
    password: str = Field(min_length=1, description="Plain text password")
    name: str = Field(min_length=1, description="Display name")
    roll_no: str = Field(min_length=1, description="University roll number")
    batch: str = Field(description="Academic batch, e.g. 'B.Tech'")
    branch: str = Field(description="Academic branch, e.g. 'CSE'")


class TeacherRegisterRequest(BaseModel):
    teacher_id: str = Field(min_length=1, description="Faculty identifier")
    username: str = Field(min_length=1, description="Login name (email address)")
    password: str = Field(min_length=1, description="Plain text password")
    name: str = Field(min_length=1, description="Display name")


class LoginRequest(BaseModel):
    username: str
    password: str


class StudentInfo(BaseModel):
    student_id: str
    username: str
    name: str
    roll_no: str
    is_ta: bool
    batch: str
    branch: str
    requested_courses: List[str] = Field(default_factory=list)
    enrolled_courses: List[str] = Field(default_factory=list)
    create_at: str


class TeacherInfo(BaseModel):
    teacher_id: str
    username: str
    name: str
    course_ids: List[str] = Field(default_factory=list)
    create_at: str


class LoginResponse(BaseModel):
    token: str = Field(description="JWT bearer token")
    role: Literal["student", "teacher"]
    student: Optional[StudentInfo] = None
    teacher: Optional[TeacherInfo] = None


class CurrentUserResponse(BaseModel):
    user: CurrentUser


class OptionsResponse(BaseModel):
    options: List[str]


class StudentOverview(BaseModel):
    student_id: str
    name: str
    roll_no: str
    batch: str
    branch: str
    is_ta: bool
    num_courses_enrolled: int
    num_pending_courses: int
    unanswered_questions: int


class TeacherOverview(BaseModel):
    teacher_id: str
    username: str
    name: str
    course_ids: List[str]
    total_pending_requests: int
