"""Authentication routes.

This module handles HTTP endpoints for student and teacher registration,
login and the identity lookups built on the bearer token.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

import pytz
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from config import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    BATCH_OPTIONS,
    BRANCH_OPTIONS,
    JWT_ALGORITHM,
    JWT_SECRET_KEY,
    ROLE_STUDENT,
    ROLE_TEACHER,
    ROLES,
)
from core.dependencies import UserManagerDep
from core.exceptions import NotFoundError
from models.student import StudentModel
from models.teacher import TeacherModel
from schemas.user import (
    CurrentUser,
    CurrentUserResponse,
    LoginRequest,
    LoginResponse,
    OptionsResponse,
    StudentInfo,
    StudentOverview,
    StudentRegisterRequest,
    TeacherInfo,
    TeacherOverview,
    TeacherRegisterRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

# HTTP Bearer token security
security = HTTPBearer()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token.

    Args:
        data: Data to encode in the token.
        expires_delta: Optional expiration time delta.

    Returns:
        Encoded JWT token string.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(pytz.utc) + expires_delta
    else:
        expire = datetime.now(pytz.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def verify_token(credentials: HTTPAuthorizationCredentials = Depends(security)) -> dict:
    """Verify JWT token from Authorization header.

    Args:
        credentials: HTTP Bearer token credentials.

    Returns:
        Decoded token payload.

    Raises:
        HTTPException: If token is invalid, expired, or lacks subject/role.
    """
    try:
        payload = jwt.decode(credentials.credentials, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )
    if payload.get("sub") is None or payload.get("role") not in ROLES:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        )
    return payload


def get_current_user(
    user_manager: UserManagerDep,
    token_payload: dict = Depends(verify_token),
) -> CurrentUser:
    """Resolve the authenticated ``(subject_id, role)`` pair.

    Raises:
        HTTPException: If the identity behind the token no longer exists.
    """
    subject_id, role = token_payload["sub"], token_payload["role"]
    try:
        identity = user_manager.get_identity(subject_id, role)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return CurrentUser(
        subject_id=subject_id,
        role=role,
        name=identity.name,
        username=identity.username,
    )


def require_role(current_user: CurrentUser, role: str) -> None:
    if current_user.role != role:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Only {role}s can perform this action.",
        )


def build_student_info(model: StudentModel) -> StudentInfo:
    return StudentInfo(
        student_id=model.student_id,
        username=model.username,
        name=model.name,
        roll_no=model.roll_no,
        is_ta=model.is_ta,
        batch=model.batch,
        branch=model.branch,
        requested_courses=model.requested_course_ids,
        enrolled_courses=model.enrolled_course_ids,
        create_at=model.create_at,
    )


def build_teacher_info(model: TeacherModel) -> TeacherInfo:
    return TeacherInfo(
        teacher_id=model.teacher_id,
        username=model.username,
        name=model.name,
        course_ids=model.course_ids,
        create_at=model.create_at,
    )


@router.post("/student/register", response_model=StudentInfo, summary="Register a student")
def register_student(req: StudentRegisterRequest, user_manager: UserManagerDep) -> StudentInfo:
    student = user_manager.register_student(
        username=req.username,
        password=req.password,
        name=req.name,
        roll_no=req.roll_no,
        batch=req.batch,
        branch=req.branch,
    )
    return build_student_info(student)


@router.post("/teacher/register", response_model=TeacherInfo, summary="Register a teacher")
def register_teacher(req: TeacherRegisterRequest, user_manager: UserManagerDep) -> TeacherInfo:
    teacher = user_manager.register_teacher(
        teacher_id=req.teacher_id,
        username=req.username,
        password=req.password,
        name=req.name,
    )
    return build_teacher_info(teacher)


def _login(role: str, req: LoginRequest, user_manager) -> LoginResponse:
    identity = user_manager.authenticate(role, req.username, req.password)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    subject_id = identity.student_id if role == ROLE_STUDENT else identity.teacher_id
    token = create_access_token(
        data={"sub": subject_id, "role": role},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    logger.info("%s %s logged in", role, subject_id)

    if role == ROLE_STUDENT:
        return LoginResponse(token=token, role=role, student=build_student_info(identity))
    return LoginResponse(token=token, role=role, teacher=build_teacher_info(identity))


@router.post("/student/login", response_model=LoginResponse, summary="Student login")
def login_student(req: LoginRequest, user_manager: UserManagerDep) -> LoginResponse:
    return _login(ROLE_STUDENT, req, user_manager)


@router.post("/teacher/login", response_model=LoginResponse, summary="Teacher login")
def login_teacher(req: LoginRequest, user_manager: UserManagerDep) -> LoginResponse:
    return _login(ROLE_TEACHER, req, user_manager)


@router.post("/logout", summary="Logout")
def logout() -> dict:
    """Logout endpoint.

    Note: Since we're using stateless JWT tokens, logout is handled
    client-side by removing the token. This endpoint exists for API
    consistency.
    """
    return {"success": True, "message": "Logged out successfully"}


@router.get("/me", response_model=CurrentUserResponse, summary="Current user")
def get_current_user_info(
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUserResponse:
    return CurrentUserResponse(user=current_user)


@router.get("/batch-options", response_model=OptionsResponse, summary="Allowed batches")
def batch_options() -> OptionsResponse:
    return OptionsResponse(options=BATCH_OPTIONS)


@router.get("/branch-options", response_model=OptionsResponse, summary="Allowed branches")
def branch_options() -> OptionsResponse:
    return OptionsResponse(options=BRANCH_OPTIONS)


@router.get("/student/overview", response_model=StudentOverview, summary="Student dashboard")
def student_overview(
    user_manager: UserManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> StudentOverview:
    require_role(current_user, ROLE_STUDENT)
    return StudentOverview(**user_manager.student_overview(current_user.subject_id))


@router.get("/teacher/overview", response_model=TeacherOverview, summary="Teacher dashboard")
def teacher_overview(
    user_manager: UserManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> TeacherOverview:
    require_role(current_user, ROLE_TEACHER)
    return TeacherOverview(**user_manager.teacher_overview(current_user.subject_id))
