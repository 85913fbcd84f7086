"""Course and enrollment routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from api.routes.auth import build_student_info, get_current_user, require_role
from config import ROLE_STUDENT, ROLE_TEACHER
from core.dependencies import CourseManagerDep
from schemas.course import (
    CourseInfo,
    CourseStudentInfo,
    CreateCourseRequest,
    EnrollmentInfo,
    StudentIdsRequest,
    StudentIdsResponse,
)
from schemas.user import CurrentUser, StudentInfo
from utils.permissions import is_course_owner

router = APIRouter(prefix="/api/courses", tags=["Course"])


def _build_course_info(model, teacher_id: Optional[str] = None) -> CourseInfo:
    info = CourseInfo(
        course_id=model.course_id,
        course_name=model.course_name,
        batch=model.batch,
        branch=model.branch,
        valid_time=model.valid_time,
        teacher_ids=model.teacher_ids,
        ta_ids=model.ta_ids,
        lecture_ids=model.lecture_ids,
        created_at=model.created_at,
    )
    if teacher_id is not None and is_course_owner(model, teacher_id):
        info.request_list = model.request_list
        info.student_list = model.student_list
    return info


def _build_enrollment_info(model) -> EnrollmentInfo:
    return EnrollmentInfo(
        course_id=model.course_id,
        student_id=model.student_id,
        status=model.status,
        requested_at=model.requested_at,
        updated_at=model.updated_at,
    )


def _build_course_student(model) -> CourseStudentInfo:
    return CourseStudentInfo(
        student_id=model.student_id,
        name=model.name,
        roll_no=model.roll_no,
        batch=model.batch,
        branch=model.branch,
        is_ta=model.is_ta,
    )


@router.post("", response_model=CourseInfo, summary="Create a course")
def create_course(
    req: CreateCourseRequest,
    course_manager: CourseManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> CourseInfo:
    require_role(current_user, ROLE_TEACHER)
    course = course_manager.create_course(
        teacher_id=current_user.subject_id,
        course_id=req.course_id,
        course_name=req.course_name,
        batch=req.batch,
        branch=req.branch,
        valid_time=req.valid_time,
        additional_teacher_ids=req.additional_teacher_ids,
        ta_ids=req.ta_ids,
    )
    return _build_course_info(course, current_user.subject_id)


@router.get("/teaching", response_model=List[CourseInfo], summary="Courses taught by the caller")
def list_teacher_courses(
    course_manager: CourseManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[CourseInfo]:
    require_role(current_user, ROLE_TEACHER)
    courses = course_manager.list_teacher_courses(current_user.subject_id)
    return [_build_course_info(c, current_user.subject_id) for c in courses]


@router.get("/available", response_model=List[CourseInfo], summary="Courses open to the caller")
def list_available_courses(
    course_manager: CourseManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[CourseInfo]:
    """Courses matching the student's batch and branch not yet requested or joined."""
    require_role(current_user, ROLE_STUDENT)
    return [
        _build_course_info(c)
        for c in course_manager.list_available_courses(current_user.subject_id)
    ]


@router.get("/enrolled", response_model=List[CourseInfo], summary="Courses the caller is enrolled in")
def list_enrolled_courses(
    course_manager: CourseManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[CourseInfo]:
    require_role(current_user, ROLE_STUDENT)
    return [
        _build_course_info(c)
        for c in course_manager.list_enrolled_courses(current_user.subject_id)
    ]


@router.get("/pending", response_model=List[CourseInfo], summary="Courses awaiting approval")
def list_pending_courses(
    course_manager: CourseManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[CourseInfo]:
    require_role(current_user, ROLE_STUDENT)
    return [
        _build_course_info(c)
        for c in course_manager.list_pending_courses(current_user.subject_id)
    ]


@router.get("/{course_id}", response_model=CourseInfo, summary="Course details")
def get_course(
    course_id: str,
    course_manager: CourseManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> CourseInfo:
    course = course_manager.get_course(course_id)
    teacher_id = current_user.subject_id if current_user.role == ROLE_TEACHER else None
    return _build_course_info(course, teacher_id)


@router.post("/{course_id}/request", response_model=EnrollmentInfo, summary="Request enrollment")
def request_enrollment(
    course_id: str,
    course_manager: CourseManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> EnrollmentInfo:
    require_role(current_user, ROLE_STUDENT)
    enrollment = course_manager.request_enrollment(current_user.subject_id, course_id)
    return _build_enrollment_info(enrollment)


@router.get(
    "/{course_id}/requests",
    response_model=List[StudentInfo],
    summary="Pending enrollment requests",
)
def list_pending_requests(
    course_id: str,
    course_manager: CourseManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[StudentInfo]:
    require_role(current_user, ROLE_TEACHER)
    students = course_manager.list_pending_requests(current_user.subject_id, course_id)
    return [build_student_info(s) for s in students]


@router.post(
    "/{course_id}/requests/{student_id}/approve",
    response_model=EnrollmentInfo,
    summary="Approve an enrollment request",
)
def approve_request(
    course_id: str,
    student_id: str,
    course_manager: CourseManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> EnrollmentInfo:
    require_role(current_user, ROLE_TEACHER)
    enrollment = course_manager.approve_request(current_user.subject_id, course_id, student_id)
    return _build_enrollment_info(enrollment)


@router.post("/{course_id}/requests/{student_id}/reject", summary="Reject an enrollment request")
def reject_request(
    course_id: str,
    student_id: str,
    course_manager: CourseManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> dict:
    require_role(current_user, ROLE_TEACHER)
    course_manager.reject_request(current_user.subject_id, course_id, student_id)
    return {"success": True, "message": "Request rejected"}


@router.post(
    "/{course_id}/requests/accept",
    response_model=StudentIdsResponse,
    summary="Approve several requests at once",
)
def accept_requests(
    course_id: str,
    req: StudentIdsRequest,
    course_manager: CourseManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> StudentIdsResponse:
    require_role(current_user, ROLE_TEACHER)
    enrollments = course_manager.accept_requests(current_user.subject_id, course_id, req.student_ids)
    return StudentIdsResponse(student_ids=[e.student_id for e in enrollments])


@router.post(
    "/{course_id}/requests/reject",
    response_model=StudentIdsResponse,
    summary="Reject several requests at once",
)
def reject_requests(
    course_id: str,
    req: StudentIdsRequest,
    course_manager: CourseManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> StudentIdsResponse:
    require_role(current_user, ROLE_TEACHER)
    rejected = course_manager.reject_requests(current_user.subject_id, course_id, req.student_ids)
    return StudentIdsResponse(student_ids=rejected)


@router.get(
    "/{course_id}/students",
    response_model=List[CourseStudentInfo],
    summary="Enrolled students",
)
def list_enrolled_students(
    course_id: str,
    course_manager: CourseManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[CourseStudentInfo]:
    require_role(current_user, ROLE_TEACHER)
    students = course_manager.list_enrolled_students(current_user.subject_id, course_id)
    return [_build_course_student(s) for s in students]


@router.delete("/{course_id}/students/{student_id}", summary="Remove an enrolled student")
def remove_student(
    course_id: str,
    student_id: str,
    course_manager: CourseManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> dict:
    require_role(current_user, ROLE_TEACHER)
    course_manager.remove_student(current_user.subject_id, course_id, student_id)
    return {"success": True, "message": "Student removed"}


@router.post(
    "/{course_id}/tas/{student_id}",
    response_model=CourseStudentInfo,
    summary="Make a student a TA of the course",
)
def make_ta(
    course_id: str,
    student_id: str,
    course_manager: CourseManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> CourseStudentInfo:
    require_role(current_user, ROLE_TEACHER)
    student = course_manager.make_ta(current_user.subject_id, course_id, student_id)
    return _build_course_student(student)
