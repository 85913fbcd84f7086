"""Lecture routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from api.routes.auth import get_current_user, require_role
from config import ROLE_STUDENT, ROLE_TEACHER
from core.dependencies import LectureManagerDep
from schemas.lecture import CreateLectureRequest, LectureInfo
from schemas.user import CurrentUser
from utils.lecture_manager import status_of
from utils.time_utils import utc_now

router = APIRouter(prefix="/api/lectures", tags=["Lecture"])


def _build_lecture_info(model, now=None) -> LectureInfo:
    return LectureInfo(
        lecture_id=model.lecture_id,
        lecture_title=model.lecture_title,
        course_id=model.course_id,
        teacher_id=model.teacher_id,
        class_start=model.class_start,
        class_end=model.class_end,
        lec_num=model.lec_num,
        topic=model.topic,
        is_teacher_ended=model.is_teacher_ended,
        teacher_ended_at=model.teacher_ended_at,
        status=status_of(model, now).value,
        joined_students=model.joined_students,
        query_ids=model.query_ids,
        created_at=model.created_at,
    )


@router.post("", response_model=LectureInfo, summary="Schedule a lecture")
def create_lecture(
    req: CreateLectureRequest,
    lecture_manager: LectureManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> LectureInfo:
    require_role(current_user, ROLE_TEACHER)
    lecture = lecture_manager.create_lecture(
        teacher_id=current_user.subject_id,
        course_id=req.course_id,
        lecture_title=req.lecture_title,
        class_start=req.class_start,
        class_end=req.class_end,
        lec_num=req.lec_num,
        topic=req.topic,
    )
    return _build_lecture_info(lecture)


@router.get("/live", response_model=List[LectureInfo], summary="Live lectures of the caller's courses")
def list_live(
    lecture_manager: LectureManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[LectureInfo]:
    require_role(current_user, ROLE_TEACHER)
    now = utc_now()
    return [
        _build_lecture_info(lecture, now)
        for lecture in lecture_manager.list_live(current_user.subject_id, now)
    ]


@router.get("/completed", response_model=List[LectureInfo], summary="Ended lectures")
def list_completed(
    lecture_manager: LectureManagerDep,
    course_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[LectureInfo]:
    require_role(current_user, ROLE_TEACHER)
    now = utc_now()
    lectures = lecture_manager.list_completed(current_user.subject_id, course_id, now)
    return [_build_lecture_info(lecture, now) for lecture in lectures]


@router.get("/upcoming", response_model=List[LectureInfo], summary="Live or imminent lectures")
def list_upcoming(
    lecture_manager: LectureManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[LectureInfo]:
    require_role(current_user, ROLE_STUDENT)
    now = utc_now()
    return [
        _build_lecture_info(lecture, now)
        for lecture in lecture_manager.list_upcoming_for_student(current_user.subject_id, now)
    ]


@router.get("/past", response_model=List[LectureInfo], summary="Ended lectures of enrolled courses")
def list_past(
    lecture_manager: LectureManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[LectureInfo]:
    require_role(current_user, ROLE_STUDENT)
    now = utc_now()
    return [
        _build_lecture_info(lecture, now)
        for lecture in lecture_manager.list_past_for_student(current_user.subject_id, now)
    ]


@router.get(
    "/course/{course_id}",
    response_model=List[LectureInfo],
    summary="Lectures of a course",
)
def list_course_lectures(
    course_id: str,
    lecture_manager: LectureManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[LectureInfo]:
    now = utc_now()
    lectures = lecture_manager.list_lectures_for_course(
        current_user.subject_id, current_user.role, course_id
    )
    return [_build_lecture_info(lecture, now) for lecture in lectures]


@router.get("/{lecture_id}", response_model=LectureInfo, summary="Lecture details")
def get_lecture(
    lecture_id: str,
    lecture_manager: LectureManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> LectureInfo:
    lecture = lecture_manager.view_lecture(current_user.subject_id, current_user.role, lecture_id)
    return _build_lecture_info(lecture)


@router.post("/{lecture_id}/join", response_model=LectureInfo, summary="Join a lecture")
def join_lecture(
    lecture_id: str,
    lecture_manager: LectureManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> LectureInfo:
    require_role(current_user, ROLE_STUDENT)
    lecture = lecture_manager.join_lecture(current_user.subject_id, lecture_id)
    return _build_lecture_info(lecture)


@router.post("/{lecture_id}/end", response_model=LectureInfo, summary="End a lecture")
def end_lecture(
    lecture_id: str,
    lecture_manager: LectureManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> LectureInfo:
    require_role(current_user, ROLE_TEACHER)
    lecture = lecture_manager.end_lecture(current_user.subject_id, lecture_id)
    return _build_lecture_info(lecture)


@router.delete("/{lecture_id}", summary="Delete a lecture")
def delete_lecture(
    lecture_id: str,
    lecture_manager: LectureManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> dict:
    require_role(current_user, ROLE_TEACHER)
    lecture_manager.delete_lecture(current_user.subject_id, lecture_id)
    return {"success": True, "message": "Lecture deleted"}
