"""Course resource routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from api.routes.auth import get_current_user
from core.dependencies import ResourceManagerDep
from schemas.resource import (
    AddResourceRequest,
    CourseResourcesResponse,
    ResourceInfo,
    UpdateResourceRequest,
)
from schemas.user import CurrentUser

router = APIRouter(prefix="/api/resources", tags=["Resource"])


def _build_resource_info(model) -> ResourceInfo:
    return ResourceInfo(
        resource_id=model.resource_id,
        course_id=model.course_id,
        title=model.title,
        description=model.description,
        resource_type=model.resource_type,
        content=model.content,
        file_url=model.file_url,
        tags=list(model.tags or []),
        topic=model.topic,
        lecture_ids=list(model.lecture_ids or []),
        added_by=model.added_by,
        added_by_role=model.added_by_role,
        access_level=model.access_level,
        is_active=model.is_active,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


@router.post("", response_model=ResourceInfo, summary="Add a course resource")
def add_resource(
    req: AddResourceRequest,
    resource_manager: ResourceManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> ResourceInfo:
    resource = resource_manager.add_resource(
        contributor_id=current_user.subject_id,
        contributor_role=current_user.role,
        course_id=req.course_id,
        title=req.title,
        description=req.description,
        resource_type=req.resource_type,
        content=req.content,
        file_url=req.file_url,
        tags=req.tags,
        topic=req.topic,
        lecture_ids=req.lecture_ids,
        access_level=req.access_level,
    )
    return _build_resource_info(resource)


@router.get(
    "/course/{course_id}",
    response_model=CourseResourcesResponse,
    summary="Active resources of a course, grouped by topic",
)
def get_course_resources(
    course_id: str,
    resource_manager: ResourceManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> CourseResourcesResponse:
    result = resource_manager.get_course_resources(
        current_user.subject_id, current_user.role, course_id
    )
    return CourseResourcesResponse(
        course_id=course_id,
        resources=[_build_resource_info(r) for r in result["resources"]],
        by_topic={
            topic: [_build_resource_info(r) for r in resources]
            for topic, resources in result["by_topic"].items()
        },
    )


@router.get(
    "/course/{course_id}/search",
    response_model=List[ResourceInfo],
    summary="Search a course's resources",
)
def search_resources(
    course_id: str,
    resource_manager: ResourceManagerDep,
    q: Optional[str] = None,
    resource_type: Optional[str] = None,
    topic: Optional[str] = None,
    tags: Optional[List[str]] = Query(default=None),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[ResourceInfo]:
    resource_manager.ensure_can_view(current_user.subject_id, current_user.role, course_id)
    results = resource_manager.search_resources(
        course_id, query=q, resource_type=resource_type, topic=topic, tags=tags
    )
    return [_build_resource_info(r) for r in results]


@router.get(
    "/course/{course_id}/lecture/{lecture_id}",
    response_model=List[ResourceInfo],
    summary="Resources linked to a lecture",
)
def get_lecture_resources(
    course_id: str,
    lecture_id: str,
    resource_manager: ResourceManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[ResourceInfo]:
    resource_manager.ensure_can_view(current_user.subject_id, current_user.role, course_id)
    resources = resource_manager.get_lecture_resources(course_id, lecture_id)
    return [_build_resource_info(r) for r in resources]


@router.get("/{resource_id}", response_model=ResourceInfo, summary="Resource by id")
def get_resource(
    resource_id: str,
    resource_manager: ResourceManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> ResourceInfo:
    """Soft-deleted resources stay addressable here."""
    resource = resource_manager.get_resource(resource_id)
    resource_manager.ensure_can_view(current_user.subject_id, current_user.role, resource.course_id)
    return _build_resource_info(resource)


@router.patch("/{resource_id}", response_model=ResourceInfo, summary="Update a resource")
def update_resource(
    resource_id: str,
    req: UpdateResourceRequest,
    resource_manager: ResourceManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> ResourceInfo:
    resource = resource_manager.update_resource(
        current_user.subject_id,
        current_user.role,
        resource_id,
        req.model_dump(exclude_none=True),
    )
    return _build_resource_info(resource)


@router.delete("/{resource_id}", response_model=ResourceInfo, summary="Soft-delete a resource")
def delete_resource(
    resource_id: str,
    resource_manager: ResourceManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> ResourceInfo:
    resource = resource_manager.delete_resource(
        current_user.subject_id, current_user.role, resource_id
    )
    return _build_resource_info(resource)
