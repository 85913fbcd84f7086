"""Course resource catalog.

Resources are numbered per course (``RES_<course_id>_<seq>``) and are
soft-deleted, so a deleted resource keeps its id and stays resolvable for
questions that reference it.
"""

import logging
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from config import (
    ACCESS_LEVELS,
    DEFAULT_ACCESS_LEVEL,
    DEFAULT_RESOURCE_TOPIC,
    RESOURCE_TYPES,
    ROLE_TEACHER,
)
from core.database import unit_of_work
from core.exceptions import ConflictError, ForbiddenError, InvalidArgumentError, NotFoundError
from models.course import CourseModel
from models.resource import ResourceModel
from utils.permissions import can_contribute, is_course_owner, resolve_course_role
from utils.time_utils import utc_now

logger = logging.getLogger(__name__)

# Fields a contributor may change after creation
UPDATABLE_FIELDS = (
    "title",
    "description",
    "resource_type",
    "content",
    "file_url",
    "tags",
    "topic",
    "lecture_ids",
    "access_level",
)
# Updatable fields that must always hold a value
REQUIRED_FIELDS = ("title", "description", "resource_type", "content", "access_level")


def _validate_choices(resource_type: Optional[str], access_level: Optional[str]) -> None:
    if resource_type is not None and resource_type not in RESOURCE_TYPES:
        raise InvalidArgumentError(
            f"Invalid resource_type: {resource_type}. Must be one of {', '.join(RESOURCE_TYPES)}."
        )
    if access_level is not None and access_level not in ACCESS_LEVELS:
        raise InvalidArgumentError(
            f"Invalid access_level: {access_level}. Must be one of {', '.join(ACCESS_LEVELS)}."
        )


class ResourceManager:
    """Manages course resources using SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    def _get_course(self, course_id: str) -> CourseModel:
        course = self.db.get(CourseModel, course_id)
        if course is None:
            raise NotFoundError("Course", course_id)
        return course

    def get_resource(self, resource_id: str) -> ResourceModel:
        resource = self.db.get(ResourceModel, resource_id)
        if resource is None:
            raise NotFoundError("Resource", resource_id)
        return resource

    def _check_lecture_ids(self, course: CourseModel, lecture_ids: List[str]) -> None:
        unknown = [lid for lid in lecture_ids if lid not in course.lecture_ids]
        if unknown:
            raise InvalidArgumentError(
                f"Lectures not in course {course.course_id}: {', '.join(unknown)}"
            )

    def ensure_can_view(self, requester_id: str, requester_role: str, course_id: str) -> CourseModel:
        """Require the requester to own, TA or be enrolled in the course."""
        course = self._get_course(course_id)
        if resolve_course_role(self.db, course, requester_id, requester_role) is None:
            raise ForbiddenError("You do not have access to this course's resources")
        return course

    def add_resource(
        self,
        contributor_id: str,
        contributor_role: str,
        course_id: str,
        title: str,
        description: str,
        resource_type: str,
        content: str,
        file_url: Optional[str] = None,
        tags: Optional[List[str]] = None,
        topic: Optional[str] = None,
        lecture_ids: Optional[List[str]] = None,
        access_level: Optional[str] = None,
    ) -> ResourceModel:
        """Add a resource to a course.

        Args:
            contributor_id: Teacher or TA adding the resource.
            contributor_role: Authenticated role of the contributor.
            course_id: Target course.
            title: Non-empty title.
            description: Short description.
            resource_type: One of ``RESOURCE_TYPES``.
            content: Text body or link.
            file_url: Optional uploaded file location.
            tags: Free-form tags.
            topic: Grouping label; resources without one fall under
                ``DEFAULT_RESOURCE_TOPIC`` when grouped.
            lecture_ids: Lectures of the same course this resource supports.
            access_level: One of ``ACCESS_LEVELS``; defaults to enrolled only.

        Returns:
            The created ResourceModel.

        Raises:
            NotFoundError: If the course does not exist.
            ForbiddenError: If the contributor is neither owner nor course TA.
            InvalidArgumentError: On a blank title, unknown type or access
                level, or lecture ids from another course.
        """
        course = self._get_course(course_id)
        added_by_role = can_contribute(self.db, course, contributor_id, contributor_role)
        if added_by_role is None:
            raise ForbiddenError("Only the course's teachers or TAs can add resources.")

        title = (title or "").strip()
        if not title:
            raise InvalidArgumentError("title is required.")
        access_level = access_level or DEFAULT_ACCESS_LEVEL
        _validate_choices(resource_type, access_level)
        lecture_ids = list(dict.fromkeys(lecture_ids or []))
        self._check_lecture_ids(course, lecture_ids)

        last_seq = (
            self.db.query(func.max(ResourceModel.seq))
            .filter(ResourceModel.course_id == course_id)
            .scalar()
        )
        seq = (last_seq or 0) + 1
        now = utc_now().isoformat()

        with unit_of_work(self.db):
            resource = ResourceModel(
                resource_id=f"RES_{course_id}_{seq:03d}",
                course_id=course_id,
                seq=seq,
                title=title,
                description=description or "",
                resource_type=resource_type,
                content=content or "",
                file_url=file_url,
                tags=list(tags or []),
                topic=topic,
                lecture_ids=lecture_ids,
                added_by=contributor_id,
                added_by_role=added_by_role,
                access_level=access_level,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            self.db.add(resource)

        self.db.refresh(resource)
        logger.info("Added resource %s to %s by %s", resource.resource_id, course_id, contributor_id)
        return resource

    def _active_resources(self, course_id: str) -> List[ResourceModel]:
        self._get_course(course_id)
        return (
            self.db.query(ResourceModel)
            .filter(ResourceModel.course_id == course_id, ResourceModel.is_active.is_(True))
            .order_by(ResourceModel.created_at.desc(), ResourceModel.seq.desc())
            .all()
        )

    def get_course_resources(
        self, requester_id: str, requester_role: str, course_id: str
    ) -> Dict[str, Any]:
        """Active resources of a course, newest first, plus a by-topic grouping.

        Raises:
            NotFoundError: If the course does not exist.
            ForbiddenError: Unless the requester owns, TAs or is enrolled in
                the course.
        """
        self.ensure_can_view(requester_id, requester_role, course_id)
        resources = self._active_resources(course_id)
        by_topic: "OrderedDict[str, List[ResourceModel]]" = OrderedDict()
        for resource in resources:
            by_topic.setdefault(resource.topic or DEFAULT_RESOURCE_TOPIC, []).append(resource)
        return {"resources": resources, "by_topic": by_topic}

    def get_lecture_resources(self, course_id: str, lecture_id: str) -> List[ResourceModel]:
        resources = self._active_resources(course_id)
        return [resource for resource in resources if lecture_id in (resource.lecture_ids or [])]

    def search_resources(
        self,
        course_id: str,
        query: Optional[str] = None,
        resource_type: Optional[str] = None,
        topic: Optional[str] = None,
        tags: Optional[List[str]] = None,
    ) -> List[ResourceModel]:
        """Filter active resources.

        ``query`` matches title, description or content case-insensitively;
        ``resource_type`` and ``topic`` match exactly; ``tags`` match when any
        tag overlaps.
        """
        resources = self._active_resources(course_id)
        needle = query.lower() if query else None
        wanted_tags = set(tags or [])

        results = []
        for resource in resources:
            if needle and not any(
                needle in (field or "").lower()
                for field in (resource.title, resource.description, resource.content)
            ):
                continue
            if resource_type and resource.resource_type != resource_type:
                continue
            if topic and resource.topic != topic:
                continue
            if wanted_tags and not wanted_tags.intersection(resource.tags or []):
                continue
            results.append(resource)
        return results

    def _ensure_can_modify(
        self, requester_id: str, requester_role: str, resource: ResourceModel
    ) -> None:
        course = self._get_course(resource.course_id)
        if requester_role == ROLE_TEACHER and is_course_owner(course, requester_id):
            return
        # TA contributions are recorded with role "ta" under the student id
        is_teacher_entry = resource.added_by_role == ROLE_TEACHER
        if resource.added_by == requester_id and is_teacher_entry == (requester_role == ROLE_TEACHER):
            return
        raise ForbiddenError("Only the contributor or the course's teachers can change this resource.")

    def update_resource(
        self,
        requester_id: str,
        requester_role: str,
        resource_id: str,
        updates: Dict[str, Any],
    ) -> ResourceModel:
        """Apply whitelisted field updates to an active resource.

        Raises:
            NotFoundError: If the resource does not exist.
            ForbiddenError: Unless the requester added it or owns the course.
            ConflictError: If the resource has been deleted.
            InvalidArgumentError: On unknown fields or invalid values.
        """
        resource = self.get_resource(resource_id)
        self._ensure_can_modify(requester_id, requester_role, resource)
        if not resource.is_active:
            raise ConflictError(f"Resource '{resource_id}' has been deleted")

        unknown = sorted(set(updates) - set(UPDATABLE_FIELDS))
        if unknown:
            raise InvalidArgumentError(f"Fields cannot be updated: {', '.join(unknown)}")
        cleared = sorted(field for field in REQUIRED_FIELDS if field in updates and updates[field] is None)
        if cleared:
            raise InvalidArgumentError(f"Fields cannot be empty: {', '.join(cleared)}")
        if "title" in updates and not (updates["title"] or "").strip():
            raise InvalidArgumentError("title cannot be empty.")
        _validate_choices(updates.get("resource_type"), updates.get("access_level"))
        if "lecture_ids" in updates:
            updates = dict(updates, lecture_ids=list(dict.fromkeys(updates["lecture_ids"] or [])))
            self._check_lecture_ids(self._get_course(resource.course_id), updates["lecture_ids"])

        with unit_of_work(self.db):
            for field, value in updates.items():
                setattr(resource, field, value)
            resource.updated_at = utc_now().isoformat()

        self.db.refresh(resource)
        logger.info("Updated resource %s: %s", resource_id, ", ".join(sorted(updates)))
        return resource

    def delete_resource(self, requester_id: str, requester_role: str, resource_id: str) -> ResourceModel:
        """Soft-delete a resource. Deleting twice is a no-op."""
        resource = self.get_resource(resource_id)
        self._ensure_can_modify(requester_id, requester_role, resource)
        if not resource.is_active:
            return resource

        with unit_of_work(self.db):
            resource.is_active = False
            resource.updated_at = utc_now().isoformat()

        self.db.refresh(resource)
        logger.info("Deleted resource %s", resource_id)
        return resource
