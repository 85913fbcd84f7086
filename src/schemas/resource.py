"""Course resource schemas."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class AddResourceRequest(BaseModel):
    course_id: str
    title: str = Field(min_length=1)
    description: str = ""
    resource_type: str = Field(description="text, pdf, video, link, image or document")
    content: str = Field(default="", description="Text body or external URL")
    file_url: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    topic: Optional[str] = None
    lecture_ids: List[str] = Field(default_factory=list)
    access_level: Optional[str] = Field(default=None, description="public or enrolled_only")


class UpdateResourceRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    resource_type: Optional[str] = None
    content: Optional[str] = None
    file_url: Optional[str] = None
    tags: Optional[List[str]] = None
    topic: Optional[str] = None
    lecture_ids: Optional[List[str]] = None
    access_level: Optional[str] = None


class ResourceInfo(BaseModel):
    resource_id: str
    course_id: str
    title: str
    description: str
    resource_type: str
    content: str
    file_url: Optional[str] = None
    tags: List[str]
    topic: Optional[str] = None
    lecture_ids: List[str]
    added_by: str
    added_by_role: str
    access_level: str
    is_active: bool
    created_at: str
    updated_at: str


class CourseResourcesResponse(BaseModel):
    course_id: str
    resources: List[ResourceInfo]
    by_topic: Dict[str, List[ResourceInfo]]
