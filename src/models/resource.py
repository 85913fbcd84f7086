"""Course resource database model."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, JSON, String, Text, UniqueConstraint

from .base import Base


class ResourceModel(Base):
    __tablename__ = "resources"
    __table_args__ = (
        UniqueConstraint("course_id", "seq", name="uq_resources_course_seq"),
    )

    resource_id = Column(String, primary_key=True, index=True)  # RES_<course_id>_<seq>
    course_id = Column(String, ForeignKey("courses.course_id", ondelete="CASCADE"), index=True)
    seq = Column(Integer, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    resource_type = Column(String, nullable=False)
    content = Column(Text, nullable=False)
    file_url = Column(String, nullable=True)
    tags = Column(JSON, default=list)
    topic = Column(String, nullable=True, index=True)
    lecture_ids = Column(JSON, default=list)
    added_by = Column(String, nullable=False)
    added_by_role = Column(String, nullable=False)  # 'teacher' or 'ta'
    access_level = Column(String, nullable=False, default="enrolled_only")
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(String, nullable=False)
    updated_at = Column(String, nullable=False)
