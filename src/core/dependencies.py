"""Dependency injection module for FastAPI.

Each manager is built per request around the request-scoped DB session.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from core.database import get_db
from utils import course_manager
from utils import doubt_manager
from utils import lecture_manager
from utils import resource_manager
from utils import user_manager


def get_user_manager(db: Session = Depends(get_db)) -> user_manager.UserManager:
    """Get UserManager instance with request-scoped DB session.

    Args:
        db: Database session.

    Returns:
        UserManager instance.
    """
    return user_manager.UserManager(db)


def get_course_manager(db: Session = Depends(get_db)) -> course_manager.CourseManager:
    """Get CourseManager instance with request-scoped DB session."""
    return course_manager.CourseManager(db)


def get_lecture_manager(db: Session = Depends(get_db)) -> lecture_manager.LectureManager:
    """Get LectureManager instance with request-scoped DB session."""
    return lecture_manager.LectureManager(db)


def get_doubt_manager(db: Session = Depends(get_db)) -> doubt_manager.DoubtManager:
    """Get DoubtManager instance with request-scoped DB session."""
    return doubt_manager.DoubtManager(db)


def get_resource_manager(
    db: Session = Depends(get_db),
) -> resource_manager.ResourceManager:
    """Get ResourceManager instance with request-scoped DB session."""
    return resource_manager.ResourceManager(db)


# Type aliases for dependency injection
UserManagerDep = Annotated[
    user_manager.UserManager, Depends(get_user_manager)
]
CourseManagerDep = Annotated[
    course_manager.CourseManager, Depends(get_course_manager)
]
LectureManagerDep = Annotated[
    lecture_manager.LectureManager, Depends(get_lecture_manager)
]
DoubtManagerDep = Annotated[
    doubt_manager.DoubtManager, Depends(get_doubt_manager)
]
ResourceManagerDep = Annotated[
    resource_manager.ResourceManager, Depends(get_resource_manager)
]
