"""Course-scoped permission checks shared by the managers.

A caller's standing in a course is derived from the authenticated
``(subject_id, role)`` pair:

- ``teacher``: role is teacher and the subject is one of the course's owners.
- ``ta``: role is student, the student is flagged ``is_ta`` and is on the
  course's TA roster.
- ``student``: role is student and the student is enrolled.
"""

from typing import Optional

from sqlalchemy.orm import Session

from config import ROLE_STUDENT, ROLE_TEACHER
from models.course import CourseModel
from models.student import StudentModel

COURSE_ROLE_TEACHER = "teacher"
COURSE_ROLE_TA = "ta"
COURSE_ROLE_STUDENT = "student"


def is_course_owner(course: CourseModel, teacher_id: str) -> bool:
    return teacher_id in course.teacher_ids


def is_course_ta(course: CourseModel, student: Optional[StudentModel]) -> bool:
    return bool(student and student.is_ta and student.student_id in course.ta_ids)


def resolve_course_role(
    db: Session, course: CourseModel, subject_id: str, role: str
) -> Optional[str]:
    """Return the caller's role within the course, or None if unrelated."""
    if role == ROLE_TEACHER:
        return COURSE_ROLE_TEACHER if is_course_owner(course, subject_id) else None
    if role == ROLE_STUDENT:
        student = db.get(StudentModel, subject_id)
        if is_course_ta(course, student):
            return COURSE_ROLE_TA
        if subject_id in course.student_list:
            return COURSE_ROLE_STUDENT
    return None


def can_contribute(db: Session, course: CourseModel, subject_id: str, role: str) -> Optional[str]:
    """Return ``teacher`` or ``ta`` when the caller may answer or add material."""
    course_role = resolve_course_role(db, course, subject_id, role)
    if course_role in (COURSE_ROLE_TEACHER, COURSE_ROLE_TA):
        return course_role
    return None
