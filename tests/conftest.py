import os

# Cheap hashing for tests; must be set before config is imported
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import datetime, timedelta

import pytest
import pytz
from sqlalchemy.pool import StaticPool

from core.database import SessionLocal, dispose_engine, init_engine
from utils.course_manager import CourseManager
from utils.doubt_manager import DoubtManager
from utils.lecture_manager import LectureManager
from utils.resource_manager import ResourceManager
from utils.user_manager import UserManager

NOW = datetime(2030, 1, 15, 10, 0, tzinfo=pytz.utc)


@pytest.fixture
def db():
    init_engine("sqlite://", poolclass=StaticPool)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        dispose_engine()


@pytest.fixture
def users(db):
    return UserManager(db)


@pytest.fixture
def courses(db):
    return CourseManager(db)


@pytest.fixture
def lectures(db):
    return LectureManager(db)


@pytest.fixture
def doubts(db):
    return DoubtManager(db)


@pytest.fixture
def resources(db):
    return ResourceManager(db)


@pytest.fixture
def teacher(users):
    return users.register_teacher("T001", "prof@uni.edu", "secret", "Prof. Rao")


@pytest.fixture
def other_teacher(users):
    return users.register_teacher("T002", "other@uni.edu", "secret", "Dr. Iyer")


def make_student(users, n, batch="B.Tech", branch="CSE"):
    return users.register_student(
        username=f"student{n}@uni.edu",
        password="pw",
        name=f"Student {n}",
        roll_no=f"2021{n:03d}",
        batch=batch,
        branch=branch,
    )


@pytest.fixture
def student(users):
    return make_student(users, 1)


@pytest.fixture
def student2(users):
    return make_student(users, 2)


@pytest.fixture
def course(courses, teacher):
    return courses.create_course(
        teacher_id=teacher.teacher_id,
        course_id="CS101",
        course_name="Data Structures",
        batch="B.Tech",
        branch="CSE",
        valid_time=NOW + timedelta(days=120),
    )


@pytest.fixture
def enrolled(courses, teacher, course, student):
    courses.request_enrollment(student.student_id, course.course_id)
    courses.approve_request(teacher.teacher_id, course.course_id, student.student_id)
    return student


@pytest.fixture
def ta(users, courses, teacher, course):
    helper = make_student(users, 50, batch="M.Tech")
    courses.make_ta(teacher.teacher_id, course.course_id, helper.student_id)
    return helper


@pytest.fixture
def lecture(lectures, teacher, course):
    return lectures.create_lecture(
        teacher_id=teacher.teacher_id,
        course_id=course.course_id,
        lecture_title="Linked lists",
        class_start=NOW - timedelta(minutes=10),
        class_end=NOW + timedelta(minutes=50),
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def new_student(users):
    numbers = iter(range(100, 1000))

    def _make(batch="B.Tech", branch="CSE"):
        return make_student(users, next(numbers), batch=batch, branch=branch)

    return _make
