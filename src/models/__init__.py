"""ORM models.

Importing this package registers every table on ``Base.metadata``.
"""

from .base import Base
from .student import StudentModel
from .teacher import TeacherModel
from .course import CourseModel, CourseTAModel, CourseTeacherModel
from .enrollment import EnrollmentModel, EnrollmentStatus
from .lecture import LectureAttendanceModel, LectureModel
from .question import QuestionModel, QuestionResourceModel, QuestionUpvoteModel
from .answer import AnswerModel
from .resource import ResourceModel

__all__ = [
    "Base",
    "StudentModel",
    "TeacherModel",
    "CourseModel",
    "CourseTAModel",
    "CourseTeacherModel",
    "EnrollmentModel",
    "EnrollmentStatus",
    "LectureModel",
    "LectureAttendanceModel",
    "QuestionModel",
    "QuestionResourceModel",
    "QuestionUpvoteModel",
    "AnswerModel",
    "ResourceModel",
]
