"""Question (doubt) and answer routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from api.routes.auth import get_current_user, require_role
from config import ROLE_STUDENT, ROLE_TEACHER
from core.dependencies import DoubtManagerDep
from schemas.doubt import AnswerInfo, AnswerRequest, AskQuestionRequest, QuestionInfo
from schemas.user import CurrentUser

router = APIRouter(prefix="/api/doubts", tags=["Doubt"])


def _build_answer_info(model) -> AnswerInfo:
    return AnswerInfo(
        answer_id=model.answer_id,
        question_id=model.question_id,
        answerer_id=model.answerer_id,
        answerer_role=model.answerer_role,
        answerer_name=model.answerer_name,
        answer=model.answer,
        answer_type=model.answer_type,
        answered_at=model.answered_at,
    )


def _build_question_info(model, with_answers: bool = True) -> QuestionInfo:
    return QuestionInfo(
        question_id=model.question_id,
        question_text=model.question_text,
        student_id=model.student_id,
        lecture_id=model.lecture_id,
        timestamp=model.timestamp,
        is_answered=model.is_answered,
        is_important=model.is_important,
        upvotes=model.upvotes,
        upvoted_by=model.upvoted_by,
        referenced_resources=model.referenced_resources,
        resource_context=model.resource_context,
        answers=[_build_answer_info(a) for a in model.answers] if with_answers else [],
    )


@router.post("", response_model=QuestionInfo, summary="Ask a question in a lecture")
def ask_question(
    req: AskQuestionRequest,
    doubt_manager: DoubtManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> QuestionInfo:
    require_role(current_user, ROLE_STUDENT)
    question = doubt_manager.ask_question(
        student_id=current_user.subject_id,
        lecture_id=req.lecture_id,
        question_text=req.question_text,
        resource_ids=req.resource_ids,
        resource_context=req.resource_context,
    )
    return _build_question_info(question)


@router.get("", response_model=List[QuestionInfo], summary="All questions in the caller's courses")
def all_doubts(
    doubt_manager: DoubtManagerDep,
    course_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[QuestionInfo]:
    questions = doubt_manager.all_doubts_for_course(
        current_user.subject_id, current_user.role, course_id
    )
    return [_build_question_info(q) for q in questions]


@router.get("/unanswered", response_model=List[QuestionInfo], summary="Unanswered questions")
def unanswered_doubts(
    doubt_manager: DoubtManagerDep,
    course_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[QuestionInfo]:
    questions = doubt_manager.unanswered_doubts(
        current_user.subject_id, current_user.role, course_id
    )
    return [_build_question_info(q, with_answers=False) for q in questions]


@router.get("/answered", response_model=List[QuestionInfo], summary="Answered questions with answers")
def answered_doubts(
    doubt_manager: DoubtManagerDep,
    course_id: Optional[str] = None,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[QuestionInfo]:
    questions = doubt_manager.answered_doubts_with_answers(
        current_user.subject_id, current_user.role, course_id
    )
    return [_build_question_info(q) for q in questions]


@router.get(
    "/lecture/{lecture_id}",
    response_model=List[QuestionInfo],
    summary="Questions raised in a lecture",
)
def lecture_doubts(
    lecture_id: str,
    doubt_manager: DoubtManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[QuestionInfo]:
    questions = doubt_manager.lecture_doubts(current_user.subject_id, current_user.role, lecture_id)
    return [_build_question_info(q) for q in questions]


@router.get(
    "/lecture/{lecture_id}/mine",
    response_model=List[QuestionInfo],
    summary="The caller's questions in a lecture",
)
def my_questions(
    lecture_id: str,
    doubt_manager: DoubtManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[QuestionInfo]:
    require_role(current_user, ROLE_STUDENT)
    questions = doubt_manager.my_questions(current_user.subject_id, lecture_id)
    return [_build_question_info(q) for q in questions]


@router.post("/{question_id}/answers", response_model=AnswerInfo, summary="Answer a question")
def answer_question(
    question_id: str,
    req: AnswerRequest,
    doubt_manager: DoubtManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> AnswerInfo:
    """Teachers of the course and its TAs may answer; anyone else gets 403."""
    answer = doubt_manager.answer_question(
        responder_id=current_user.subject_id,
        responder_role=current_user.role,
        question_id=question_id,
        content=req.answer,
        content_kind=req.answer_type,
    )
    return _build_answer_info(answer)


@router.get("/{question_id}/answers", response_model=List[AnswerInfo], summary="Answers in order")
def list_answers(
    question_id: str,
    doubt_manager: DoubtManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> List[AnswerInfo]:
    answers = doubt_manager.list_answers(current_user.subject_id, current_user.role, question_id)
    return [_build_answer_info(a) for a in answers]


@router.post("/{question_id}/upvote", response_model=QuestionInfo, summary="Upvote a question")
def upvote(
    question_id: str,
    doubt_manager: DoubtManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> QuestionInfo:
    require_role(current_user, ROLE_STUDENT)
    return _build_question_info(doubt_manager.upvote(current_user.subject_id, question_id))


@router.post(
    "/{question_id}/important",
    response_model=QuestionInfo,
    summary="Toggle the important flag",
)
def mark_important(
    question_id: str,
    doubt_manager: DoubtManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> QuestionInfo:
    require_role(current_user, ROLE_TEACHER)
    question = doubt_manager.mark_important(current_user.subject_id, question_id)
    return _build_question_info(question)


@router.delete("/{question_id}", summary="Delete a question")
def delete_question(
    question_id: str,
    doubt_manager: DoubtManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> dict:
    require_role(current_user, ROLE_TEACHER)
    doubt_manager.delete_question(current_user.subject_id, question_id)
    return {"success": True, "message": "Question deleted"}


@router.delete("/answers/{answer_id}", response_model=QuestionInfo, summary="Delete an answer")
def delete_answer(
    answer_id: str,
    doubt_manager: DoubtManagerDep,
    current_user: CurrentUser = Depends(get_current_user),
) -> QuestionInfo:
    require_role(current_user, ROLE_TEACHER)
    return _build_question_info(doubt_manager.delete_answer(current_user.subject_id, answer_id))
