from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.middleware.exceptions import unwrap
from app.models.user import User
from app.schemas.assessment_answer import AnswerReceipt, AnswerSubmit
from app.schemas.assessment_session import CompletionRequest, CompletionResult, SessionSummary, SessionView
from app.schemas.proctoring import ViolationReceipt, ViolationReport
from app.schemas.response import APIResponse
from app.services.answer import answer_service
from app.services.assessment_session import assessment_session_service
from app.services.completion import completion_service
from app.services.proctoring import proctoring_service
from app.utils import deps

router = APIRouter()


@router.post("/assessments/{assessment_id}/sessions", response_model=APIResponse[SessionView])
async def start_or_resume_session(
    *,
    db: Session = Depends(deps.get_db),
    assessment_id: int,
    user: User = Depends(deps.get_current_user)
):
    """Start a new attempt, or resume the caller's in-progress one."""
    view = unwrap(await assessment_session_service.start_or_resume(db, user_id=user.id, assessment_id=assessment_id))
    message = "Session resumed" if view.resumed else "Session started"
    return APIResponse(message=message, data=view)


@router.get("/sessions/{session_id}", response_model=APIResponse[SessionSummary])
async def get_session_summary(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    user: User = Depends(deps.get_current_user)
):
    summary = unwrap(assessment_session_service.get_session_summary(db, session_id=session_id, user_id=user.id))
    return APIResponse(message="Session retrieved successfully", data=summary)


@router.post("/sessions/{session_id}/answers", response_model=APIResponse[AnswerReceipt])
async def submit_answer(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    answer_in: AnswerSubmit,
    user: User = Depends(deps.get_current_user)
):
    receipt = unwrap(answer_service.submit_answer(
        db,
        session_id=session_id,
        user_id=user.id,
        question_id=answer_in.question_id,
        selected_index=answer_in.selected_index,
        client_reported_remaining=answer_in.client_reported_remaining,
    ))
    return APIResponse(message="Answer saved", data=receipt)


@router.post("/sessions/{session_id}/focus-loss", response_model=APIResponse[ViolationReceipt], status_code=status.HTTP_201_CREATED)
async def record_focus_loss(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    user: User = Depends(deps.get_current_user)
):
    receipt = unwrap(proctoring_service.record_focus_loss(db, session_id=session_id, user_id=user.id))
    return APIResponse(message="Focus loss recorded", data=receipt)


@router.post("/sessions/{session_id}/complete", response_model=APIResponse[CompletionResult])
async def complete_session(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    completion_in: CompletionRequest = CompletionRequest(),
    user: User = Depends(deps.get_current_user)
):
    result = unwrap(await completion_service.complete(db, session_id=session_id, user_id=user.id, reason=completion_in.reason))
    message = "Session was already completed" if result.already_completed else "Session completed"
    return APIResponse(message=message, data=result)


@router.get("/sessions/{session_id}/violations", response_model=APIResponse[ViolationReport])
async def get_violations(
    *,
    db: Session = Depends(deps.get_db),
    session_id: int,
    user: User = Depends(deps.get_current_user)
):
    report = unwrap(proctoring_service.get_violations(db, session_id=session_id, viewer_id=user.id))
    return APIResponse(message="Violations retrieved successfully", data=report)
