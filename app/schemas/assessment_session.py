from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from app.core.constants import SessionStatusEnum, CompletionReasonEnum
from app.schemas.question import PublicQuestion
from app.schemas.proctoring import ViolationEntry


class AssessmentSessionCreate(BaseModel):
    assessment_id: int
    user_id: int
    started_at: datetime
    question_order: List[int]
    time_remaining_seconds: int
    status: SessionStatusEnum = Field(default=SessionStatusEnum.IN_PROGRESS)


class AssessmentSession(BaseModel):
    id: int
    assessment_id: int
    user_id: int
    status: SessionStatusEnum
    started_at: datetime
    question_order: List[int]
    time_remaining_seconds: int
    deadline_at: Optional[datetime] = None
    tab_switch_count: int = 0
    tab_switch_log: List[ViolationEntry] = []
    score: Optional[int] = None
    passed: Optional[bool] = None
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SubmittedAnswer(BaseModel):
    question_id: int
    selected_index: int


class SessionView(BaseModel):
    """What a candidate receives from start/resume."""
    session: AssessmentSession
    questions: List[PublicQuestion] = []
    answers: List[SubmittedAnswer] = []
    resumed: bool = False


class QuestionReview(BaseModel):
    question_id: int
    selected_index: Optional[int] = None
    correct_index: int
    is_correct: bool


class SessionSummary(BaseModel):
    session_id: int
    assessment_id: int
    assessment_title: str
    status: SessionStatusEnum
    time_remaining_seconds: int
    answered_count: int
    total_questions: int
    score: Optional[int] = None
    passed: Optional[bool] = None
    pass_score: int
    completed_at: Optional[datetime] = None
    review: Optional[List[QuestionReview]] = None


class CompletionRequest(BaseModel):
    reason: CompletionReasonEnum = CompletionReasonEnum.MANUAL


class CompletionResult(BaseModel):
    session_id: int
    status: SessionStatusEnum
    score: int
    passed: bool
    completed_at: datetime
    correct_count: Optional[int] = None
    total_questions: int
    already_completed: bool = False
