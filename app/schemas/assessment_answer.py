from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime


class AnswerSubmit(BaseModel):
    question_id: int
    selected_index: int = Field(..., ge=0)
    client_reported_remaining: Optional[int] = Field(None, description="Client countdown value, telemetry only")


class AnswerReceipt(BaseModel):
    session_id: int
    question_id: int
    selected_index: int
    submitted_at: datetime


class AssessmentAnswer(BaseModel):
    id: int
    session_id: int
    question_id: int
    selected_index: int
    is_correct: Optional[bool] = None
    submitted_at: datetime

    model_config = ConfigDict(from_attributes=True)
