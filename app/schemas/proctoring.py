from pydantic import BaseModel, ConfigDict, Field
from typing import List
from datetime import datetime

from app.core.constants import ViolationTypeEnum


class ViolationEntry(BaseModel):
    timestamp: datetime = Field(validation_alias="occurred_at")
    type: ViolationTypeEnum = Field(validation_alias="event_type")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class ViolationReceipt(BaseModel):
    session_id: int
    recorded_at: datetime


class ViolationReport(BaseModel):
    session_id: int
    user_id: int
    tab_switch_count: int
    tab_switch_log: List[ViolationEntry] = []
