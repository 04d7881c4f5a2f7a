from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.core.constants import ViolationTypeEnum

class ProctoringEvent(Base):
    __tablename__ = "proctoring_events"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("assessment_sessions.id"), nullable=False, index=True)
    event_type = Column(
        Enum(ViolationTypeEnum, name="violationtypeenum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ViolationTypeEnum.TAB_HIDDEN,
    )
    occurred_at = Column(DateTime(timezone=True), nullable=False)

    session = relationship("AssessmentSession", back_populates="proctoring_events")
