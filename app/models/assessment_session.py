from sqlalchemy import Column, Integer, DateTime, ForeignKey, Boolean, Enum, JSON, Index, text
from sqlalchemy.orm import relationship
from app.core.database import Base
from app.core.constants import SessionStatusEnum

class AssessmentSession(Base):
    __tablename__ = "assessment_sessions"
    __table_args__ = (
        # At most one in-progress attempt per (user, assessment)
        Index(
            "uq_assessment_sessions_in_progress",
            "user_id",
            "assessment_id",
            unique=True,
            postgresql_where=text("status = 'in_progress'"),
            sqlite_where=text("status = 'in_progress'"),
        ),
        Index("idx_assessment_sessions_assessment_status", "assessment_id", "status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    assessment_id = Column(Integer, ForeignKey("assessments.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(
        Enum(SessionStatusEnum, name="sessionstatusenum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=SessionStatusEnum.IN_PROGRESS,
    )
    started_at = Column(DateTime(timezone=True), nullable=False)
    question_order = Column(JSON, nullable=False)
    time_remaining_seconds = Column(Integer, nullable=False) # Initial allowance, recomputed on every read
    tab_switch_count = Column(Integer, nullable=False, default=0)
    score = Column(Integer, nullable=True)
    passed = Column(Boolean, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    assessment = relationship("Assessment", back_populates="sessions")
    user = relationship("User", back_populates="assessment_sessions")
    answers = relationship("AssessmentAnswer", back_populates="session", cascade="all, delete-orphan")
    proctoring_events = relationship(
        "ProctoringEvent",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ProctoringEvent.id",
    )

    @property
    def is_terminal(self) -> bool:
        return self.status != SessionStatusEnum.IN_PROGRESS
