from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base
from app.core.constants import AssessmentStatusEnum

class Assessment(Base):
    __tablename__ = "assessments"
    __table_args__ = (
        CheckConstraint("pass_score >= 0 AND pass_score <= 100", name="ck_assessments_pass_score_range"),
    )

    id = Column(Integer, primary_key=True, index=True)
    org_id = Column(Integer, ForeignKey("organizations.id"), nullable=False, index=True)
    deck_id = Column(Integer, ForeignKey("decks.id"), nullable=False)
    title = Column(String, index=True, nullable=False)
    question_count = Column(Integer, nullable=False)
    time_limit_minutes = Column(Integer, nullable=False)
    pass_score = Column(Integer, nullable=False) # 0-100 threshold
    status = Column(
        Enum(AssessmentStatusEnum, name="assessmentstatusenum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AssessmentStatusEnum.DRAFT,
    )
    shuffle_questions = Column(Boolean, nullable=False, default=True)
    allow_review = Column(Boolean, nullable=False, default=True)
    max_attempts = Column(Integer, nullable=True) # None means unlimited
    cooldown_minutes = Column(Integer, nullable=True)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    organization = relationship("Organization", back_populates="assessments")
    deck = relationship("Deck")
    sessions = relationship("AssessmentSession", back_populates="assessment")

    @property
    def time_limit_seconds(self) -> int:
        return self.time_limit_minutes * 60
