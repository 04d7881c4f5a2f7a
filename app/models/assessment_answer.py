from sqlalchemy import Column, Integer, DateTime, ForeignKey, Boolean, UniqueConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base

class AssessmentAnswer(Base):
    __tablename__ = "assessment_answers"
    __table_args__ = (UniqueConstraint("session_id", "question_id", name="uq_assessment_answers_session_question"),)

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("assessment_sessions.id"), nullable=False, index=True)
    question_id = Column(Integer, ForeignKey("questions.id"), nullable=False)
    selected_index = Column(Integer, nullable=False)
    is_correct = Column(Boolean, nullable=True) # Filled in at scoring time
    submitted_at = Column(DateTime(timezone=True), nullable=False)
    client_reported_remaining = Column(Integer, nullable=True) # Telemetry only

    session = relationship("AssessmentSession", back_populates="answers")
    question = relationship("Question")
