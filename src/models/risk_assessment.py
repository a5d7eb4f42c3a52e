from sqlalchemy import JSON, Column, DateTime, Integer, String

from .base import Base


class RiskAssessmentModel(Base):
    __tablename__ = "risk_assessments"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    area = Column(String, nullable=False)
    risk_level = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending", index=True)
    assessor_id = Column(String, index=True, nullable=False)
    # Ordered checklist: [{"id", "text", "completed", "required"}, ...]
    items = Column(JSON, nullable=False, default=list)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
