from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from .base import Base


class TrainingCourseModel(Base):
    __tablename__ = "training_courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(String, nullable=False)
    duration = Column(Integer, nullable=False)  # minutes
    content = Column(Text, nullable=False)
    is_required = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
