from sqlalchemy import JSON, Column, DateTime, Integer, String

from .base import Base


class SafetyDocumentModel(Base):
    __tablename__ = "safety_documents"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    file_path = Column(String, nullable=False)
    uploaded_by = Column(String, index=True, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
