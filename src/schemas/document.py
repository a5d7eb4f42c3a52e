"""Safety document schemas."""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from utils.clock import utc_now


class SafetyDocumentCreate(BaseModel):
    title: str = Field(min_length=1)
    category: str = Field(min_length=1, description="Free text, used for filtering.")
    file_path: str = Field(description="Where the uploaded file was written.")
    uploaded_by: str
    tags: List[str] = Field(default_factory=list)


class SafetyDocument(SafetyDocumentCreate):
    id: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
