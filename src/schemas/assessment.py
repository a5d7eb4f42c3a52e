"""Risk assessment schema definitions.

A risk assessment is a checklist. Its status moves to ``completed`` by itself
once every required item is ticked; see ``utils.completion``.
"""

import secrets
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from utils.clock import utc_now

RiskLevel = Literal["low", "medium", "high", "critical"]
AssessmentStatus = Literal["pending", "in_progress", "completed"]


class ChecklistItem(BaseModel):
    id: str = Field(default_factory=lambda: secrets.token_hex(4))
    text: str = Field(min_length=1)
    completed: bool = False
    required: bool = True


class RiskAssessmentCreate(BaseModel):
    title: str = Field(min_length=1)
    area: str = Field(min_length=1)
    risk_level: RiskLevel
    status: AssessmentStatus = "pending"
    items: List[ChecklistItem] = Field(default_factory=list)


class RiskAssessmentUpdate(BaseModel):
    """Partial update. Only fields that are set are applied."""

    title: Optional[str] = Field(default=None, min_length=1)
    area: Optional[str] = Field(default=None, min_length=1)
    risk_level: Optional[RiskLevel] = None
    status: Optional[AssessmentStatus] = None
    items: Optional[List[ChecklistItem]] = None


class RiskAssessment(BaseModel):
    id: str
    title: str
    area: str
    risk_level: RiskLevel
    status: AssessmentStatus = "pending"
    assessor_id: str
    items: List[ChecklistItem] = Field(default_factory=list)
    completed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
