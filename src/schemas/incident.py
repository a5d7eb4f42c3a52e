"""Safety incident schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from schemas.assessment import RiskLevel
from utils.clock import utc_now

IncidentStatus = Literal["open", "investigating", "resolved"]


class IncidentReportRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    severity: RiskLevel
    area: str = Field(min_length=1)
    status: IncidentStatus = "open"


class SafetyIncidentCreate(IncidentReportRequest):
    reported_by: str


class SafetyIncident(SafetyIncidentCreate):
    id: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class EmergencyAlertRequest(BaseModel):
    title: str = Field(min_length=1)
    message: str = Field(min_length=1)
    severity: RiskLevel
    area: str = Field(min_length=1)
