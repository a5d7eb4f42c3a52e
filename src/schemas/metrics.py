from datetime import datetime

from pydantic import BaseModel, Field


class SafetyMetrics(BaseModel):
    safety_score: int = Field(ge=0, le=100)
    incidents_this_month: int = Field(ge=0)
    training_completion: int = Field(ge=0, le=100)
    risk_assessments: int = Field(ge=0, description="Completed assessments.")


class ActivityItem(BaseModel):
    """One line of the dashboard's recent-activity feed."""

    id: str
    type: str
    title: str
    description: str
    timestamp: datetime
    icon: str
