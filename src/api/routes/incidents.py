"""Safety incident routes."""

from typing import List, Optional

from fastapi import APIRouter, status

from api.routes.auth import CurrentUserDep
from core.dependencies import EntityStoreDep
from schemas.incident import (
    IncidentReportRequest,
    IncidentStatus,
    SafetyIncident,
    SafetyIncidentCreate,
)

router = APIRouter(prefix="/api/incidents", tags=["Incidents"])


@router.get("", response_model=List[SafetyIncident], summary="List incidents")
async def list_incidents(
    store: EntityStoreDep,
    current_user: CurrentUserDep,
    status: Optional[IncidentStatus] = None,
) -> List[SafetyIncident]:
    return await store.get_all_incidents(status)


@router.post(
    "",
    response_model=SafetyIncident,
    status_code=status.HTTP_201_CREATED,
    summary="Report an incident",
)
async def report_incident(
    req: IncidentReportRequest, store: EntityStoreDep, current_user: CurrentUserDep
) -> SafetyIncident:
    """Report an incident on behalf of the current user."""
    return await store.create_incident(
        SafetyIncidentCreate(**req.model_dump(), reported_by=current_user.id)
    )
