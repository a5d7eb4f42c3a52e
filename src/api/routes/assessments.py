"""Risk assessment routes.

Updating an assessment with a checklist in which every required item is
ticked completes it, whatever status the client sent.
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, status

from api.routes.auth import CurrentUserDep
from core.dependencies import EntityStoreDep
from core.exceptions import RecordNotFoundError
from schemas.assessment import (
    AssessmentStatus,
    RiskAssessment,
    RiskAssessmentCreate,
    RiskAssessmentUpdate,
)

router = APIRouter(prefix="/api/assessments", tags=["Assessments"])


@router.get("", response_model=List[RiskAssessment], summary="List assessments")
async def list_assessments(
    store: EntityStoreDep,
    current_user: CurrentUserDep,
    status: Optional[AssessmentStatus] = None,
) -> List[RiskAssessment]:
    return await store.get_all_assessments(status)


@router.get("/{assessment_id}", response_model=RiskAssessment, summary="Get an assessment")
async def get_assessment(
    assessment_id: str, store: EntityStoreDep, current_user: CurrentUserDep
) -> RiskAssessment:
    assessment = await store.get_assessment(assessment_id)
    if assessment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Assessment not found",
        )
    return assessment


@router.post(
    "",
    response_model=RiskAssessment,
    status_code=status.HTTP_201_CREATED,
    summary="Create an assessment",
)
async def create_assessment(
    req: RiskAssessmentCreate, store: EntityStoreDep, current_user: CurrentUserDep
) -> RiskAssessment:
    """Create an assessment with the current user as assessor."""
    return await store.create_assessment(req, assessor_id=current_user.id)


@router.put("/{assessment_id}", response_model=RiskAssessment, summary="Update an assessment")
async def update_assessment(
    assessment_id: str,
    req: RiskAssessmentUpdate,
    store: EntityStoreDep,
    current_user: CurrentUserDep,
) -> RiskAssessment:
    try:
        return await store.update_assessment(assessment_id, req)
    except RecordNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
