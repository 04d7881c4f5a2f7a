from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.middleware.exceptions import unwrap
from app.models.user import User
from app.schemas.analytics import AssessmentSummary, OrganizationSummary
from app.schemas.response import APIResponse
from app.services.analytics import analytics_service
from app.utils import deps

router = APIRouter()


@router.get("/assessments/{assessment_id}", response_model=APIResponse[AssessmentSummary])
async def get_assessment_summary(
    *,
    db: Session = Depends(deps.get_db),
    assessment_id: int,
    user: User = Depends(deps.get_current_user)
):
    summary = unwrap(analytics_service.summarize_assessment(db, assessment_id=assessment_id, viewer_id=user.id))
    return APIResponse(message="Assessment analytics retrieved successfully", data=summary)


@router.get("/organizations/{org_id}", response_model=APIResponse[OrganizationSummary])
async def get_organization_summary(
    *,
    db: Session = Depends(deps.get_db),
    org_id: int,
    user: User = Depends(deps.get_current_user)
):
    summary = unwrap(analytics_service.summarize_organization(db, org_id=org_id, viewer_id=user.id))
    return APIResponse(message="Organization analytics retrieved successfully", data=summary)
