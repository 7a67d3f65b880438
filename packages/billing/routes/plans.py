"""Public plan catalog."""

from fastapi import APIRouter, Depends

from packages.billing.dependencies import get_plans_service
from packages.billing.models.schemas.billing import PlanResponse, PlansResponse
from packages.billing.services.plans_service import PlansService

router = APIRouter()


@router.get("", response_model=PlansResponse)
async def get_plans(plans_service: PlansService = Depends(get_plans_service)):
    """All plans with their monthly caps. -1 means unlimited."""
    plans = (await plans_service.get_all_plans()).unwrap()
    return PlansResponse(plans=[PlanResponse.model_validate(p) for p in plans])
