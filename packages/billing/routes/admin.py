"""
Back-office billing routes. The caller must be an active admin.
"""

from datetime import datetime
from fastapi import APIRouter, Depends, Query

from packages.auth.dependencies import get_current_user
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.billing.dependencies import get_billing_service, get_usage_service
from packages.billing.models.domain.enums import SubscriptionPlan
from packages.billing.models.schemas.billing import (
    BillingRecordResponse,
    ProcessPaymentRequest,
    UsageSummaryResponse,
)
from packages.billing.services.billing_service import BillingService
from packages.billing.services.usage_service import UsageService

router = APIRouter()


@router.post("/records/{record_id}/process", response_model=BillingRecordResponse)
async def process_billing_payment(
    record_id: int,
    request: ProcessPaymentRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    billing_service: BillingService = Depends(get_billing_service),
):
    """Mark a pending record paid or failed, e.g. after gateway reconciliation."""
    record = (
        await billing_service.process_billing_payment(
            current_user.user_id,
            record_id,
            success=request.success,
            failure_reason=request.failure_reason,
        )
    ).unwrap()
    return BillingRecordResponse.model_validate(record)


@router.get("/usage/aggregate", response_model=UsageSummaryResponse)
async def get_aggregated_usage_by_plan(
    plan: SubscriptionPlan = Query(...),
    start_date: datetime = Query(..., alias="startDate"),
    end_date: datetime = Query(..., alias="endDate"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    usage_service: UsageService = Depends(get_usage_service),
):
    """Usage totals for everyone on ``plan`` between two calendar months."""
    summary = (
        await usage_service.get_aggregated_usage_by_plan(
            current_user.user_id, plan, start_date, end_date
        )
    ).unwrap()
    return UsageSummaryResponse.model_validate(summary)
