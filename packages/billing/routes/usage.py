"""
Usage ledger and plan limit routes for the caller.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from packages.auth.dependencies import get_current_user
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.billing.dependencies import get_usage_service
from packages.billing.models.domain.usage import UsageDelta
from packages.billing.models.schemas.billing import (
    PlanLimitReportResponse,
    RecordUsageRequest,
    UsageMetricsResponse,
    UsageSummaryResponse,
)
from packages.billing.services.usage_service import UsageService

router = APIRouter()


@router.get("/limits", response_model=PlanLimitReportResponse)
async def check_plan_limits(
    current_user: AuthenticatedUser = Depends(get_current_user),
    usage_service: UsageService = Depends(get_usage_service),
):
    """This month's usage against the caller's plan (free without a subscription)."""
    report = (await usage_service.check_plan_limits(current_user.user_id)).unwrap()
    return PlanLimitReportResponse.model_validate(report)


@router.post("/usage", response_model=UsageSummaryResponse)
async def record_usage(
    request: RecordUsageRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    usage_service: UsageService = Depends(get_usage_service),
):
    summary = (
        await usage_service.record_usage(
            current_user.user_id, UsageDelta(**request.model_dump())
        )
    ).unwrap()
    return UsageSummaryResponse.model_validate(summary)


@router.get("/usage/current", response_model=UsageSummaryResponse)
async def get_current_month_usage(
    current_user: AuthenticatedUser = Depends(get_current_user),
    usage_service: UsageService = Depends(get_usage_service),
):
    summary = (
        await usage_service.get_current_month_usage(current_user.user_id)
    ).unwrap()
    return UsageSummaryResponse.model_validate(summary)


@router.get("/usage/monthly", response_model=UsageSummaryResponse)
async def get_monthly_usage(
    month: int = Query(...),
    year: int = Query(...),
    current_user: AuthenticatedUser = Depends(get_current_user),
    usage_service: UsageService = Depends(get_usage_service),
):
    """One month's counters. Out-of-range month or year is a 422."""
    summary = (
        await usage_service.get_monthly_usage(current_user.user_id, month, year)
    ).unwrap()
    return UsageSummaryResponse.model_validate(summary)


@router.get("/usage/yearly", response_model=list[UsageSummaryResponse])
async def get_yearly_usage(
    year: int = Query(...),
    current_user: AuthenticatedUser = Depends(get_current_user),
    usage_service: UsageService = Depends(get_usage_service),
):
    summaries = (
        await usage_service.get_yearly_usage(current_user.user_id, year)
    ).unwrap()
    return [UsageSummaryResponse.model_validate(s) for s in summaries]


@router.get("/usage/history", response_model=list[UsageMetricsResponse])
async def get_usage_history(
    limit: Optional[int] = Query(default=None),
    current_user: AuthenticatedUser = Depends(get_current_user),
    usage_service: UsageService = Depends(get_usage_service),
):
    """Recorded months, newest first."""
    history = (
        await usage_service.get_usage_history(current_user.user_id, limit)
    ).unwrap()
    return [UsageMetricsResponse.model_validate(m) for m in history]
