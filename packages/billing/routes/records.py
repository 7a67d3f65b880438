"""
Billing history routes, scoped to the caller's own records.
"""

from fastapi import APIRouter, Depends, Query, status

from common.core.config import settings
from packages.auth.dependencies import get_current_user
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.billing.dependencies import get_billing_service
from packages.billing.models.domain.billing import (
    BillingHistoryQuery,
    BillingStatusUpdateRequest,
)
from packages.billing.models.domain.enums import BillingHistoryOrderBy, SortOrder
from packages.billing.models.schemas.billing import (
    BillingHistoryResponse,
    BillingRecordResponse,
    CreateBillingRecordRequest,
    UpdateBillingStatusRequest,
)
from packages.billing.services.billing_service import BillingService

router = APIRouter()

ORDER_BY_PARAMS = {
    "createdAt": BillingHistoryOrderBy.CREATED_AT,
    "paidAt": BillingHistoryOrderBy.PAID_AT,
}


@router.post(
    "", response_model=BillingRecordResponse, status_code=status.HTTP_201_CREATED
)
async def create_billing_record(
    request: CreateBillingRecordRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    billing_service: BillingService = Depends(get_billing_service),
):
    """Record a pending charge against the caller's subscription."""
    record = (
        await billing_service.create_billing_record(current_user.user_id, request)
    ).unwrap()
    return BillingRecordResponse.model_validate(record)


@router.get("", response_model=BillingHistoryResponse)
async def get_billing_history(
    page: int = Query(default=1, ge=1),
    limit: int = Query(
        default=settings.billing_history_default_limit,
        ge=1,
        le=settings.billing_history_max_limit,
    ),
    order: SortOrder = Query(default=SortOrder.DESC),
    order_by: str = Query(
        default="createdAt", alias="orderBy", pattern="^(createdAt|paidAt)$"
    ),
    current_user: AuthenticatedUser = Depends(get_current_user),
    billing_service: BillingService = Depends(get_billing_service),
):
    history = (
        await billing_service.get_billing_history(
            current_user.user_id,
            BillingHistoryQuery(
                page=page, limit=limit, order=order, order_by=ORDER_BY_PARAMS[order_by]
            ),
        )
    ).unwrap()
    return BillingHistoryResponse.model_validate(history)


@router.get("/{record_id}", response_model=BillingRecordResponse)
async def get_billing_record(
    record_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    billing_service: BillingService = Depends(get_billing_service),
):
    record = (
        await billing_service.get_billing_record(current_user.user_id, record_id)
    ).unwrap()
    return BillingRecordResponse.model_validate(record)


@router.patch("/{record_id}/status", response_model=BillingRecordResponse)
async def update_billing_status(
    record_id: int,
    request: UpdateBillingStatusRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    billing_service: BillingService = Depends(get_billing_service),
):
    """Move a pending record to a terminal status. Terminal records answer 409."""
    record = (
        await billing_service.update_billing_status(
            current_user.user_id,
            record_id,
            BillingStatusUpdateRequest(**request.model_dump()),
        )
    ).unwrap()
    return BillingRecordResponse.model_validate(record)
