"""
Subscription API routes.

Every endpoint acts on the caller's own subscription.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from packages.auth.dependencies import get_current_user
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.billing.dependencies import get_subscription_service
from packages.billing.models.domain.enums import SubscriptionPlan
from packages.billing.models.domain.subscription import (
    SubscriptionCreateRequest,
    SubscriptionUpdateRequest,
)
from packages.billing.models.schemas.billing import (
    CancelSubscriptionRequest,
    CreateSubscriptionRequest,
    PermissionResponse,
    RenewSubscriptionRequest,
    SubscriptionResponse,
    SubscriptionStatusResponse,
    UpdateSubscriptionRequest,
)
from packages.billing.services.subscription_service import SubscriptionService

router = APIRouter()


# ============================================================================
# Subscription Queries
# ============================================================================


@router.get("/subscription", response_model=Optional[SubscriptionResponse])
async def get_subscription(
    current_user: AuthenticatedUser = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    """Get the caller's subscription, or null when there is none."""
    subscription = (
        await subscription_service.get_subscription(current_user.user_id)
    ).unwrap()
    return SubscriptionResponse.model_validate(subscription) if subscription else None


@router.get("/subscription/status", response_model=SubscriptionStatusResponse)
async def get_subscription_status(
    current_user: AuthenticatedUser = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    """Access flags for the caller's subscription, evaluated now."""
    summary = (
        await subscription_service.get_subscription_status(current_user.user_id)
    ).unwrap()
    return SubscriptionStatusResponse.model_validate(summary)


@router.get("/subscription/permissions", response_model=PermissionResponse)
async def check_subscription_permissions(
    required_plan: SubscriptionPlan = Query(
        default=SubscriptionPlan.FREE, alias="requiredPlan"
    ),
    current_user: AuthenticatedUser = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    allowed = (
        await subscription_service.check_subscription_permissions(
            current_user.user_id, required_plan
        )
    ).unwrap()
    return PermissionResponse(required_plan=required_plan, has_permission=allowed)


# ============================================================================
# Subscription Lifecycle
# ============================================================================


@router.post(
    "/subscription",
    response_model=SubscriptionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_subscription(
    request: CreateSubscriptionRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    """
    Open the caller's subscription.

    Fails with 409 if the caller ever had one, whatever its status;
    lapsed subscriptions are revived through renewal.
    """
    subscription = (
        await subscription_service.create_subscription(
            SubscriptionCreateRequest(
                user_id=current_user.user_id, **request.model_dump()
            )
        )
    ).unwrap()
    return SubscriptionResponse.model_validate(subscription)


@router.patch("/subscription", response_model=SubscriptionResponse)
async def update_subscription(
    request: UpdateSubscriptionRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    subscription = (
        await subscription_service.update_subscription(
            current_user.user_id,
            SubscriptionUpdateRequest(**request.model_dump(exclude_unset=True)),
        )
    ).unwrap()
    return SubscriptionResponse.model_validate(subscription)


@router.post("/subscription/cancel", response_model=SubscriptionResponse)
async def cancel_subscription(
    request: CancelSubscriptionRequest = CancelSubscriptionRequest(),
    current_user: AuthenticatedUser = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    """Cancel at period end by default; ``immediately`` ends access now."""
    subscription = (
        await subscription_service.cancel_subscription(
            current_user.user_id, immediately=request.immediately
        )
    ).unwrap()
    return SubscriptionResponse.model_validate(subscription)


@router.post("/subscription/renew", response_model=SubscriptionResponse)
async def renew_subscription(
    request: RenewSubscriptionRequest = RenewSubscriptionRequest(),
    current_user: AuthenticatedUser = Depends(get_current_user),
    subscription_service: SubscriptionService = Depends(get_subscription_service),
):
    subscription = (
        await subscription_service.renew_subscription(
            current_user.user_id, request.period_length_days
        )
    ).unwrap()
    return SubscriptionResponse.model_validate(subscription)
