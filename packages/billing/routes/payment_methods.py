"""
Payment method routes for the caller.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Response, status

from packages.auth.dependencies import get_current_user
from packages.auth.models.domain.authenticated_user import AuthenticatedUser
from packages.billing.dependencies import get_payment_method_service
from packages.billing.models.domain.payment_method import (
    PaymentMethodCreateModel,
    PaymentMethodUpdateModel,
)
from packages.billing.models.schemas.billing import (
    AddPaymentMethodRequest,
    PaymentMethodResponse,
    UpdatePaymentMethodRequest,
)
from packages.billing.services.payment_method_service import PaymentMethodService

router = APIRouter()


@router.post(
    "", response_model=PaymentMethodResponse, status_code=status.HTTP_201_CREATED
)
async def add_payment_method(
    request: AddPaymentMethodRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    payment_method_service: PaymentMethodService = Depends(get_payment_method_service),
):
    """Details required depend on the type: card, PayPal e-mail or bank account."""
    payment_method = (
        await payment_method_service.add_payment_method(
            current_user.user_id, PaymentMethodCreateModel(**request.model_dump())
        )
    ).unwrap()
    return PaymentMethodResponse.model_validate(payment_method)


@router.get("", response_model=list[PaymentMethodResponse])
async def list_payment_methods(
    current_user: AuthenticatedUser = Depends(get_current_user),
    payment_method_service: PaymentMethodService = Depends(get_payment_method_service),
):
    methods = (
        await payment_method_service.list_payment_methods(current_user.user_id)
    ).unwrap()
    return [PaymentMethodResponse.model_validate(m) for m in methods]


@router.get("/default", response_model=Optional[PaymentMethodResponse])
async def get_default_payment_method(
    current_user: AuthenticatedUser = Depends(get_current_user),
    payment_method_service: PaymentMethodService = Depends(get_payment_method_service),
):
    payment_method = (
        await payment_method_service.get_default_payment_method(current_user.user_id)
    ).unwrap()
    return (
        PaymentMethodResponse.model_validate(payment_method) if payment_method else None
    )


@router.patch("/{payment_method_id}", response_model=PaymentMethodResponse)
async def update_payment_method(
    payment_method_id: int,
    request: UpdatePaymentMethodRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    payment_method_service: PaymentMethodService = Depends(get_payment_method_service),
):
    payment_method = (
        await payment_method_service.update_payment_method(
            current_user.user_id,
            payment_method_id,
            PaymentMethodUpdateModel(**request.model_dump(exclude_unset=True)),
        )
    ).unwrap()
    return PaymentMethodResponse.model_validate(payment_method)


@router.delete("/{payment_method_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment_method(
    payment_method_id: int,
    current_user: AuthenticatedUser = Depends(get_current_user),
    payment_method_service: PaymentMethodService = Depends(get_payment_method_service),
):
    (
        await payment_method_service.delete_payment_method(
            current_user.user_id, payment_method_id
        )
    ).unwrap()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
