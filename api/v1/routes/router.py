from fastapi import APIRouter, Depends

from api.v1.routes import health
from packages.auth.dependencies import get_current_user
from packages.billing.routes import (
    admin,
    payment_methods,
    plans,
    records,
    billing,
    usage,
)

api_router = APIRouter()

# Health check (no auth required)
api_router.include_router(health.router, prefix="/health", tags=["health"])

# Plans catalog (no auth - public quota info)
api_router.include_router(plans.router, prefix="/billing/plans", tags=["billing"])

# Billing routes (caller identity required)
api_router.include_router(
    billing.router,
    prefix="/billing",
    tags=["billing"],
    dependencies=[Depends(get_current_user)],
)
api_router.include_router(
    usage.router,
    prefix="/billing",
    tags=["usage"],
    dependencies=[Depends(get_current_user)],
)
api_router.include_router(
    records.router,
    prefix="/billing/records",
    tags=["billing-records"],
    dependencies=[Depends(get_current_user)],
)
api_router.include_router(
    payment_methods.router,
    prefix="/billing/payment-methods",
    tags=["payment-methods"],
    dependencies=[Depends(get_current_user)],
)

# Admin routes - admin role checked by the services
api_router.include_router(
    admin.router,
    prefix="/admin/billing",
    tags=["billing-admin"],
    dependencies=[Depends(get_current_user)],
)
