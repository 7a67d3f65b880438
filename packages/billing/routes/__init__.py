"""Billing API routes."""

from packages.billing.routes import (
    admin,
    billing,
    payment_methods,
    plans,
    records,
    usage,
)

__all__ = ["admin", "billing", "payment_methods", "plans", "records", "usage"]
