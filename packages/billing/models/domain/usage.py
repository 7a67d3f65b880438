"""
Domain models for the monthly usage ledger.
"""

from datetime import datetime
from pydantic import BaseModel, Field


class UsageMetrics(BaseModel):
    """One ledger row: a user's counters for one calendar month."""

    id: int
    user_id: int
    month: int
    year: int

    regions_created: int = 0
    places_created: int = 0
    checkins_count: int = 0
    images_uploaded: int = 0
    storage_used_mb: float = 0.0
    api_calls_count: int = 0

    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UsageMetricsSummary(BaseModel):
    """
    Counters for one month, detached from the ledger row.

    Months without recorded activity are represented by an all-zero summary.
    """

    month: int
    year: int

    regions_created: int = 0
    places_created: int = 0
    checkins_count: int = 0
    images_uploaded: int = 0
    storage_used_mb: float = 0.0
    api_calls_count: int = 0

    class Config:
        from_attributes = True

    @classmethod
    def empty(cls, month: int, year: int) -> "UsageMetricsSummary":
        return cls(month=month, year=year)


class UsageDelta(BaseModel):
    """Non-negative amounts to add to the current month's counters."""

    regions_created: int = Field(default=0, ge=0)
    places_created: int = Field(default=0, ge=0)
    checkins_count: int = Field(default=0, ge=0)
    images_uploaded: int = Field(default=0, ge=0)
    storage_used_mb: float = Field(default=0.0, ge=0)
    api_calls_count: int = Field(default=0, ge=0)

    def increments(self) -> dict[str, float]:
        """Only the counters that actually move."""
        return {name: value for name, value in self.model_dump().items() if value}
