"""
Database entity for subscriptions.
"""

from sqlalchemy import Column, String, Boolean, ForeignKey, Index
from sqlalchemy.sql import func

from common.db.base import Base, BigIntegerType, UTCDateTime


class SubscriptionEntity(Base):
    """
    User subscription database entity.

    One subscription per user for the lifetime of the account; cancellation
    and expiry are status changes, the row is never deleted.
    """

    __tablename__ = "subscriptions"

    id = Column(BigIntegerType, primary_key=True, index=True, autoincrement=True)
    user_id = Column(
        BigIntegerType,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )

    plan = Column(String(20), nullable=False, index=True)  # free, standard, premium
    status = Column(
        String(20), nullable=False, index=True
    )  # none, trial, active, expired, cancelled

    # Billing period
    current_period_start = Column(UTCDateTime, nullable=False)
    current_period_end = Column(UTCDateTime, nullable=False)
    cancel_at_period_end = Column(
        Boolean, nullable=False, default=False, server_default="false"
    )

    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_subscription_status_plan", "status", "plan"),
        Index("idx_subscription_period_end", "current_period_end"),
    )
