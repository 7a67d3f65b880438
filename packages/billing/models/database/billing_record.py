"""
Database entity for billing history records.
"""

from sqlalchemy import Column, String, Numeric, Text, ForeignKey, Index
from sqlalchemy.sql import func

from common.db.base import Base, BigIntegerType, UTCDateTime


class BillingRecordEntity(Base):
    """
    One charge against a subscription period.

    Created as pending and moved exactly once to a terminal status
    (paid, failed, refunded, cancelled).
    """

    __tablename__ = "billing_records"

    id = Column(BigIntegerType, primary_key=True, index=True, autoincrement=True)
    user_id = Column(
        BigIntegerType,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    subscription_id = Column(
        BigIntegerType,
        ForeignKey("subscriptions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    payment_method_id = Column(
        BigIntegerType,
        ForeignKey("payment_methods.id", ondelete="SET NULL"),
        nullable=True,
    )

    amount = Column(Numeric(12, 2), nullable=False)
    currency = Column(String(3), nullable=False, server_default="USD")
    status = Column(
        String(20), nullable=False, index=True
    )  # pending, paid, failed, refunded, cancelled

    billing_period_start = Column(UTCDateTime, nullable=False)
    billing_period_end = Column(UTCDateTime, nullable=False)

    # Terminal transition metadata
    paid_at = Column(UTCDateTime, nullable=True)
    failed_at = Column(UTCDateTime, nullable=True)
    refunded_at = Column(UTCDateTime, nullable=True)
    failure_reason = Column(Text, nullable=True)
    invoice_url = Column(String(2048), nullable=True)

    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("idx_billing_user_created", "user_id", "created_at"),)
