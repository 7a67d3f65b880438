"""
Database entity for the monthly usage ledger.
"""

from sqlalchemy import (
    Column,
    Integer,
    Float,
    ForeignKey,
    UniqueConstraint,
    Index,
)
from sqlalchemy.sql import func

from common.db.base import Base, BigIntegerType, UTCDateTime


class UsageMetricsEntity(Base):
    """
    Usage counters for one user and one calendar month.

    Created lazily by the first recorded activity of the month and only ever
    incremented afterwards.
    """

    __tablename__ = "usage_metrics"

    id = Column(BigIntegerType, primary_key=True, index=True, autoincrement=True)
    user_id = Column(
        BigIntegerType,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    month = Column(Integer, nullable=False)  # 1-12
    year = Column(Integer, nullable=False)

    regions_created = Column(Integer, nullable=False, default=0, server_default="0")
    places_created = Column(Integer, nullable=False, default=0, server_default="0")
    checkins_count = Column(Integer, nullable=False, default=0, server_default="0")
    images_uploaded = Column(Integer, nullable=False, default=0, server_default="0")
    storage_used_mb = Column(Float, nullable=False, default=0.0, server_default="0")
    api_calls_count = Column(Integer, nullable=False, default=0, server_default="0")

    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("user_id", "year", "month", name="uq_usage_user_period"),
        Index("idx_usage_period", "year", "month"),
    )
