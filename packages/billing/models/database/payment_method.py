"""
Database entity for stored payment methods.
"""

from sqlalchemy import Column, String, Boolean, Integer, ForeignKey
from sqlalchemy.sql import func

from common.db.base import Base, BigIntegerType, UTCDateTime


class PaymentMethodEntity(Base):
    """
    Payment method reference. Only display details are stored (last digits,
    brand, expiry); capture happens with the external payment gateway.
    """

    __tablename__ = "payment_methods"

    id = Column(BigIntegerType, primary_key=True, index=True, autoincrement=True)
    user_id = Column(
        BigIntegerType,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    type = Column(String(20), nullable=False)  # credit_card, bank_transfer, paypal
    is_default = Column(Boolean, nullable=False, default=False, server_default="false")

    # Credit card
    card_last4 = Column(String(4), nullable=True)
    card_brand = Column(String(50), nullable=True)
    expiry_month = Column(Integer, nullable=True)
    expiry_year = Column(Integer, nullable=True)

    # PayPal
    paypal_email = Column(String(255), nullable=True)

    # Bank transfer
    bank_account_last4 = Column(String(4), nullable=True)

    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())
