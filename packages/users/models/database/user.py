from sqlalchemy import Column, String
from sqlalchemy.sql import func

from common.db.base import Base, BigIntegerType, UTCDateTime


class UserEntity(Base):
    __tablename__ = "users"

    id = Column(BigIntegerType, primary_key=True, index=True, autoincrement=True)
    email = Column(String, nullable=False, unique=True, index=True)
    full_name = Column(String, nullable=True)
    role = Column(String(20), nullable=False, default="visitor")  # visitor, editor, admin
    status = Column(
        String(20), nullable=False, default="active", index=True
    )  # active, suspended, deleted
    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())
