"""SQLAlchemy models for the credential record and the delivery ledger."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class CredentialRecord(Base):
    """
    The single OAuth credential of the seller.

    There is exactly one row, keyed by a fixed identifier. Every save replaces
    the whole row.
    """

    __tablename__ = "credentials"

    key: Mapped[str] = mapped_column(String(50), primary_key=True)

    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[str] = mapped_column(Text, nullable=False)
    expires_in: Mapped[int] = mapped_column(Integer, nullable=False)

    # Local clock at save time, epoch milliseconds
    issued_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)


class DeliveryRecord(Base):
    """An order whose delivery message was posted to the buyer."""

    __tablename__ = "deliveries"

    order_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    pack_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    catalog_id: Mapped[str] = mapped_column(String(50), nullable=True)
    delivered_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )
