"""Repositories for the credential record and the delivery ledger."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from meli_bot.models.credential import Credential

from .models import CredentialRecord, DeliveryRecord


class CredentialRepository:
    """
    Durable storage of the single credential record.

    Only get-by-key and upsert. Each call opens its own session so the
    repository can be shared by concurrent tasks.
    """

    def __init__(self, session_factory: async_sessionmaker):
        """Initialize repository with an async session factory."""
        self.session_factory = session_factory

    async def get(self, key: str) -> Optional[Credential]:
        """Return the credential stored under ``key``, or None."""
        async with self.session_factory() as session:
            record = await session.get(CredentialRecord, key)
            if record is None:
                return None
            return Credential(
                access_token=record.access_token,
                refresh_token=record.refresh_token,
                expires_in=record.expires_in,
                issued_at_ms=record.issued_at_ms,
            )

    async def upsert(self, key: str, credential: Credential) -> None:
        """
        Replace the record under ``key`` with ``credential`` in one transaction.

        Args:
            key: Fixed record identifier
            credential: Full record; no field of the previous row survives
        """
        async with self.session_factory() as session:
            async with session.begin():
                await session.merge(
                    CredentialRecord(
                        key=key,
                        access_token=credential.access_token,
                        refresh_token=credential.refresh_token,
                        expires_in=credential.expires_in,
                        issued_at_ms=credential.issued_at_ms,
                    )
                )


class DeliveryLedgerRepository:
    """Data access layer for DeliveryRecord."""

    def __init__(self, session_factory: async_sessionmaker):
        """Initialize repository with an async session factory."""
        self.session_factory = session_factory

    async def has_delivered(self, order_id: int) -> bool:
        """Check whether a message was already posted for this order."""
        async with self.session_factory() as session:
            query = select(DeliveryRecord.order_id).where(DeliveryRecord.order_id == order_id)
            result = await session.execute(query)
            return result.scalar_one_or_none() is not None

    async def record_delivery(
        self, order_id: int, pack_id: int, catalog_id: Optional[str]
    ) -> None:
        """Mark an order as messaged."""
        async with self.session_factory() as session:
            async with session.begin():
                await session.merge(
                    DeliveryRecord(order_id=order_id, pack_id=pack_id, catalog_id=catalog_id)
                )
