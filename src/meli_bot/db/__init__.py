"""Database module."""

from .base import Base, get_engine, get_session_factory, init_db
from .models import CredentialRecord, DeliveryRecord
from .repository import CredentialRepository, DeliveryLedgerRepository

__all__ = [
    "Base",
    "get_engine",
    "get_session_factory",
    "init_db",
    "CredentialRecord",
    "DeliveryRecord",
    "CredentialRepository",
    "DeliveryLedgerRepository",
]
