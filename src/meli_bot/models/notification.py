"""Pydantic models for webhook notifications."""

from typing import Optional

from pydantic import BaseModel, Field


class Notification(BaseModel):
    """Notification pushed by Mercado Livre to the callback URL."""

    topic: str = Field(..., description="Notification topic, e.g. orders_v2")
    resource: str = Field(..., description="Resource path, e.g. /orders/2000001")
    user_id: Optional[int] = Field(None, description="Seller user id")
    application_id: Optional[int] = None
    attempts: Optional[int] = None
    sent: Optional[str] = None
    received: Optional[str] = None

    class Config:
        extra = "allow"
