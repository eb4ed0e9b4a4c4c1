"""Pydantic models for order data."""

from typing import List, Optional

from pydantic import BaseModel, Field


class UserRef(BaseModel):
    """Buyer or seller reference inside an order."""

    id: int
    nickname: Optional[str] = None

    class Config:
        extra = "allow"


class CatalogItem(BaseModel):
    """Listed product referenced by an order line."""

    id: str = Field(..., description="Catalog identifier, e.g. MLB123 or MLBU123")
    title: str = ""

    class Config:
        extra = "allow"


class OrderItem(BaseModel):
    """Single purchased line of an order."""

    item: CatalogItem
    quantity: int = 1
    unit_price: Optional[float] = None

    class Config:
        extra = "allow"


class Order(BaseModel):
    """Order response from the marketplace API."""

    id: int
    status: str
    pack_id: Optional[int] = None
    buyer: UserRef
    seller: UserRef
    order_items: List[OrderItem] = Field(default_factory=list)
    total_amount: Optional[float] = None
    currency_id: Optional[str] = None

    class Config:
        extra = "allow"

    @property
    def effective_pack_id(self) -> int:
        """Pack used for messaging; orders outside a pack use their own id."""
        return self.pack_id or self.id

    @property
    def first_item(self) -> Optional[OrderItem]:
        """First purchased line, if any."""
        return self.order_items[0] if self.order_items else None


class OutboundMessage(BaseModel):
    """Body posted to the pack messaging endpoint."""

    seller_id: int
    buyer_id: int
    text: str

    def to_payload(self) -> dict:
        """Wire format expected by the messaging endpoint."""
        return {
            "from": {"user_id": self.seller_id},
            "to": {"user_id": self.buyer_id},
            "text": self.text,
        }
