"""Pydantic schemas for order endpoints.

Money values are integer cents.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import Field, field_validator

from richhabits.models.enums import OrderStatus
from richhabits.schemas.common import CamelModel, PayloadModel


class OrderItem(CamelModel):
    item_name: str = Field(..., min_length=1, max_length=255)
    quantity: int = Field(..., ge=1)
    unit_price: int = Field(..., ge=0, description="Unit price in cents")

    @property
    def line_total(self) -> int:
        return self.quantity * self.unit_price


def compute_order_total(items: list[OrderItem]) -> int:
    """Sum of quantity x unit price over all line items."""
    return sum(item.line_total for item in items)


class OrderCreate(PayloadModel):
    order_number: str = Field(..., min_length=1, max_length=64)
    customer_name: str = Field(..., min_length=1, max_length=255)
    status: OrderStatus = OrderStatus.PENDING
    total_amount: int | None = Field(None, ge=0, description="Total in cents; defaults to the item sum")
    items: list[OrderItem] = Field(default_factory=list)
    notes: str | None = None

    @field_validator("order_number", "customer_name")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()

    @field_validator("items", mode="before")
    @classmethod
    def _items_never_null(cls, v: Any) -> Any:
        return [] if v is None else v


class OrderUpdate(PayloadModel):
    order_number: str | None = Field(None, min_length=1, max_length=64)
    customer_name: str | None = Field(None, min_length=1, max_length=255)
    status: OrderStatus | None = None
    total_amount: int | None = Field(None, ge=0)
    items: list[OrderItem] | None = None
    notes: str | None = None

    @field_validator("order_number", "customer_name", "status")
    @classmethod
    def _not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Field cannot be null")
        return v.strip() if isinstance(v, str) and not isinstance(v, OrderStatus) else v

    @field_validator("items", mode="before")
    @classmethod
    def _items_never_null(cls, v: Any) -> Any:
        return [] if v is None else v

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class OrderResponse(CamelModel):
    id: UUID
    organization_id: UUID
    order_number: str
    customer_name: str
    status: OrderStatus
    total_amount: int
    items: list[OrderItem] = Field(default_factory=list)
    notes: str | None = None
    created_at: datetime
    updated_at: datetime


class OrderListResponse(CamelModel):
    items: list[OrderResponse]
    total: int
