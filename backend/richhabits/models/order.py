"""Order model."""
from sqlalchemy import (
    CheckConstraint,
    Column,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import relationship

from richhabits.models.base import BaseModel, JSONType
from richhabits.models.enums import OrderStatus


class Order(BaseModel):
    """A clothing order placed by an organization.

    Amounts are stored in cents. ``items`` holds the line items as a JSON list
    of ``{"itemName", "quantity", "unitPrice"}`` objects.
    """

    __tablename__ = "orders"

    organization_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    order_number = Column(String(64), nullable=False)
    customer_name = Column(String(255), nullable=False)
    status = Column(
        SQLEnum(
            OrderStatus,
            name="order_status",
            native_enum=False,
            length=32,
            values_callable=lambda x: [e.value for e in x],
        ),
        nullable=False,
        default=OrderStatus.PENDING,
    )
    total_amount = Column(Integer, nullable=False, default=0)
    items = Column(JSONType, nullable=False, default=list, server_default=text("'[]'"))
    notes = Column(Text, nullable=True)

    organization = relationship("Organization", back_populates="orders")

    __table_args__ = (
        UniqueConstraint("organization_id", "order_number", name="uq_orders_org_order_number"),
        CheckConstraint("total_amount >= 0", name="order_total_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, order_number={self.order_number}, status={self.status})>"
