"""SQLAlchemy models."""

from richhabits.models.base import Base, BaseModel
from richhabits.models.enums import OrderStatus, OrganizationType, SortField, SortOrder
from richhabits.models.order import Order
from richhabits.models.organization import Organization
from richhabits.models.sport import Sport
from richhabits.models.user import Role, User, UserRole

__all__ = [
    "Base",
    "BaseModel",
    "OrderStatus",
    "OrganizationType",
    "SortField",
    "SortOrder",
    "Organization",
    "Sport",
    "Order",
    "User",
    "Role",
    "UserRole",
]
