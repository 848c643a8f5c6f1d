"""Enumerations shared by models and schemas."""

from enum import Enum


class OrderStatus(str, Enum):
    """Order lifecycle states."""

    PENDING = "pending"
    IN_PRODUCTION = "in_production"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrganizationType(str, Enum):
    """Listing filter: schools are organizations with ``is_business`` false."""

    SCHOOL = "school"
    BUSINESS = "business"
    ALL = "all"


class SortField(str, Enum):
    NAME = "name"
    CREATED_AT = "created_at"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
