"""Organization model."""
from sqlalchemy import Boolean, CheckConstraint, Column, Index, String, Text, false, func, text
from sqlalchemy.orm import relationship

from richhabits.models.base import BaseModel, JSONType


class Organization(BaseModel):
    """A customer: a school or business that buys team apparel.

    Organizations own their sports programs and orders; deleting one removes
    both. Names are unique regardless of case.
    """

    __tablename__ = "organizations"

    name = Column(String(255), nullable=False)
    state = Column(String(2), nullable=True, index=True)
    address = Column(Text, nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    logo_url = Column(Text, nullable=True)
    title_card_url = Column(Text, nullable=True)
    brand_primary = Column(String(7), nullable=True)
    brand_secondary = Column(String(7), nullable=True)

    is_business = Column(Boolean, nullable=False, default=False, server_default=false())
    universal_discounts = Column(JSONType, nullable=False, default=dict, server_default=text("'{}'"))
    tags = Column(JSONType, nullable=False, default=list, server_default=text("'[]'"))

    # Relationships
    sports = relationship(
        "Sport",
        back_populates="organization",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    orders = relationship(
        "Order",
        back_populates="organization",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("LENGTH(name) > 0", name="organization_name_not_empty"),
        Index("uq_organizations_name_lower", func.lower(name), unique=True),
    )

    @property
    def can_generate_title_card(self) -> bool:
        return bool(self.logo_url and self.brand_primary and self.brand_secondary)

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name={self.name})>"
