"""Sport model."""
from sqlalchemy import Column, ForeignKey, String, Uuid
from sqlalchemy.orm import relationship

from richhabits.models.base import BaseModel


class Sport(BaseModel):
    """A sports program run by one organization, with its sales contact."""

    __tablename__ = "sports"

    organization_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    salesperson_name = Column(String(255), nullable=True)
    contact_name = Column(String(255), nullable=True)
    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)

    organization = relationship("Organization", back_populates="sports")

    def __repr__(self) -> str:
        return f"<Sport(id={self.id}, name={self.name}, organization_id={self.organization_id})>"
