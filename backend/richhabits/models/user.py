"""User, role and role-assignment models."""
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from richhabits.models.base import BaseModel, utcnow


class User(BaseModel):
    """A person known to the system.

    Accounts are managed by the external auth service; this table only holds
    what role assignments need to reference.
    """

    __tablename__ = "users"

    email = Column(String(255), nullable=False, unique=True)
    full_name = Column(String(255), nullable=True)

    role_assignments = relationship(
        "UserRole",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"


class Role(BaseModel):
    """A named role such as ``owner``; looked up by slug."""

    __tablename__ = "roles"

    name = Column(String(100), nullable=False)
    slug = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Role(slug={self.slug})>"


class UserRole(BaseModel):
    """Grants a user a role within one organization (one row per user/org)."""

    __tablename__ = "user_roles"

    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    organization_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
    )
    assigned_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="role_assignments")
    role = relationship("Role")

    __table_args__ = (
        UniqueConstraint("user_id", "organization_id", name="uq_user_roles_user_org"),
    )

    def __repr__(self) -> str:
        return f"<UserRole(user_id={self.user_id}, organization_id={self.organization_id})>"
