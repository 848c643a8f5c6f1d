"""Seed script for development data.

Creates:
- The "owner" role
- A development user "owner@richhabits.local" (override with SEED_USER_EMAIL)
- A handful of sample organizations owned by that user

Can be run multiple times safely (skips what already exists).
"""
import asyncio
import os

from sqlalchemy import select

from richhabits.core.database import AsyncSessionLocal
from richhabits.core.errors import ConflictError
from richhabits.models.user import Role, User
from richhabits.schemas.organization import OrganizationCreate
from richhabits.services.organization_service import OrganizationService

SAMPLE_ORGANIZATIONS = [
    {"name": "Lincoln High School", "state": "NE", "tags": ["wrestling", "football"]},
    {"name": "Westview Academy", "state": "OR", "brandPrimary": "#0a2342", "brandSecondary": "#f5b700"},
    {"name": "Summit Fitness Co", "state": "CO", "isBusiness": True, "universalDiscounts": {"bulk": 10}},
]


async def seed_data():
    """Seed development data."""
    print("Starting database seeding...")
    user_email = os.environ.get("SEED_USER_EMAIL", "owner@richhabits.local")

    async with AsyncSessionLocal() as db:
        result = await db.execute(select(Role).where(Role.slug == "owner"))
        role = result.scalar_one_or_none()
        if role:
            print(f"✓ Role 'owner' already exists (ID: {role.id})")
        else:
            role = Role(name="Owner", slug="owner", description="Full control of an organization")
            db.add(role)
            print("✓ Created role 'owner'")

        result = await db.execute(select(User).where(User.email == user_email))
        user = result.scalar_one_or_none()
        if user:
            print(f"✓ User '{user_email}' already exists (ID: {user.id})")
        else:
            user = User(email=user_email, full_name="Development Owner")
            db.add(user)
            print(f"✓ Created user '{user_email}'")

        await db.commit()

        service = OrganizationService(db)
        for sample in SAMPLE_ORGANIZATIONS:
            try:
                created = await service.create(OrganizationCreate.model_validate(sample), user.id)
            except ConflictError:
                print(f"✓ Organization '{sample['name']}' already exists")
                continue
            outcomes = ", ".join(f"{e.name}={e.status}" for e in created.side_effects)
            print(f"✓ Created organization '{created.organization.name}' ({outcomes})")

    print("\nDatabase seeding complete!")
    print(f"  Use X-User-Id: {user.id} to act as the development owner")


if __name__ == "__main__":
    asyncio.run(seed_data())
