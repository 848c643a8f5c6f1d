"""Sport service for CRUD operations scoped to one organization."""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from richhabits.core.errors import NotFoundError, translate_db_error
from richhabits.core.structured_logging import log_json
from richhabits.models.organization import Organization
from richhabits.models.sport import Sport
from richhabits.schemas.sport import SportCreate, SportUpdate

logger = logging.getLogger(__name__)


class SportService:
    """Service for managing an organization's sports programs."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _require_organization(self, org_id: UUID) -> None:
        result = await self.db.execute(select(Organization.id).where(Organization.id == org_id))
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Organization not found")

    async def list(self, org_id: UUID) -> tuple[list[Sport], int]:
        """List sports for an organization, ordered by name.

        Raises:
            NotFoundError: 404 if organization not found
        """
        await self._require_organization(org_id)
        result = await self.db.execute(
            select(Sport)
            .where(Sport.organization_id == org_id)
            .order_by(func.lower(Sport.name), Sport.id)
        )
        sports = list(result.scalars().all())
        return sports, len(sports)

    async def get_by_id(self, org_id: UUID, sport_id: UUID) -> Sport:
        """Get a sport, enforcing that it belongs to ``org_id``.

        Raises:
            NotFoundError: 404 if organization or sport not found
        """
        await self._require_organization(org_id)
        result = await self.db.execute(
            select(Sport).where(Sport.id == sport_id, Sport.organization_id == org_id)
        )
        sport = result.scalar_one_or_none()
        if not sport:
            raise NotFoundError("Sport not found")
        return sport

    async def create(self, org_id: UUID, request: SportCreate) -> Sport:
        await self._require_organization(org_id)
        sport = Sport(organization_id=org_id, **request.model_dump())
        self.db.add(sport)
        try:
            await self.db.flush()
            await self.db.commit()
        except DBAPIError as exc:
            await self.db.rollback()
            raise translate_db_error(exc, operation="create sport") from exc

        log_json(logger, logging.INFO, "sport_created", org_id=org_id, sport_id=sport.id)
        return sport

    async def update(self, org_id: UUID, sport_id: UUID, request: SportUpdate) -> Sport:
        sport = await self.get_by_id(org_id, sport_id)
        changes = request.changes()
        for field_name, value in changes.items():
            setattr(sport, field_name, value)
        try:
            await self.db.flush()
            await self.db.commit()
        except DBAPIError as exc:
            await self.db.rollback()
            raise translate_db_error(exc, operation="update sport") from exc

        log_json(
            logger,
            logging.INFO,
            "sport_updated",
            org_id=org_id,
            sport_id=sport_id,
            fields=sorted(changes),
        )
        return sport

    async def delete(self, org_id: UUID, sport_id: UUID) -> None:
        sport = await self.get_by_id(org_id, sport_id)
        try:
            await self.db.delete(sport)
            await self.db.flush()
            await self.db.commit()
        except DBAPIError as exc:
            await self.db.rollback()
            raise translate_db_error(exc, operation="delete sport") from exc

        log_json(logger, logging.INFO, "sport_deleted", org_id=org_id, sport_id=sport_id)
