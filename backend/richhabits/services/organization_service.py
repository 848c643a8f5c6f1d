"""Organization service: the single write path for organizations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from richhabits.core.config import Settings, get_settings
from richhabits.core.errors import (
    AppError,
    CollaboratorError,
    ConflictError,
    NotFoundError,
    ValidationError,
    translate_db_error,
)
from richhabits.core.metrics import record_organization_mutation, record_side_effect
from richhabits.core.side_effects import (
    PostCommitHooks,
    SideEffectResult,
    SideEffectSkipped,
    run_side_effect,
)
from richhabits.core.structured_logging import log_json
from richhabits.models.enums import OrganizationType, SortField, SortOrder
from richhabits.models.order import Order
from richhabits.models.organization import Organization
from richhabits.models.sport import Sport
from richhabits.models.user import Role, UserRole
from richhabits.schemas.organization import OrganizationCreate, OrganizationUpdate
from richhabits.services.title_card_service import (
    TitleCardError,
    TitleCardRequest,
    TitleCardService,
    TitleCardUnavailable,
)

logger = logging.getLogger(__name__)

OWNER_ROLE_EFFECT = "owner_role"
TITLE_CARD_EFFECT = "title_card"


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass
class OrganizationCreateResult:
    organization: Organization
    side_effects: list[SideEffectResult] = field(default_factory=list)


class OrganizationService:
    """Create, read, update, list and delete organizations.

    Creation runs in one transaction covering the organization row and the
    owner-role assignment. Title card generation happens after commit and can
    only ever add ``title_card_url`` to an already saved row.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: Settings | None = None,
        title_cards: TitleCardService | None = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.title_cards = title_cards or TitleCardService(self.settings)

    async def _find_by_name(self, name: str, exclude_id: UUID | None = None) -> Organization | None:
        query = select(Organization).where(func.lower(Organization.name) == name.strip().lower())
        if exclude_id is not None:
            query = query.where(Organization.id != exclude_id)
        result = await self.db.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def _ensure_unique_name(self, name: str, exclude_id: UUID | None = None) -> None:
        existing = await self._find_by_name(name, exclude_id)
        if existing:
            raise ConflictError(
                f"Organization '{existing.name}' already exists",
                existing_id=existing.id,
            )

    async def _write_error(self, exc: DBAPIError, name: str | None, operation: str) -> AppError:
        """Translate a failed write, reporting lost duplicate-name races as 409."""
        if isinstance(exc, IntegrityError) and name:
            existing = await self._find_by_name(name)
            if existing:
                return ConflictError(
                    f"Organization '{existing.name}' already exists",
                    existing_id=existing.id,
                )
        return translate_db_error(exc, operation=operation)

    async def _commit(self, operation: str) -> None:
        try:
            await self.db.commit()
        except DBAPIError as exc:
            await self.db.rollback()
            raise translate_db_error(exc, operation=operation) from exc

    async def create(
        self,
        payload: OrganizationCreate,
        acting_user_id: UUID | None = None,
    ) -> OrganizationCreateResult:
        """Create an organization and run its follow-up actions.

        Args:
            payload: Normalized creation payload
            acting_user_id: User to receive the owner role, if known

        Returns:
            The saved organization plus one result per side effect

        Raises:
            ConflictError: 409 if the name is taken (case-insensitive)
            DatabaseError: 500 if the insert fails
        """
        await self._ensure_unique_name(payload.name)

        organization = Organization(**payload.to_row())
        try:
            async with self.db.begin_nested():
                self.db.add(organization)
                await self.db.flush()
        except DBAPIError as exc:
            raise await self._write_error(exc, payload.name, "create organization") from exc

        side_effects = [
            await run_side_effect(
                OWNER_ROLE_EFFECT,
                lambda: self._assign_owner(organization, acting_user_id),
            )
        ]

        await self._commit("create organization")
        record_organization_mutation("create")
        log_json(
            logger,
            logging.INFO,
            "organization_created",
            org_id=organization.id,
            name=organization.name,
        )

        hooks = PostCommitHooks.from_settings(self.settings)
        urls: list[str] = []
        if organization.title_card_url:
            side_effects.append(
                SideEffectResult(TITLE_CARD_EFFECT, "skipped", 0, "Title card already present")
            )
        elif not organization.can_generate_title_card:
            side_effects.append(
                SideEffectResult(
                    TITLE_CARD_EFFECT,
                    "skipped",
                    0,
                    "Logo URL and both brand colors are required",
                )
            )
        else:
            request = self._title_card_request(organization)

            async def generate_title_card() -> None:
                urls.append(await self._generate_title_card(request))

            hooks.add(TITLE_CARD_EFFECT, generate_title_card)

        for outcome in await hooks.run():
            if outcome.name == TITLE_CARD_EFFECT and outcome.status == "succeeded":
                outcome = await self._save_title_card(organization, urls[-1], outcome)
            side_effects.append(outcome)

        return OrganizationCreateResult(organization=organization, side_effects=side_effects)

    async def _assign_owner(self, organization: Organization, acting_user_id: UUID | None) -> None:
        """Give the acting user the owner role on a freshly inserted organization.

        Runs inside the creation transaction under its own savepoint, so a
        failure here rolls back only the role row.
        """
        if acting_user_id is None:
            log_json(logger, logging.WARNING, "owner_role_skipped", org_id=organization.id, reason="no_user")
            raise SideEffectSkipped("No acting user to assign as owner")

        slug = self.settings.owner_role_slug
        result = await self.db.execute(select(Role).where(Role.slug == slug))
        role = result.scalar_one_or_none()
        if role is None:
            log_json(logger, logging.WARNING, "owner_role_skipped", org_id=organization.id, reason="no_role")
            raise SideEffectSkipped(f"Role '{slug}' does not exist")

        result = await self.db.execute(
            select(UserRole).where(
                UserRole.user_id == acting_user_id,
                UserRole.organization_id == organization.id,
            )
        )
        if result.scalar_one_or_none() is not None:
            return

        async with self.db.begin_nested():
            self.db.add(
                UserRole(
                    user_id=acting_user_id,
                    organization_id=organization.id,
                    role_id=role.id,
                )
            )
            await self.db.flush()

        log_json(
            logger,
            logging.INFO,
            "owner_role_assigned",
            org_id=organization.id,
            user_id=acting_user_id,
        )

    def _title_card_request(self, organization: Organization) -> TitleCardRequest:
        return TitleCardRequest(
            org_id=organization.id,
            team_name=organization.name,
            logo_url=organization.logo_url,
            brand_primary=organization.brand_primary,
            brand_secondary=organization.brand_secondary,
        )

    async def _generate_title_card(self, request: TitleCardRequest) -> str:
        try:
            return await self.title_cards.generate(request)
        except TitleCardUnavailable as exc:
            raise SideEffectSkipped(str(exc)) from exc

    async def _save_title_card(
        self, organization: Organization, url: str, outcome: SideEffectResult
    ) -> SideEffectResult:
        """Store a generated title card URL on the already committed organization.

        A failed commit is reported on the title card outcome and the row is
        reloaded as it was saved.
        """
        org_id = organization.id
        organization.title_card_url = url
        try:
            await self.db.commit()
        except DBAPIError as exc:
            await self.db.rollback()
            await self.db.refresh(organization)
            detail = f"{exc.__class__.__name__}: {exc}"
            log_json(logger, logging.WARNING, "title_card_save_failed", org_id=org_id, error=detail)
            record_side_effect(TITLE_CARD_EFFECT, "failed")
            return replace(outcome, status="failed", detail=detail)
        return outcome

    async def get_by_id(self, org_id: UUID) -> Organization:
        """Get organization by ID.

        Raises:
            NotFoundError: 404 if organization not found
        """
        result = await self.db.execute(select(Organization).where(Organization.id == org_id))
        organization = result.scalar_one_or_none()
        if not organization:
            raise NotFoundError("Organization not found")
        return organization

    async def update(self, org_id: UUID, payload: OrganizationUpdate) -> Organization:
        """Apply a partial update; keys absent from the payload are untouched.

        Raises:
            NotFoundError: 404 if organization not found
            ConflictError: 409 if renamed onto another organization's name
        """
        organization = await self.get_by_id(org_id)
        changes = payload.changes()

        if "name" in changes:
            await self._ensure_unique_name(changes["name"], exclude_id=organization.id)

        for field_name, value in changes.items():
            setattr(organization, field_name, value)

        try:
            await self.db.flush()
        except DBAPIError as exc:
            await self.db.rollback()
            raise await self._write_error(exc, changes.get("name"), "update organization") from exc

        await self._commit("update organization")
        record_organization_mutation("update")
        log_json(
            logger,
            logging.INFO,
            "organization_updated",
            org_id=organization.id,
            fields=sorted(changes),
        )
        return organization

    async def list(
        self,
        *,
        q: str | None = None,
        state: str | None = None,
        org_type: OrganizationType = OrganizationType.ALL,
        sort: SortField = SortField.CREATED_AT,
        order: SortOrder = SortOrder.DESC,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[Organization], int]:
        """List organizations matching all given filters.

        Returns:
            Tuple of (organizations on the requested page, total matches)
        """
        conditions = []
        if q and q.strip():
            pattern = f"%{_escape_like(q.strip())}%"
            conditions.append(Organization.name.ilike(pattern, escape="\\"))
        if state:
            conditions.append(Organization.state == state.strip().upper())
        if org_type == OrganizationType.BUSINESS:
            conditions.append(Organization.is_business.is_(True))
        elif org_type == OrganizationType.SCHOOL:
            conditions.append(Organization.is_business.is_(False))

        sort_column = func.lower(Organization.name) if sort == SortField.NAME else Organization.created_at
        direction = sort_column.asc() if order == SortOrder.ASC else sort_column.desc()

        query = (
            select(Organization)
            .where(*conditions)
            .order_by(direction, Organization.id)
            .limit(page_size)
            .offset((page - 1) * page_size)
        )
        count_query = select(func.count()).select_from(Organization).where(*conditions)

        result = await self.db.execute(query)
        organizations = list(result.scalars().all())

        count_result = await self.db.execute(count_query)
        total = count_result.scalar() or 0

        return organizations, total

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(Organization))
        return result.scalar() or 0

    async def delete(self, org_id: UUID) -> None:
        """Delete an organization together with its sports, orders and role rows.

        Raises:
            NotFoundError: 404 if organization not found
        """
        organization = await self.get_by_id(org_id)

        try:
            await self.db.execute(delete(Sport).where(Sport.organization_id == org_id))
            await self.db.execute(delete(Order).where(Order.organization_id == org_id))
            await self.db.execute(delete(UserRole).where(UserRole.organization_id == org_id))
            await self.db.delete(organization)
            await self.db.flush()
        except DBAPIError as exc:
            await self.db.rollback()
            raise translate_db_error(exc, operation="delete organization") from exc

        await self._commit("delete organization")
        record_organization_mutation("delete")
        log_json(logger, logging.INFO, "organization_deleted", org_id=org_id)

    async def replace_title_card(self, org_id: UUID) -> Organization:
        """Regenerate the title card synchronously, overwriting the stored image.

        Raises:
            NotFoundError: 404 if organization not found
            ValidationError: 400 if logo or brand colors are missing
            CollaboratorError: 502/503 if generation fails or is unavailable
        """
        organization = await self.get_by_id(org_id)
        if not organization.can_generate_title_card:
            missing = {
                field_name: "Required to generate a title card"
                for field_name, value in (
                    ("logoUrl", organization.logo_url),
                    ("brandPrimary", organization.brand_primary),
                    ("brandSecondary", organization.brand_secondary),
                )
                if not value
            }
            raise ValidationError(
                "Logo URL and both brand colors are required to generate a title card",
                details=missing,
            )

        try:
            url = await self.title_cards.generate(
                self._title_card_request(organization), replace=True
            )
        except TitleCardUnavailable as exc:
            raise CollaboratorError(str(exc), status_code=503) from exc
        except TitleCardError as exc:
            log_json(
                logger,
                logging.ERROR,
                "title_card_replace_failed",
                org_id=organization.id,
                error=str(exc),
            )
            raise CollaboratorError("Title card generation failed") from exc

        organization.title_card_url = url
        await self._commit("replace title card")
        return organization
