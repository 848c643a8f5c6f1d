"""FastAPI dependencies for acting-user resolution and shared services."""
import logging
from uuid import UUID

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from richhabits.core.config import get_settings
from richhabits.core.database import get_db
from richhabits.core.request_context import set_acting_user
from richhabits.core.schema_catalog import ColumnCatalog
from richhabits.core.security import subject_user_id
from richhabits.core.structured_logging import log_json
from richhabits.services.organization_service import OrganizationService
from richhabits.services.title_card_service import TitleCardService

logger = logging.getLogger(__name__)

# Optional bearer scheme: a missing token is not an error here
security = HTTPBearer(auto_error=False)


async def get_acting_user_id(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> UUID | None:
    """Resolve who is acting on this request.

    Order of precedence: ``X-User-Id`` header, bearer token subject, then
    the configured default. Values that cannot be parsed are ignored with a
    warning, and the result may be None.
    """
    user_id: UUID | None = None

    if x_user_id:
        try:
            user_id = UUID(x_user_id.strip())
        except ValueError:
            log_json(logger, logging.WARNING, "acting_user_invalid", source="header")

    if user_id is None and credentials is not None:
        user_id = subject_user_id(credentials.credentials)
        if user_id is None:
            log_json(logger, logging.WARNING, "acting_user_invalid", source="bearer")

    if user_id is None:
        user_id = get_settings().default_acting_user_id

    set_acting_user(user_id)
    return user_id


def get_column_catalog(request: Request) -> ColumnCatalog:
    catalog = getattr(request.app.state, "column_catalog", None)
    if catalog is None:
        catalog = ColumnCatalog()
        request.app.state.column_catalog = catalog
    return catalog


def get_title_card_service() -> TitleCardService:
    """Title card collaborator; overridden in tests."""
    return TitleCardService(get_settings())


def get_organization_service(
    db: AsyncSession = Depends(get_db),
    title_cards: TitleCardService = Depends(get_title_card_service),
) -> OrganizationService:
    return OrganizationService(db, get_settings(), title_cards)
