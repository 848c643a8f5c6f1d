"""Organization API endpoints.

Thin adapters over ``OrganizationService``; every write goes through the
service so normalization and side effects are applied uniformly.
"""
import math
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from richhabits.api.deps import (
    get_acting_user_id,
    get_column_catalog,
    get_organization_service,
)
from richhabits.core.config import get_settings
from richhabits.core.database import get_db
from richhabits.core.schema_catalog import ColumnCatalog
from richhabits.models.enums import OrganizationType, SortField, SortOrder
from richhabits.schemas.errors import ErrorResponse
from richhabits.schemas.organization import (
    OrganizationCreate,
    OrganizationCreatedResponse,
    OrganizationListResponse,
    OrganizationResponse,
    OrganizationUpdate,
    SchemaDiagnosticsResponse,
    SideEffectResponse,
)
from richhabits.services.organization_service import OrganizationService

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get(
    "",
    response_model=OrganizationListResponse,
    summary="List organizations",
    responses={400: {"model": ErrorResponse}},
)
async def list_organizations(
    q: Optional[str] = Query(None, description="Case-insensitive substring of the name"),
    state: Optional[str] = Query(None, description="Two-letter state code"),
    org_type: OrganizationType = Query(OrganizationType.ALL, alias="type"),
    sort: SortField = Query(SortField.CREATED_AT),
    order: SortOrder = Query(SortOrder.DESC),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, alias="pageSize"),
    service: OrganizationService = Depends(get_organization_service),
) -> OrganizationListResponse:
    """List organizations with filtering, sorting and pagination.

    ``pageSize`` is clamped to the configured maximum.
    """
    settings = get_settings()
    size = min(page_size or settings.organizations_page_size_default, settings.organizations_page_size_max)

    organizations, total = await service.list(
        q=q,
        state=state,
        org_type=org_type,
        sort=sort,
        order=order,
        page=page,
        page_size=size,
    )
    return OrganizationListResponse(
        items=[OrganizationResponse.model_validate(org) for org in organizations],
        total=total,
        page=page,
        page_size=size,
        total_pages=math.ceil(total / size) if total else 0,
    )


@router.get(
    "/_schema",
    response_model=SchemaDiagnosticsResponse,
    summary="Organization table column diagnostics",
)
async def organization_schema(
    db: AsyncSession = Depends(get_db),
    catalog: ColumnCatalog = Depends(get_column_catalog),
) -> SchemaDiagnosticsResponse:
    """Report the live ``organizations`` columns and any the model expects but lacks."""
    columns = (await catalog.columns(db)).get("organizations", set())
    missing = await catalog.missing_columns(db, "organizations")
    return SchemaDiagnosticsResponse(columns=sorted(columns), missing=missing)


@router.post(
    "",
    response_model=OrganizationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create organization",
    responses={**ERROR_RESPONSES, 409: {"model": ErrorResponse}},
)
async def create_organization(
    request: OrganizationCreate,
    acting_user_id: Optional[UUID] = Depends(get_acting_user_id),
    service: OrganizationService = Depends(get_organization_service),
) -> OrganizationCreatedResponse:
    """Create an organization.

    The acting user becomes its owner when resolvable, and a title card is
    generated when a logo and both brand colors are supplied. Neither
    follow-up can fail the request; their outcomes are listed in
    ``sideEffects``.
    """
    result = await service.create(request, acting_user_id)
    response = OrganizationCreatedResponse.model_validate(result.organization)
    response.side_effects = [
        SideEffectResponse(
            name=effect.name,
            status=effect.status,
            attempts=effect.attempts,
            detail=effect.detail,
        )
        for effect in result.side_effects
    ]
    return response


@router.get(
    "/{org_id}",
    response_model=OrganizationResponse,
    summary="Get organization details",
    responses=ERROR_RESPONSES,
)
async def get_organization(
    org_id: UUID,
    service: OrganizationService = Depends(get_organization_service),
) -> OrganizationResponse:
    organization = await service.get_by_id(org_id)
    return OrganizationResponse.model_validate(organization)


@router.patch(
    "/{org_id}",
    response_model=OrganizationResponse,
    summary="Update organization",
    responses={**ERROR_RESPONSES, 409: {"model": ErrorResponse}},
)
async def update_organization(
    org_id: UUID,
    request: OrganizationUpdate,
    service: OrganizationService = Depends(get_organization_service),
) -> OrganizationResponse:
    """Partially update an organization; omitted fields are left unchanged."""
    organization = await service.update(org_id, request)
    return OrganizationResponse.model_validate(organization)


@router.delete(
    "/{org_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete organization",
    responses=ERROR_RESPONSES,
)
async def delete_organization(
    org_id: UUID,
    service: OrganizationService = Depends(get_organization_service),
) -> Response:
    """Delete an organization along with its sports, orders and role assignments."""
    await service.delete(org_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{org_id}/replace-title-card",
    response_model=OrganizationResponse,
    summary="Regenerate the organization's title card",
    responses={**ERROR_RESPONSES, 502: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def replace_title_card(
    org_id: UUID,
    service: OrganizationService = Depends(get_organization_service),
) -> OrganizationResponse:
    organization = await service.replace_title_card(org_id)
    return OrganizationResponse.model_validate(organization)
