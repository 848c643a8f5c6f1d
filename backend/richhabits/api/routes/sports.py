"""Sport API endpoints, nested under an organization."""
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from richhabits.core.database import get_db
from richhabits.schemas.errors import ErrorResponse
from richhabits.schemas.sport import SportCreate, SportListResponse, SportResponse, SportUpdate
from richhabits.services.sport_service import SportService

router = APIRouter()

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


@router.get("/{org_id}/sports", response_model=SportListResponse, summary="List sports")
async def list_sports(
    org_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> SportListResponse:
    sports, total = await SportService(db).list(org_id)
    return SportListResponse(
        items=[SportResponse.model_validate(sport) for sport in sports],
        total=total,
    )


@router.post(
    "/{org_id}/sports",
    response_model=SportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create sport",
    responses=ERROR_RESPONSES,
)
async def create_sport(
    org_id: UUID,
    request: SportCreate,
    db: AsyncSession = Depends(get_db),
) -> SportResponse:
    sport = await SportService(db).create(org_id, request)
    return SportResponse.model_validate(sport)


@router.get(
    "/{org_id}/sports/{sport_id}",
    response_model=SportResponse,
    summary="Get sport",
    responses=ERROR_RESPONSES,
)
async def get_sport(
    org_id: UUID,
    sport_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> SportResponse:
    sport = await SportService(db).get_by_id(org_id, sport_id)
    return SportResponse.model_validate(sport)


@router.patch(
    "/{org_id}/sports/{sport_id}",
    response_model=SportResponse,
    summary="Update sport",
    responses=ERROR_RESPONSES,
)
async def update_sport(
    org_id: UUID,
    sport_id: UUID,
    request: SportUpdate,
    db: AsyncSession = Depends(get_db),
) -> SportResponse:
    sport = await SportService(db).update(org_id, sport_id, request)
    return SportResponse.model_validate(sport)


@router.delete(
    "/{org_id}/sports/{sport_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete sport",
    responses=ERROR_RESPONSES,
)
async def delete_sport(
    org_id: UUID,
    sport_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> Response:
    await SportService(db).delete(org_id, sport_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
