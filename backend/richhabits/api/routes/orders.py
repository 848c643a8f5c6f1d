"""Order API endpoints, nested under an organization."""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from richhabits.core.database import get_db
from richhabits.models.enums import OrderStatus
from richhabits.schemas.errors import ErrorResponse
from richhabits.schemas.order import OrderCreate, OrderListResponse, OrderResponse, OrderUpdate
from richhabits.services.order_service import OrderService

router = APIRouter()

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


@router.get("/{org_id}/orders", response_model=OrderListResponse, summary="List orders")
async def list_orders(
    org_id: UUID,
    order_status: Optional[OrderStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
) -> OrderListResponse:
    """List an organization's orders, optionally filtered by status."""
    orders, total = await OrderService(db).list(org_id, status=order_status)
    return OrderListResponse(
        items=[OrderResponse.model_validate(order) for order in orders],
        total=total,
    )


@router.post(
    "/{org_id}/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create order",
    responses={**ERROR_RESPONSES, 409: {"model": ErrorResponse}},
)
async def create_order(
    org_id: UUID,
    request: OrderCreate,
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    """Create an order. ``totalAmount`` defaults to the sum of the line items."""
    order = await OrderService(db).create(org_id, request)
    return OrderResponse.model_validate(order)


@router.get(
    "/{org_id}/orders/{order_id}",
    response_model=OrderResponse,
    summary="Get order",
    responses=ERROR_RESPONSES,
)
async def get_order(
    org_id: UUID,
    order_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    order = await OrderService(db).get_by_id(org_id, order_id)
    return OrderResponse.model_validate(order)


@router.patch(
    "/{org_id}/orders/{order_id}",
    response_model=OrderResponse,
    summary="Update order",
    responses={**ERROR_RESPONSES, 409: {"model": ErrorResponse}},
)
async def update_order(
    org_id: UUID,
    order_id: UUID,
    request: OrderUpdate,
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    order = await OrderService(db).update(org_id, order_id, request)
    return OrderResponse.model_validate(order)


@router.delete(
    "/{org_id}/orders/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete order",
    responses=ERROR_RESPONSES,
)
async def delete_order(
    org_id: UUID,
    order_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> Response:
    await OrderService(db).delete(org_id, order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
