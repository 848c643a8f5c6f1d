"""Order service for CRUD operations scoped to one organization."""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from richhabits.core.errors import AppError, ConflictError, NotFoundError, translate_db_error
from richhabits.core.structured_logging import log_json
from richhabits.models.enums import OrderStatus
from richhabits.models.order import Order
from richhabits.models.organization import Organization
from richhabits.schemas.order import OrderCreate, OrderItem, OrderUpdate, compute_order_total

logger = logging.getLogger(__name__)


def _items_to_json(items: list[OrderItem]) -> list[dict[str, Any]]:
    return [item.model_dump(by_alias=True) for item in items]


class OrderService:
    """Service for managing an organization's orders.

    ``total_amount`` falls back to the item sum whenever the client sends
    items without an explicit total.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _require_organization(self, org_id: UUID) -> None:
        result = await self.db.execute(select(Organization.id).where(Organization.id == org_id))
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Organization not found")

    async def _find_by_number(
        self, org_id: UUID, order_number: str, exclude_id: UUID | None = None
    ) -> Order | None:
        query = select(Order).where(
            Order.organization_id == org_id,
            Order.order_number == order_number,
        )
        if exclude_id is not None:
            query = query.where(Order.id != exclude_id)
        result = await self.db.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def _ensure_unique_number(
        self, org_id: UUID, order_number: str, exclude_id: UUID | None = None
    ) -> None:
        existing = await self._find_by_number(org_id, order_number, exclude_id)
        if existing:
            raise ConflictError(
                f"Order '{order_number}' already exists for this organization",
                existing_id=existing.id,
            )

    async def _write(self, org_id: UUID, order_number: str | None, operation: str) -> None:
        try:
            await self.db.flush()
            await self.db.commit()
        except DBAPIError as exc:
            await self.db.rollback()
            error: AppError = translate_db_error(exc, operation=operation)
            if isinstance(exc, IntegrityError) and order_number:
                existing = await self._find_by_number(org_id, order_number)
                if existing:
                    error = ConflictError(
                        f"Order '{order_number}' already exists for this organization",
                        existing_id=existing.id,
                    )
            raise error from exc

    async def list(
        self, org_id: UUID, status: OrderStatus | None = None
    ) -> tuple[list[Order], int]:
        """List orders for an organization, newest first.

        Raises:
            NotFoundError: 404 if organization not found
        """
        await self._require_organization(org_id)
        query = select(Order).where(Order.organization_id == org_id)
        count_query = select(func.count()).select_from(Order).where(Order.organization_id == org_id)
        if status:
            query = query.where(Order.status == status)
            count_query = count_query.where(Order.status == status)

        result = await self.db.execute(query.order_by(Order.created_at.desc(), Order.id))
        orders = list(result.scalars().all())
        count_result = await self.db.execute(count_query)
        return orders, count_result.scalar() or 0

    async def get_by_id(self, org_id: UUID, order_id: UUID) -> Order:
        await self._require_organization(org_id)
        result = await self.db.execute(
            select(Order).where(Order.id == order_id, Order.organization_id == org_id)
        )
        order = result.scalar_one_or_none()
        if not order:
            raise NotFoundError("Order not found")
        return order

    async def create(self, org_id: UUID, request: OrderCreate) -> Order:
        """Create an order.

        Raises:
            NotFoundError: 404 if organization not found
            ConflictError: 409 if the order number is already used in the org
        """
        await self._require_organization(org_id)
        await self._ensure_unique_number(org_id, request.order_number)

        total = request.total_amount
        if total is None:
            total = compute_order_total(request.items)

        order = Order(
            organization_id=org_id,
            order_number=request.order_number,
            customer_name=request.customer_name,
            status=request.status,
            total_amount=total,
            items=_items_to_json(request.items),
            notes=request.notes,
        )
        self.db.add(order)
        await self._write(org_id, request.order_number, "create order")

        log_json(
            logger,
            logging.INFO,
            "order_created",
            org_id=org_id,
            order_id=order.id,
            total_amount=total,
        )
        return order

    async def update(self, org_id: UUID, order_id: UUID, request: OrderUpdate) -> Order:
        order = await self.get_by_id(org_id, order_id)
        changes = request.changes()

        if "order_number" in changes:
            await self._ensure_unique_number(org_id, changes["order_number"], exclude_id=order.id)

        if "items" in changes:
            items = request.items or []
            changes["items"] = _items_to_json(items)
            if changes.get("total_amount") is None:
                changes["total_amount"] = compute_order_total(items)
        elif "total_amount" in changes and changes["total_amount"] is None:
            changes["total_amount"] = compute_order_total(
                [OrderItem.model_validate(item) for item in order.items or []]
            )

        for field_name, value in changes.items():
            setattr(order, field_name, value)
        await self._write(org_id, changes.get("order_number"), "update order")

        log_json(
            logger,
            logging.INFO,
            "order_updated",
            org_id=org_id,
            order_id=order_id,
            fields=sorted(changes),
        )
        return order

    async def delete(self, org_id: UUID, order_id: UUID) -> None:
        order = await self.get_by_id(org_id, order_id)
        await self.db.delete(order)
        await self._write(org_id, None, "delete order")
        log_json(logger, logging.INFO, "order_deleted", org_id=org_id, order_id=order_id)
