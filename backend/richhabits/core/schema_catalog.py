"""Live database column catalog used to diagnose schema drift."""

from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncSession

from richhabits.core.structured_logging import log_json
from richhabits.models import Base

logger = logging.getLogger(__name__)

TRACKED_TABLES = ("organizations", "sports", "orders", "users", "roles", "user_roles")


class ColumnCatalog:
    """Lazily loaded map of table name to the columns the database really has.

    One instance is created per application and handed to routes through a
    dependency. Nothing is read until the first call to ``columns``; ``reset``
    drops the cache so the next call re-inspects (e.g. after a migration).
    """

    def __init__(self, tables: tuple[str, ...] = TRACKED_TABLES):
        self.tables = tables
        self._columns: dict[str, set[str]] | None = None

    @property
    def loaded(self) -> bool:
        return self._columns is not None

    def reset(self) -> None:
        self._columns = None

    def _inspect(self, sync_conn: Connection) -> dict[str, set[str]]:
        inspector = inspect(sync_conn)
        existing = set(inspector.get_table_names())
        return {
            table: {col["name"] for col in inspector.get_columns(table)} if table in existing else set()
            for table in self.tables
        }

    async def columns(self, db: AsyncSession) -> dict[str, set[str]]:
        if self._columns is None:
            conn = await db.connection()
            self._columns = await conn.run_sync(self._inspect)
            log_json(
                logger,
                logging.INFO,
                "schema_catalog_loaded",
                tables={t: len(cols) for t, cols in self._columns.items()},
            )
        return self._columns

    async def missing_columns(self, db: AsyncSession, table: str) -> list[str]:
        """Columns the ORM model declares but the live table lacks."""
        live = (await self.columns(db)).get(table, set())
        expected = [col.name for col in Base.metadata.tables[table].columns]
        return [name for name in expected if name not in live]
