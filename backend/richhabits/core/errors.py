"""Typed API errors and database error translation."""

from __future__ import annotations

import logging
import re
from typing import Any
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import DBAPIError

from richhabits.core.structured_logging import log_json

logger = logging.getLogger(__name__)

NOT_NULL_VIOLATION = "23502"
UNIQUE_VIOLATION = "23505"
UNDEFINED_COLUMN = "42703"


class AppError(HTTPException):
    """Base class for errors rendered as ErrorResponse bodies."""

    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
    ):
        super().__init__(status_code=status_code or self.status_code_default, detail=message)
        self.message = message
        self.details = details

    def to_body(self) -> dict[str, Any]:
        return {"error": self.error_code, "message": self.message, "details": self.details}


class ValidationError(AppError):
    status_code_default = status.HTTP_400_BAD_REQUEST
    error_code = "validation_error"


class NotFoundError(AppError):
    status_code_default = status.HTTP_404_NOT_FOUND
    error_code = "not_found"


class ConflictError(AppError):
    status_code_default = status.HTTP_409_CONFLICT
    error_code = "conflict"

    def __init__(self, message: str, *, existing_id: UUID | None = None):
        super().__init__(message)
        self.existing_id = existing_id

    def to_body(self) -> dict[str, Any]:
        body = super().to_body()
        body["existingId"] = str(self.existing_id) if self.existing_id else None
        return body


class DatabaseError(AppError):
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "database_error"


class CollaboratorError(AppError):
    """An external collaborator (image generation, storage) failed."""

    status_code_default = status.HTTP_502_BAD_GATEWAY
    error_code = "collaborator_error"


def sqlstate_of(exc: BaseException) -> str | None:
    """Dig the PostgreSQL SQLSTATE out of a wrapped DBAPI exception."""
    candidates: list[Any] = [exc]
    orig = getattr(exc, "orig", None)
    if orig is not None:
        candidates.append(orig)
        if orig.__cause__ is not None:
            candidates.append(orig.__cause__)
    for candidate in candidates:
        for attr in ("sqlstate", "pgcode"):
            code = getattr(candidate, attr, None)
            if isinstance(code, str) and code:
                return code
    return None


def _column_from(exc: BaseException) -> str | None:
    orig = getattr(exc, "orig", None)
    for candidate in (orig, getattr(orig, "__cause__", None)):
        column = getattr(candidate, "column_name", None)
        if column:
            return column
    match = re.search(r'column "([^"]+)"', str(exc))
    return match.group(1) if match else None


def translate_db_error(exc: DBAPIError, *, operation: str) -> AppError:
    """Map a database failure onto the API error taxonomy.

    Known SQLSTATEs get a message the client can act on; everything else is
    reported with an opaque message and logged in full.
    """
    code = sqlstate_of(exc)
    column = _column_from(exc)
    log_json(
        logger,
        logging.ERROR,
        "db_error",
        operation=operation,
        sqlstate=code,
        column=column,
        error=str(getattr(exc, "orig", exc)),
    )

    if code == NOT_NULL_VIOLATION:
        name = column or "unknown"
        return DatabaseError(
            f"Missing required field: {name}",
            details={"column": name, "sqlstate": code},
        )
    if code == UNDEFINED_COLUMN:
        return DatabaseError(
            "Database schema is out of date; a pending migration may need to be applied",
            details={"column": column, "sqlstate": code},
        )
    if code == UNIQUE_VIOLATION:
        return ConflictError("A record with the same unique value already exists")
    return DatabaseError(f"Failed to {operation}")
