"""Request context utilities.

Carries the correlation/request ID and the resolved acting user through a
request so that log lines emitted deep inside services can be tied back to
the HTTP call that caused them.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from uuid import UUID, uuid4

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
_acting_user_var: ContextVar[UUID | None] = ContextVar("acting_user_id", default=None)


def get_request_id() -> str | None:
    """Get the current request correlation ID (if any)."""

    return _request_id_var.get()


def set_request_id(request_id: str | None) -> Token[str | None]:
    return _request_id_var.set(request_id)


def reset_request_id(token: Token[str | None]) -> None:
    _request_id_var.reset(token)


def new_request_id() -> str:
    return str(uuid4())


@contextmanager
def request_id_context(request_id: str | None):
    """Context manager that sets the correlation ID for the duration."""

    token = set_request_id(request_id)
    try:
        yield
    finally:
        reset_request_id(token)


def get_acting_user() -> UUID | None:
    """Acting user recorded for the current request, if one was resolved."""

    return _acting_user_var.get()


def set_acting_user(user_id: UUID | None) -> Token[UUID | None]:
    return _acting_user_var.set(user_id)
