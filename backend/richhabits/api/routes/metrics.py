"""Prometheus metrics endpoint."""

from __future__ import annotations

import hmac

from fastapi import APIRouter, Header, HTTPException, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from richhabits.core.config import get_settings

router = APIRouter()


def _bearer(authorization: str | None) -> str | None:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


@router.get(
    "/metrics",
    include_in_schema=False,
    summary="Prometheus metrics",
)
async def metrics_endpoint(
    authorization: str | None = Header(default=None),
    x_metrics_token: str | None = Header(default=None, alias="X-Metrics-Token"),
) -> Response:
    """Expose request, mutation and side-effect counters.

    In production the endpoint is hidden unless ``METRICS_TOKEN`` is set, and
    then requires that token as a bearer or ``X-Metrics-Token`` header.
    """
    settings = get_settings()
    if settings.environment == "production":
        expected = settings.metrics_token
        if not expected:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
        token = _bearer(authorization) or x_metrics_token
        if not token or not hmac.compare_digest(token, expected):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
