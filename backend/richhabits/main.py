"""FastAPI application entry point."""

import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from richhabits.api.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from richhabits.api.routes import metrics, orders, organizations, sports
from richhabits.core.config import get_settings
from richhabits.core.database import get_db
from richhabits.core.errors import AppError, translate_db_error
from richhabits.core.schema_catalog import ColumnCatalog
from richhabits.core.structured_logging import configure_logging, log_json
from richhabits.services.organization_service import OrganizationService

configure_logging()
logger = logging.getLogger(__name__)

settings = get_settings()
docs_enabled = settings.api_docs_enabled
if docs_enabled is None:
    docs_enabled = settings.environment != "production"

app = FastAPI(
    title="Rich Habits API",
    description="Organizations, sports and orders for Rich Habits custom clothing",
    version="1.0.0",
    docs_url="/api/docs" if docs_enabled else None,
    redoc_url="/api/redoc" if docs_enabled else None,
    openapi_url="/api/openapi.json" if docs_enabled else None,
)
app.state.column_catalog = ColumnCatalog()

# Middleware configuration (order matters - applied in reverse order)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


def _field_name(loc: tuple) -> str:
    parts = [str(part) for part in loc if part not in ("body", "query", "path", "header")]
    return ".".join(parts) or "body"


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures as 400 with a per-field message map."""
    details: dict[str, str] = {}
    for error in exc.errors():
        message = str(error.get("msg", "Invalid value")).removeprefix("Value error, ")
        details.setdefault(_field_name(tuple(error.get("loc", ()))), message)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "validation_error", "message": "Request validation failed", "details": details},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error = "not_found" if exc.status_code == status.HTTP_404_NOT_FOUND else "http_error"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": error, "message": str(exc.detail), "details": None},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(DBAPIError)
async def database_error_handler(request: Request, exc: DBAPIError) -> JSONResponse:
    error = translate_db_error(exc, operation="process request")
    return JSONResponse(status_code=error.status_code, content=error.to_body())


@app.get("/api/health", tags=["health"])
async def health_check(db: AsyncSession = Depends(get_db)):
    """Liveness plus database reachability and organization count."""
    try:
        orgs = await OrganizationService(db, settings).count()
    except (SQLAlchemyError, OSError) as exc:
        log_json(logger, logging.ERROR, "health_db_unreachable", error=str(exc))
        await db.rollback()
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"ok": False, "db": False, "orgs": None},
        )
    return {"ok": True, "db": True, "orgs": orgs}


app.include_router(organizations.router, prefix="/api/organizations", tags=["organizations"])
app.include_router(sports.router, prefix="/api/organizations", tags=["sports"])
app.include_router(orders.router, prefix="/api/organizations", tags=["orders"])
app.include_router(metrics.router, prefix="/api", tags=["metrics"])
