"""Pydantic schemas for organization endpoints.

Create and update payloads share the normalization rules below. Invalid
``state``, ``email`` and ``logoUrl`` values are dropped (treated as not sent)
rather than rejected; malformed brand colors are rejected.
"""

from datetime import datetime
from typing import Any, ClassVar, Literal
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from richhabits.schemas.common import (
    CamelModel,
    PayloadModel,
    normalize_email,
    normalize_hex_color,
    normalize_http_url,
    normalize_state,
    normalize_tags,
)

# Leniently normalized fields: an unusable value is treated as not sent.
LENIENT_FIELDS = {
    "state": normalize_state,
    "email": normalize_email,
    "logoUrl": normalize_http_url,
    "logo_url": normalize_http_url,
}


class OrganizationFields(PayloadModel):
    """Optional organization fields shared by create and update."""

    state: str | None = Field(None, description="Two-letter state code")
    address: str | None = None
    phone: str | None = Field(None, max_length=50)
    email: str | None = None
    notes: str | None = Field(None, max_length=2000)
    logo_url: str | None = None
    brand_primary: str | None = Field(None, description="Hex color, e.g. #1a2b3c")
    brand_secondary: str | None = Field(None, description="Hex color, e.g. #1a2b3c")
    is_business: bool = False
    universal_discounts: dict[str, Any] | None = None
    tags: list[str] | None = None

    @model_validator(mode="before")
    @classmethod
    def _drop_unusable_values(cls, data: Any) -> Any:
        """Drop invalid state, email and logo URL values so an update keeps the stored ones."""
        if not isinstance(data, dict):
            return data
        return {
            key: value
            for key, value in data.items()
            if value is None or key not in LENIENT_FIELDS or LENIENT_FIELDS[key](value) is not None
        }

    @field_validator("state", mode="before")
    @classmethod
    def _state(cls, v: Any) -> str | None:
        return normalize_state(v)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v: Any) -> str | None:
        return normalize_email(v)

    @field_validator("logo_url", mode="before")
    @classmethod
    def _logo_url(cls, v: Any) -> str | None:
        return normalize_http_url(v)

    @field_validator("brand_primary", "brand_secondary")
    @classmethod
    def _hex_color(cls, v: str | None) -> str | None:
        return normalize_hex_color(v) if v is not None else None

    @field_validator("address", "phone", "notes")
    @classmethod
    def _strip(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else None

    @field_validator("is_business", mode="before")
    @classmethod
    def _is_business_not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("isBusiness cannot be null")
        return v

    @field_validator("universal_discounts")
    @classmethod
    def _discounts(cls, v: dict[str, Any] | None) -> dict[str, Any]:
        return v if v is not None else {}

    @field_validator("tags")
    @classmethod
    def _tags(cls, v: list[str] | None) -> list[str]:
        return normalize_tags(v)


class OrganizationCreate(OrganizationFields):
    """Request schema for POST /organizations."""

    name: str = Field(..., min_length=1, max_length=120, description="Organization display name")

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Organization name cannot be empty")
        return v.strip()

    def to_row(self) -> dict[str, Any]:
        """Column values for a new row, with defaults for omitted fields."""
        values = self.model_dump()
        values["universal_discounts"] = values.get("universal_discounts") or {}
        values["tags"] = values.get("tags") or []
        return values


class OrganizationUpdate(OrganizationFields):
    """Request schema for PATCH /organizations/{id}. Only sent keys change."""

    blank_rejected_fields: ClassVar[frozenset[str]] = frozenset({"name"})

    name: str | None = Field(None, min_length=1, max_length=120)
    is_business: bool | None = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str | None) -> str:
        if v is None or not v.strip():
            raise ValueError("Organization name cannot be empty")
        return v.strip()

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class OrganizationResponse(CamelModel):
    """Full organization row."""

    id: UUID
    name: str
    state: str | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    notes: str | None = None
    logo_url: str | None = None
    title_card_url: str | None = None
    brand_primary: str | None = None
    brand_secondary: str | None = None
    is_business: bool = False
    universal_discounts: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @field_validator("universal_discounts", mode="before")
    @classmethod
    def _discounts_never_null(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_never_null(cls, v: Any) -> Any:
        return [] if v is None else v


class SideEffectResponse(CamelModel):
    """Outcome of a best-effort follow-up action."""

    name: str
    status: Literal["succeeded", "skipped", "failed"]
    attempts: int
    detail: str | None = None


class OrganizationCreatedResponse(OrganizationResponse):
    """Created row plus the outcome of owner-role and title-card follow-ups."""

    side_effects: list[SideEffectResponse] = Field(default_factory=list)


class OrganizationListResponse(CamelModel):
    """Paginated organization list."""

    items: list[OrganizationResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class SchemaDiagnosticsResponse(CamelModel):
    columns: list[str]
    missing: list[str]
