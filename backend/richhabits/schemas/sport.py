"""Pydantic schemas for sport endpoints."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from richhabits.schemas.common import CamelModel, PayloadModel


class SportCreate(PayloadModel):
    name: str = Field(..., min_length=1, max_length=255)
    salesperson_name: str | None = Field(None, max_length=255)
    contact_name: str | None = Field(None, max_length=255)
    contact_email: EmailStr | None = None
    contact_phone: str | None = Field(None, max_length=50)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Sport name cannot be empty")
        return v.strip()


class SportUpdate(PayloadModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    salesperson_name: str | None = Field(None, max_length=255)
    contact_name: str | None = Field(None, max_length=255)
    contact_email: EmailStr | None = None
    contact_phone: str | None = Field(None, max_length=50)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str | None) -> str:
        if v is None or not v.strip():
            raise ValueError("Sport name cannot be empty")
        return v.strip()

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class SportResponse(CamelModel):
    id: UUID
    organization_id: UUID
    name: str
    salesperson_name: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    created_at: datetime
    updated_at: datetime


class SportListResponse(CamelModel):
    items: list[SportResponse]
    total: int
