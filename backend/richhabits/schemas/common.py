"""Shared schema base classes and normalization helpers."""

from __future__ import annotations

import re
from typing import Any, ClassVar
from urllib.parse import urlparse

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

STATE_CODE_RE = re.compile(r"^[A-Z]{2}$")
HEX_COLOR_RE = re.compile(r"^#?(?P<hex>[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; both accepted on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PayloadModel(CamelModel):
    """Request body base: keys holding blank strings are treated as not sent.

    Fields listed in ``blank_rejected_fields`` keep their blank value so their
    own validators can reject it.
    """

    blank_rejected_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_strings(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return {
            key: value
            for key, value in data.items()
            if key in cls.blank_rejected_fields or not (isinstance(value, str) and not value.strip())
        }


def normalize_state(value: Any) -> str | None:
    """Upper-case a two-letter state code; anything else becomes None."""
    if not isinstance(value, str):
        return None
    code = value.strip().upper()
    return code if STATE_CODE_RE.match(code) else None


def normalize_email(value: Any) -> str | None:
    """Return a syntactically valid address or None."""
    if not isinstance(value, str):
        return None
    try:
        return validate_email(value.strip(), check_deliverability=False).normalized
    except EmailNotValidError:
        return None


def normalize_http_url(value: Any) -> str | None:
    """Return an absolute http(s) URL unchanged, or None."""
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    parsed = urlparse(candidate)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return candidate


def normalize_hex_color(value: str) -> str:
    """Normalize ``#abc`` / ``AABBCC`` style colors to ``#aabbcc``.

    Raises:
        ValueError: If the value is not a 3- or 6-digit hex color
    """
    match = HEX_COLOR_RE.match(value.strip())
    if not match:
        raise ValueError("Must be a hex color such as #1a2b3c")
    digits = match.group("hex").lower()
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return f"#{digits}"


def normalize_tags(values: list[str] | None) -> list[str]:
    """Trim tags, drop blanks and duplicates, keep first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for raw in values or []:
        tag = raw.strip()
        if tag and tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result
