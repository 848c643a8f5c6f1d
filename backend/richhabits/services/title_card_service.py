"""Title card generation: brand tile image from logo and colors."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import time
from dataclasses import dataclass
from uuid import UUID

import httpx
from botocore.exceptions import BotoCoreError, ClientError

from richhabits.core.config import Settings, get_settings
from richhabits.core.storage import StorageClient, get_storage_client
from richhabits.core.structured_logging import log_json

logger = logging.getLogger(__name__)


class TitleCardError(Exception):
    """Image generation or upload failed."""


class TitleCardUnavailable(TitleCardError):
    """Generation is disabled or no provider credentials are configured."""


@dataclass(frozen=True)
class TitleCardRequest:
    org_id: UUID
    team_name: str
    logo_url: str
    brand_primary: str
    brand_secondary: str


def build_prompt(request: TitleCardRequest) -> str:
    palette = f"{request.brand_primary}, {request.brand_secondary}"
    return (
        "Create a crisp title card for a sports team with a 2:1 aspect ratio.\n"
        f'Text: "{request.team_name}" in a bold, high-contrast wordmark (single font style).\n'
        "Style: vibrant neon gradient strokes with subtle abstract stripes in the "
        "background (no logos), clean edges, not noisy.\n"
        "Color rules:\n"
        f"- Use {palette} plus hues sampled from the team logo.\n"
        f"- Background should harmonize with {request.brand_primary}; stroke accents "
        f"may use {request.brand_secondary}.\n"
        "Composition:\n"
        "- Centered wordmark, strong contrast against background, readable at small size.\n"
        "- No real-world photos, no brand marks, no IP; pure graphic.\n"
    )


def object_key(org_id: UUID) -> str:
    return f"org-tiles/{org_id}/title.png"


class TitleCardService:
    """Calls the image API and stores the result in object storage."""

    def __init__(
        self,
        settings: Settings | None = None,
        storage: StorageClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self._storage = storage
        self._transport = transport

    @property
    def storage(self) -> StorageClient:
        if self._storage is None:
            self._storage = get_storage_client()
        return self._storage

    def available(self) -> bool:
        return bool(self.settings.title_card_enabled and self.settings.title_card_api_key)

    async def _render(self, prompt: str) -> bytes:
        payload = {
            "model": self.settings.title_card_model,
            "prompt": prompt,
            "size": self.settings.title_card_size,
            "n": 1,
            "response_format": "b64_json",
        }
        headers = {"Authorization": f"Bearer {self.settings.title_card_api_key}"}
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.title_card_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self.settings.title_card_api_url, json=payload, headers=headers
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as exc:
            raise TitleCardError(f"Image provider request failed: {exc}") from exc
        except ValueError as exc:
            raise TitleCardError("Image provider returned invalid JSON") from exc

        data = body.get("data") or []
        b64 = data[0].get("b64_json") if data else None
        if not b64:
            raise TitleCardError("Image provider returned no image data")
        try:
            return base64.b64decode(b64, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise TitleCardError("Image provider returned malformed base64") from exc

    async def generate(self, request: TitleCardRequest, *, replace: bool = False) -> str:
        """Render and upload a title card, returning its public URL.

        Without ``replace`` an already stored card for the organization is
        kept and its URL returned.

        Raises:
            TitleCardUnavailable: If generation is not configured
            TitleCardError: If rendering or upload fails
        """
        if not self.available():
            raise TitleCardUnavailable("Title card generation is not configured")

        started = time.perf_counter()
        image = await self._render(build_prompt(request))
        key = object_key(request.org_id)
        try:
            url = await asyncio.to_thread(
                self.storage.put_bytes, key, image, "image/png", overwrite=replace
            )
        except (BotoCoreError, ClientError) as exc:
            raise TitleCardError(f"Title card upload failed: {exc}") from exc

        log_json(
            logger,
            logging.INFO,
            "title_card_generated",
            org_id=request.org_id,
            replace=replace,
            bytes=len(image),
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return url
