"""Unit tests for the title card collaborator.

The image API is replaced with ``httpx.MockTransport`` and storage with a Mock.
"""

import base64
import json
from uuid import uuid4

import httpx
import pytest
from botocore.exceptions import ClientError

from richhabits.services.title_card_service import (
    TitleCardError,
    TitleCardRequest,
    TitleCardUnavailable,
    build_prompt,
    object_key,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\nwestview"


def image_api_down(request: httpx.Request) -> httpx.Response:
    return httpx.Response(503, json={"error": {"message": "overloaded"}})


@pytest.fixture
def card_request() -> TitleCardRequest:
    return TitleCardRequest(
        org_id=uuid4(),
        team_name="Westview Wolves",
        logo_url="https://cdn.richhabits.com/westview.png",
        brand_primary="#0a2342",
        brand_secondary="#f5b700",
    )


def test_prompt_mentions_team_and_colors(card_request):
    prompt = build_prompt(card_request)
    assert '"Westview Wolves"' in prompt
    assert "#0a2342" in prompt
    assert "#f5b700" in prompt


def test_object_key_layout():
    org_id = uuid4()
    assert object_key(org_id) == f"org-tiles/{org_id}/title.png"


@pytest.mark.asyncio
async def test_generate_uploads_png_and_returns_url(make_title_cards, storage, card_request):
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured["auth"] = request.headers["Authorization"]
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"data": [{"b64_json": base64.b64encode(PNG_BYTES).decode()}]})

    service = make_title_cards(handler)
    url = await service.generate(card_request)

    assert url == f"http://storage.test/org-tiles/{card_request.org_id}/title.png"
    assert captured["auth"] == "Bearer test-key"
    assert captured["body"]["response_format"] == "b64_json"
    storage.put_bytes.assert_called_once_with(
        object_key(card_request.org_id), PNG_BYTES, "image/png", overwrite=False
    )


@pytest.mark.asyncio
async def test_replace_overwrites_stored_object(make_title_cards, storage, card_request):
    await make_title_cards().generate(card_request, replace=True)
    assert storage.put_bytes.call_args.kwargs["overwrite"] is True


@pytest.mark.asyncio
async def test_unconfigured_service_is_unavailable(make_title_cards, card_request):
    service = make_title_cards(title_card_api_key=None)
    assert service.available() is False
    with pytest.raises(TitleCardUnavailable):
        await service.generate(card_request)


def test_disabled_service_is_unavailable(make_title_cards):
    assert make_title_cards(title_card_enabled=False).available() is False


@pytest.mark.asyncio
async def test_provider_error_raises(make_title_cards, storage, card_request):
    with pytest.raises(TitleCardError):
        await make_title_cards(image_api_down).generate(card_request)
    storage.put_bytes.assert_not_called()


@pytest.mark.asyncio
async def test_missing_image_data_raises(make_title_cards, card_request):
    service = make_title_cards(lambda request: httpx.Response(200, json={"data": []}))
    with pytest.raises(TitleCardError, match="no image data"):
        await service.generate(card_request)


@pytest.mark.asyncio
async def test_storage_failure_raises(make_title_cards, storage, card_request):
    storage.put_bytes.side_effect = ClientError(
        {"Error": {"Code": "NoSuchBucket", "Message": "missing"}}, "PutObject"
    )
    with pytest.raises(TitleCardError, match="upload failed"):
        await make_title_cards().generate(card_request)
