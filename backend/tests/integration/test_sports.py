"""Integration tests for sport sub-resources."""
from uuid import uuid4

import pytest
from httpx import AsyncClient

from richhabits.models.organization import Organization


@pytest.mark.asyncio
async def test_sport_crud(client: AsyncClient, test_org: Organization):
    base = f"/api/organizations/{test_org.id}/sports"

    created = await client.post(
        base,
        json={
            "name": "Wrestling",
            "salespersonName": "Jordan",
            "contactName": "Coach Pat",
            "contactEmail": "pat@lincolnhigh.org",
        },
    )
    assert created.status_code == 201
    sport = created.json()
    assert sport["organizationId"] == str(test_org.id)
    assert sport["contactEmail"] == "pat@lincolnhigh.org"

    listing = await client.get(base)
    assert listing.status_code == 200
    assert listing.json()["total"] == 1

    updated = await client.patch(f"{base}/{sport['id']}", json={"contactPhone": "555-0101"})
    assert updated.status_code == 200
    assert updated.json()["contactPhone"] == "555-0101"
    assert updated.json()["salespersonName"] == "Jordan"

    fetched = await client.get(f"{base}/{sport['id']}")
    assert fetched.json()["contactPhone"] == "555-0101"

    deleted = await client.delete(f"{base}/{sport['id']}")
    assert deleted.status_code == 204
    assert (await client.get(f"{base}/{sport['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_sports_listed_by_name(client: AsyncClient, test_org: Organization):
    base = f"/api/organizations/{test_org.id}/sports"
    for name in ("Wrestling", "basketball", "Football"):
        await client.post(base, json={"name": name})

    names = [item["name"] for item in (await client.get(base)).json()["items"]]
    assert names == ["basketball", "Football", "Wrestling"]


@pytest.mark.asyncio
async def test_sport_contact_email_is_strict(client: AsyncClient, test_org: Organization):
    response = await client.post(
        f"/api/organizations/{test_org.id}/sports",
        json={"name": "Wrestling", "contactEmail": "not-an-email"},
    )
    assert response.status_code == 400
    assert "contactEmail" in response.json()["details"]


@pytest.mark.asyncio
async def test_sport_name_required(client: AsyncClient, test_org: Organization):
    response = await client.post(f"/api/organizations/{test_org.id}/sports", json={"name": " "})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_sports_of_missing_organization(client: AsyncClient):
    base = f"/api/organizations/{uuid4()}/sports"
    assert (await client.get(base)).status_code == 404
    assert (await client.post(base, json={"name": "Wrestling"})).status_code == 404


@pytest.mark.asyncio
async def test_sport_of_another_organization_is_404(client: AsyncClient, test_org: Organization):
    other = (await client.post("/api/organizations", json={"name": "Westview Academy"})).json()
    sport = (
        await client.post(f"/api/organizations/{other['id']}/sports", json={"name": "Soccer"})
    ).json()

    response = await client.get(f"/api/organizations/{test_org.id}/sports/{sport['id']}")
    assert response.status_code == 404
    response = await client.delete(f"/api/organizations/{test_org.id}/sports/{sport['id']}")
    assert response.status_code == 404
