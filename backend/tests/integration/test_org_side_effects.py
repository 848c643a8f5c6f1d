"""Integration tests for owner-role assignment and title card generation.

Both follow-ups are best effort: the organization write must succeed and the
response must report what happened to each of them.
"""
from uuid import UUID, uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from richhabits.models.organization import Organization
from richhabits.models.user import Role, User, UserRole


BRANDED = {
    "logoUrl": "https://cdn.richhabits.com/westview.png",
    "brandPrimary": "#0a2342",
    "brandSecondary": "#f5b700",
}


def side_effect(response, name: str) -> dict:
    effects = {effect["name"]: effect for effect in response.json()["sideEffects"]}
    return effects[name]


async def _roles_for(db: AsyncSession, org_id: str) -> list[UserRole]:
    result = await db.execute(select(UserRole).where(UserRole.organization_id == UUID(org_id)))
    return list(result.scalars().all())


class TestOwnerRole:
    @pytest.mark.asyncio
    async def test_acting_user_becomes_owner(
        self, client: AsyncClient, db: AsyncSession, test_user: User, owner_role: Role
    ):
        response = await client.post(
            "/api/organizations",
            json={"name": "Westview Academy"},
            headers={"X-User-Id": str(test_user.id)},
        )

        assert response.status_code == 201
        assert side_effect(response, "owner_role")["status"] == "succeeded"
        roles = await _roles_for(db, response.json()["id"])
        assert [(r.user_id, r.role_id) for r in roles] == [(test_user.id, owner_role.id)]

    @pytest.mark.asyncio
    async def test_bearer_token_identifies_owner(
        self, client: AsyncClient, db: AsyncSession, test_user: User, owner_role: Role, issue_token
    ):
        token = issue_token(str(test_user.id))
        response = await client.post(
            "/api/organizations",
            json={"name": "Westview Academy"},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert side_effect(response, "owner_role")["status"] == "succeeded"
        assert len(await _roles_for(db, response.json()["id"])) == 1

    @pytest.mark.asyncio
    async def test_no_acting_user_skips(self, client: AsyncClient, db: AsyncSession, owner_role: Role):
        response = await client.post("/api/organizations", json={"name": "Westview Academy"})

        assert response.status_code == 201
        effect = side_effect(response, "owner_role")
        assert effect["status"] == "skipped"
        assert await _roles_for(db, response.json()["id"]) == []

    @pytest.mark.asyncio
    async def test_missing_owner_role_skips(self, client: AsyncClient, test_user: User):
        response = await client.post(
            "/api/organizations",
            json={"name": "Westview Academy"},
            headers={"X-User-Id": str(test_user.id)},
        )

        assert response.status_code == 201
        effect = side_effect(response, "owner_role")
        assert effect["status"] == "skipped"
        assert "owner" in effect["detail"]

    @pytest.mark.asyncio
    async def test_unknown_user_fails_without_losing_organization(
        self, client: AsyncClient, db: AsyncSession, owner_role: Role
    ):
        response = await client.post(
            "/api/organizations",
            json={"name": "Westview Academy"},
            headers={"X-User-Id": str(uuid4())},
        )

        assert response.status_code == 201
        assert side_effect(response, "owner_role")["status"] == "failed"
        org = await db.get(Organization, UUID(response.json()["id"]))
        assert org is not None
        assert await _roles_for(db, response.json()["id"]) == []


class TestTitleCard:
    @pytest.mark.asyncio
    async def test_unbranded_organization_skips(self, client: AsyncClient, use_title_cards, storage):
        use_title_cards()
        response = await client.post("/api/organizations", json={"name": "Plain Org"})

        assert side_effect(response, "title_card")["status"] == "skipped"
        assert response.json()["titleCardUrl"] is None
        storage.put_bytes.assert_not_called()

    @pytest.mark.asyncio
    async def test_unconfigured_generator_skips(self, client: AsyncClient):
        response = await client.post("/api/organizations", json={"name": "Westview", **BRANDED})

        assert response.status_code == 201
        effect = side_effect(response, "title_card")
        assert effect["status"] == "skipped"
        assert effect["attempts"] == 1

    @pytest.mark.asyncio
    async def test_generated_after_commit(
        self, client: AsyncClient, db: AsyncSession, use_title_cards, storage
    ):
        use_title_cards()
        response = await client.post("/api/organizations", json={"name": "Westview", **BRANDED})

        assert response.status_code == 201
        data = response.json()
        assert side_effect(response, "title_card") == {
            "name": "title_card",
            "status": "succeeded",
            "attempts": 1,
            "detail": None,
        }
        assert data["titleCardUrl"] == f"http://storage.test/org-tiles/{data['id']}/title.png"

        org = await db.get(Organization, UUID(data["id"]))
        await db.refresh(org)
        assert org.title_card_url == data["titleCardUrl"]
        assert storage.put_bytes.call_args.kwargs["overwrite"] is False

    @pytest.mark.asyncio
    async def test_generator_failure_keeps_organization(
        self, client: AsyncClient, db: AsyncSession, use_title_cards
    ):
        use_title_cards(failing=True)
        response = await client.post("/api/organizations", json={"name": "Westview", **BRANDED})

        assert response.status_code == 201
        effect = side_effect(response, "title_card")
        assert effect["status"] == "failed"
        assert effect["attempts"] == 3
        assert response.json()["titleCardUrl"] is None

        org = await db.get(Organization, UUID(response.json()["id"]))
        assert org is not None

    @pytest.mark.asyncio
    async def test_failed_url_save_keeps_created_organization(
        self, client: AsyncClient, db: AsyncSession, use_title_cards, storage, monkeypatch
    ):
        use_title_cards()
        real_commit = db.commit
        commits = 0

        async def commit_failing_on_second_call():
            nonlocal commits
            commits += 1
            if commits == 2:
                raise OperationalError("COMMIT", {}, Exception("connection reset"))
            await real_commit()

        monkeypatch.setattr(db, "commit", commit_failing_on_second_call)

        response = await client.post("/api/organizations", json={"name": "Westview", **BRANDED})

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Westview"
        assert data["titleCardUrl"] is None
        effect = side_effect(response, "title_card")
        assert effect["status"] == "failed"
        assert effect["attempts"] == 1
        assert "OperationalError" in effect["detail"]
        assert storage.put_bytes.call_count == 1

        org = await db.get(Organization, UUID(data["id"]))
        assert org is not None
        assert org.title_card_url is None


class TestReplaceTitleCard:
    @pytest.mark.asyncio
    async def test_replace_overwrites(self, client: AsyncClient, use_title_cards, storage):
        use_title_cards()
        org_id = (await client.post("/api/organizations", json={"name": "Westview", **BRANDED})).json()["id"]
        storage.put_bytes.reset_mock()

        response = await client.post(f"/api/organizations/{org_id}/replace-title-card")

        assert response.status_code == 200
        assert response.json()["titleCardUrl"].endswith(f"/{org_id}/title.png")
        assert storage.put_bytes.call_args.kwargs["overwrite"] is True

    @pytest.mark.asyncio
    async def test_replace_requires_logo_and_colors(
        self, client: AsyncClient, use_title_cards, test_org: Organization
    ):
        use_title_cards()
        response = await client.post(f"/api/organizations/{test_org.id}/replace-title-card")

        assert response.status_code == 400
        assert set(response.json()["details"]) == {"logoUrl", "brandPrimary", "brandSecondary"}

    @pytest.mark.asyncio
    async def test_replace_generator_failure_is_502(self, client: AsyncClient, use_title_cards):
        use_title_cards(failing=True)
        org_id = (await client.post("/api/organizations", json={"name": "Westview", **BRANDED})).json()["id"]

        response = await client.post(f"/api/organizations/{org_id}/replace-title-card")

        assert response.status_code == 502
        assert response.json()["error"] == "collaborator_error"

    @pytest.mark.asyncio
    async def test_replace_unconfigured_is_503(self, client: AsyncClient):
        org_id = (await client.post("/api/organizations", json={"name": "Westview", **BRANDED})).json()["id"]

        response = await client.post(f"/api/organizations/{org_id}/replace-title-card")

        assert response.status_code == 503

    @pytest.mark.asyncio
    async def test_replace_missing_organization_is_404(self, client: AsyncClient):
        response = await client.post(f"/api/organizations/{uuid4()}/replace-title-card")
        assert response.status_code == 404
