"""Tests for set API endpoints."""

from collections.abc import Callable

import pytest
from httpx import AsyncClient

CookieFactory = Callable[..., dict[str, str]]

INITIAL_SET = {
    "title": "myTitle",
    "description": "desc",
    "cards": [
        {"term": "term1", "definition": "def1"},
        {"term": "term2", "definition": "def2"},
        {"term": "term3", "definition": "def3"},
    ],
}


@pytest.fixture
def alice(auth_cookie: CookieFactory, owner_id: int) -> dict[str, str]:
    return auth_cookie(owner_id, "alice")


@pytest.fixture
def bob(auth_cookie: CookieFactory, other_user_id: int) -> dict[str, str]:
    return auth_cookie(other_user_id, "bob")


@pytest.fixture
async def set_id(client: AsyncClient, alice: dict[str, str]) -> int:
    response = await client.post("/sets", json=INITIAL_SET, headers=alice)
    assert response.status_code == 200
    return int(response.json()["setInsertId"])


class TestAuthentication:
    async def test_missing_cookie(self, client: AsyncClient) -> None:
        response = await client.post("/sets", json=INITIAL_SET)

        assert response.status_code == 401

    async def test_invalid_cookie(self, client: AsyncClient) -> None:
        response = await client.get("/sets", headers={"Cookie": "token=bearer garbage"})

        assert response.status_code == 401


class TestCreateSet:
    async def test_create_set(self, client: AsyncClient, alice: dict[str, str]) -> None:
        response = await client.post("/sets", json=INITIAL_SET, headers=alice)

        assert response.status_code == 200
        assert isinstance(response.json()["setInsertId"], int)

    async def test_missing_description_is_accepted(
        self, client: AsyncClient, alice: dict[str, str]
    ) -> None:
        payload = {"title": "t", "cards": [{"term": "a", "definition": "b"}]}

        response = await client.post("/sets", json=payload, headers=alice)

        assert response.status_code == 200

    async def test_empty_title(self, client: AsyncClient, alice: dict[str, str]) -> None:
        response = await client.post("/sets", json={**INITIAL_SET, "title": ""}, headers=alice)

        assert response.status_code == 422
        assert response.json()["error"]["kind"] == "validation_error"

    async def test_empty_cards(self, client: AsyncClient, alice: dict[str, str]) -> None:
        response = await client.post("/sets", json={**INITIAL_SET, "cards": []}, headers=alice)

        assert response.status_code == 422
        listing = await client.get("/sets", headers=alice)
        assert listing.json() == {"userSets": []}

    async def test_card_missing_field(self, client: AsyncClient, alice: dict[str, str]) -> None:
        payload = {**INITIAL_SET, "cards": [{"term": "only term"}]}

        response = await client.post("/sets", json=payload, headers=alice)

        assert response.status_code == 422

    async def test_malformed_payload(self, client: AsyncClient, alice: dict[str, str]) -> None:
        response = await client.post("/sets", json={"garbage": True}, headers=alice)

        assert response.status_code == 422


class TestListSets:
    async def test_no_sets(self, client: AsyncClient, alice: dict[str, str]) -> None:
        response = await client.get("/sets", headers=alice)

        assert response.status_code == 200
        assert response.json() == {"userSets": []}

    async def test_lists_only_own_sets(
        self, client: AsyncClient, alice: dict[str, str], bob: dict[str, str], set_id: int
    ) -> None:
        await client.post("/sets", json=INITIAL_SET, headers=alice)
        await client.post("/sets", json=INITIAL_SET, headers=bob)

        response = await client.get("/sets", headers=alice)

        data = response.json()["userSets"]
        assert len(data) == 2
        assert data[0] == {
            "id": set_id,
            "title": "myTitle",
            "description": "desc",
            "totalTerms": 3,
            "mastered": 0,
        }


class TestGetSet:
    async def test_get_own_set(self, client: AsyncClient, alice: dict[str, str], set_id: int) -> None:
        response = await client.get(f"/sets/{set_id}", headers=alice)

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "myTitle"
        assert data["description"] == "desc"
        assert [(c["term"], c["definition"]) for c in data["cards"]] == [
            ("term1", "def1"),
            ("term2", "def2"),
            ("term3", "def3"),
        ]
        assert all(isinstance(c["id"], int) for c in data["cards"])

    async def test_get_other_users_set(
        self, client: AsyncClient, bob: dict[str, str], set_id: int
    ) -> None:
        response = await client.get(f"/sets/{set_id}", headers=bob)

        assert response.status_code == 401
        assert response.json()["error"]["kind"] == "unauthorized"

    async def test_get_missing_set(self, client: AsyncClient, alice: dict[str, str]) -> None:
        response = await client.get("/sets/999", headers=alice)

        assert response.status_code == 404
        assert response.json()["error"]["kind"] == "not_found"


class TestUpdateSet:
    async def _before(self, client: AsyncClient, headers: dict[str, str], set_id: int) -> list:
        response = await client.get(f"/sets/{set_id}", headers=headers)
        return list(response.json()["cards"])

    async def test_no_changes_keeps_set_intact(
        self, client: AsyncClient, alice: dict[str, str], set_id: int
    ) -> None:
        before = await self._before(client, alice, set_id)

        response = await client.put(
            f"/sets/{set_id}",
            json={"beforeCards": before, "updatedCards": before},
            headers=alice,
        )

        assert response.status_code == 200
        assert response.json() == before

    async def test_reconciles_changes(
        self, client: AsyncClient, alice: dict[str, str], set_id: int
    ) -> None:
        before = await self._before(client, alice, set_id)
        updated = [
            before[0],
            {**before[1], "definition": "changed"},
            {"term": "term4", "definition": "def4", "new": True},
        ]

        response = await client.put(
            f"/sets/{set_id}",
            json={"beforeCards": before, "updatedCards": updated},
            headers=alice,
        )

        assert response.status_code == 200
        cards = response.json()
        assert [(c["term"], c["definition"]) for c in cards] == [
            ("term1", "def1"),
            ("term2", "changed"),
            ("term4", "def4"),
        ]
        assert cards == await self._before(client, alice, set_id)

    async def test_card_without_id_is_added(
        self, client: AsyncClient, alice: dict[str, str], set_id: int
    ) -> None:
        before = await self._before(client, alice, set_id)
        updated = [*before, {"term": "term4", "definition": "def4"}]

        response = await client.put(
            f"/sets/{set_id}",
            json={"beforeCards": before, "updatedCards": updated},
            headers=alice,
        )

        assert len(response.json()) == 4

    async def test_other_user_cannot_update(
        self, client: AsyncClient, alice: dict[str, str], bob: dict[str, str], set_id: int
    ) -> None:
        before = await self._before(client, alice, set_id)

        response = await client.put(
            f"/sets/{set_id}",
            json={"beforeCards": before, "updatedCards": []},
            headers=bob,
        )

        assert response.status_code == 401
        assert await self._before(client, alice, set_id) == before

    async def test_update_missing_set(self, client: AsyncClient, alice: dict[str, str]) -> None:
        response = await client.put(
            "/sets/999",
            json={"beforeCards": [], "updatedCards": []},
            headers=alice,
        )

        assert response.status_code == 404

    async def test_store_failure_returns_generic_error(
        self,
        client: AsyncClient,
        alice: dict[str, str],
        set_id: int,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        from sqlalchemy.exc import OperationalError

        async def failing_upsert(*_args: object) -> None:
            raise OperationalError("INSERT", {}, Exception("connection lost"))

        monkeypatch.setattr("cardcoach.services.set_coordinator.upsert_cards", failing_upsert)
        before = await self._before(client, alice, set_id)
        updated = [{**before[0], "term": "changed"}]

        response = await client.put(
            f"/sets/{set_id}",
            json={"beforeCards": before, "updatedCards": updated},
            headers=alice,
        )

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["kind"] == "internal_error"
        assert "connection lost" not in error["message"]
        assert await self._before(client, alice, set_id) == before
