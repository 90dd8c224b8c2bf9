from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shopfront.users import security, services
from shopfront.users.models import User
from shopfront.utils import Conflict, NotFound

SIGNUP = {
    "email": "a@x.com",
    "password": "secret1",
    "given_name": "A",
    "family_name": "B",
}


@pytest.mark.anyio
async def test_signup_never_returns_plaintext_password(client: AsyncClient):
    response = await client.post("/api/users", json=SIGNUP)

    assert response.status_code == 201
    body = response.json()
    assert body["email"] == "a@x.com"
    assert body["active"] is True
    assert "password" not in body
    assert "secret1" not in response.text


@pytest.mark.anyio
async def test_password_is_stored_hashed(dbsession: AsyncSession):
    user = await services.create_user(dbsession, **SIGNUP)

    assert user.password != "secret1"
    assert security.verify_password("secret1", user.password)


@pytest.mark.anyio
async def test_duplicate_email_conflicts(client: AsyncClient):
    first = await client.post("/api/users", json=SIGNUP)
    second = await client.post("/api/users", json=SIGNUP)

    assert first.status_code == 201
    assert second.status_code == 409

    listed = await client.get("/api/users")
    assert len(listed.json()) == 1


@pytest.mark.anyio
async def test_update_email_to_taken_one_conflicts(client: AsyncClient):
    await client.post("/api/users", json=SIGNUP)
    other = await client.post("/api/users", json={**SIGNUP, "email": "c@x.com"})

    response = await client.patch(
        f"/api/users/{other.json()['id']}", json={"email": "a@x.com"},
    )

    assert response.status_code == 409


@pytest.mark.anyio
async def test_update_email_to_own_value_succeeds(client: AsyncClient):
    created = await client.post("/api/users", json=SIGNUP)
    user_id = created.json()["id"]

    response = await client.patch(
        f"/api/users/{user_id}", json={"email": "a@x.com", "given_name": "Ann"},
    )

    assert response.status_code == 200
    assert response.json()["given_name"] == "Ann"
    assert response.json()["family_name"] == "B"


@pytest.mark.anyio
async def test_update_without_email_skips_duplicate_check(
    dbsession: AsyncSession,
    monkeypatch: pytest.MonkeyPatch,
):
    user = await services.create_user(dbsession, **SIGNUP)
    check = AsyncMock()
    monkeypatch.setattr("shopfront.users.services.ensure_unique", check)

    updated = await services.update_user(dbsession, user.id, family_name="Z")

    check.assert_not_awaited()
    assert updated.family_name == "Z"
    assert updated.email == "a@x.com"


@pytest.mark.anyio
async def test_update_rehashes_password(dbsession: AsyncSession):
    user = await services.create_user(dbsession, **SIGNUP)

    updated = await services.update_user(dbsession, user.id, password="another1")

    assert updated.password != "another1"
    assert security.verify_password("another1", updated.password)
    assert not security.verify_password("secret1", updated.password)


@pytest.mark.anyio
async def test_deactivated_user_is_hidden_but_keeps_email(client: AsyncClient):
    created = await client.post("/api/users", json=SIGNUP)
    user_id = created.json()["id"]

    deleted = await client.delete(f"/api/users/{user_id}")
    assert deleted.status_code == 204
    assert deleted.content == b""

    assert (await client.get(f"/api/users/{user_id}")).status_code == 404
    assert (await client.get("/api/users")).json() == []
    assert (await client.patch(f"/api/users/{user_id}", json={"given_name": "X"})).status_code == 404
    assert (await client.post("/api/users", json=SIGNUP)).status_code == 409


@pytest.mark.anyio
async def test_deactivated_row_still_exists(dbsession: AsyncSession):
    user = await services.create_user(dbsession, **SIGNUP)
    await services.deactivate_user(dbsession, user.id)

    with pytest.raises(NotFound):
        await services.get_user(dbsession, user.id)

    result = await dbsession.execute(select(User).where(User.id == user.id))
    row = result.scalars().one()
    assert row.active is False

    with pytest.raises(Conflict):
        await services.create_user(dbsession, **SIGNUP)


@pytest.mark.anyio
async def test_deactivate_missing_user_is_not_found(client: AsyncClient):
    response = await client.delete("/api/users/999")

    assert response.status_code == 404


@pytest.mark.anyio
async def test_short_password_is_rejected_before_persisting(client: AsyncClient):
    response = await client.post("/api/users", json={**SIGNUP, "password": "123"})

    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == "Validation failed"
    assert [e["field"] for e in body["errors"]] == ["password"]
    assert (await client.get("/api/users")).json() == []


@pytest.mark.anyio
async def test_invalid_email_and_unknown_fields_are_rejected(client: AsyncClient):
    bad_email = await client.post("/api/users", json={**SIGNUP, "email": "nope"})
    extra = await client.post("/api/users", json={**SIGNUP, "admin": True})

    assert bad_email.status_code == 400
    assert extra.status_code == 400
    assert [e["field"] for e in extra.json()["errors"]] == ["admin"]


@pytest.mark.anyio
async def test_explicit_null_in_update_is_rejected(client: AsyncClient):
    created = await client.post("/api/users", json=SIGNUP)

    response = await client.patch(
        f"/api/users/{created.json()['id']}", json={"given_name": None},
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "given_name"


@pytest.mark.anyio
async def test_lookup_by_email_sees_inactive_users(dbsession: AsyncSession):
    user = await services.create_user(dbsession, **SIGNUP)
    await services.deactivate_user(dbsession, user.id)

    found = await services.get_user_by_email(dbsession, "a@x.com")

    assert found is not None
    assert found.id == user.id
    assert await services.get_user_by_email(dbsession, "nobody@x.com") is None


@pytest.mark.anyio
async def test_unique_index_backs_the_email_check(
    dbsession: AsyncSession,
    monkeypatch: pytest.MonkeyPatch,
):
    monkeypatch.setattr("shopfront.users.services.ensure_unique", AsyncMock())
    await services.create_user(dbsession, **SIGNUP)

    with pytest.raises(Conflict):
        await services.create_user(dbsession, **SIGNUP)
