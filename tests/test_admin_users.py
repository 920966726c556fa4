"""User administration, allowlist and sign-in promotion"""

import pytest

from conftest import auth, auth_hook
from jumpstudy.models.enums import Role
from jumpstudy.repositories.user_repo import LastPlatformAdminError, UserRepository


@pytest.mark.asyncio
async def test_admin_cannot_delete_self(client, make_user, admin_id):
    r = await client.delete(f"/api/admin/users/{admin_id}", headers=auth(admin_id))
    assert r.status_code == 400
    assert "own account" in r.json()["error"]

    second = await make_user(Role.PLATFORM_ADMIN)
    # Deleting one of two admins is fine
    r = await client.delete(f"/api/admin/users/{second}", headers=auth(admin_id))
    assert r.status_code == 200
    r = await client.get("/api/admin/users", params={"role": "PLATFORM_ADMIN"}, headers=auth(admin_id))
    assert [u["id"] for u in r.json()] == [admin_id]


@pytest.mark.asyncio
async def test_cannot_demote_last_platform_admin(client, make_user, admin_id):
    r = await client.patch(
        f"/api/admin/users/{admin_id}", json={"role": "STUDENT"}, headers=auth(admin_id)
    )
    assert r.status_code == 400
    assert "last platform admin" in r.json()["error"]

    second = await make_user(Role.PLATFORM_ADMIN)
    r = await client.patch(
        f"/api/admin/users/{second}", json={"role": "ORGANIZATION_ADMIN"}, headers=auth(admin_id)
    )
    assert r.status_code == 200
    assert r.json()["role"] == "ORGANIZATION_ADMIN"


@pytest.mark.asyncio
async def test_delete_user_removes_drafts(client, make_user, admin_id):
    advocate = await make_user(Role.YOUTH_ADVOCATE)
    await client.post(
        "/api/drafts",
        json={"title": "t", "type": "COURSE", "content": {}},
        headers=auth(advocate),
    )
    await client.post("/api/advocate/profile", json={"bio": "hi"}, headers=auth(advocate))

    r = await client.delete(f"/api/admin/users/{advocate}", headers=auth(admin_id))
    assert r.status_code == 200, r.text
    r = await client.get("/api/admin/drafts", headers=auth(admin_id))
    assert r.json() == []
    r = await client.get("/api/admin/profiles", headers=auth(admin_id))
    assert r.json()["pagination"]["total"] == 0


@pytest.mark.asyncio
async def test_suspend_user(client, make_user, admin_id):
    student = await make_user(Role.STUDENT)
    r = await client.patch(
        f"/api/admin/users/{student}", json={"status": "SUSPENDED"}, headers=auth(admin_id)
    )
    assert r.status_code == 200
    assert r.json()["status"] == "SUSPENDED"

    # Suspended users no longer authenticate
    r = await client.get("/api/drafts", headers=auth(student))
    assert r.status_code == 401

    r = await client.patch(
        f"/api/admin/users/{admin_id}", json={"status": "SUSPENDED"}, headers=auth(admin_id)
    )
    assert r.status_code == 400

    r = await client.patch(
        f"/api/admin/users/{student}", json={"status": "BANNED"}, headers=auth(admin_id)
    )
    assert r.status_code == 400

    r = await client.patch(
        "/api/admin/users/missing", json={"status": "ACTIVE"}, headers=auth(admin_id)
    )
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_allowlist_promotes_and_never_demotes(client, make_user, admin_id):
    student = await make_user(Role.STUDENT, email="helper@example.com")

    r = await client.post(
        "/api/admin/allowlist",
        json={"email": "Helper@Example.com", "notes": "ops"},
        headers=auth(admin_id),
    )
    assert r.status_code == 201, r.text
    entry = r.json()
    assert entry["email"] == "helper@example.com"

    r = await client.post(
        "/api/admin/allowlist", json={"email": "helper@example.com"}, headers=auth(admin_id)
    )
    assert r.status_code == 400

    r = await client.get("/api/admin/users", params={"role": "PLATFORM_ADMIN"}, headers=auth(admin_id))
    assert student in [u["id"] for u in r.json()]

    r = await client.delete("/api/admin/allowlist", headers=auth(admin_id))
    assert r.status_code == 400
    r = await client.delete("/api/admin/allowlist", params={"id": "nope"}, headers=auth(admin_id))
    assert r.status_code == 404

    r = await client.delete("/api/admin/allowlist", params={"id": entry["id"]}, headers=auth(admin_id))
    assert r.status_code == 200
    r = await client.get("/api/admin/users", params={"role": "PLATFORM_ADMIN"}, headers=auth(admin_id))
    assert student in [u["id"] for u in r.json()]


@pytest.mark.asyncio
async def test_allowlist_removal_refused_with_single_admin(client, admin_id):
    r = await client.post(
        "/api/admin/allowlist", json={"email": "new@example.com"}, headers=auth(admin_id)
    )
    r = await client.delete(
        "/api/admin/allowlist", params={"id": r.json()["id"]}, headers=auth(admin_id)
    )
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_allowlist_invalid_email(client, admin_id):
    r = await client.post(
        "/api/admin/allowlist", json={"email": "not-an-email"}, headers=auth(admin_id)
    )
    assert r.status_code == 400
    assert r.json()["details"][0]["field"] == "email"


@pytest.mark.asyncio
async def test_sign_in_promotes_configured_admins(client, admin_id):
    r = await client.post("/api/auth/sign-in", json={"email": "Boss@JumpStudy.org", "name": "Boss"}, headers=auth_hook())
    assert r.status_code == 200
    assert r.json()["role"] == "PLATFORM_ADMIN"
    assert r.json()["lastLoginAt"] is not None

    r = await client.post("/api/auth/sign-in", json={"email": "kid@example.com", "name": "Kid"}, headers=auth_hook())
    kid = r.json()
    assert kid["role"] == "STUDENT"

    await client.post(
        "/api/admin/allowlist", json={"email": "kid@example.com"}, headers=auth(admin_id)
    )
    r = await client.post("/api/auth/sign-in", json={"email": "kid@example.com"}, headers=auth_hook())
    assert r.json()["id"] == kid["id"]
    assert r.json()["role"] == "PLATFORM_ADMIN"


@pytest.mark.asyncio
async def test_sign_in_refuses_suspended(client, make_user, admin_id):
    student = await make_user(Role.STUDENT, email="bad@example.com")
    await client.patch(
        f"/api/admin/users/{student}", json={"status": "SUSPENDED"}, headers=auth(admin_id)
    )
    r = await client.post("/api/auth/sign-in", json={"email": "bad@example.com"}, headers=auth_hook())
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_repository_refuses_deleting_last_platform_admin(session_factory, make_user, admin_id):
    other = await make_user(Role.STUDENT)
    async with session_factory() as session:
        repo = UserRepository(session)
        acting = await repo.get(other)
        with pytest.raises(LastPlatformAdminError):
            await repo.delete(admin_id, acting_user=acting)
        assert await repo.count_platform_admins() == 1


@pytest.mark.asyncio
async def test_sign_in_requires_hook_secret(client):
    r = await client.post("/api/auth/sign-in", json={"email": "Boss@JumpStudy.org"})
    assert r.status_code == 401

    r = await client.post(
        "/api/auth/sign-in",
        json={"email": "Boss@JumpStudy.org"},
        headers={"X-Auth-Hook-Secret": "guess"},
    )
    assert r.status_code == 401
    assert r.json()["error"] == "Unauthenticated"
