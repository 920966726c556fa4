import pytest

from conftest import auth
from jumpstudy.models.enums import Role


@pytest.mark.asyncio
async def test_profile_lifecycle(client, make_user, admin_id, organization):
    advocate = await make_user(Role.YOUTH_ADVOCATE, organization_id=organization["id"])

    r = await client.get("/api/advocate/profile", headers=auth(advocate))
    assert r.status_code == 404

    r = await client.post(
        "/api/advocate/profile",
        json={"publicName": "Mya", "bio": "I help", "showOrganization": True, "status": "PENDING"},
        headers=auth(advocate),
    )
    assert r.status_code == 201, r.text
    profile = r.json()
    assert profile["status"] == "PENDING"
    assert profile["submittedAt"] is not None

    r = await client.post("/api/advocate/profile", json={}, headers=auth(advocate))
    assert r.status_code == 400

    # Not public until approved
    r = await client.get("/api/advocates/public")
    assert r.json() == []

    r = await client.patch(
        f"/api/admin/profiles/{profile['id']}",
        json={"status": "APPROVED"},
        headers=auth(admin_id),
    )
    assert r.status_code == 200
    assert r.json()["reviewedBy"] == admin_id

    r = await client.get("/api/advocates/public")
    public = r.json()
    assert public[0]["publicName"] == "Mya"
    assert public[0]["organizationName"] == organization["name"]

    # Editing an approved profile sends it back to moderation
    r = await client.put(
        "/api/advocate/profile",
        json={"publicName": "Mya T", "status": "DRAFT"},
        headers=auth(advocate),
    )
    assert r.json()["status"] == "PENDING"


@pytest.mark.asyncio
async def test_public_defaults_and_hidden_org(client, make_user, admin_id):
    advocate = await make_user(Role.YOUTH_ADVOCATE)
    r = await client.post("/api/advocate/profile", json={"bio": "anon"}, headers=auth(advocate))
    await client.patch(
        f"/api/admin/profiles/{r.json()['id']}",
        json={"status": "APPROVED"},
        headers=auth(admin_id),
    )
    public = (await client.get("/api/advocates/public")).json()
    assert public[0]["publicName"] == "Anonymous Youth Advocate"
    assert public[0]["organizationName"] is None


@pytest.mark.asyncio
async def test_review_rules(client, make_user, admin_id, organization):
    advocate = await make_user(Role.YOUTH_ADVOCATE)
    profile = (await client.post(
        "/api/advocate/profile", json={"status": "PENDING"}, headers=auth(advocate)
    )).json()

    r = await client.patch(
        f"/api/admin/profiles/{profile['id']}", json={"status": "PENDING"}, headers=auth(admin_id)
    )
    assert r.status_code == 400

    # Org admins only moderate advocates of their own organization
    org_admin = await make_user(Role.ORGANIZATION_ADMIN, organization_id=organization["id"])
    r = await client.patch(
        f"/api/admin/profiles/{profile['id']}", json={"status": "HIDDEN"}, headers=auth(org_admin)
    )
    assert r.status_code == 403
    r = await client.get("/api/admin/profiles", headers=auth(org_admin))
    assert r.json()["pagination"]["total"] == 0

    r = await client.delete(f"/api/admin/profiles/{profile['id']}", headers=auth(org_admin))
    assert r.status_code == 403
    r = await client.delete(f"/api/admin/profiles/{profile['id']}", headers=auth(admin_id))
    assert r.status_code == 200

    r = await client.get("/api/advocate/profile", headers=auth(org_admin))
    assert r.status_code == 403
