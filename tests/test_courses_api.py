import pytest

from conftest import auth, course_payload
from jumpstudy.models.enums import Role


@pytest.mark.asyncio
async def test_course_crud_flow(client, admin_id, organization):
    headers = auth(admin_id)

    # Create
    r = await client.post(
        "/api/courses",
        json=course_payload(organizationId=organization["id"]),
        headers=headers,
    )
    assert r.status_code == 201, r.text
    created = r.json()
    assert created["slug"] == "bright-futures/intro-to-coding"
    assert created["status"] == "PUBLISHED"
    assert created["images"] == ["https://cdn.example.com/a.png"]
    # FAQ entries without a question are skipped
    assert len(created["faq"]) == 1
    assert created["organizationInfo"]["mapLocation"] == {"lat": 16.84, "lng": 96.17}

    # List
    r = await client.get("/api/courses", headers=headers)
    assert r.status_code == 200
    assert len(r.json()) == 1

    cid = created["id"]
    # Get (public) and lookup by slug
    r = await client.get(f"/api/courses/{cid}")
    assert r.status_code == 200
    r = await client.get(f"/api/courses/slug/{created['slug']}")
    assert r.status_code == 200
    assert r.json()["id"] == cid

    # Put replaces children wholesale, slug is kept
    r = await client.put(
        f"/api/courses/{cid}",
        json=course_payload(
            title="Advanced Coding",
            organizationId=organization["id"],
            badges=[{"text": "Online"}, {"text": "Weekend"}],
            faq=[],
            imageUrls=[],
        ),
        headers=headers,
    )
    assert r.status_code == 200, r.text
    updated = r.json()
    assert updated["title"] == "Advanced Coding"
    assert updated["slug"] == created["slug"]
    assert [b["text"] for b in updated["badges"]] == ["Online", "Weekend"]
    assert updated["faq"] == []
    assert updated["images"] == []

    # Delete
    r = await client.delete(f"/api/courses/{cid}", headers=headers)
    assert r.status_code == 200

    # Confirm gone
    r = await client.get(f"/api/courses/{cid}")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_duplicate_titles_get_counter_suffix(client, admin_id):
    slugs = []
    for _ in range(3):
        r = await client.post(
            "/api/courses", json=course_payload(), headers=auth(admin_id)
        )
        assert r.status_code == 201, r.text
        slugs.append(r.json()["slug"])
    assert slugs == ["intro-to-coding", "intro-to-coding-1", "intro-to-coding-2"]


@pytest.mark.asyncio
async def test_validation_errors_are_400(client, admin_id):
    r = await client.post(
        "/api/courses",
        json=course_payload(title="x", availableDays=[True], feeAmount=-1),
        headers=auth(admin_id),
    )
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Validation failed"
    fields = {d["field"] for d in body["details"]}
    assert {"title", "availableDays", "feeAmount"} <= fields


@pytest.mark.asyncio
async def test_age_range_and_dates_checked(client, admin_id):
    r = await client.post(
        "/api/courses",
        json=course_payload(ageMin=30, ageMax=20),
        headers=auth(admin_id),
    )
    assert r.status_code == 400
    assert "ageMin must not exceed ageMax" in r.text


@pytest.mark.asyncio
async def test_permissions(client, make_user, admin_id, organization):
    other_org = await client.post(
        "/api/organizations",
        json={**organization, "name": "Other Org", "latitude": 1, "longitude": 2},
        headers=auth(admin_id),
    )
    org_admin = await make_user(Role.ORGANIZATION_ADMIN, organization_id=organization["id"])
    student = await make_user(Role.STUDENT)

    # No identity
    r = await client.get("/api/courses")
    assert r.status_code == 401

    r = await client.get("/api/courses", headers=auth(student))
    assert r.status_code == 403

    # Org admin cannot create for another organization
    r = await client.post(
        "/api/courses",
        json=course_payload(organizationId=other_org.json()["id"]),
        headers=auth(org_admin),
    )
    assert r.status_code == 403

    # Blank organization defaults to the admin's own
    r = await client.post(
        "/api/courses", json=course_payload(), headers=auth(org_admin)
    )
    assert r.status_code == 201, r.text
    assert r.json()["organizationId"] == organization["id"]

    r = await client.get("/api/courses", headers=auth(org_admin))
    assert len(r.json()) == 1


@pytest.mark.asyncio
async def test_edit_request_takes_course_offline(client, make_user, admin_id, organization):
    org_admin = await make_user(Role.ORGANIZATION_ADMIN, organization_id=organization["id"])
    r = await client.post(
        "/api/courses",
        json=course_payload(organizationId=organization["id"]),
        headers=auth(admin_id),
    )
    course = r.json()

    r = await client.post(
        f"/api/courses/{course['id']}/edit-request",
        json={"changes": course_payload(title="Renamed Course")},
        headers=auth(org_admin),
    )
    assert r.status_code == 201, r.text
    draft = r.json()
    assert draft["status"] == "PENDING"
    assert draft["content"]["originalCourseId"] == course["id"]
    assert draft["content"]["originalCourseStatus"] == "PUBLISHED"

    r = await client.get(f"/api/courses/{course['id']}")
    assert r.json()["status"] == "UNDER_REVIEW"

    r = await client.get("/api/courses/public")
    assert r.json()["pagination"]["total"] == 0
