"""
Database Seeding Script

Creates a platform admin, one organization and a sample published course for
local development.
"""
import asyncio
import os
from datetime import datetime, timedelta

from sqlalchemy import select

from jumpstudy.db.config import SessionLocal, create_tables
from jumpstudy.models.enums import Role
from jumpstudy.models.persisted import Organization, User
from jumpstudy.models.schemas import CoursePayload, OrganizationPayload
from jumpstudy.repositories.course_repo import CourseRepository
from jumpstudy.repositories.organization_repo import OrganizationRepository

SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@jumpstudy.org")

SEED_ORGANIZATION = {
    "name": "Bright Futures Learning Center",
    "description": "Community learning center offering youth programs.",
    "phone": "+95 9 123 456 789",
    "email": "contact@brightfutures.org",
    "address": "123 Pyay Road, Kamayut Township",
    "latitude": 16.8409,
    "longitude": 96.1735,
    "district": "Yangon",
    "province": "Yangon Region",
}


def _seed_course(organization_id: str) -> dict:
    start = datetime.utcnow() + timedelta(days=30)
    return {
        "title": "Introduction to Computer Skills",
        "subtitle": "Typing, email and safe browsing",
        "startDate": start,
        "endDate": start + timedelta(days=28),
        "applyByDate": start - timedelta(days=7),
        "duration": 28,
        "schedule": "Mon, Wed, Fri 2-4 PM",
        "feeAmount": 0,
        "ageMin": 14,
        "ageMax": 24,
        "availableDays": [False, True, False, True, False, True, False],
        "outcomes": ["Touch typing", "Using email"],
        "howToApply": ["Fill out the application form"],
        "organizationId": organization_id,
        "badges": [
            {"text": "Free", "color": "#ffffff", "backgroundColor": "#28a745"}
        ],
        "faq": [
            {"question": "Do I need a laptop?", "answer": "No, we provide one."}
        ],
    }


async def seed_database():
    """Seed the database with initial development data."""
    await create_tables()

    async with SessionLocal() as session:
        result = await session.execute(
            select(User).where(User.email == SEED_ADMIN_EMAIL)
        )
        if result.scalar_one_or_none():
            print(f"Seed data already present ({SEED_ADMIN_EMAIL} exists)")
            return

        session.add(
            User(
                email=SEED_ADMIN_EMAIL,
                name="Platform Admin",
                role=Role.PLATFORM_ADMIN.value,
            )
        )
        await session.commit()

        result = await session.execute(
            select(Organization).where(
                Organization.name == SEED_ORGANIZATION["name"]
            )
        )
        organization = result.scalar_one_or_none()
        if organization is None:
            organization = await OrganizationRepository(session).create(
                OrganizationPayload(**SEED_ORGANIZATION)
            )

        course = await CourseRepository(session).create(
            CoursePayload(**_seed_course(organization.id))
        )
        print(f"Seeded admin {SEED_ADMIN_EMAIL}, organization and course '{course.slug}'")


if __name__ == "__main__":
    asyncio.run(seed_database())
