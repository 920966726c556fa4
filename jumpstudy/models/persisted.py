"""SQLAlchemy ORM models for persisted entities.

Separate from the Pydantic payloads in schemas.py which describe request
validation. This layer manages persistence concerns only; ``to_dict`` renders
the camelCase JSON shape the API returns.
"""
from __future__ import annotations
import uuid
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import (
    Mapped,
    mapped_column,
    declarative_base,
    relationship,
)
from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
)

from jumpstudy.models.enums import (
    CourseStatus,
    DraftStatus,
    ProfileStatus,
    Role,
    UserStatus,
)

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class Organization(Base):
    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text, default="")
    phone: Mapped[str] = mapped_column(String(50), default="")
    email: Mapped[str] = mapped_column(String(200), default="")
    address: Mapped[str] = mapped_column(Text, default="")
    facebook_page: Mapped[Optional[str]] = mapped_column(
        String(300), nullable=True
    )
    latitude: Mapped[float] = mapped_column(Float, default=0.0)
    longitude: Mapped[float] = mapped_column(Float, default=0.0)
    district: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    province: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    logo_image: Mapped[Optional[str]] = mapped_column(
        String(500), nullable=True
    )
    slug: Mapped[str] = mapped_column(String(250), unique=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "facebookPage": self.facebook_page,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "district": self.district,
            "province": self.province,
            "logoImage": self.logo_image,
            "slug": self.slug,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(200), default="")
    email: Mapped[str] = mapped_column(String(200), unique=True, index=True)
    image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    role: Mapped[str] = mapped_column(
        String(32), default=Role.STUDENT.value, index=True
    )
    status: Mapped[str] = mapped_column(
        String(32), default=UserStatus.ACTIVE.value
    )
    organization_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("organizations.id"), nullable=True, index=True
    )
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

    organization: Mapped[Optional[Organization]] = relationship(
        lazy="selectin"
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "image": self.image,
            "role": self.role,
            "status": self.status,
            "organizationId": self.organization_id,
            "organization": (
                {"name": self.organization.name}
                if self.organization else None
            ),
            "lastLoginAt": _iso(self.last_login_at),
            "createdAt": _iso(self.created_at),
        }


class Course(Base):
    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    slug: Mapped[str] = mapped_column(String(300), unique=True, index=True)
    status: Mapped[str] = mapped_column(
        String(32), default=CourseStatus.PUBLISHED.value, index=True
    )
    title: Mapped[str] = mapped_column(String(300))
    title_mm: Mapped[Optional[str]] = mapped_column(String(300), nullable=True)
    subtitle: Mapped[str] = mapped_column(String(300), default="")
    subtitle_mm: Mapped[Optional[str]] = mapped_column(
        String(300), nullable=True
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description_mm: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    province: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    district: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    start_date: Mapped[datetime] = mapped_column(DateTime)
    start_date_mm: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )
    end_date: Mapped[datetime] = mapped_column(DateTime)
    end_date_mm: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )
    apply_by_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )
    apply_by_date_mm: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )
    duration: Mapped[int] = mapped_column(Integer, default=0)
    duration_mm: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    schedule: Mapped[str] = mapped_column(String(300), default="")
    schedule_mm: Mapped[Optional[str]] = mapped_column(
        String(300), nullable=True
    )
    fee_amount: Mapped[float] = mapped_column(Float, default=0.0)
    fee_amount_mm: Mapped[Optional[float]] = mapped_column(
        Float, nullable=True
    )
    age_min: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    age_min_mm: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    age_max: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    age_max_mm: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    document: Mapped[str] = mapped_column(Text, default="")
    document_mm: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    available_days: Mapped[list] = mapped_column(JSON, default=list)
    outcomes: Mapped[list] = mapped_column(JSON, default=list)
    outcomes_mm: Mapped[list] = mapped_column(JSON, default=list)
    schedule_details: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True
    )
    schedule_details_mm: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True
    )
    selection_criteria: Mapped[list] = mapped_column(JSON, default=list)
    selection_criteria_mm: Mapped[list] = mapped_column(JSON, default=list)
    how_to_apply: Mapped[list] = mapped_column(JSON, default=list)
    how_to_apply_mm: Mapped[list] = mapped_column(JSON, default=list)
    apply_button_text: Mapped[Optional[str]] = mapped_column(
        String(200), nullable=True
    )
    apply_button_text_mm: Mapped[Optional[str]] = mapped_column(
        String(200), nullable=True
    )
    apply_link: Mapped[Optional[str]] = mapped_column(
        String(500), nullable=True
    )
    estimated_date: Mapped[Optional[str]] = mapped_column(
        String(200), nullable=True
    )
    estimated_date_mm: Mapped[Optional[str]] = mapped_column(
        String(200), nullable=True
    )
    organization_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("organizations.id"), nullable=True, index=True
    )
    created_by_user_id: Mapped[Optional[str]] = mapped_column(
        String(36), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    organization: Mapped[Optional[Organization]] = relationship(
        lazy="selectin"
    )
    images: Mapped[List["Image"]] = relationship(
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="Image.position",
    )
    badges: Mapped[List["Badge"]] = relationship(
        lazy="selectin", cascade="all, delete-orphan"
    )
    faq: Mapped[List["FAQ"]] = relationship(
        lazy="selectin", cascade="all, delete-orphan"
    )

    def to_dict(self) -> dict:
        organization = None
        if self.organization is not None:
            organization = {
                **self.organization.to_dict(),
                "mapLocation": {
                    "lat": self.organization.latitude,
                    "lng": self.organization.longitude,
                },
            }
        return {
            "id": self.id,
            "slug": self.slug,
            "status": self.status,
            "title": self.title,
            "titleMm": self.title_mm,
            "subtitle": self.subtitle,
            "subtitleMm": self.subtitle_mm,
            "description": self.description,
            "descriptionMm": self.description_mm,
            "province": self.province,
            "district": self.district,
            "address": self.address,
            "startDate": _iso(self.start_date),
            "startDateMm": _iso(self.start_date_mm),
            "endDate": _iso(self.end_date),
            "endDateMm": _iso(self.end_date_mm),
            "applyByDate": _iso(self.apply_by_date),
            "applyByDateMm": _iso(self.apply_by_date_mm),
            "duration": self.duration,
            "durationMm": self.duration_mm,
            "schedule": self.schedule,
            "scheduleMm": self.schedule_mm,
            "feeAmount": self.fee_amount,
            "feeAmountMm": self.fee_amount_mm,
            "ageMin": self.age_min,
            "ageMinMm": self.age_min_mm,
            "ageMax": self.age_max,
            "ageMaxMm": self.age_max_mm,
            "document": self.document,
            "documentMm": self.document_mm,
            "availableDays": self.available_days or [],
            "outcomes": self.outcomes or [],
            "outcomesMm": self.outcomes_mm or [],
            "scheduleDetails": self.schedule_details,
            "scheduleDetailsMm": self.schedule_details_mm,
            "selectionCriteria": self.selection_criteria or [],
            "selectionCriteriaMm": self.selection_criteria_mm or [],
            "howToApply": self.how_to_apply or [],
            "howToApplyMm": self.how_to_apply_mm or [],
            "applyButtonText": self.apply_button_text,
            "applyButtonTextMm": self.apply_button_text_mm,
            "applyLink": self.apply_link,
            "estimatedDate": self.estimated_date,
            "estimatedDateMm": self.estimated_date_mm,
            "organizationId": self.organization_id,
            "createdByUserId": self.created_by_user_id,
            "images": [img.url for img in self.images],
            "badges": [badge.to_dict() for badge in self.badges],
            "faq": [item.to_dict() for item in self.faq],
            "organizationInfo": organization,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Image(Base):
    __tablename__ = "images"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    url: Mapped[str] = mapped_column(String(500))
    position: Mapped[int] = mapped_column(Integer, default=0)
    course_id: Mapped[str] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )


class Badge(Base):
    __tablename__ = "badges"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    text: Mapped[str] = mapped_column(String(100))
    color: Mapped[str] = mapped_column(String(32), default="#ffffff")
    background_color: Mapped[str] = mapped_column(
        String(32), default="#000000"
    )
    course_id: Mapped[str] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "color": self.color,
            "backgroundColor": self.background_color,
        }


class FAQ(Base):
    __tablename__ = "faqs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    question: Mapped[str] = mapped_column(Text)
    question_mm: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    answer: Mapped[str] = mapped_column(Text)
    answer_mm: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    course_id: Mapped[str] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "question": self.question,
            "questionMm": self.question_mm,
            "answer": self.answer,
            "answerMm": self.answer_mm,
            "courseId": self.course_id,
        }


class ContentDraft(Base):
    """Staged, unpublished proposal for a Course or Organization."""

    __tablename__ = "content_drafts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(300))
    type: Mapped[str] = mapped_column(String(32), index=True)
    content: Mapped[dict] = mapped_column(JSON, nullable=False)
    status: Mapped[str] = mapped_column(
        String(32), default=DraftStatus.DRAFT.value, index=True
    )
    created_by: Mapped[str] = mapped_column(
        ForeignKey("users.id"), index=True
    )
    organization_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("organizations.id"), nullable=True, index=True
    )
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )
    reviewed_by: Mapped[Optional[str]] = mapped_column(
        String(36), nullable=True
    )
    review_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    author: Mapped[User] = relationship(lazy="selectin")
    organization: Mapped[Optional[Organization]] = relationship(
        lazy="selectin"
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "content": self.content,
            "status": self.status,
            "createdBy": self.created_by,
            "organizationId": self.organization_id,
            "submittedAt": _iso(self.submitted_at),
            "reviewedAt": _iso(self.reviewed_at),
            "reviewedBy": self.reviewed_by,
            "reviewNotes": self.review_notes,
            "author": (
                {"name": self.author.name, "email": self.author.email}
                if self.author else None
            ),
            "organization": (
                {"name": self.organization.name}
                if self.organization else None
            ),
        }


class AdvocateProfile(Base):
    """Public-facing bio page of a youth advocate, moderated separately."""

    __tablename__ = "advocate_profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        ForeignKey("users.id"), unique=True, index=True
    )
    public_name: Mapped[Optional[str]] = mapped_column(
        String(200), nullable=True
    )
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    show_organization: Mapped[bool] = mapped_column(Boolean, default=False)
    status: Mapped[str] = mapped_column(
        String(32), default=ProfileStatus.DRAFT.value, index=True
    )
    submitted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )
    reviewed_by: Mapped[Optional[str]] = mapped_column(
        String(36), nullable=True
    )
    review_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    user: Mapped[User] = relationship(lazy="selectin")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "publicName": self.public_name,
            "bio": self.bio,
            "avatarUrl": self.avatar_url,
            "showOrganization": self.show_organization,
            "status": self.status,
            "submittedAt": _iso(self.submitted_at),
            "reviewedAt": _iso(self.reviewed_at),
            "reviewedBy": self.reviewed_by,
            "reviewNotes": self.review_notes,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
            "user": self.user.to_dict() if self.user else None,
        }

    def to_public_dict(self) -> dict:
        organization = self.user.organization if self.user else None
        return {
            "id": self.id,
            "publicName": self.public_name or "Anonymous Youth Advocate",
            "bio": self.bio,
            "avatarUrl": self.avatar_url,
            "showOrganization": self.show_organization,
            "organizationName": (
                organization.name
                if self.show_organization and organization else None
            ),
        }


class AdminAllowList(Base):
    """Emails promoted to PLATFORM_ADMIN when they sign in."""

    __tablename__ = "admin_allow_list"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    email: Mapped[str] = mapped_column(String(200), unique=True, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    added_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    added_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "notes": self.notes,
            "addedBy": self.added_by,
            "addedAt": _iso(self.added_at),
        }
