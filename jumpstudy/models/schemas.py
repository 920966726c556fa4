"""
Pydantic request models

Validation for every JSON body the API accepts. Field names follow the
camelCase wire format used by the dashboards; persistence mapping happens in
the repositories.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from jumpstudy.models.enums import (
    DraftStatus,
    DraftType,
    ProfileStatus,
    Role,
    UserStatus,
)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize aware datetimes to naive UTC for storage."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class BadgeIn(BaseModel):
    text: str = Field(..., min_length=1, max_length=100)
    color: str = Field("#ffffff", max_length=32)
    backgroundColor: str = Field("#000000", max_length=32)


class FAQIn(BaseModel):
    question: str = ""
    questionMm: Optional[str] = None
    answer: str = ""
    answerMm: Optional[str] = None


class CoursePayload(BaseModel):
    """Full course body used for create, update and draft approval."""

    title: str = Field(..., min_length=2, max_length=300)
    titleMm: Optional[str] = None
    subtitle: str = Field(..., min_length=2, max_length=300)
    subtitleMm: Optional[str] = None
    description: Optional[str] = None
    descriptionMm: Optional[str] = None
    province: Optional[str] = None
    district: Optional[str] = None
    address: Optional[str] = None
    startDate: datetime
    startDateMm: Optional[datetime] = None
    endDate: datetime
    endDateMm: Optional[datetime] = None
    applyByDate: Optional[datetime] = None
    applyByDateMm: Optional[datetime] = None
    duration: int = Field(..., gt=0)
    durationMm: Optional[int] = Field(None, gt=0)
    schedule: str = Field(..., min_length=2, max_length=300)
    scheduleMm: Optional[str] = None
    feeAmount: float = Field(0, ge=0)
    feeAmountMm: Optional[float] = Field(None, ge=0)
    ageMin: Optional[int] = Field(None, ge=0)
    ageMinMm: Optional[int] = Field(None, ge=0)
    ageMax: Optional[int] = Field(None, gt=0)
    ageMaxMm: Optional[int] = Field(None, gt=0)
    document: str = ""
    documentMm: Optional[str] = None
    availableDays: List[bool] = Field(
        default_factory=lambda: [False] * 7, min_length=7, max_length=7
    )
    outcomes: List[str] = Field(default_factory=list)
    outcomesMm: List[str] = Field(default_factory=list)
    scheduleDetails: Optional[str] = None
    scheduleDetailsMm: Optional[str] = None
    selectionCriteria: List[str] = Field(default_factory=list)
    selectionCriteriaMm: List[str] = Field(default_factory=list)
    howToApply: List[str] = Field(default_factory=list)
    howToApplyMm: List[str] = Field(default_factory=list)
    applyButtonText: Optional[str] = None
    applyButtonTextMm: Optional[str] = None
    applyLink: Optional[str] = None
    estimatedDate: Optional[str] = None
    estimatedDateMm: Optional[str] = None
    organizationId: Optional[str] = None
    badges: List[BadgeIn] = Field(default_factory=list)
    faq: List[FAQIn] = Field(default_factory=list)
    imageUrls: List[str] = Field(default_factory=list)

    @field_validator(
        "startDate", "startDateMm", "endDate", "endDateMm",
        "applyByDate", "applyByDateMm",
    )
    @classmethod
    def normalize_dates(cls, v):
        return to_naive_utc(v)

    @field_validator("organizationId")
    @classmethod
    def blank_organization(cls, v):
        return v or None

    @model_validator(mode="after")
    def check_ranges(self):
        if self.endDate < self.startDate:
            raise ValueError("endDate must not be before startDate")
        if (
            self.ageMin is not None
            and self.ageMax is not None
            and self.ageMin > self.ageMax
        ):
            raise ValueError("ageMin must not exceed ageMax")
        return self


class OrganizationPayload(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    description: str = Field(..., min_length=10)
    phone: str = Field(..., min_length=5, max_length=50)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    address: str = Field(..., min_length=5)
    facebookPage: Optional[str] = None
    latitude: float
    longitude: float
    district: Optional[str] = None
    province: Optional[str] = None
    logoImage: Optional[str] = None

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def coerce_coordinate(cls, v):
        # Map pickers submit coordinates as strings
        if isinstance(v, str):
            return float(v.strip())
        return v


class DraftCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    type: DraftType
    content: dict
    status: DraftStatus = DraftStatus.DRAFT

    @field_validator("status")
    @classmethod
    def creatable_status(cls, v):
        if v not in (DraftStatus.DRAFT, DraftStatus.PENDING):
            raise ValueError(
                "Can only create drafts with DRAFT or PENDING status"
            )
        return v


class DraftUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    content: Optional[dict] = None
    status: Optional[DraftStatus] = None

    @field_validator("status")
    @classmethod
    def editable_status(cls, v):
        if v is not None and v not in (DraftStatus.DRAFT, DraftStatus.PENDING):
            raise ValueError("Invalid status for draft update")
        return v


class DraftReview(BaseModel):
    # Kept as str so an unknown value maps to a plain "Invalid status" error
    status: str
    reviewNotes: Optional[str] = None
    content: Optional[dict] = None


class CourseEditRequest(BaseModel):
    """Proposed changes to a live course, staged as a PENDING draft."""

    changes: dict
    title: Optional[str] = None


class UserUpdate(BaseModel):
    status: Optional[UserStatus] = None
    role: Optional[Role] = None
    organizationId: Optional[str] = None

    @model_validator(mode="after")
    def not_empty(self):
        if self.status is None and self.role is None and (
            "organizationId" not in self.model_fields_set
        ):
            raise ValueError("Nothing to update")
        return self


class AllowListCreate(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    notes: Optional[str] = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class SignInRequest(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    name: str = ""
    image: Optional[str] = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class ProfilePayload(BaseModel):
    publicName: Optional[str] = Field(None, max_length=200)
    bio: Optional[str] = Field(None, max_length=2000)
    avatarUrl: Optional[str] = None
    showOrganization: bool = False
    status: ProfileStatus = ProfileStatus.DRAFT

    @field_validator("status")
    @classmethod
    def submittable_status(cls, v):
        if v not in (ProfileStatus.DRAFT, ProfileStatus.PENDING):
            raise ValueError("Profile status must be DRAFT or PENDING")
        return v


class ProfileReview(BaseModel):
    status: ProfileStatus
    reviewNotes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def reviewable_status(cls, v):
        if v not in (
            ProfileStatus.APPROVED,
            ProfileStatus.REJECTED,
            ProfileStatus.HIDDEN,
        ):
            raise ValueError("Invalid status")
        return v


class AvatarRequest(BaseModel):
    style: Optional[str] = None
    seed: Optional[str] = None
    size: int = Field(128, ge=16, le=1024)
