"""Enumerations shared by persistence models and request payloads."""

from enum import Enum


class Role(str, Enum):
    PLATFORM_ADMIN = "PLATFORM_ADMIN"
    ORGANIZATION_ADMIN = "ORGANIZATION_ADMIN"
    YOUTH_ADVOCATE = "YOUTH_ADVOCATE"
    STUDENT = "STUDENT"


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SUSPENDED = "SUSPENDED"


class CourseStatus(str, Enum):
    PUBLISHED = "PUBLISHED"
    DRAFT = "DRAFT"
    # Taken offline while an edit request waits for review
    UNDER_REVIEW = "UNDER_REVIEW"


class DraftType(str, Enum):
    COURSE = "COURSE"
    ORGANIZATION = "ORGANIZATION"


class DraftStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ProfileStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    HIDDEN = "HIDDEN"


def values(enum_cls) -> list:
    return [member.value for member in enum_cls]
