"""
Database Enums

Python Enums that map to database ENUM types.
"""

import enum


class UserRole(str, enum.Enum):
    """User role enumeration."""
    CUSTOMER = "customer"
    PROVIDER = "provider"
    ADMIN = "admin"


class UserStatus(str, enum.Enum):
    """
    Account status enumeration.

    PENDING_PROVIDER is a customer waiting for an admin decision
    on their provider request.
    """
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING_PROVIDER = "pending_provider"


class CourseStatus(str, enum.Enum):
    """Course moderation status enumeration."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DiscountType(str, enum.Enum):
    """Discount type enumeration."""
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class NotificationType(str, enum.Enum):
    """Notification event type enumeration."""
    ENROLLMENT = "enrollment"
    REVIEW = "review"
    COURSE_APPROVED = "course_approved"
    COURSE_REJECTED = "course_rejected"
    PROVIDER_APPROVED = "provider_approved"
    PROVIDER_REJECTED = "provider_rejected"
    SYSTEM = "system"


class ResourceType(str, enum.Enum):
    """Lesson resource type enumeration."""
    PDF = "pdf"
    DOCUMENT = "document"
    LINK = "link"
    OTHER = "other"
