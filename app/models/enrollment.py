"""
Enrollment Model

User-course enrollment with the price actually paid and completion bookkeeping.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, utcnow

if TYPE_CHECKING:
    from app.models.course import Course


class Enrollment(Base):
    """
    Enrollment model representing a customer's access grant to a course.

    Unique constraint ensures a user can only enroll once per course.

    Attributes:
        id: Integer primary key.
        user_id: Enrolled user.
        course_id: Course enrolled in.
        enrolled_at: Enrollment timestamp.
        price_paid: Final price after any discount.
        discount_applied: Snapshot {code, type, value, original_price,
            discounted_price} of the discount used, if any.
        progress: Completion percentage as last computed by the progress tracker.
        last_accessed_lesson_id: Most recently opened lesson.
        completed_at: When completion first reached 100%.
        certificate_issued: Reserved; certificates are not generated.
    """

    __tablename__ = "enrollments"

    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_enrollment_user_course"),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    course_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("courses.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    enrolled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    price_paid: Mapped[float] = mapped_column(
        Float,
        default=0,
        nullable=False,
    )
    discount_applied: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
    )
    progress: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    last_accessed_lesson_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("lessons.id", ondelete="SET NULL"),
        nullable=True,
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    certificate_issued: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # Relationships
    course: Mapped["Course"] = relationship(
        "Course",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Enrollment(id={self.id}, user_id={self.user_id}, course_id={self.course_id})>"
