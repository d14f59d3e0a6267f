"""
Course Model

Course catalog entry owned by a provider and moderated by admins.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, utcnow
from app.models.enums import CourseStatus

if TYPE_CHECKING:
    from app.models.user import User
    from app.models.lesson import Lesson


class Course(Base):
    """
    Course model.

    ``enrollment_count``, ``average_rating`` and ``total_reviews`` are
    denormalized from the enrollments and reviews tables. They are only
    written by the enrollment and review services.

    Attributes:
        id: Integer primary key.
        provider_id: Owning provider, immutable after creation.
        title: Globally unique title.
        description: Course description.
        price: List price (>= 0).
        thumbnail_url: Cover image URL.
        category: Free-form category label.
        status: PENDING, APPROVED or REJECTED.
    """

    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    provider_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        String(200),
        unique=True,
        nullable=False,
    )
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    price: Mapped[float] = mapped_column(
        Float,
        default=0,
        nullable=False,
    )
    thumbnail_url: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    category: Mapped[str] = mapped_column(
        String(100),
        index=True,
        nullable=False,
    )
    status: Mapped[CourseStatus] = mapped_column(
        Enum(CourseStatus, name="course_status", create_constraint=True),
        default=CourseStatus.PENDING,
        index=True,
        nullable=False,
    )
    enrollment_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    average_rating: Mapped[float] = mapped_column(
        Float,
        default=0,
        nullable=False,
    )
    total_reviews: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    # Relationships
    provider: Mapped["User"] = relationship(
        "User",
        foreign_keys=[provider_id],
        lazy="selectin",
    )
    lessons: Mapped[list["Lesson"]] = relationship(
        "Lesson",
        back_populates="course",
        order_by="Lesson.order",
        lazy="selectin",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title={self.title[:30]}, status={self.status})>"
