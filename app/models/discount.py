"""
Discount Model

Time- and usage-bounded discount code scoped to one course.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, utcnow
from app.models.enums import DiscountType

if TYPE_CHECKING:
    from app.models.course import Course


class Discount(Base):
    """
    Discount code model.

    Codes are stored upper-cased and are unique per course, not globally.

    Attributes:
        id: Integer primary key.
        code: 3-20 character code.
        course_id: Course the code applies to.
        provider_id: Provider who owns the course and the code.
        type: PERCENTAGE or FIXED.
        value: Percent (0-100) or fixed amount (>= 0).
        max_uses: Usage cap, None for unlimited.
        used_count: Successful enrollments that used the code.
        start_date: Start of the validity window.
        end_date: End of the validity window (after start_date).
        active: Manual switch; cleared automatically when the cap is reached.
        description: Optional note, up to 200 characters.
    """

    __tablename__ = "discounts"

    __table_args__ = (
        UniqueConstraint("course_id", "code", name="uq_discount_course_code"),
        Index("ix_discounts_provider_active", "provider_id", "active"),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    code: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )
    course_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("courses.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    provider_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[DiscountType] = mapped_column(
        Enum(DiscountType, name="discount_type", create_constraint=True),
        nullable=False,
    )
    value: Mapped[float] = mapped_column(
        Float,
        nullable=False,
    )
    max_uses: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
    )
    used_count: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    end_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        String(200),
        nullable=True,
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
    course: Mapped["Course"] = relationship(
        "Course",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Discount(id={self.id}, code={self.code}, course_id={self.course_id})>"
