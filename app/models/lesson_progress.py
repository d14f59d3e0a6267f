"""
Lesson Progress Model

Per-lesson access and completion tracking for an enrolled user.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, utcnow

if TYPE_CHECKING:
    from app.models.lesson import Lesson


class LessonProgress(Base):
    """
    Lesson progress model.

    Rows are created lazily on first access or completion. One row per
    (user, lesson). ``course_id`` is denormalized from the lesson so a
    user's progress in a course can be read without a join.

    Attributes:
        id: Integer primary key.
        user_id: Learner.
        course_id: Course the lesson belonged to at creation time.
        lesson_id: Lesson tracked.
        completed: Whether the lesson has been completed.
        completed_at: First completion time; never overwritten.
        last_accessed_at: Most recent access.
    """

    __tablename__ = "lesson_progress"

    __table_args__ = (
        UniqueConstraint("user_id", "lesson_id", name="uq_progress_user_lesson"),
        Index("ix_lesson_progress_user_course", "user_id", "course_id"),
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
        nullable=False,
    )
    lesson_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("lessons.id", ondelete="CASCADE"),
        nullable=False,
    )
    completed: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    last_accessed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    # Relationships
    lesson: Mapped["Lesson"] = relationship(
        "Lesson",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<LessonProgress(id={self.id}, lesson_id={self.lesson_id}, completed={self.completed})>"
