"""
Lesson Model

Ordered unit of content inside a course.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base, utcnow

if TYPE_CHECKING:
    from app.models.course import Course


class Lesson(Base):
    """
    Lesson model.

    Attributes:
        id: Integer primary key.
        course_id: Owning course.
        title: Lesson title.
        video_url: Video location.
        duration: Length in minutes (>= 0).
        order: Position inside the course, assigned as max + 1 on creation.
        description: Optional summary.
        content: Optional body text.
        resources: List of {title, url, type} attachments.
        is_free: Whether the lesson is a free preview.
    """

    __tablename__ = "lessons"

    __table_args__ = (
        Index("ix_lessons_course_order", "course_id", "order"),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    course_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    video_url: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    duration: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    order: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    description: Mapped[Optional[str]] = mapped_column(
        String(1000),
        nullable=True,
    )
    content: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    resources: Mapped[list] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )
    is_free: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    # Relationships
    course: Mapped["Course"] = relationship(
        "Course",
        back_populates="lessons",
    )

    def __repr__(self) -> str:
        return f"<Lesson(id={self.id}, course_id={self.course_id}, order={self.order})>"
