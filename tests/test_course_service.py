"""
Course Service Tests

Tests for course editing and lesson ordering.
"""

import pytest

from app.models import CourseStatus, UserRole


class TestCourseEditing:
    """Tests for course_service.update_course."""

    @pytest.mark.asyncio
    async def test_editing_rejected_course_resubmits_it(
        self, db_session, make_user, make_course
    ):
        """Verify a rejected course goes back to pending when edited."""
        from app.schemas.course import CourseUpdate
        from app.services.course_service import update_course

        provider = await make_user(role=UserRole.PROVIDER)
        course = await make_course(provider, status=CourseStatus.REJECTED)

        updated = await update_course(
            course.id, CourseUpdate(description="Rewritten outline"), provider, db_session
        )

        assert updated.status == CourseStatus.PENDING
        assert updated.description == "Rewritten outline"

    @pytest.mark.asyncio
    async def test_editing_approved_course_keeps_status(
        self, db_session, make_user, make_course
    ):
        """Verify edits to a published course leave it published."""
        from app.schemas.course import CourseUpdate
        from app.services.course_service import update_course

        provider = await make_user(role=UserRole.PROVIDER)
        course = await make_course(provider)

        updated = await update_course(
            course.id, CourseUpdate(price=250), provider, db_session
        )

        assert updated.status == CourseStatus.APPROVED
        assert updated.price == 250

    @pytest.mark.asyncio
    async def test_other_provider_cannot_edit(self, db_session, make_user, make_course):
        """Verify only the owning provider may edit a course."""
        from app.core.exceptions import AuthorizationError
        from app.schemas.course import CourseUpdate
        from app.services.course_service import update_course

        owner = await make_user(role=UserRole.PROVIDER)
        other = await make_user(role=UserRole.PROVIDER)
        course = await make_course(owner)

        with pytest.raises(AuthorizationError):
            await update_course(course.id, CourseUpdate(price=1), other, db_session)


class TestLessonOrdering:
    """Tests for lesson positions within a course."""

    @pytest.mark.asyncio
    async def test_new_lessons_are_appended(self, db_session, make_user, make_course):
        """Verify the first lesson gets order 1 and later ones follow the last."""
        from app.schemas.course import LessonCreate
        from app.services.lesson_service import create_lesson

        provider = await make_user(role=UserRole.PROVIDER)
        course = await make_course(provider)

        def lesson_data(title):
            return LessonCreate(
                courseId=course.id,
                title=title,
                video_url=f"https://videos.example.com/{title}.mp4",
                duration=12,
            )

        first = await create_lesson(lesson_data("intro"), provider, db_session)
        second = await create_lesson(lesson_data("setup"), provider, db_session)

        assert first.order == 1
        assert second.order == 2

    @pytest.mark.asyncio
    async def test_append_follows_highest_order(
        self, db_session, make_user, make_course, make_lesson
    ):
        """Verify gaps in numbering do not cause collisions."""
        from app.schemas.course import LessonCreate
        from app.services.lesson_service import create_lesson

        provider = await make_user(role=UserRole.PROVIDER)
        course = await make_course(provider)
        await make_lesson(course, order=1)
        await make_lesson(course, order=5)

        lesson = await create_lesson(
            LessonCreate(
                course_id=course.id,
                title="Wrap-up",
                video_url="https://videos.example.com/wrap-up.mp4",
            ),
            provider,
            db_session,
        )

        assert lesson.order == 6

    @pytest.mark.asyncio
    async def test_reorder_ignores_other_courses(
        self, db_session, make_user, make_course, make_lesson
    ):
        """Verify reordering only moves lessons of the named course."""
        from app.schemas.course import LessonOrder
        from app.services.lesson_service import reorder_lessons

        provider = await make_user(role=UserRole.PROVIDER)
        course = await make_course(provider)
        other_course = await make_course(provider)
        first = await make_lesson(course, order=1)
        second = await make_lesson(course, order=2)
        foreign = await make_lesson(other_course, order=1)

        lessons = await reorder_lessons(
            course.id,
            [
                LessonOrder(lessonId=first.id, order=2),
                LessonOrder(lessonId=second.id, order=1),
                LessonOrder(lessonId=foreign.id, order=9),
            ],
            provider,
            db_session,
        )

        assert [lesson.id for lesson in lessons] == [second.id, first.id]

        await db_session.refresh(foreign)
        assert foreign.order == 1

    @pytest.mark.asyncio
    async def test_reorder_requires_owner(
        self, db_session, make_user, make_course, make_lesson
    ):
        """Verify another provider cannot reorder a course's lessons."""
        from app.core.exceptions import AuthorizationError
        from app.schemas.course import LessonOrder
        from app.services.lesson_service import reorder_lessons

        owner = await make_user(role=UserRole.PROVIDER)
        other = await make_user(role=UserRole.PROVIDER)
        course = await make_course(owner)
        lesson = await make_lesson(course, order=1)

        with pytest.raises(AuthorizationError):
            await reorder_lessons(
                course.id, [LessonOrder(lessonId=lesson.id, order=3)], other, db_session
            )
