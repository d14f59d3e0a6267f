"""
Review Service Tests

Tests for reviews and the course rating aggregate.
"""

import pytest

from app.models import UserRole


@pytest.fixture
def course_with_students(db_session, make_user, make_course):
    """Factory: an approved course and ``count`` enrolled students."""

    async def _create(count: int = 2):
        from app.services.enrollment_service import enroll

        provider = await make_user(role=UserRole.PROVIDER)
        course = await make_course(provider, title="Data Pipelines")
        students = []
        for _ in range(count):
            student = await make_user()
            await enroll(student, course.id, db_session)
            students.append(student)
        return provider, course, students

    return _create


def _review(course_id: int, rating: int, comment: str = "Solid course"):
    from app.schemas.review import ReviewCreate

    return ReviewCreate(courseId=course_id, rating=rating, comment=comment)


class TestCreateReview:
    """Tests for create_review."""

    @pytest.mark.asyncio
    async def test_rating_is_averaged(self, db_session, course_with_students):
        """Verify ratings 4 and 2 give an average of 3.0 over 2 reviews."""
        from app.services.review_service import create_review

        _, course, (alice, bob) = await course_with_students(2)

        await create_review(alice, _review(course.id, 4), db_session)
        await create_review(bob, _review(course.id, 2), db_session)

        await db_session.refresh(course)
        assert course.average_rating == 3.0
        assert course.total_reviews == 2

    @pytest.mark.asyncio
    async def test_average_rounds_to_one_decimal(self, db_session, course_with_students):
        """Verify 5, 5 and 4 average to 4.7."""
        from app.services.review_service import create_review

        _, course, students = await course_with_students(3)

        for student, rating in zip(students, (5, 5, 4)):
            await create_review(student, _review(course.id, rating), db_session)

        await db_session.refresh(course)
        assert course.average_rating == 4.7

    @pytest.mark.asyncio
    async def test_requires_enrollment(self, db_session, make_user, make_course):
        """Verify only enrolled students can review."""
        from app.core.exceptions import AuthorizationError
        from app.services.review_service import create_review

        provider = await make_user(role=UserRole.PROVIDER)
        outsider = await make_user()
        course = await make_course(provider)

        with pytest.raises(AuthorizationError):
            await create_review(outsider, _review(course.id, 5), db_session)

    @pytest.mark.asyncio
    async def test_one_review_per_student(self, db_session, course_with_students):
        """Verify a second review from the same student conflicts."""
        from app.core.exceptions import ConflictError
        from app.services.review_service import create_review

        _, course, (alice,) = await course_with_students(1)

        await create_review(alice, _review(course.id, 4), db_session)
        with pytest.raises(ConflictError):
            await create_review(alice, _review(course.id, 1), db_session)

    @pytest.mark.asyncio
    async def test_provider_is_notified(self, db_session, course_with_students):
        """Verify the provider gets a review notification."""
        from sqlalchemy import select

        from app.models import Notification, NotificationType
        from app.services.review_service import create_review

        provider, course, (alice,) = await course_with_students(1)

        await create_review(alice, _review(course.id, 5), db_session)

        result = await db_session.execute(
            select(Notification).where(
                Notification.user_id == provider.id,
                Notification.type == NotificationType.REVIEW,
            )
        )
        notification = result.scalar_one()
        assert notification.message == (
            f'{alice.full_name} left a 5-star review on your course "Data Pipelines".'
        )


class TestUpdateAndDeleteReview:
    """Tests for editing and removing reviews."""

    @pytest.mark.asyncio
    async def test_update_recomputes_rating(self, db_session, course_with_students):
        """Verify changing 4 to 5 next to a 2 gives 3.5."""
        from app.schemas.review import ReviewUpdate
        from app.services.review_service import create_review, update_review

        _, course, (alice, bob) = await course_with_students(2)

        review = await create_review(alice, _review(course.id, 4), db_session)
        await create_review(bob, _review(course.id, 2), db_session)

        updated = await update_review(alice, review.id, ReviewUpdate(rating=5), db_session)

        assert updated.rating == 5
        await db_session.refresh(course)
        assert course.average_rating == 3.5
        assert course.total_reviews == 2

    @pytest.mark.asyncio
    async def test_only_author_may_update(self, db_session, course_with_students):
        """Verify another student cannot edit a review."""
        from app.core.exceptions import AuthorizationError
        from app.schemas.review import ReviewUpdate
        from app.services.review_service import create_review, update_review

        _, course, (alice, bob) = await course_with_students(2)
        review = await create_review(alice, _review(course.id, 4), db_session)

        with pytest.raises(AuthorizationError):
            await update_review(bob, review.id, ReviewUpdate(rating=1), db_session)

    @pytest.mark.asyncio
    async def test_deleting_last_review_resets_rating(self, db_session, course_with_students):
        """Verify rating and count drop to 0 when no reviews remain."""
        from app.services.review_service import create_review, delete_review

        _, course, (alice, bob) = await course_with_students(2)

        first = await create_review(alice, _review(course.id, 4), db_session)
        second = await create_review(bob, _review(course.id, 2), db_session)

        await delete_review(alice, first.id, db_session)
        await db_session.refresh(course)
        assert course.average_rating == 2.0
        assert course.total_reviews == 1

        await delete_review(bob, second.id, db_session)
        await db_session.refresh(course)
        assert course.average_rating == 0
        assert course.total_reviews == 0

    @pytest.mark.asyncio
    async def test_admin_may_delete_any_review(
        self, db_session, make_user, course_with_students
    ):
        """Verify moderators can remove reviews they did not write."""
        from app.services.review_service import (
            create_review,
            delete_review,
            get_my_review,
        )

        admin = await make_user(role=UserRole.ADMIN)
        _, course, (alice,) = await course_with_students(1)
        review = await create_review(alice, _review(course.id, 1), db_session)

        await delete_review(admin, review.id, db_session)

        assert await get_my_review(alice, course.id, db_session) is None
