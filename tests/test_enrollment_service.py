"""
Enrollment Service Tests

Tests for enrolling in courses, with and without discount codes.
"""

import pytest
from sqlalchemy import select

from app.models import CourseStatus, UserRole


class TestEnroll:
    """Tests for enrollment_service.enroll."""

    @pytest.mark.asyncio
    async def test_enroll_charges_full_price(self, db_session, make_user, make_course):
        """Verify enrolling without a code pays the list price."""
        from app.services.enrollment_service import enroll

        provider = await make_user(role=UserRole.PROVIDER)
        customer = await make_user()
        course = await make_course(provider, price=100000)

        enrollment = await enroll(customer, course.id, db_session)

        assert enrollment.price_paid == 100000
        assert enrollment.discount_applied is None
        assert enrollment.progress == 0

        await db_session.refresh(course)
        assert course.enrollment_count == 1

    @pytest.mark.asyncio
    async def test_single_use_code(
        self, db_session, make_user, make_course, make_discount
    ):
        """Verify a one-use 20% code applies once, then deactivates."""
        from app.services.enrollment_service import enroll

        provider = await make_user(role=UserRole.PROVIDER)
        first = await make_user()
        second = await make_user()
        course = await make_course(provider, price=100000)
        discount = await make_discount(course, code="SAVE20", value=20, max_uses=1)

        enrollment = await enroll(first, course.id, db_session, discount_code="SAVE20")

        assert enrollment.price_paid == 80000
        assert enrollment.discount_applied["code"] == "SAVE20"
        assert enrollment.discount_applied["original_price"] == 100000
        assert enrollment.discount_applied["discounted_price"] == 80000

        await db_session.refresh(discount)
        assert discount.used_count == 1
        assert discount.active is False

        later = await enroll(second, course.id, db_session, discount_code="SAVE20")

        assert later.price_paid == 100000
        assert later.discount_applied is None

        await db_session.refresh(discount)
        assert discount.used_count == 1

    @pytest.mark.asyncio
    async def test_unknown_code_falls_back_to_full_price(
        self, db_session, make_user, make_course
    ):
        """Verify an unknown code does not block enrollment."""
        from app.services.enrollment_service import enroll

        provider = await make_user(role=UserRole.PROVIDER)
        customer = await make_user()
        course = await make_course(provider, price=50000)

        enrollment = await enroll(customer, course.id, db_session, discount_code="BOGUS1")

        assert enrollment.price_paid == 50000

    @pytest.mark.asyncio
    async def test_duplicate_enrollment_conflicts(self, db_session, make_user, make_course):
        """Verify enrolling twice raises a conflict and counts once."""
        from app.core.exceptions import ConflictError
        from app.services.enrollment_service import enroll

        provider = await make_user(role=UserRole.PROVIDER)
        customer = await make_user()
        course = await make_course(provider)

        await enroll(customer, course.id, db_session)
        with pytest.raises(ConflictError):
            await enroll(customer, course.id, db_session)

        await db_session.refresh(course)
        assert course.enrollment_count == 1

    @pytest.mark.asyncio
    async def test_unapproved_course_rejected(self, db_session, make_user, make_course):
        """Verify pending courses cannot be enrolled in."""
        from app.core.exceptions import DomainRuleError
        from app.services.enrollment_service import enroll

        provider = await make_user(role=UserRole.PROVIDER)
        customer = await make_user()
        course = await make_course(provider, status=CourseStatus.PENDING)

        with pytest.raises(DomainRuleError):
            await enroll(customer, course.id, db_session)

    @pytest.mark.asyncio
    async def test_missing_course_not_found(self, db_session, make_user):
        """Verify an unknown course id raises NotFoundError."""
        from app.core.exceptions import NotFoundError
        from app.services.enrollment_service import enroll

        customer = await make_user()

        with pytest.raises(NotFoundError):
            await enroll(customer, 999, db_session)

    @pytest.mark.asyncio
    async def test_notifies_student_and_provider(self, db_session, make_user, make_course):
        """Verify both parties receive an enrollment notification."""
        from app.models import Notification
        from app.services.enrollment_service import enroll

        provider = await make_user(role=UserRole.PROVIDER)
        customer = await make_user(full_name="Ada Lovelace")
        course = await make_course(provider, title="Async Python")

        await enroll(customer, course.id, db_session)

        result = await db_session.execute(select(Notification))
        by_user = {n.user_id: n for n in result.scalars().all()}

        assert by_user[customer.id].title == "Enrollment Successful!"
        assert by_user[customer.id].link == f"/courses/{course.id}/lessons"
        assert by_user[provider.id].title == "New Student Enrolled!"
        assert by_user[provider.id].message == (
            'Ada Lovelace has enrolled in your course "Async Python".'
        )

    @pytest.mark.asyncio
    async def test_list_enrolled_courses(self, db_session, make_user, make_course):
        """Verify a student's enrollments are listed with their courses."""
        from app.services.enrollment_service import enroll, list_enrolled_courses

        provider = await make_user(role=UserRole.PROVIDER)
        customer = await make_user()
        first = await make_course(provider)
        second = await make_course(provider)

        await enroll(customer, first.id, db_session)
        await enroll(customer, second.id, db_session)

        enrollments = await list_enrolled_courses(customer, db_session)

        assert {e.course_id for e in enrollments} == {first.id, second.id}

    @pytest.mark.asyncio
    async def test_lost_duplicate_race_keeps_discount_slot(
        self, db_session, make_user, make_course, make_discount, monkeypatch
    ):
        """Verify an enrollment refused by the unique constraint does not use the code."""
        from app.core.exceptions import ConflictError
        from app.services import enrollment_service

        provider = await make_user(role=UserRole.PROVIDER)
        customer = await make_user()
        course = await make_course(provider, price=100000)
        discount = await make_discount(course, code="SAVE20", value=20, max_uses=2)

        await enrollment_service.enroll(
            customer, course.id, db_session, discount_code="SAVE20"
        )

        # Second request passed the enrollment check before the first committed
        async def not_enrolled_yet(user_id, course_id, db):
            return None

        monkeypatch.setattr(enrollment_service, "get_enrollment", not_enrolled_yet)

        with pytest.raises(ConflictError):
            await enrollment_service.enroll(
                customer, course.id, db_session, discount_code="SAVE20"
            )

        await db_session.refresh(discount)
        assert discount.used_count == 1
        assert discount.active is True
