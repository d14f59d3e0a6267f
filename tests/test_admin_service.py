"""
Admin Service Tests

Tests for moderation workflows and platform statistics.
"""

import pytest

from app.models import CourseStatus, UserRole, UserStatus


class TestProviderRequests:
    """Tests for the provider request workflow."""

    @pytest.mark.asyncio
    async def test_request_then_approve(self, db_session, make_user):
        """Verify a customer becomes an active provider after approval."""
        from app.services.admin_service import approve_provider, list_pending_providers
        from app.services.user_service import request_provider

        customer = await make_user()

        await request_provider(customer, db_session)
        pending = await list_pending_providers(db_session)
        assert [u.id for u in pending] == [customer.id]

        user = await approve_provider(customer.id, db_session)

        assert user.role == UserRole.PROVIDER
        assert user.status == UserStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_reject_keeps_customer(self, db_session, make_user):
        """Verify a rejected request leaves an active customer."""
        from app.services.admin_service import reject_provider
        from app.services.user_service import request_provider

        customer = await make_user()
        await request_provider(customer, db_session)

        user = await reject_provider(customer.id, db_session)

        assert user.role == UserRole.CUSTOMER
        assert user.status == UserStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_approve_without_request(self, db_session, make_user):
        """Verify users without a pending request cannot be approved."""
        from app.core.exceptions import DomainRuleError
        from app.services.admin_service import approve_provider

        customer = await make_user()

        with pytest.raises(DomainRuleError):
            await approve_provider(customer.id, db_session)

    @pytest.mark.asyncio
    async def test_duplicate_request(self, db_session, make_user):
        """Verify a second request while pending is refused."""
        from app.core.exceptions import DomainRuleError
        from app.services.user_service import request_provider

        customer = await make_user()
        await request_provider(customer, db_session)

        with pytest.raises(DomainRuleError):
            await request_provider(customer, db_session)


class TestUserModeration:
    """Tests for account status changes."""

    @pytest.mark.asyncio
    async def test_toggle_user_status(self, db_session, make_user):
        """Verify toggling flips between active and inactive."""
        from app.services.admin_service import toggle_user_status

        admin = await make_user(role=UserRole.ADMIN)
        customer = await make_user()

        user = await toggle_user_status(customer.id, admin, db_session)
        assert user.status == UserStatus.INACTIVE

        user = await toggle_user_status(customer.id, admin, db_session)
        assert user.status == UserStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_cannot_toggle_self(self, db_session, make_user):
        """Verify an admin cannot lock themselves out."""
        from app.core.exceptions import DomainRuleError
        from app.services.admin_service import toggle_user_status

        admin = await make_user(role=UserRole.ADMIN)

        with pytest.raises(DomainRuleError):
            await toggle_user_status(admin.id, admin, db_session)


class TestCourseModeration:
    """Tests for course approval."""

    @pytest.mark.asyncio
    async def test_approve_course_publishes_it(self, db_session, make_user, make_course):
        """Verify approval lists the course in the public catalog."""
        from app.services.admin_service import approve_course
        from app.services.course_service import list_approved_courses

        provider = await make_user(role=UserRole.PROVIDER)
        course = await make_course(provider, status=CourseStatus.PENDING)

        assert await list_approved_courses(db_session) == []

        approved = await approve_course(course.id, db_session)

        assert approved.status == CourseStatus.APPROVED
        catalog = await list_approved_courses(db_session)
        assert [c.id for c in catalog] == [course.id]

    @pytest.mark.asyncio
    async def test_approve_twice(self, db_session, make_user, make_course):
        """Verify approving an approved course is refused."""
        from app.core.exceptions import DomainRuleError
        from app.services.admin_service import approve_course

        provider = await make_user(role=UserRole.PROVIDER)
        course = await make_course(provider)

        with pytest.raises(DomainRuleError):
            await approve_course(course.id, db_session)

    @pytest.mark.asyncio
    async def test_reject_course(self, db_session, make_user, make_course):
        """Verify rejection marks the course rejected."""
        from app.services.admin_service import reject_course

        provider = await make_user(role=UserRole.PROVIDER)
        course = await make_course(provider, status=CourseStatus.PENDING)

        rejected = await reject_course(course.id, db_session)

        assert rejected.status == CourseStatus.REJECTED


class TestSystemStats:
    """Tests for get_system_stats."""

    @pytest.mark.asyncio
    async def test_revenue_uses_list_price_and_paid_tracks_discounts(
        self, db_session, make_user, make_course, make_discount
    ):
        """Verify revenue sums list prices while revenue_paid sums payments."""
        from app.services.admin_service import get_system_stats
        from app.services.enrollment_service import enroll

        provider = await make_user(role=UserRole.PROVIDER)
        first = await make_user()
        second = await make_user()
        course = await make_course(provider, price=100000)
        await make_discount(course, code="SAVE20", value=20)

        await enroll(first, course.id, db_session, discount_code="SAVE20")
        await enroll(second, course.id, db_session)

        stats = await get_system_stats(db_session)

        assert stats["enrollments"] == 2
        assert stats["revenue"] == 200000
        assert stats["revenue_paid"] == 180000
        assert stats["users"]["customers"] == 2
        assert stats["users"]["providers"] == 1
        assert stats["courses"]["approved"] == 1

    @pytest.mark.asyncio
    async def test_empty_platform(self, db_session):
        """Verify an empty database reports zeros."""
        from app.services.admin_service import get_system_stats

        stats = await get_system_stats(db_session)

        assert stats["users"]["total"] == 0
        assert stats["enrollments"] == 0
        assert stats["revenue"] == 0
        assert stats["revenue_paid"] == 0
