"""
Notification Service Tests

Tests for best-effort notification creation and owner-only access.
"""

import uuid

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.models import NotificationType


class TestCreateNotification:
    """Tests for create_notification."""

    @pytest.mark.asyncio
    async def test_storage_failure_is_swallowed(self, mock_async_session):
        """Verify a failed commit is rolled back and reported as None."""
        from app.services.notification_service import create_notification

        mock_async_session.commit.side_effect = SQLAlchemyError("database is gone")

        result = await create_notification(
            mock_async_session,
            user_id=uuid.uuid4(),
            type=NotificationType.SYSTEM,
            title="Hello",
            message="World",
        )

        assert result is None
        mock_async_session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_creates_unread_notification(self, db_session, make_user):
        """Verify a stored notification starts unread."""
        from app.services.notification_service import create_notification, get_unread_count

        user = await make_user()

        notification = await create_notification(
            db_session,
            user_id=user.id,
            type=NotificationType.SYSTEM,
            title="Welcome",
            message="Glad to have you",
            link="/profile",
        )

        assert notification is not None
        assert notification.read is False
        assert await get_unread_count(user.id, db_session) == 1


class TestNotificationInbox:
    """Tests for listing and managing notifications."""

    async def _seed(self, db_session, user, count: int):
        from app.services.notification_service import create_notification

        created = []
        for i in range(count):
            created.append(
                await create_notification(
                    db_session,
                    user_id=user.id,
                    type=NotificationType.SYSTEM,
                    title=f"Notice {i}",
                    message="Something happened",
                )
            )
        return created

    @pytest.mark.asyncio
    async def test_pagination_and_unread_count(self, db_session, make_user):
        """Verify pages are newest first and totals cover every row."""
        from app.services.notification_service import list_notifications, mark_as_read

        user = await make_user()
        created = await self._seed(db_session, user, 5)
        await mark_as_read(created[0].id, user, db_session)

        page, total, unread = await list_notifications(user, db_session, page=1, limit=2)

        assert total == 5
        assert unread == 4
        assert [n.id for n in page] == [created[4].id, created[3].id]

        unread_page, unread_total, _ = await list_notifications(
            user, db_session, unread_only=True
        )
        assert unread_total == 4
        assert all(not n.read for n in unread_page)

    @pytest.mark.asyncio
    async def test_mark_all_then_clear_read(self, db_session, make_user):
        """Verify bulk read and bulk delete only touch the caller's rows."""
        from app.services.notification_service import (
            clear_read,
            get_unread_count,
            mark_all_as_read,
        )

        user = await make_user()
        other = await make_user()
        await self._seed(db_session, user, 3)
        await self._seed(db_session, other, 1)

        assert await mark_all_as_read(user, db_session) == 3
        assert await get_unread_count(user.id, db_session) == 0

        assert await clear_read(user, db_session) == 3
        assert await get_unread_count(other.id, db_session) == 1

    @pytest.mark.asyncio
    async def test_cannot_touch_someone_elses_notification(self, db_session, make_user):
        """Verify owner checks on read and delete."""
        from app.core.exceptions import AuthorizationError, NotFoundError
        from app.services.notification_service import delete_notification, mark_as_read

        owner = await make_user()
        intruder = await make_user()
        (notification,) = await self._seed(db_session, owner, 1)

        with pytest.raises(AuthorizationError):
            await mark_as_read(notification.id, intruder, db_session)
        with pytest.raises(AuthorizationError):
            await delete_notification(notification.id, intruder, db_session)
        with pytest.raises(NotFoundError):
            await mark_as_read(9999, owner, db_session)
