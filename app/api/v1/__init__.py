"""
API v1 Router

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    admin,
    auth,
    courses,
    discounts,
    lessons,
    notifications,
    progress,
    reviews,
    users,
)

router = APIRouter()

# Include authentication routes
router.include_router(auth.router)

# Include user account routes
router.include_router(users.router)

# Include catalog and enrollment routes
router.include_router(courses.router)

# Include lesson routes
router.include_router(lessons.router)

# Include progress routes
router.include_router(progress.router)

# Include review routes
router.include_router(reviews.router)

# Include discount routes
router.include_router(discounts.router)

# Include notification routes
router.include_router(notifications.router)

# Include admin routes
router.include_router(admin.router)
