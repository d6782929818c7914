"""Aggregated API router.

All endpoints are registered here and mounted under API_PREFIX (/api) in main.py.
"""

from fastapi import APIRouter

from api.routes import (
    health,
    auth,
    users,
    devices,
    weather,
    notification_templates,
)
from api.schemas.common import ErrorResponse

api_router = APIRouter()

# Error bodies the auth dependencies can produce on protected routers
AUTH_ERRORS = {
    401: {"model": ErrorResponse, "description": "Missing, invalid or expired token"},
    403: {"model": ErrorResponse, "description": "Role not permitted or account disabled"},
}

# Health (no auth required)
api_router.include_router(
    health.router,
    tags=["Health"],
)

# Authentication
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"],
)

# Users
api_router.include_router(
    users.router,
    prefix="/users",
    tags=["Users"],
    responses=AUTH_ERRORS,
)

# Devices
api_router.include_router(
    devices.router,
    prefix="/devices",
    tags=["Devices"],
    responses=AUTH_ERRORS,
)

# Weather
api_router.include_router(
    weather.router,
    prefix="/weather",
    tags=["Weather"],
    responses=AUTH_ERRORS,
)

# Notification templates
api_router.include_router(
    notification_templates.router,
    prefix="/notification-templates",
    tags=["Notification Templates"],
    responses=AUTH_ERRORS,
)
