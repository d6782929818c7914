"""Weather collection endpoints."""

from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from api.schemas.weather import (
    WeatherCollectRequest,
    WeatherCollectResponse,
    WeatherConfigResponse,
    WeatherReadingResponse,
)
from app.config import get_settings
from app.dependencies import AuthenticatedUser, get_current_user, get_db
from core.constants import Role
from core.exceptions import NotFoundError
from core.rbac import require_roles
from services.weather_service import WeatherService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["weather"])

can_collect_weather = require_roles([Role.ADMIN.value, Role.EDITOR.value])


def get_weather_service(db: AsyncSession = Depends(get_db)) -> WeatherService:
    return WeatherService(db)


@router.post("/collect", response_model=WeatherCollectResponse)
async def collect_weather(
    request: Optional[WeatherCollectRequest] = Body(default=None),
    current_user: AuthenticatedUser = Depends(can_collect_weather),
    svc: WeatherService = Depends(get_weather_service),
) -> WeatherCollectResponse:
    """Fetch current conditions from the provider and store them."""
    location = request.location if request else None
    reading = await svc.collect(location)
    logger.info("Weather collected for %s by %s", reading.location_name, current_user.username)
    return WeatherCollectResponse(
        success=True,
        message=f"Weather data collected for {reading.location_name}",
        data=WeatherReadingResponse.model_validate(reading),
    )


@router.get("/latest", response_model=WeatherReadingResponse)
async def latest_weather(
    svc: WeatherService = Depends(get_weather_service),
) -> WeatherReadingResponse:
    """Most recent stored reading."""
    reading = await svc.latest()
    if not reading:
        raise NotFoundError("No weather data available")
    return WeatherReadingResponse.model_validate(reading)


@router.get("/config", response_model=WeatherConfigResponse)
async def weather_config(
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> WeatherConfigResponse:
    settings = get_settings()
    return WeatherConfigResponse(
        configured=settings.weather_configured,
        location=settings.WEATHER_LOCATION,
        api_url=settings.WEATHER_API_URL,
    )
