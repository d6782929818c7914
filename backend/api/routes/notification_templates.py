"""Notification template preview endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.routes.weather import get_weather_service
from api.schemas.notification_template import (
    TemplatePreview,
    TemplateTestRequest,
    TemplateTestResponse,
    TemplateVariablesResponse,
)
from app.dependencies import AuthenticatedUser, get_current_user, get_db
from services.notification_template_service import (
    NotificationTemplateService,
    available_variables,
)
from services.weather_service import WeatherService

router = APIRouter(tags=["notification-templates"])


@router.get("/variables", response_model=TemplateVariablesResponse)
async def list_variables(
    current_user: AuthenticatedUser = Depends(get_current_user),
) -> TemplateVariablesResponse:
    """Variables that can be used in notification messages."""
    return TemplateVariablesResponse(success=True, data=available_variables())


@router.post("/test", response_model=TemplateTestResponse)
async def test_template(
    request: TemplateTestRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    weather: WeatherService = Depends(get_weather_service),
) -> TemplateTestResponse:
    """Render a template against the given context and the latest weather reading."""
    svc = NotificationTemplateService(db, weather=weather)
    preview = await svc.preview(request.template, request.context)
    return TemplateTestResponse(success=True, data=TemplatePreview(**preview))
