"""Weather schemas."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class WeatherCollectRequest(BaseModel):
    """Optional override of the configured location."""

    location: Optional[str] = Field(default=None, min_length=1, description="Provider query, e.g. 'Villarrica,Chile'")


class WeatherReadingResponse(BaseModel):
    """Stored weather reading."""

    id: str
    location_name: str
    region: Optional[str] = None
    country: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    feels_like: Optional[float] = None
    dew_point: Optional[float] = None
    pressure: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_direction: Optional[str] = None
    condition: Optional[str] = None
    collected_at: datetime

    class Config:
        from_attributes = True


class WeatherCollectResponse(BaseModel):
    success: bool = True
    message: str
    data: WeatherReadingResponse


class WeatherConfigResponse(BaseModel):
    """Weather provider configuration (never includes the API key)."""

    configured: bool
    location: str
    api_url: str
