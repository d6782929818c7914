"""Weather collection service.

Fetches current conditions from a WeatherAPI.com compatible provider
(``GET {WEATHER_API_URL}/current.json?key=...&q=...``) and stores them as
WeatherReading rows.
"""

import math
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from core.exceptions import ServiceUnavailableError, UpstreamError
from db.models.weather_reading import WeatherReading

logger = structlog.get_logger(__name__)

# Magnus formula coefficients
_MAGNUS_A = 17.27
_MAGNUS_B = 237.7


def calc_dew_point(temperature: Optional[float], humidity: Optional[float]) -> Optional[float]:
    """Dew point in °C from temperature (°C) and relative humidity (%)."""
    if temperature is None or humidity is None or humidity <= 0:
        return None
    alpha = (_MAGNUS_A * temperature) / (_MAGNUS_B + temperature) + math.log(humidity / 100)
    return round(_MAGNUS_B * alpha / (_MAGNUS_A - alpha), 2)


class WeatherService:
    """Fetch-and-store for current weather conditions."""

    def __init__(
        self,
        db: AsyncSession,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.db = db
        self.settings = settings or get_settings()
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return self.settings.weather_configured

    async def fetch_current(self, location: Optional[str] = None) -> dict[str, Any]:
        """Return the provider's raw JSON for ``location``.

        Raises:
            ServiceUnavailableError: WEATHER_API_KEY is not set
            UpstreamError: Transport failure or non-2xx response
        """
        if not self.is_configured:
            raise ServiceUnavailableError("Weather service not configured: WEATHER_API_KEY not set")

        query = location or self.settings.WEATHER_LOCATION
        url = self.settings.WEATHER_API_URL.rstrip("/") + "/current.json"
        logger.info("weather_fetch", location=query)

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.WEATHER_TIMEOUT,
                transport=self._transport,
            ) as client:
                response = await client.get(
                    url,
                    params={"key": self.settings.WEATHER_API_KEY, "q": query, "aqi": "no"},
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as e:
            logger.error("weather_fetch_failed", status_code=e.response.status_code, location=query)
            raise UpstreamError(f"Weather provider returned HTTP {e.response.status_code}")
        except (httpx.HTTPError, ValueError) as e:
            logger.error("weather_fetch_failed", error=type(e).__name__, location=query)
            raise UpstreamError(f"Weather provider request failed: {type(e).__name__}")

    @staticmethod
    def to_reading(payload: dict[str, Any]) -> WeatherReading:
        """Map a provider payload onto a WeatherReading (not yet persisted)."""
        location = payload.get("location") or {}
        current = payload.get("current") or {}
        condition = current.get("condition") or {}

        temperature = current.get("temp_c")
        humidity = current.get("humidity")
        if not location.get("name"):
            raise UpstreamError("Weather provider response has no location name")

        return WeatherReading(
            location_name=location["name"],
            region=location.get("region"),
            country=location.get("country"),
            latitude=location.get("lat"),
            longitude=location.get("lon"),
            temperature=temperature,
            humidity=humidity,
            feels_like=current.get("feelslike_c"),
            dew_point=calc_dew_point(temperature, humidity),
            pressure=current.get("pressure_mb"),
            wind_speed=current.get("wind_kph"),
            wind_direction=current.get("wind_dir"),
            condition=condition.get("text"),
            raw=payload,
            collected_at=datetime.now(timezone.utc),
        )

    async def collect(self, location: Optional[str] = None) -> WeatherReading:
        """Fetch current conditions and persist them."""
        payload = await self.fetch_current(location)
        reading = self.to_reading(payload)
        self.db.add(reading)
        await self.db.flush()
        await self.db.refresh(reading)
        logger.info(
            "weather_collected",
            location=reading.location_name,
            temperature=reading.temperature,
            humidity=reading.humidity,
        )
        return reading

    async def latest(self) -> Optional[WeatherReading]:
        result = await self.db.execute(
            select(WeatherReading)
            .where(WeatherReading.is_deleted == False)  # noqa: E712
            .order_by(WeatherReading.collected_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
