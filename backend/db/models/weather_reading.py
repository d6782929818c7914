"""Weather reading model."""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from db.base import BaseModel


class WeatherReading(BaseModel):
    """One snapshot of current conditions fetched from the weather provider."""

    __tablename__ = "weather_readings"

    location_name: Mapped[str] = mapped_column(nullable=False, index=True)
    region: Mapped[Optional[str]] = mapped_column(nullable=True)
    country: Mapped[Optional[str]] = mapped_column(nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(nullable=True)

    temperature: Mapped[Optional[float]] = mapped_column(nullable=True)
    humidity: Mapped[Optional[float]] = mapped_column(nullable=True)
    feels_like: Mapped[Optional[float]] = mapped_column(nullable=True)
    dew_point: Mapped[Optional[float]] = mapped_column(nullable=True)
    pressure: Mapped[Optional[float]] = mapped_column(nullable=True)
    wind_speed: Mapped[Optional[float]] = mapped_column(nullable=True)
    wind_direction: Mapped[Optional[str]] = mapped_column(nullable=True)
    condition: Mapped[Optional[str]] = mapped_column(nullable=True)

    raw: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    collected_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
