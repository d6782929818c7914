"""Database models for the IoT control API.

This module imports all models to ensure they are registered
with SQLAlchemy's declarative base.
"""

from db.models.user import User
from db.models.device import Device
from db.models.weather_reading import WeatherReading

__all__ = [
    "User",
    "Device",
    "WeatherReading",
]
