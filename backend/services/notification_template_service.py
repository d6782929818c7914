"""Notification template processing.

Templates contain ``{name}`` placeholders, e.g. ``"Temp: {weather.temperature}°C"``.
A placeholder resolves from a flat context key first, then by dotted path
into nested dictionaries. Unresolved placeholders are left in place.
"""

import logging
import re
from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from db.models.weather_reading import WeatherReading
from services.weather_service import WeatherService

logger = logging.getLogger(__name__)

VARIABLE_PATTERN = re.compile(r"\{([^{}]+)\}")

_MISSING = object()

WEATHER_FIELDS = (
    "location_name",
    "temperature",
    "humidity",
    "feels_like",
    "dew_point",
    "pressure",
    "wind_speed",
    "wind_direction",
    "condition",
    "collected_at",
)

AVAILABLE_VARIABLES: dict[str, dict[str, Any]] = {
    "weather": {
        "label": "Current weather",
        "fields": {
            "location_name": {"label": "Location", "unit": ""},
            "temperature": {"label": "Temperature", "unit": "°C"},
            "humidity": {"label": "Humidity", "unit": "%"},
            "feels_like": {"label": "Feels like", "unit": "°C"},
            "dew_point": {"label": "Dew point", "unit": "°C"},
            "pressure": {"label": "Pressure", "unit": "mb"},
            "wind_speed": {"label": "Wind speed", "unit": "km/h"},
            "wind_direction": {"label": "Wind direction", "unit": ""},
            "condition": {"label": "Condition", "unit": ""},
            "collected_at": {"label": "Collected at", "unit": ""},
        },
    },
    "temhum1": {
        "label": "Temperature & humidity 1",
        "fields": {
            "temperatura": {"label": "Temperature", "unit": "°C"},
            "humedad": {"label": "Humidity", "unit": "%"},
            "heatindex": {"label": "Heat index", "unit": "°C"},
            "dewpoint": {"label": "Dew point", "unit": "°C"},
            "rssi": {"label": "RSSI", "unit": "dBm"},
        },
    },
    "temhum2": {
        "label": "Temperature & humidity 2",
        "fields": {
            "temperatura": {"label": "Temperature", "unit": "°C"},
            "humedad": {"label": "Humidity", "unit": "%"},
            "heatindex": {"label": "Heat index", "unit": "°C"},
            "dewpoint": {"label": "Dew point", "unit": "°C"},
            "rssi": {"label": "RSSI", "unit": "dBm"},
        },
    },
    "calidad_agua": {
        "label": "Water quality",
        "fields": {
            "ph": {"label": "pH", "unit": ""},
            "ec": {"label": "Conductivity", "unit": "µS/cm"},
            "ppm": {"label": "PPM", "unit": "ppm"},
            "temperatura": {"label": "Water temperature", "unit": "°C"},
            "rssi": {"label": "RSSI", "unit": "dBm"},
        },
    },
    "power_monitor_logs": {
        "label": "Power monitor",
        "fields": {
            "voltage": {"label": "Voltage", "unit": "V"},
            "current": {"label": "Current", "unit": "A"},
            "power": {"label": "Power", "unit": "W"},
            "energy": {"label": "Energy", "unit": "kWh"},
            "frequency": {"label": "Frequency", "unit": "Hz"},
            "power_factor": {"label": "Power factor", "unit": ""},
        },
    },
}


def extract_variables(template: str) -> list[str]:
    """Placeholder names in order of first appearance, without duplicates."""
    seen: dict[str, None] = {}
    for match in VARIABLE_PATTERN.finditer(template or ""):
        seen.setdefault(match.group(1), None)
    return list(seen)


def format_value(value: Any) -> str:
    if value is None:
        return "N/A"
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        # whole numbers print without decimals
        if value.is_integer():
            return str(int(value))
        return f"{value:.2f}"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def resolve_variable(name: str, context: dict[str, Any]) -> Any:
    """Look ``name`` up in ``context``; returns _MISSING when unresolved."""
    if name in context:
        return context[name]

    current: Any = context
    for part in name.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def process_template(template: str, context: Optional[dict[str, Any]] = None) -> str:
    """Replace every resolvable placeholder in ``template``."""
    if not template:
        return template
    context = context or {}

    def _replace(match: re.Match) -> str:
        value = resolve_variable(match.group(1), context)
        if value is _MISSING:
            logger.debug("Unresolved template variable {%s}", match.group(1))
            return match.group(0)
        return format_value(value)

    return VARIABLE_PATTERN.sub(_replace, template)


def available_variables() -> dict[str, dict[str, Any]]:
    return AVAILABLE_VARIABLES


def weather_context(reading: WeatherReading) -> dict[str, Any]:
    return {field: getattr(reading, field) for field in WEATHER_FIELDS}


class NotificationTemplateService:
    """Renders template previews against caller context and stored readings."""

    def __init__(self, db: AsyncSession, weather: Optional[WeatherService] = None):
        self.db = db
        self.weather = weather or WeatherService(db)

    async def build_context(self, context: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Caller context plus the latest weather reading under ``weather``."""
        merged = dict(context or {})
        if "weather" not in merged:
            reading = await self.weather.latest()
            if reading is not None:
                merged["weather"] = weather_context(reading)
        return merged

    async def preview(self, template: str, context: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Process ``template`` and describe the result."""
        resolved = await self.build_context(context)
        return {
            "original_template": template,
            "processed_message": process_template(template, resolved),
            "variables": extract_variables(template),
            "context": context or {},
        }
