"""Device registry model."""

from typing import Any, Optional

from sqlalchemy import JSON
from sqlalchemy.orm import Mapped, mapped_column

from core.constants import DeviceStatus
from db.base import BaseModel


class Device(BaseModel):
    """A registered field device (sensor, relay, controller).

    Attributes:
        device_id: External identifier reported by the hardware (unique)
        name: Display name
        type: Free-form device type, e.g. 'environmental_sensor'
        status: One of core.constants.DeviceStatus
        config: Device-specific JSON configuration
        room_id: Optional location grouping
    """

    __tablename__ = "devices"

    device_id: Mapped[str] = mapped_column(nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(nullable=False)
    type: Mapped[str] = mapped_column(nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(nullable=True)
    status: Mapped[str] = mapped_column(nullable=False, default=DeviceStatus.INACTIVE.value)
    config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    room_id: Mapped[Optional[str]] = mapped_column(nullable=True, index=True)
