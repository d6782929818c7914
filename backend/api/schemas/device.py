"""Device schemas."""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional, Dict, Any


class DeviceCreate(BaseModel):
    """Request to register a device."""

    device_id: str = Field(min_length=1, max_length=128, description="External device identifier")
    name: str = Field(min_length=1, description="Display name")
    type: str = Field(min_length=1, description="Device type, e.g. 'environmental_sensor'")
    description: Optional[str] = Field(default=None, description="Free-form description")
    status: Optional[str] = Field(default=None, description="Initial status (default: inactive)")
    config: Optional[Dict[str, Any]] = Field(default=None, description="Device configuration")
    room_id: Optional[str] = Field(default=None, description="Location grouping")


class DeviceUpdate(BaseModel):
    """Request to update a device. Omitted fields are left unchanged."""

    device_id: Optional[str] = Field(default=None, min_length=1, max_length=128)
    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[str] = None
    config: Optional[Dict[str, Any]] = None
    room_id: Optional[str] = None


class DeviceStatusUpdate(BaseModel):
    status: str = Field(min_length=1, description="New device status")


class DeviceResponse(BaseModel):
    """Device information response."""

    id: str = Field(description="Device record ID")
    device_id: str = Field(description="External device identifier")
    name: str
    type: str
    description: Optional[str] = None
    status: str
    config: Dict[str, Any] = Field(default_factory=dict)
    room_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DeviceListResponse(BaseModel):
    """Paginated list of devices."""

    items: List[DeviceResponse]
    total: int
    page: int
    per_page: int


class DeviceDeleteResponse(BaseModel):
    message: str
    device: DeviceResponse
