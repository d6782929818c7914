"""Device registry service."""

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.constants import DeviceStatus
from core.exceptions import BadRequestError, ConflictError
from db.models.device import Device
from services.base import BaseService

logger = logging.getLogger(__name__)

VALID_STATUSES = frozenset(s.value for s in DeviceStatus)


class DeviceService(BaseService[Device]):
    """CRUD for registered devices, keyed internally by UUID and externally by device_id."""

    def __init__(self, db: AsyncSession):
        super().__init__(Device, db)

    async def create_device(self, data: dict[str, Any]) -> Device:
        """Register a device.

        Raises:
            ConflictError: Duplicate device_id
            BadRequestError: Unknown status
        """
        # device_id stays reserved after a soft delete (unique column)
        if await self.get_by_field("device_id", data["device_id"], include_deleted=True):
            raise ConflictError(f"Device with device_id '{data['device_id']}' already exists")
        if data.get("status") is None:
            data["status"] = DeviceStatus.INACTIVE.value
        self._check_status(data["status"])
        if data.get("config") is None:
            data["config"] = {}

        device = await self.create(data)
        logger.info("Device registered: %s (%s)", device.device_id, device.type)
        return device

    async def update_device(self, id: str, data: dict[str, Any]) -> Optional[Device]:
        """Update mutable device fields.

        Raises:
            ConflictError: device_id collides with another device
            BadRequestError: Unknown status
        """
        new_device_id = data.get("device_id")
        if new_device_id:
            other = await self.get_by_field("device_id", new_device_id, include_deleted=True)
            if other and other.id != id:
                raise ConflictError(f"Device with device_id '{new_device_id}' already exists")
        if data.get("status") is not None:
            self._check_status(data["status"])
        return await self.update(id, data)

    async def update_status(self, id: str, status: str) -> Optional[Device]:
        self._check_status(status)
        return await self.update(id, {"status": status})

    @staticmethod
    def _check_status(status: str) -> None:
        if status not in VALID_STATUSES:
            raise BadRequestError(
                f"Invalid status '{status}'; expected one of {', '.join(sorted(VALID_STATUSES))}"
            )
