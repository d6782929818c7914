"""Device registry endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from api.schemas.common import PaginationParams
from api.schemas.device import (
    DeviceCreate,
    DeviceDeleteResponse,
    DeviceListResponse,
    DeviceResponse,
    DeviceStatusUpdate,
    DeviceUpdate,
)
from app.dependencies import AuthenticatedUser, get_current_user, get_db
from core.constants import Role
from core.exceptions import NotFoundError
from core.rbac import require_min_role, require_roles
from services.device_service import DeviceService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["devices"])

# Built once at import time; a malformed role list fails here, not per request.
can_manage_devices = require_roles([Role.ADMIN.value, Role.EDITOR.value])
can_control_devices = require_roles([Role.ADMIN.value, Role.EDITOR.value, Role.OPERATOR.value])
can_delete_devices = require_min_role(Role.ADMIN.value)


@router.get("", response_model=DeviceListResponse)
async def list_devices(
    pagination: PaginationParams = Depends(),
    type: Optional[str] = Query(default=None, description="Filter by device type"),
    status_filter: Optional[str] = Query(default=None, alias="status", description="Filter by status"),
    room_id: Optional[str] = Query(default=None, description="Filter by room"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> DeviceListResponse:
    """List registered devices (paginated)."""
    svc = DeviceService(db)
    devices, total = await svc.list(
        offset=pagination.offset,
        limit=pagination.per_page,
        filters={"type": type, "status": status_filter, "room_id": room_id},
    )
    return DeviceListResponse(
        items=[DeviceResponse.model_validate(d) for d in devices],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
    )


@router.get("/{id}", response_model=DeviceResponse)
async def get_device(
    id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> DeviceResponse:
    device = await DeviceService(db).get_by_id(id)
    if not device:
        raise NotFoundError("Device not found")
    return DeviceResponse.model_validate(device)


@router.post("", response_model=DeviceResponse, status_code=status.HTTP_201_CREATED)
async def create_device(
    request: DeviceCreate,
    current_user: AuthenticatedUser = Depends(can_manage_devices),
    db: AsyncSession = Depends(get_db),
) -> DeviceResponse:
    """Register a device. Admins and editors only."""
    device = await DeviceService(db).create_device(request.model_dump())
    logger.info("Device %s created by %s", device.device_id, current_user.username)
    return DeviceResponse.model_validate(device)


@router.put("/{id}", response_model=DeviceResponse)
async def update_device(
    id: str,
    request: DeviceUpdate,
    current_user: AuthenticatedUser = Depends(can_manage_devices),
    db: AsyncSession = Depends(get_db),
) -> DeviceResponse:
    device = await DeviceService(db).update_device(id, request.model_dump(exclude_unset=True))
    if not device:
        raise NotFoundError("Device not found")
    return DeviceResponse.model_validate(device)


@router.patch("/{id}/status", response_model=DeviceResponse)
async def update_device_status(
    id: str,
    request: DeviceStatusUpdate,
    current_user: AuthenticatedUser = Depends(can_control_devices),
    db: AsyncSession = Depends(get_db),
) -> DeviceResponse:
    device = await DeviceService(db).update_status(id, request.status)
    if not device:
        raise NotFoundError("Device not found")
    logger.info("Device %s status -> %s by %s", device.device_id, device.status, current_user.username)
    return DeviceResponse.model_validate(device)


@router.delete("/{id}", response_model=DeviceDeleteResponse)
async def delete_device(
    id: str,
    current_user: AuthenticatedUser = Depends(can_delete_devices),
    db: AsyncSession = Depends(get_db),
) -> DeviceDeleteResponse:
    """Soft-delete a device. Requires admin or above."""
    device = await DeviceService(db).soft_delete(id)
    if not device:
        raise NotFoundError("Device not found")
    logger.info("Device %s deleted by %s", device.device_id, current_user.username)
    return DeviceDeleteResponse(
        message="Device deleted successfully",
        device=DeviceResponse.model_validate(device),
    )
