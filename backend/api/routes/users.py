"""User administration endpoints: list, change role, enable/disable."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from api.schemas.auth import ActiveUpdateRequest, AdminUserResponse, RoleUpdateRequest
from api.schemas.common import PaginationParams
from app.dependencies import AuthenticatedUser, get_db
from core.exceptions import NotFoundError, ValidationError
from core.rbac import require_permission
from services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


@router.get("", response_model=dict)
async def list_users(
    pagination: PaginationParams = Depends(),
    current_user: AuthenticatedUser = Depends(require_permission("users:read")),
    db: AsyncSession = Depends(get_db),
) -> dict:
    """List user accounts (paginated)."""
    svc = UserService(db)
    users, total = await svc.list_users(offset=pagination.offset, limit=pagination.per_page)

    return {
        "users": [AdminUserResponse.model_validate(u) for u in users],
        "total": total,
        "page": pagination.page,
        "per_page": pagination.per_page,
    }


@router.patch("/{user_id}/role", response_model=AdminUserResponse)
async def update_role(
    user_id: str,
    request: RoleUpdateRequest,
    current_user: AuthenticatedUser = Depends(require_permission("users:update")),
    db: AsyncSession = Depends(get_db),
) -> AdminUserResponse:
    """Change a user's role. Takes effect on that user's next request."""
    svc = UserService(db)
    try:
        user = await svc.set_role(user_id, request.role)
    except ValueError as e:
        raise ValidationError(str(e))

    if not user:
        raise NotFoundError("User not found")

    logger.info("Role of %s set to %s by %s", user.username, user.role, current_user.username)
    return AdminUserResponse.model_validate(user)


@router.patch("/{user_id}/active", response_model=AdminUserResponse)
async def update_active(
    user_id: str,
    request: ActiveUpdateRequest,
    current_user: AuthenticatedUser = Depends(require_permission("users:update")),
    db: AsyncSession = Depends(get_db),
) -> AdminUserResponse:
    """Enable or disable an account."""
    if user_id == current_user.id and not request.is_active:
        raise ValidationError("Cannot deactivate your own account")

    svc = UserService(db)
    user = await svc.set_active(user_id, request.is_active)
    if not user:
        raise NotFoundError("User not found")

    return AdminUserResponse.model_validate(user)
