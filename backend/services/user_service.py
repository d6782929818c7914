"""User service: listing and role administration."""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.constants import Role
from core.rbac import normalize_role
from db.models.user import User
from services.base import BaseService

logger = logging.getLogger(__name__)


class UserService(BaseService[User]):
    """Service for user administration."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def list_users(self, offset: int = 0, limit: int = 50):
        """List users, oldest first."""
        return await self.list(offset=offset, limit=limit, order_by="created_at", order_desc=False)

    async def set_role(self, user_id: str, role: str) -> Optional[User]:
        """Change a user's role.

        The new role takes effect on the user's next request when roles are
        read from the database; tokens already issued keep the old claim.

        Raises:
            ValueError: If ``role`` is not a known role
        """
        normalized = normalize_role(role)
        if normalized not in {r.value for r in Role}:
            raise ValueError(f"Unknown role: {role}")

        user = await self.get_by_id(user_id)
        if not user:
            return None

        previous = user.role
        user = await self.update(user_id, {"role": normalized})
        logger.info("Role for user %s changed: %s -> %s", user.username, previous, normalized)
        return user

    async def set_active(self, user_id: str, is_active: bool) -> Optional[User]:
        """Enable or disable an account."""
        user = await self.get_by_id(user_id)
        if not user:
            return None
        user.is_active = is_active
        await self.db.flush()
        await self.db.refresh(user)
        return user
