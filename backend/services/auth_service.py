"""Authentication service: login, register, token issuing."""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.constants import DEFAULT_ROLE
from core.security import create_access_token, hash_password, verify_password
from db.models.user import User

logger = logging.getLogger(__name__)


class AuthService:
    """Handles authentication, registration, and token operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def register(
        self,
        username: str,
        password: str,
        email: Optional[str] = None,
        role: str = DEFAULT_ROLE.value,
    ) -> User:
        """Register a new user.

        Args:
            username: Login name (must be unique)
            password: Plain text password (will be hashed)
            email: Optional contact address
            role: Initial role

        Returns:
            The created user

        Raises:
            ValueError: If the username is already taken
        """
        existing = await self.get_user_by_username(username)
        if existing:
            raise ValueError(f"Username already in use: {username}")

        user = User(
            username=username,
            email=email,
            password_hash=hash_password(password),
            role=role,
        )
        self.db.add(user)
        await self.db.flush()
        await self.db.refresh(user)

        logger.info("User registered: %s", username)
        return user

    async def login(self, username: str, password: str) -> Optional[dict]:
        """Authenticate a user and issue an access token.

        Args:
            username: Login name
            password: Plain text password

        Returns:
            Dict with token and user, or None if authentication fails
        """
        result = await self.db.execute(
            select(User).where(
                User.username == username,
                User.is_deleted == False,  # noqa: E712
                User.is_active == True,  # noqa: E712
            )
        )
        user = result.scalar_one_or_none()

        if not user or not verify_password(password, user.password_hash):
            logger.info("Failed login for %s", username)
            return None

        user.last_login_at = datetime.now(timezone.utc)
        await self.db.flush()
        await self.db.refresh(user)

        token = create_access_token(user_id=user.id, username=user.username, role=user.role)

        logger.info("User authenticated: %s (role: %s)", user.username, user.role)
        return {"token": token, "token_type": "bearer", "user": user}

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by ID."""
        result = await self.db.execute(
            select(User).where(User.id == user_id, User.is_deleted == False)  # noqa: E712
        )
        return result.scalar_one_or_none()

    async def get_user_by_username(self, username: str) -> Optional[User]:
        """Get a user by username."""
        result = await self.db.execute(
            select(User).where(User.username == username, User.is_deleted == False)  # noqa: E712
        )
        return result.scalar_one_or_none()
