"""FastAPI dependency injection functions."""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from core.exceptions import ForbiddenError, UnauthorizedError
from core.security import TokenClaims, verify_token
from db.database import AsyncSessionLocal

logger = logging.getLogger(__name__)

# auto_error=False so a missing header is reported as 401 by get_current_user
security_scheme = HTTPBearer(auto_error=False)


class AuthenticatedUser(BaseModel):
    """The caller of a protected endpoint, as resolved for this request."""

    id: str
    username: str
    role: Optional[str] = None
    email: Optional[str] = None
    token_role: Optional[str] = None
    claims: TokenClaims

    @property
    def role_changed(self) -> bool:
        """True when the stored role differs from the role the token was issued with."""
        return (self.role or "") != (self.token_role or "")


async def get_db() -> AsyncSession:
    """
    Provide a database session for API endpoints.

    Yields an async SQLAlchemy session that is automatically
    committed on success or rolled back on error.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            logger.error("Database error: %s", e)
            await session.rollback()
            raise
        except Exception:
            # IoTAPIException and other request errors: roll back quietly
            await session.rollback()
            raise
        finally:
            await session.close()


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
    db: AsyncSession = Depends(get_db),
) -> AuthenticatedUser:
    """
    Resolve the caller from the Authorization header.

    The token is always verified. With AUTH_ROLE_SOURCE=database the role is
    re-read from the user row so a role change applies without re-login;
    with AUTH_ROLE_SOURCE=token the role claim is trusted.

    Raises:
        UnauthorizedError: Missing/invalid/expired token, or user no longer exists
        ForbiddenError: User account is deactivated
    """
    if credentials is None or not credentials.credentials:
        logger.warning("No token found, authorization denied")
        raise UnauthorizedError("Not authorized, no token", error_code="missing_credential")

    claims = verify_token(credentials.credentials)
    settings = get_settings()

    if settings.AUTH_ROLE_SOURCE == "token":
        return AuthenticatedUser(
            id=claims.sub,
            username=claims.username,
            role=claims.role,
            token_role=claims.role,
            claims=claims,
        )

    from services.auth_service import AuthService

    user = await AuthService(db).get_user_by_id(claims.sub)

    if not user:
        logger.warning("User %s from token not found in database", claims.sub)
        raise UnauthorizedError("User not found", error_code="user_not_found")

    if not user.is_active:
        raise ForbiddenError("User account is deactivated", error_code="account_disabled")

    if (user.role or "") != (claims.role or ""):
        logger.info(
            "Role change detected for user %s: %s -> %s",
            user.username,
            claims.role,
            user.role,
        )

    return AuthenticatedUser(
        id=user.id,
        username=user.username,
        role=user.role,
        email=user.email,
        token_role=claims.role,
        claims=claims,
    )
