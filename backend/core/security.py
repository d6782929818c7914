"""
Security utilities for the IoT control API.

Includes:
- Password hashing with bcrypt
- JWT issuing and verification
- Raw token inspection for diagnostics
"""

import logging
import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

import jwt
from passlib.context import CryptContext
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.config import get_settings
from core.exceptions import UnauthorizedError

logger = logging.getLogger(__name__)

# Initialize security settings
settings = get_settings()

# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

DEFAULT_EXPIRES_SECONDS = 3600
_EXPIRES_RE = re.compile(r"^(\d+)([smhd])$")
_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}

_dev_signing_key: Optional[str] = None


class TokenClaims(BaseModel):
    """JWT claim set."""

    sub: str  # user id
    id: str
    username: str
    role: Optional[str] = None
    iat: datetime
    exp: datetime


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Hashed password
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hash.

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password to verify against

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def parse_expires_in(value: Union[str, int]) -> int:
    """Convert '15s', '30m', '1h', '7d' or a plain number to seconds.

    Unparseable values fall back to one hour.
    """
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    match = _EXPIRES_RE.match(text)
    if not match:
        return DEFAULT_EXPIRES_SECONDS
    return int(match.group(1)) * _UNIT_SECONDS[match.group(2)]


def get_signing_key() -> str:
    """Return the JWT signing key.

    Outside production an unset JWT_SECRET is replaced by a random key that
    lives as long as the process; tokens do not survive a restart.
    """
    global _dev_signing_key

    if settings.JWT_SECRET:
        return settings.JWT_SECRET
    if _dev_signing_key is None:
        logger.warning("JWT_SECRET is not set; using an ephemeral signing key")
        _dev_signing_key = secrets.token_urlsafe(48)
    return _dev_signing_key


def create_access_token(
    user_id: str,
    username: str,
    role: Optional[str],
    expires_in: Optional[Union[str, int]] = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        user_id: User ID
        username: Login name
        role: Role at issuance time
        expires_in: Lifetime override (defaults to JWT_EXPIRES_IN)

    Returns:
        Encoded JWT token
    """
    now = datetime.now(timezone.utc)
    lifetime = parse_expires_in(expires_in if expires_in is not None else settings.JWT_EXPIRES_IN)

    payload = {
        "sub": str(user_id),
        "id": str(user_id),
        "username": username,
        "role": role,
        "iat": now,
        "exp": now + timedelta(seconds=lifetime),
    }

    return jwt.encode(payload, get_signing_key(), algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> TokenClaims:
    """
    Verify and decode a JWT token.

    Args:
        token: Encoded JWT token

    Returns:
        Decoded claim set

    Raises:
        UnauthorizedError: If token is invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            get_signing_key(),
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Not authorized, token expired", error_code="token_expired")
    except jwt.InvalidTokenError as e:
        logger.info("Token verification failed: %s", type(e).__name__)
        raise UnauthorizedError("Not authorized, token failed", error_code="token_invalid")

    user_id = payload.get("sub") or payload.get("id")
    username = payload.get("username")
    if not user_id or not isinstance(username, str) or not username:
        raise UnauthorizedError("Invalid token payload", error_code="token_invalid")

    # A non-string role claim counts as no role at all
    role = payload.get("role")
    if not isinstance(role, str):
        role = None

    try:
        return TokenClaims(
            sub=str(user_id),
            id=str(payload.get("id") or user_id),
            username=username,
            role=role,
            iat=datetime.fromtimestamp(payload.get("iat", 0), tz=timezone.utc),
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
    except (PydanticValidationError, TypeError, ValueError, OverflowError, OSError):
        raise UnauthorizedError("Invalid token payload", error_code="token_invalid")


def decode_unverified(token: str) -> tuple[dict[str, Any], dict[str, Any]]:
    """Return (header, payload) without checking signature or expiry.

    For inspection only; never use the result for an access decision.
    """
    header = jwt.get_unverified_header(token)
    payload = jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
    return header, payload
