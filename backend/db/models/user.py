"""User model for the IoT control API."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column

from core.constants import DEFAULT_ROLE
from db.base import BaseModel


class User(BaseModel):
    """User model representing an API account.

    Attributes:
        id: Unique identifier (UUID string)
        username: Login name (unique)
        email: Optional contact address
        password_hash: Bcrypt hashed password
        role: Single role name, one of core.constants.Role
        is_active: Whether the account may authenticate
        last_login_at: Timestamp of last successful login
    """

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(nullable=False, unique=True, index=True)
    email: Mapped[Optional[str]] = mapped_column(nullable=True)
    password_hash: Mapped[str] = mapped_column(nullable=False)
    role: Mapped[Optional[str]] = mapped_column(nullable=True, default=DEFAULT_ROLE.value)
    is_active: Mapped[bool] = mapped_column(default=True, index=True)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
