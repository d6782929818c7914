"""Constants and enums for the IoT control API."""

from enum import Enum


class Role(str, Enum):
    """User role. Stored lower-case; compared case-insensitively."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    EDITOR = "editor"
    OPERATOR = "operator"
    VIEWER = "viewer"
    USER = "user"


class DenialReason(str, Enum):
    """Why the authorization guard refused a request."""

    MISSING_CREDENTIAL = "missing_credential"
    INSUFFICIENT_PRIVILEGE = "insufficient_privilege"


class DeviceStatus(str, Enum):
    """Device lifecycle status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    MAINTENANCE = "maintenance"
    OFFLINE = "offline"


DEFAULT_ROLE = Role.VIEWER

ROLE_HIERARCHY: dict[str, int] = {
    Role.SUPER_ADMIN.value: 5,
    Role.ADMIN.value: 4,
    Role.EDITOR.value: 3,
    Role.OPERATOR.value: 2,
    Role.VIEWER.value: 1,
    Role.USER.value: 1,
}

PERMISSIONS: dict[str, tuple[str, ...]] = {
    # Device management
    "devices:create": ("admin", "editor"),
    "devices:read": ("admin", "editor", "operator", "viewer"),
    "devices:update": ("admin", "editor"),
    "devices:delete": ("admin",),
    "devices:control": ("admin", "editor", "operator"),
    # User management
    "users:create": ("admin",),
    "users:read": ("admin", "editor"),
    "users:update": ("admin",),
    "users:delete": ("admin",),
    # System administration
    "system:config": ("admin",),
    "system:logs": ("admin", "editor"),
    "system:monitoring": ("admin", "editor", "operator"),
    # Rules and automation
    "rules:create": ("admin", "editor"),
    "rules:read": ("admin", "editor", "viewer"),
    "rules:update": ("admin", "editor"),
    "rules:delete": ("admin", "editor"),
    # Scheduled operations
    "schedules:create": ("admin", "editor"),
    "schedules:read": ("admin", "editor", "viewer"),
    "schedules:update": ("admin", "editor"),
    "schedules:delete": ("admin", "editor"),
}
