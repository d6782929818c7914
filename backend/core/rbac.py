"""Role-Based Access Control (RBAC) enforcement.

The guard itself is ``authorize``: a pure predicate over the caller's role
and the permitted-role collection. The ``require_*`` factories wrap it as
FastAPI dependencies for route declarations.

The permitted roles are always ONE collection argument. Passing a bare
string, a nested list, or an empty collection raises RoleConfigurationError
when the dependency is built, so a misdeclared route fails at import time
instead of denying every request.

Usage:
    @router.post("/devices", status_code=201)
    async def create_device(
        user: AuthenticatedUser = Depends(require_roles([Role.ADMIN, Role.EDITOR])),
    ): ...

    @router.get("/users", dependencies=[Depends(require_permission("users:read"))])
    async def list_users(...): ...
"""

import logging
from collections.abc import Collection
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Depends, Request

from app.dependencies import AuthenticatedUser, get_current_user
from core.constants import PERMISSIONS, ROLE_HIERARCHY, DenialReason, Role
from core.exceptions import ForbiddenError, RoleConfigurationError, UnauthorizedError

logger = logging.getLogger(__name__)

KNOWN_ROLES = frozenset(r.value for r in Role)


@dataclass(frozen=True)
class AuthorizationDecision:
    """Outcome of a single guard evaluation."""

    allowed: bool
    reason: Optional[DenialReason]
    role: Optional[str]
    permitted: frozenset[str]


def normalize_role(role: str) -> str:
    """Canonical form used for every role comparison."""
    return role.strip().lower()


def normalize_roles(roles: Collection[str]) -> frozenset[str]:
    """Validate and normalize a permitted-role collection.

    Raises:
        RoleConfigurationError: ``roles`` is a string, not a collection,
            contains a non-string or blank element, or is empty.
    """
    if isinstance(roles, (str, bytes)):
        raise RoleConfigurationError(
            f"permitted roles must be a collection of role names, got the string {roles!r}; "
            f"wrap it: [{roles!r}]"
        )
    if not isinstance(roles, Collection):
        raise RoleConfigurationError(
            f"permitted roles must be a collection of role names, got {type(roles).__name__}"
        )

    normalized = set()
    for role in roles:
        if not isinstance(role, str):
            raise RoleConfigurationError(
                f"permitted roles must contain strings only, got {type(role).__name__}: {role!r}"
            )
        if not role.strip():
            raise RoleConfigurationError("permitted roles must not contain blank names")
        normalized.add(normalize_role(role))

    if not normalized:
        raise RoleConfigurationError("permitted roles must not be empty")
    return frozenset(normalized)


def authorize(user_role: Optional[str], allowed_roles: Collection[str]) -> AuthorizationDecision:
    """Decide whether ``user_role`` is one of ``allowed_roles``.

    Comparison is case-insensitive and ignores surrounding whitespace.
    A missing, blank or non-string caller role is denied with
    MISSING_CREDENTIAL; a present role outside the set with
    INSUFFICIENT_PRIVILEGE.
    """
    permitted = normalize_roles(allowed_roles)

    if not isinstance(user_role, str) or not user_role.strip():
        return AuthorizationDecision(
            allowed=False,
            reason=DenialReason.MISSING_CREDENTIAL,
            role=None,
            permitted=permitted,
        )

    role = normalize_role(user_role)
    if role not in permitted:
        return AuthorizationDecision(
            allowed=False,
            reason=DenialReason.INSUFFICIENT_PRIVILEGE,
            role=role,
            permitted=permitted,
        )
    return AuthorizationDecision(allowed=True, reason=None, role=role, permitted=permitted)


def _validate_known(roles: frozenset[str]) -> None:
    unknown = sorted(roles - KNOWN_ROLES)
    if unknown:
        raise RoleConfigurationError(
            f"unknown role(s) {', '.join(unknown)}; expected one of {', '.join(sorted(KNOWN_ROLES))}"
        )


def _enforce(
    decision: AuthorizationDecision,
    user: AuthenticatedUser,
    request: Request,
    extra: dict[str, Any],
) -> AuthenticatedUser:
    """Turn a guard decision into a response: pass the user through or raise 401/403."""
    if decision.reason is DenialReason.MISSING_CREDENTIAL:
        logger.warning(
            "Authorization failed for %s %s: user %s has no role",
            request.method,
            request.url.path,
            user.username,
        )
        raise UnauthorizedError(
            "Not authorized to access this resource",
            error_code=DenialReason.MISSING_CREDENTIAL.value,
        )

    if not decision.allowed:
        logger.warning(
            "Authorization failed for user %s (role: %s) on %s %s; permitted: %s",
            user.username,
            user.role,
            request.method,
            request.url.path,
            ", ".join(sorted(decision.permitted)),
        )
        raise ForbiddenError(
            "Forbidden: you do not have the required role to access this resource",
            error_code=DenialReason.INSUFFICIENT_PRIVILEGE.value,
            extra={**extra, "user_role": user.role},
        )

    logger.debug(
        "User %s (role: %s) authorized for %s %s",
        user.username,
        user.role,
        request.method,
        request.url.path,
    )
    return user


def require_roles(roles: Collection[str]):
    """FastAPI dependency that admits callers holding one of ``roles``.

    Returns 401 when the caller has no role and 403 when the role is not
    permitted. Raises RoleConfigurationError immediately on a malformed
    ``roles`` argument or an unknown role name.
    """
    permitted = normalize_roles(roles)
    _validate_known(permitted)
    required = sorted(permitted)

    async def _check(
        request: Request,
        current_user: AuthenticatedUser = Depends(get_current_user),
    ) -> AuthenticatedUser:
        decision = authorize(current_user.role, permitted)
        return _enforce(decision, current_user, request, {"required_roles": required})

    return _check


def require_permission(permission: str):
    """FastAPI dependency that enforces a named permission from PERMISSIONS.

    Raises RoleConfigurationError immediately for an unknown permission.
    """
    allowed = PERMISSIONS.get(permission)
    if allowed is None:
        raise RoleConfigurationError(f"unknown permission: {permission}")
    permitted = normalize_roles(allowed)

    async def _check(
        request: Request,
        current_user: AuthenticatedUser = Depends(get_current_user),
    ) -> AuthenticatedUser:
        decision = authorize(current_user.role, permitted)
        return _enforce(
            decision,
            current_user,
            request,
            {"required_permission": permission, "allowed_roles": sorted(permitted)},
        )

    return _check


def require_min_role(min_role: str):
    """FastAPI dependency that admits callers at or above ``min_role`` in ROLE_HIERARCHY."""
    if not isinstance(min_role, str) or normalize_role(min_role) not in ROLE_HIERARCHY:
        raise RoleConfigurationError(f"unknown minimum role: {min_role!r}")
    required_name = normalize_role(min_role)
    required_level = ROLE_HIERARCHY[required_name]
    # Every role at or above the threshold, so the check is still set membership.
    permitted = frozenset(name for name, level in ROLE_HIERARCHY.items() if level >= required_level)

    async def _check(
        request: Request,
        current_user: AuthenticatedUser = Depends(get_current_user),
    ) -> AuthenticatedUser:
        decision = authorize(current_user.role, permitted)
        return _enforce(
            decision,
            current_user,
            request,
            {
                "required_role": required_name,
                "required_level": required_level,
                "user_level": ROLE_HIERARCHY.get(decision.role or "", 0),
            },
        )

    return _check
