"""
Role-based permission helpers for assessment endpoints.

Authentication happens upstream; the gateway forwards the caller's role in
the X-User-Role header.
"""

from typing import List, Optional

from fastapi import Depends, status

from assessment_engine.core.dependencies import get_caller_role
from assessment_engine.errors import raise_app_error


class Roles:
    """Standard roles in the competency platform."""
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"

    # All roles list for validation
    ALL = [ADMIN, MANAGER, EMPLOYEE]

    # Roles allowed to override an employee's assessed level
    LEVEL_REVIEWERS = [ADMIN, MANAGER]


def check_role_permission(user_role: Optional[str], allowed_roles: List[str]) -> bool:
    """
    Check if user's role is in the list of allowed roles.

    Args:
        user_role: The caller's role (case-insensitive)
        allowed_roles: List of roles that are permitted

    Returns:
        True if user has permission, False otherwise
    """
    if not user_role or not allowed_roles:
        return False
    return user_role.strip().lower() in allowed_roles


def raise_if_not_roles(user_role: Optional[str], allowed_roles: List[str], action: str = "perform this action") -> None:
    """
    Raise 403 error if user doesn't have one of the allowed roles.

    Raises:
        AppError: 403 FORBIDDEN if user doesn't have permission
    """
    if not check_role_permission(user_role, allowed_roles):
        raise_app_error(
            status.HTTP_403_FORBIDDEN,
            "FORBIDDEN",
            f"Insufficient permissions to {action}. Required: {', '.join(allowed_roles)}",
            {"role": user_role, "allowed_roles": list(allowed_roles)},
        )


def require_roles(allowed_roles: List[str], action: str = "perform this action"):
    """
    Dependency factory requiring the caller to hold one of the allowed roles.

    Usage:
        @router.post("/manager-level")
        async def set_manager_level(
            _: str = Depends(require_roles(Roles.LEVEL_REVIEWERS)),
        ):
            ...
    """
    async def role_checker(user_role: Optional[str] = Depends(get_caller_role)) -> str:
        raise_if_not_roles(user_role, allowed_roles, action)
        return user_role.strip().lower()

    return role_checker
