"""
Role-based access control

Permissions are a fixed matrix of role -> resource -> action. Anything not in
the matrix is denied.
"""

import logging

from fastapi import HTTPException

logger = logging.getLogger(__name__)

ROLES = (
    "system_admin",  # every organization
    "org_admin",  # everything within their organization
    "admin",  # legacy, same as org_admin
    "manager",
    "office_staff",
    "technician",
    "client",
)

RESOURCES = (
    "clients",
    "technicians",
    "projects",
    "maintenance",
    "repairs",
    "invoices",
    "inventory",
    "reports",
    "settings",
    "vehicles",
    "communications",
    "users",
    "organization",
)

ACTIONS = ("view", "create", "edit", "delete")

ADMIN_ROLES = {"system_admin", "org_admin", "admin"}
OWNERSHIP_EXEMPT_ROLES = {"system_admin", "org_admin", "admin", "manager"}


def _row(view: bool, create: bool, edit: bool, delete: bool) -> dict[str, bool]:
    return {"view": view, "create": create, "edit": edit, "delete": delete}


ALL = _row(True, True, True, True)
NONE = _row(False, False, False, False)
VIEW_ONLY = _row(True, False, False, False)

_ORG_ADMIN = {resource: ALL for resource in RESOURCES}
_ORG_ADMIN["organization"] = _row(True, False, True, False)

PERMISSIONS_BY_ROLE: dict[str, dict[str, dict[str, bool]]] = {
    "system_admin": {resource: ALL for resource in RESOURCES},
    "admin": dict(_ORG_ADMIN),
    "org_admin": dict(_ORG_ADMIN),
    "manager": {
        "clients": ALL,
        "technicians": _row(True, True, True, False),
        "projects": ALL,
        "maintenance": ALL,
        "repairs": ALL,
        "invoices": _row(True, True, True, False),
        "inventory": ALL,
        "reports": ALL,
        "settings": _row(True, False, True, False),
        "vehicles": _row(True, True, True, False),
        "communications": ALL,
        "users": _row(True, True, True, False),
        "organization": VIEW_ONLY,
    },
    "office_staff": {
        "clients": _row(True, True, True, False),
        "technicians": VIEW_ONLY,
        "projects": _row(True, True, True, False),
        "maintenance": _row(True, True, True, False),
        "repairs": _row(True, True, True, False),
        "invoices": _row(True, True, True, False),
        "inventory": _row(True, True, True, False),
        "reports": _row(True, True, True, False),
        "settings": NONE,
        "vehicles": VIEW_ONLY,
        "communications": _row(True, True, True, False),
        "users": VIEW_ONLY,
        "organization": VIEW_ONLY,
    },
    "technician": {
        "clients": VIEW_ONLY,
        "technicians": VIEW_ONLY,
        "projects": _row(True, False, True, False),
        "maintenance": _row(True, True, True, False),
        "repairs": _row(True, True, True, False),
        "invoices": VIEW_ONLY,
        "inventory": _row(True, False, True, False),
        "reports": _row(True, True, True, False),
        "settings": NONE,
        "vehicles": VIEW_ONLY,
        "communications": _row(True, True, False, False),
        "users": NONE,
        "organization": NONE,
    },
    "client": {
        "clients": _row(True, False, True, False),  # own profile only
        "technicians": VIEW_ONLY,
        "projects": VIEW_ONLY,
        "maintenance": VIEW_ONLY,
        "repairs": _row(True, True, False, False),  # can request repairs
        "invoices": VIEW_ONLY,
        "inventory": NONE,
        "reports": VIEW_ONLY,
        "settings": NONE,
        "vehicles": NONE,
        "communications": _row(True, True, False, False),
        "users": NONE,
        "organization": NONE,
    },
}


def has_permission(role: str, resource: str, action: str) -> bool:
    """Check whether a role may perform an action on a resource"""
    role_permissions = PERMISSIONS_BY_ROLE.get(role)
    if role_permissions is None:
        logger.warning(f"⚠️ Unknown role: {role}")
        return False

    resource_permissions = role_permissions.get(resource)
    if resource_permissions is None:
        logger.warning(f"⚠️ Unknown resource: {resource} for role: {role}")
        return False

    return resource_permissions.get(action, False)


def get_role_permissions(role: str) -> dict[str, dict[str, bool]]:
    """Get the full permission matrix for a role (empty for unknown roles)"""
    return PERMISSIONS_BY_ROLE.get(role, {})


def is_admin_role(role: str) -> bool:
    return role in ADMIN_ROLES


def check_resource_ownership(user, owner_user_id) -> None:
    """
    Raise 403 unless the user may touch a resource owned by owner_user_id.

    Admin-level roles and managers always pass. Clients pass only for
    their own records.
    """
    if user.role in OWNERSHIP_EXEMPT_ROLES:
        return

    if user.role == "client" and owner_user_id is not None and user.id == owner_user_id:
        return

    logger.warning(
        f"🚫 Ownership check failed for user {user.id} ({user.username}) "
        f"with role {user.role}: resource owned by {owner_user_id}"
    )
    raise HTTPException(
        status_code=403,
        detail={
            "message": "Forbidden",
            "details": "You can only access your own resources",
            "role": user.role,
        },
    )
