"""
Marketplace account roles and the landing page each role is sent to.

Roles live on ``profiles.role``; a NULL role means the user signed in but has
not yet picked a side of the marketplace.
"""

from typing import Dict, Optional, FrozenSet
from enum import Enum


ROLE_RETAILER = "retailer"
ROLE_WHOLESALER = "wholesaler"
ROLE_ADMIN = "admin"

# Admin is granted through ADMIN_EMAILS only
SELF_SELECTABLE_ROLES: FrozenSet[str] = frozenset({ROLE_RETAILER, ROLE_WHOLESALER})

ROLE_SELECTION_PATH = "/role-selection"
ANONYMOUS_LANDING_PATH = "/"

ROLE_HOME_PATHS: Dict[str, str] = {
    ROLE_RETAILER: "/retailer/dashboard",
    ROLE_WHOLESALER: "/wholesaler/dashboard",
    ROLE_ADMIN: "/admin/dashboard",
}


class RoleEnum(str, Enum):
    """Enum for marketplace roles used in schemas and validation."""
    retailer = ROLE_RETAILER
    wholesaler = ROLE_WHOLESALER
    admin = ROLE_ADMIN


def is_self_selectable(role: str) -> bool:
    return role in SELF_SELECTABLE_ROLES


def redirect_path_for(role: Optional[str], authenticated: bool = True) -> str:
    """Return the page a user should land on after signing in.

    Unauthenticated visitors go to the public landing page, users without a
    role go to role selection, everyone else to their portal dashboard.
    """
    if not authenticated:
        return ANONYMOUS_LANDING_PATH
    if not role:
        return ROLE_SELECTION_PATH
    return ROLE_HOME_PATHS.get(role, ROLE_SELECTION_PATH)
