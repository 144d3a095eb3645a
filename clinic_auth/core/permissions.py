"""
Core permissions utilities for role-based access control.

Access rules live in one table keyed by HTTP method and route template. The
access guard looks the matched route up here before the handler runs.
"""
from typing import AbstractSet, Dict, FrozenSet, Iterable, Tuple
from ..auth.models import UserRole

ANY_AUTHENTICATED: FrozenSet[UserRole] = frozenset()
ADMIN_ONLY: FrozenSet[UserRole] = frozenset({UserRole.ADMIN})
CLINICAL_STAFF: FrozenSet[UserRole] = frozenset({UserRole.ADMIN, UserRole.DOCTOR, UserRole.NURSE})

# Route-based role mapping
ROUTE_POLICIES: Dict[Tuple[str, str], FrozenSet[UserRole]] = {
    # Session routes
    ("GET", "/api/v1/auth/profile"): ANY_AUTHENTICATED,
    ("POST", "/api/v1/auth/logout"): ANY_AUTHENTICATED,
    ("GET", "/api/v1/auth/admin/audit-logs"): ADMIN_ONLY,

    # User directory routes
    ("POST", "/api/v1/users"): CLINICAL_STAFF,
    ("GET", "/api/v1/users"): CLINICAL_STAFF,
    ("GET", "/api/v1/users/{user_id}"): CLINICAL_STAFF,
    ("PATCH", "/api/v1/users/{user_id}"): CLINICAL_STAFF,
    ("DELETE", "/api/v1/users/{user_id}"): ADMIN_ONLY,
    ("PUT", "/api/v1/users/{user_id}/roles"): ADMIN_ONLY,
    ("PUT", "/api/v1/users/{user_id}/status"): ADMIN_ONLY,
}


def is_allowed(principal_roles: Iterable[UserRole], required_roles: AbstractSet[UserRole]) -> bool:
    """
    Decide whether a principal may access a resource.

    Holding any one of the required roles is enough. An empty requirement
    admits every authenticated principal.

    Args:
        principal_roles: Roles held by the principal
        required_roles: Roles accepted by the resource

    Returns:
        bool: True if access is allowed
    """
    if not required_roles:
        return True
    return not required_roles.isdisjoint(principal_roles)


def required_roles_for(method: str, path: str) -> FrozenSet[UserRole]:
    """
    Get the roles required for a route.

    Args:
        method: HTTP method
        path: Route template, e.g. "/api/v1/users/{user_id}"

    Returns:
        FrozenSet[UserRole]: Required roles (empty for any authenticated user)

    Raises:
        KeyError: If the route has no entry in ROUTE_POLICIES
    """
    return ROUTE_POLICIES[(method.upper(), path)]
