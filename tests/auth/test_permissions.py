"""
Tests for the role policy and the route policy table.
"""
import pytest
from fastapi.routing import APIRoute

from clinic_auth.auth.dependencies import guard_route
from clinic_auth.auth.models import UserRole
from clinic_auth.core.permissions import (
    ADMIN_ONLY,
    ANY_AUTHENTICATED,
    CLINICAL_STAFF,
    ROUTE_POLICIES,
    is_allowed,
    required_roles_for,
)
from clinic_auth.main import app


def test_no_roles_is_not_allowed_when_roles_required():
    assert is_allowed(set(), {UserRole.ADMIN}) is False


def test_empty_requirement_allows_anyone():
    assert is_allowed({UserRole.ADMIN}, set()) is True
    assert is_allowed(set(), set()) is True


def test_any_required_role_suffices():
    assert is_allowed({UserRole.NURSE}, {UserRole.DOCTOR, UserRole.NURSE}) is True


def test_disjoint_roles_are_denied():
    assert is_allowed({UserRole.PATIENT, UserRole.USER}, CLINICAL_STAFF) is False


def test_required_roles_lookup():
    assert required_roles_for("get", "/api/v1/users") == CLINICAL_STAFF
    assert required_roles_for("DELETE", "/api/v1/users/{user_id}") == ADMIN_ONLY
    assert required_roles_for("GET", "/api/v1/auth/profile") == ANY_AUTHENTICATED


def test_unknown_route_has_no_policy():
    with pytest.raises(KeyError):
        required_roles_for("GET", "/api/v1/unknown")


def _guarded_routes():
    for route in app.routes:
        if not isinstance(route, APIRoute):
            continue
        if any(dep.call is guard_route for dep in route.dependant.dependencies):
            for method in route.methods:
                yield method, route.path


def test_every_guarded_route_has_a_policy():
    guarded = set(_guarded_routes())
    assert guarded
    assert guarded <= set(ROUTE_POLICIES)


def test_every_policy_belongs_to_a_guarded_route():
    assert set(ROUTE_POLICIES) <= set(_guarded_routes())
