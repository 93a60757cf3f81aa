import pytest

from backend.app import policy
from backend.app.models.user_model import Role


@pytest.mark.parametrize("resource,action", [
    ("transactions", "create"),
    ("users", "list"),
    ("users", "update"),
    ("reports", "read"),
])
def test_admin_only_actions(resource, action):
    assert policy.is_allowed(Role.ADMIN, resource, action)
    assert not policy.is_allowed(Role.USER, resource, action)


@pytest.mark.parametrize("resource,action", [
    ("transactions", "list"),
    ("profile", "read"),
    ("profile", "update"),
])
def test_any_session_actions(resource, action):
    assert policy.is_allowed(Role.ADMIN, resource, action)
    assert policy.is_allowed(Role.USER, resource, action)


def test_unknown_permission_is_denied():
    assert not policy.is_allowed(Role.ADMIN, "transactions", "delete")
    with pytest.raises(KeyError):
        policy.required_role("transactions", "delete")


def test_only_canonical_role_strings():
    assert policy.is_allowed("admin", "users", "list")
    assert not policy.is_allowed("administrador", "users", "list")
