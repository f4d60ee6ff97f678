"""Tests for capability predicates and the auth context."""

import pytest

from inkwell.auth.capabilities import (
    Capability,
    can_modify,
    get_capabilities,
    has_content_access,
    has_product_access,
    is_admin,
)
from inkwell.auth.context import AuthContext
from inkwell.auth.policies import Policy
from inkwell.core.errors import AuthorizationError
from inkwell.core.models import Content, User, UserRoles


def make_user(is_admin=False, **roles) -> User:
    return User(
        name="Someone",
        email="someone@example.com",
        password_hash="x:y",
        is_admin=is_admin,
        roles=UserRoles(**roles),
    )


def make_content(author_id: str) -> Content:
    return Content(title="T", slug="t", body="B", category="c", author_id=author_id)


class TestPredicates:
    def test_plain_user_has_nothing(self):
        user = make_user()
        assert not is_admin(user)
        assert not has_content_access(user)
        assert not has_product_access(user)
        assert get_capabilities(user) == set()

    def test_role_flags(self):
        user = make_user(access_content=True)
        assert has_content_access(user)
        assert not has_product_access(user)
        assert get_capabilities(user) == {Capability.CONTENT_ACCESS}

    def test_admin_has_everything(self):
        user = make_user(is_admin=True)
        assert has_content_access(user)
        assert has_product_access(user)
        assert get_capabilities(user) == set(Capability)

    def test_anonymous(self):
        assert get_capabilities(None) == set()


class TestCanModify:
    def test_author(self):
        user = make_user(access_content=True)
        assert can_modify(user, make_content(user.id))

    def test_admin(self):
        assert can_modify(make_user(is_admin=True), make_content("user_someoneelse"))

    def test_anyone_else(self):
        user = make_user(access_content=True)
        assert not can_modify(user, make_content("user_someoneelse"))


class TestAuthContext:
    def test_can(self):
        ctx = AuthContext(user=make_user(access_product=True))
        assert ctx.can(Capability.PRODUCT_ACCESS)
        assert ctx.can("product.access")
        assert not ctx.can("content.access")
        assert not ctx.can("no.such.capability")

    def test_require_raises_with_message(self):
        ctx = AuthContext(user=make_user())
        with pytest.raises(AuthorizationError) as exc:
            ctx.require(Capability.ADMIN)
        assert exc.value.message == "Access denied. Admin privileges required."
        assert exc.value.status_code == 403


class TestPolicy:
    def test_all_capabilities_required(self):
        policy = Policy([Capability.CONTENT_ACCESS, Capability.PRODUCT_ACCESS])
        policy.check(AuthContext(user=make_user(access_content=True, access_product=True)))

        with pytest.raises(AuthorizationError) as exc:
            policy.check(AuthContext(user=make_user(access_content=True)))
        assert exc.value.message == "Access denied. Product access permission required."

    def test_empty_policy_allows_anyone(self):
        Policy().check(AuthContext(user=make_user()))
