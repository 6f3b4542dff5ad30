"""Tests for logout, current session and change password."""

import pytest

from storefront.application.change_password import ChangePasswordHandler
from storefront.application.session_queries import CurrentSessionHandler, LogoutHandler
from storefront.domain.exceptions import AccessDenied, BackendError, NotAuthenticated, ValidationError
from storefront.domain.model.session import Role
from tests.fakes import FakeStorefrontApi, InMemoryCredentialStore, customer_session


class TestLogout:

    def test_clears_both_slots(self):
        store = InMemoryCredentialStore(customer_session())
        LogoutHandler(store).handle()
        assert store.is_empty

    def test_is_idempotent(self):
        store = InMemoryCredentialStore()
        LogoutHandler(store).handle()
        LogoutHandler(store).handle()
        assert store.is_empty


class TestCurrentSession:

    def test_returns_stored_session(self):
        dto = CurrentSessionHandler(InMemoryCredentialStore(customer_session("nimal"))).handle()
        assert dto.username == "nimal"
        assert dto.role == "CUSTOMER"

    def test_no_session(self):
        with pytest.raises(NotAuthenticated):
            CurrentSessionHandler(InMemoryCredentialStore()).handle()

    def test_role_guard(self):
        handler = CurrentSessionHandler(InMemoryCredentialStore(customer_session()))
        assert handler.session([Role.CUSTOMER]).is_customer
        with pytest.raises(AccessDenied):
            handler.session([Role.OWNER, Role.DISPATCH_OFFICER])


@pytest.mark.asyncio
class TestChangePassword:

    async def test_delegates_to_backend(self):
        api = FakeStorefrontApi()
        handler = ChangePasswordHandler(api, InMemoryCredentialStore(customer_session()))
        await handler.handle("secret1", "secret2", "secret2")
        assert api.credential_changes == [("secret1", "secret2")]

    @pytest.mark.parametrize("current,new,confirm,message", [
        ("", "secret2", "secret2", "Current password is required"),
        ("secret1", "", "", "New password is required"),
        ("secret1", "abc", "abc", "at least 6 characters"),
        ("secret1", "secret2", "secret3", "do not match"),
        ("secret1", "secret1", "secret1", "must be different"),
    ])
    async def test_form_rules(self, current, new, confirm, message):
        api = FakeStorefrontApi()
        handler = ChangePasswordHandler(api, InMemoryCredentialStore(customer_session()))
        with pytest.raises(ValidationError, match=message):
            await handler.handle(current, new, confirm)
        assert api.credential_changes == []

    async def test_requires_session(self):
        api = FakeStorefrontApi()
        handler = ChangePasswordHandler(api, InMemoryCredentialStore())
        with pytest.raises(NotAuthenticated):
            await handler.handle("secret1", "secret2", "secret2")
        assert api.credential_changes == []

    async def test_backend_refusal_propagates(self):
        api = FakeStorefrontApi()
        api.change_error = BackendError(400, "Current password is incorrect")
        handler = ChangePasswordHandler(api, InMemoryCredentialStore(customer_session()))
        with pytest.raises(BackendError, match="incorrect"):
            await handler.handle("wrong1", "secret2", "secret2")
