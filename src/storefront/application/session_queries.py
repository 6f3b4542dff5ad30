"""Application services: logout and current-session lookup."""

from __future__ import annotations

import structlog

from storefront.application.dto import LoginResultDTO
from storefront.domain.exceptions import NotAuthenticated
from storefront.domain.model.session import Role, Session, require_role
from storefront.domain.repository.credential_store import CredentialStore

logger = structlog.get_logger(__name__)


class LogoutHandler:

    def __init__(self, credential_store: CredentialStore) -> None:
        self._credential_store = credential_store

    def handle(self) -> None:
        """Drop the local session.  Logging out twice is not an error."""
        self._credential_store.clear()
        logger.info("logout")


class CurrentSessionHandler:

    def __init__(self, credential_store: CredentialStore) -> None:
        self._credential_store = credential_store

    def session(self, allowed_roles: list[Role | str] | None = None) -> Session:
        session = self._credential_store.load()
        if session is None:
            raise NotAuthenticated()
        if allowed_roles:
            require_role(session, allowed_roles)
        return session

    def handle(self) -> LoginResultDTO:
        session = self.session()
        return LoginResultDTO(
            username=session.username,
            role=session.role.value,
            redirect_target=session.redirect_target,
        )
