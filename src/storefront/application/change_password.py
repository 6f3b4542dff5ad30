"""Application service: Change Password use case.

Form rules are checked before any remote call; the first broken rule is
reported.  Rotating the locally cached credential is the request
gateway's job once the backend confirms the change.
"""

from __future__ import annotations

import structlog

from storefront.domain.exceptions import NotAuthenticated, ValidationError
from storefront.domain.repository.credential_store import CredentialStore
from storefront.domain.repository.storefront_api import StorefrontApi

logger = structlog.get_logger(__name__)

MIN_PASSWORD_LENGTH = 6


class ChangePasswordHandler:

    def __init__(self, api: StorefrontApi, credential_store: CredentialStore) -> None:
        self._api = api
        self._credential_store = credential_store

    async def handle(self, current_password: str, new_password: str, confirm_password: str) -> None:
        self._validate(current_password, new_password, confirm_password)

        session = self._credential_store.load()
        if session is None:
            raise NotAuthenticated()

        await self._api.change_credential(current_password, new_password)
        logger.info("password_changed", username=session.username)

    @staticmethod
    def _validate(current: str, new: str, confirm: str) -> None:
        if not current:
            raise ValidationError("Current password is required")
        if not new:
            raise ValidationError("New password is required")
        if len(new) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"New password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        if new != confirm:
            raise ValidationError("New password and confirm password do not match")
        if current == new:
            raise ValidationError("New password must be different from current password")
