"""Abstract store for the persisted session.

Two named slots are kept: the encoded credential and the user record
(username, role, redirect target).  They are always written and cleared
together, so a half-present session is treated as no session.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from storefront.domain.model.session import Session
from storefront.domain.model.value_objects import Credential


class CredentialStore(ABC):

    @abstractmethod
    def load(self) -> Session | None:
        """Return the persisted session, or None if either slot is empty."""

    @abstractmethod
    def load_credential(self) -> Credential | None:
        """Return only the encoded credential slot."""

    @abstractmethod
    def save(self, session: Session) -> None:
        """Persist both slots for *session*."""

    @abstractmethod
    def update_credential(self, credential: Credential) -> None:
        """Replace the credential slot, keeping the user record."""

    @abstractmethod
    def clear(self) -> None:
        """Remove both slots."""
