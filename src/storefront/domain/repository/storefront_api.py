"""Abstract ports for the remote storefront backend.

Defined in the domain layer so the use cases never depend on HTTP.
Implementations raise RemoteCallError subclasses on failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from storefront.domain.model.checkout import OrderDraft, OrderResult
from storefront.domain.model.session import ProbeDescriptor, ProbeOutcome
from storefront.domain.model.value_objects import Credential


class StorefrontApi(ABC):

    @abstractmethod
    async def fetch_cart(self) -> Any:
        """Return the raw cart payload; its shape is not guaranteed."""

    @abstractmethod
    async def fetch_customer_profile(self) -> dict[str, Any]:
        """Return the logged-in customer's profile record."""

    @abstractmethod
    async def create_order(self, draft: OrderDraft) -> OrderResult:
        """Create one order for one cart item."""

    @abstractmethod
    async def clear_cart(self) -> None:
        """Empty the customer's cart."""

    @abstractmethod
    async def change_credential(self, current_secret: str, new_secret: str) -> None:
        """Change the secret; the local credential is rotated on success."""

    @abstractmethod
    async def cancel_order(self, order_number: str) -> None:
        """Remove a previously created order (compensation only)."""


class RoleProbe(ABC):

    @abstractmethod
    async def probe(self, descriptor: ProbeDescriptor, credential: Credential) -> ProbeOutcome:
        """Try *credential* against one role-gated resource.

        Must never raise for remote failures: every failure is classified
        as REJECTED (401/403) or ABORTED (anything else).
        """
