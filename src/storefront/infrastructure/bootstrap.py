"""Composition root: builds the store, HTTP clients and policy from Settings.

Only this module and the CLI know the concrete adapters; application
handlers see the abstract ports.
"""

from __future__ import annotations

from collections.abc import Callable

from storefront.domain.model.checkout import CheckoutPolicy
from storefront.domain.model.session import ProbeDescriptor, probes_in_priority
from storefront.domain.model.value_objects import Money
from storefront.infrastructure.config import Settings
from storefront.infrastructure.http.gateway import AuthenticatedGateway
from storefront.infrastructure.http.role_probe import HttpRoleProbe
from storefront.infrastructure.http.storefront_api import HttpStorefrontApi
from storefront.infrastructure.persistence.json_credential_store import (
    JsonCredentialStore,
)


def load_settings() -> Settings:
    return Settings()


def credential_store(settings: Settings) -> JsonCredentialStore:
    return JsonCredentialStore(settings.resolved_session_file)


def role_probe(settings: Settings) -> HttpRoleProbe:
    return HttpRoleProbe(settings.api_base_url, timeout=settings.request_timeout)


def probes(settings: Settings) -> list[ProbeDescriptor]:
    return probes_in_priority(settings.role_priority)


def gateway(
    settings: Settings,
    store: JsonCredentialStore,
    on_session_expired: Callable[[str], None] | None = None,
) -> AuthenticatedGateway:
    return AuthenticatedGateway(
        settings.api_base_url,
        store,
        timeout=settings.request_timeout,
        on_session_expired=on_session_expired,
    )


def storefront_api(gw: AuthenticatedGateway) -> HttpStorefrontApi:
    return HttpStorefrontApi(gw)


def checkout_policy(settings: Settings) -> CheckoutPolicy:
    return CheckoutPolicy(
        tax_rate=settings.tax_rate,
        free_shipping_threshold=Money.of(settings.free_shipping_threshold, settings.currency),
        flat_shipping_fee=Money.of(settings.flat_shipping_fee, settings.currency),
        compensate_partial_orders=settings.compensate_partial_orders,
    )
