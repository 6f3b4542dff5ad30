"""HTTP role probe.

Uses its own client, outside the gateway: the candidate credential is
not the stored one, and a 401 here means "wrong role", not "session
expired".
"""

from __future__ import annotations

import httpx
import structlog

from storefront.domain.model.session import ProbeDescriptor, ProbeOutcome
from storefront.domain.model.value_objects import Credential
from storefront.domain.repository.storefront_api import RoleProbe

logger = structlog.get_logger(__name__)

REJECTING_STATUSES = frozenset({httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN})


class HttpRoleProbe(RoleProbe):

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def probe(self, descriptor: ProbeDescriptor, credential: Credential) -> ProbeOutcome:
        try:
            response = await self._client.get(
                descriptor.probe_path,
                headers={"Authorization": credential.header_value},
            )
        except httpx.TimeoutException:
            return ProbeOutcome.aborted(descriptor, "request timed out")
        except httpx.TransportError as exc:
            return ProbeOutcome.aborted(descriptor, f"network failure: {exc}")
        except httpx.RequestError as exc:
            return ProbeOutcome.aborted(descriptor, f"unreadable response: {exc}")

        logger.debug("role_probe_response", role=descriptor.role.value, status=response.status_code)
        if response.is_success:
            return ProbeOutcome.accepted(descriptor)
        if response.status_code in REJECTING_STATUSES:
            return ProbeOutcome.rejected(descriptor, f"HTTP {response.status_code}")
        return ProbeOutcome.aborted(descriptor, f"HTTP {response.status_code}")
