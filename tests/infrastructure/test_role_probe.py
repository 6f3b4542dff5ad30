"""Tests for classifying role probe responses."""

import httpx
import pytest

from storefront.application.login import LoginHandler
from storefront.domain.exceptions import TransientProbeFailure
from storefront.domain.model.session import DEFAULT_PROBES, ProbeStatus, Role
from storefront.domain.model.value_objects import Credential
from storefront.infrastructure.http.role_probe import HttpRoleProbe
from tests.fakes import InMemoryCredentialStore

CREDENTIAL = Credential.encode("nimal", "secret1")
CUSTOMER = next(p for p in DEFAULT_PROBES if p.role is Role.CUSTOMER)


async def _probe(handler):
    probe = HttpRoleProbe("http://shop.test/api", transport=httpx.MockTransport(handler))
    try:
        return await probe.probe(CUSTOMER, CREDENTIAL)
    finally:
        await probe.aclose()


@pytest.mark.asyncio
class TestHttpRoleProbe:

    async def test_success_is_accepted(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"dashboard": True})

        outcome = await _probe(handler)

        assert outcome.status is ProbeStatus.ACCEPTED
        assert outcome.descriptor is CUSTOMER
        assert seen[0].url.path == "/api/customer/dashboard"
        assert seen[0].headers["Authorization"] == CREDENTIAL.header_value

    @pytest.mark.parametrize("status", [401, 403])
    async def test_auth_statuses_are_rejected(self, status):
        outcome = await _probe(lambda r: httpx.Response(status))
        assert outcome.status is ProbeStatus.REJECTED
        assert outcome.detail == f"HTTP {status}"

    @pytest.mark.parametrize("status", [404, 500, 503])
    async def test_other_statuses_abort(self, status):
        outcome = await _probe(lambda r: httpx.Response(status))
        assert outcome.status is ProbeStatus.ABORTED

    async def test_timeout_aborts(self):
        def handler(request):
            raise httpx.ConnectTimeout("too slow", request=request)

        outcome = await _probe(handler)
        assert outcome.status is ProbeStatus.ABORTED
        assert outcome.detail == "request timed out"

    async def test_network_failure_aborts(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        outcome = await _probe(handler)
        assert outcome.status is ProbeStatus.ABORTED
        assert "network failure" in outcome.detail

    async def test_undecodable_body_aborts(self):
        def handler(request):
            raise httpx.DecodingError("bad gzip", request=request)

        outcome = await _probe(handler)
        assert outcome.status is ProbeStatus.ABORTED
        assert "bad gzip" in outcome.detail

    async def test_login_reports_undecodable_body_as_transient(self):
        def handler(request):
            raise httpx.DecodingError("bad gzip", request=request)

        probe = HttpRoleProbe("http://shop.test/api", transport=httpx.MockTransport(handler))
        store = InMemoryCredentialStore()
        try:
            with pytest.raises(TransientProbeFailure, match="Please try again"):
                await LoginHandler(probe, store).handle("nimal", "secret1")
        finally:
            await probe.aclose()
        assert store.is_empty
