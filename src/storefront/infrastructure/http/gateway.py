"""Authenticated request gateway over httpx.

Every outbound call goes through one ``httpx.AsyncClient`` whose event
hooks apply the session policy globally:

- request hook:  attach ``Authorization: Basic ...`` when a credential
  is stored, otherwise send the request unauthenticated;
- response hook: on 401 purge the stored session and invoke the
  unauthenticated entry-point callback.

The credential store is injected; the gateway reads it on every request,
so a rotated credential is used from the very next call.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
import structlog

from storefront.domain.exceptions import (
    BackendError,
    BackendUnavailable,
    NotAuthenticated,
    SessionExpired,
)
from storefront.domain.model.session import LOGIN_ENTRY_POINT
from storefront.domain.repository.credential_store import CredentialStore

logger = structlog.get_logger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


class AuthenticatedGateway:

    def __init__(
        self,
        base_url: str,
        credential_store: CredentialStore,
        timeout: float = 10.0,
        on_session_expired: Callable[[str], None] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._credential_store = credential_store
        self._on_session_expired = on_session_expired
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout),
            headers=DEFAULT_HEADERS,
            event_hooks={
                "request": [self._attach_credential],
                "response": [self._enforce_session_policy],
            },
            transport=transport,
        )

    async def __aenter__(self) -> AuthenticatedGateway:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- Hooks ----------------------------------------------------------------

    async def _attach_credential(self, request: httpx.Request) -> None:
        credential = self._credential_store.load_credential()
        if credential is not None:
            request.headers["Authorization"] = credential.header_value
        logger.debug(
            "outbound_request",
            method=request.method,
            url=str(request.url),
            authenticated=credential is not None,
        )

    async def _enforce_session_policy(self, response: httpx.Response) -> None:
        if response.status_code != httpx.codes.UNAUTHORIZED:
            return
        sent = response.request.headers.get("Authorization")
        stored = self._credential_store.load_credential()
        if sent is not None and (stored is None or stored.header_value != sent):
            # The session this request used is already gone.
            return
        self._credential_store.clear()
        logger.warning("session_expired", url=str(response.request.url))
        if self._on_session_expired is not None:
            self._on_session_expired(LOGIN_ENTRY_POINT)

    # --- Requests -------------------------------------------------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Send one request and return the decoded body.

        Raises SessionExpired on 401, BackendError on other error statuses
        and BackendUnavailable when no usable response arrived (timeouts,
        transport failures, undecodable bodies).
        """
        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.TimeoutException as exc:
            raise BackendUnavailable(f"{method} {path} timed out") from exc
        except httpx.RequestError as exc:
            raise BackendUnavailable(f"{method} {path} failed: {exc}") from exc

        if response.status_code == httpx.codes.UNAUTHORIZED:
            raise SessionExpired()
        if response.is_error:
            raise BackendError(response.status_code, _error_detail(response))
        return _decode(response)

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)

    # --- Credential rotation --------------------------------------------------

    def rotate_credential(self, new_secret: str) -> None:
        """Persist the new secret under the stored username.

        Called right after the backend confirms a password change, before
        any other request can go out with the old, now invalid, secret.
        """
        credential = self._credential_store.load_credential()
        if credential is None:
            raise NotAuthenticated()
        self._credential_store.update_credential(credential.rotated(new_secret))
        logger.info("credential_rotated")


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_detail(response: httpx.Response) -> str:
    body = _decode(response)
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    if isinstance(body, str) and body.strip():
        return body.strip()
    return response.reason_phrase or "request failed"
