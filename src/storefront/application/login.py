"""Application service: Login use case (session establishment).

The backend has no "who am I" endpoint, so the role is discovered by
trying the credential against each role's dashboard in priority order.
Each probe yields a tagged outcome:

- ACCEPTED: the role is known, the session is persisted.
- REJECTED: 401/403, try the next role.
- ABORTED:  anything else; stop at once so an outage is never reported
            as a wrong password.
"""

from __future__ import annotations

import structlog

from storefront.application.dto import LoginResultDTO
from storefront.domain.exceptions import InvalidCredentials, TransientProbeFailure, ValidationError
from storefront.domain.model.session import (
    DEFAULT_PROBES,
    ProbeDescriptor,
    ProbeStatus,
    Session,
)
from storefront.domain.model.value_objects import Credential
from storefront.domain.repository.credential_store import CredentialStore
from storefront.domain.repository.storefront_api import RoleProbe

logger = structlog.get_logger(__name__)


class LoginHandler:

    def __init__(
        self,
        role_probe: RoleProbe,
        credential_store: CredentialStore,
        probes: list[ProbeDescriptor] | None = None,
    ) -> None:
        self._role_probe = role_probe
        self._credential_store = credential_store
        self._probes = list(probes) if probes is not None else list(DEFAULT_PROBES)
        if not self._probes:
            raise ValidationError("At least one role probe is required")

    async def handle(self, username: str, password: str) -> LoginResultDTO:
        if not username or not username.strip():
            raise ValidationError("Username is required")
        if not password:
            raise ValidationError("Password is required")

        username = username.strip()
        credential = Credential.encode(username, password)

        for descriptor in self._probes:
            outcome = await self._role_probe.probe(descriptor, credential)

            if outcome.status is ProbeStatus.ACCEPTED:
                session = Session(
                    username=username,
                    credential=credential,
                    role=descriptor.role,
                    redirect_target=descriptor.redirect_target,
                )
                self._credential_store.save(session)
                logger.info("login_succeeded", username=username, role=descriptor.role.value)
                return LoginResultDTO(
                    username=username,
                    role=descriptor.role.value,
                    redirect_target=descriptor.redirect_target,
                )

            if outcome.status is ProbeStatus.REJECTED:
                logger.debug("role_probe_rejected", role=descriptor.role.value, detail=outcome.detail)
                continue

            logger.warning(
                "role_probe_aborted",
                role=descriptor.role.value,
                detail=outcome.detail,
            )
            raise TransientProbeFailure(descriptor.role.value, outcome.detail)

        # No role accepted the credential: whatever was persisted is stale.
        self._credential_store.clear()
        logger.info("login_rejected", username=username, probes=len(self._probes))
        raise InvalidCredentials()
