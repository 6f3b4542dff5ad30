"""JSON-file-backed implementation of CredentialStore.

The file holds one object with two slots::

    {"basicAuth": "<base64>", "user": {"username": ..., "role": ..., "redirectUrl": ...}}
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import structlog

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.session import Role, Session
from storefront.domain.model.value_objects import Credential
from storefront.domain.repository.credential_store import CredentialStore

logger = structlog.get_logger(__name__)

CREDENTIAL_SLOT = "basicAuth"
USER_SLOT = "user"


class JsonCredentialStore(CredentialStore):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path

    # --- CredentialStore interface --------------------------------------------

    def load(self) -> Session | None:
        raw = self._load_raw()
        credential = raw.get(CREDENTIAL_SLOT)
        user = raw.get(USER_SLOT)
        if not credential or not isinstance(user, dict):
            return None
        try:
            return self._to_domain(credential, user)
        except (KeyError, ValidationError) as exc:
            logger.warning("stored_session_unreadable", error=str(exc))
            return None

    def load_credential(self) -> Credential | None:
        encoded = self._load_raw().get(CREDENTIAL_SLOT)
        return Credential(encoded) if encoded else None

    def save(self, session: Session) -> None:
        self._persist_raw({
            CREDENTIAL_SLOT: session.credential.encoded,
            USER_SLOT: self._user_to_raw(session),
        })

    def update_credential(self, credential: Credential) -> None:
        raw = self._load_raw()
        raw[CREDENTIAL_SLOT] = credential.encoded
        self._persist_raw(raw)

    def clear(self) -> None:
        self._file_path.unlink(missing_ok=True)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _user_to_raw(session: Session) -> dict:
        return {
            "username": session.username,
            "role": session.role.value,
            "redirectUrl": session.redirect_target,
        }

    @staticmethod
    def _to_domain(encoded: str, user: dict) -> Session:
        return Session(
            username=user["username"],
            credential=Credential(encoded),
            role=Role.parse(user["role"]),
            redirect_target=user.get("redirectUrl", ""),
        )

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict:
        if not self._file_path.exists():
            return {}
        try:
            data = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("session_file_corrupt", path=str(self._file_path))
            return {}
        return data if isinstance(data, dict) else {}

    def _persist_raw(self, data: dict) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        os.chmod(tmp, 0o600)
        os.replace(tmp, self._file_path)
