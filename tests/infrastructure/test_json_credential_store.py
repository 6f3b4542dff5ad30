"""Tests for the JSON-file credential store."""

import json
import stat

from storefront.domain.model.session import Role
from storefront.domain.model.value_objects import Credential
from storefront.infrastructure.persistence.json_credential_store import JsonCredentialStore
from tests.fakes import customer_session


class TestJsonCredentialStore:

    def test_save_and_load(self, tmp_path):
        store = JsonCredentialStore(tmp_path / "session.json")
        store.save(customer_session("nimal"))

        session = store.load()
        assert session == customer_session("nimal")
        assert store.load_credential() == Credential.encode("nimal", "secret1")

    def test_file_layout(self, tmp_path):
        path = tmp_path / "session.json"
        JsonCredentialStore(path).save(customer_session("nimal"))

        raw = json.loads(path.read_text())
        assert raw == {
            "basicAuth": Credential.encode("nimal", "secret1").encoded,
            "user": {"username": "nimal", "role": "CUSTOMER", "redirectUrl": "/c"},
        }

    def test_file_is_private(self, tmp_path):
        path = tmp_path / "nested" / "session.json"
        JsonCredentialStore(path).save(customer_session())
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_missing_file_is_no_session(self, tmp_path):
        store = JsonCredentialStore(tmp_path / "absent.json")
        assert store.load() is None
        assert store.load_credential() is None

    def test_clear_removes_both_slots(self, tmp_path):
        path = tmp_path / "session.json"
        store = JsonCredentialStore(path)
        store.save(customer_session())
        store.clear()
        store.clear()
        assert not path.exists()
        assert store.load() is None

    def test_update_credential_keeps_user_slot(self, tmp_path):
        store = JsonCredentialStore(tmp_path / "session.json")
        store.save(customer_session("nimal"))
        store.update_credential(Credential.encode("nimal", "secret2"))

        session = store.load()
        assert session.role is Role.CUSTOMER
        assert session.credential == Credential.encode("nimal", "secret2")

    def test_one_slot_missing_is_no_session(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text(json.dumps({"basicAuth": Credential.encode("a", "b").encoded}))
        store = JsonCredentialStore(path)
        assert store.load() is None
        assert store.load_credential() is not None

    def test_corrupt_file_is_no_session(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{not json")
        assert JsonCredentialStore(path).load() is None

    def test_non_utf8_file_is_no_session(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_bytes(b"\xff\xfe{garbage")
        store = JsonCredentialStore(path)
        assert store.load() is None
        assert store.load_credential() is None

    def test_unreadable_file_can_be_overwritten(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_bytes(b"\xff\xfe{garbage")
        store = JsonCredentialStore(path)
        store.save(customer_session("nimal"))
        assert store.load() == customer_session("nimal")

    def test_unknown_role_is_no_session(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text(json.dumps({
            "basicAuth": Credential.encode("a", "b").encoded,
            "user": {"username": "a", "role": "CEO", "redirectUrl": "/x"},
        }))
        assert JsonCredentialStore(path).load() is None
