"""Unit tests for roles, probe ordering and order numbers."""

import random

import pytest

from storefront.domain.exceptions import AccessDenied, ValidationError
from storefront.domain.model.session import (
    DEFAULT_PROBES,
    Role,
    Session,
    probes_in_priority,
    require_role,
)
from storefront.domain.model.value_objects import Credential
from storefront.domain.service.order_numbers import OrderNumberGenerator
from tests.fakes import customer_session


class TestRole:

    def test_parse_is_case_insensitive(self):
        assert Role.parse(" customer ") is Role.CUSTOMER

    def test_parse_unknown(self):
        with pytest.raises(ValidationError, match="Unknown role"):
            Role.parse("CEO")


class TestProbePriority:

    def test_default_order(self):
        assert [p.role for p in probes_in_priority()] == [
            Role.OWNER,
            Role.PRODUCT_MANAGER,
            Role.MERCHANDISE_MANAGER,
            Role.DISPATCH_OFFICER,
            Role.CUSTOMER,
        ]

    def test_partial_priority_puts_listed_roles_first(self):
        roles = [p.role for p in probes_in_priority([Role.CUSTOMER, Role.DISPATCH_OFFICER])]
        assert roles[:2] == [Role.CUSTOMER, Role.DISPATCH_OFFICER]
        assert set(roles) == {p.role for p in DEFAULT_PROBES}

    def test_duplicates_rejected(self):
        with pytest.raises(ValidationError, match="more than once"):
            probes_in_priority([Role.OWNER, Role.OWNER])

    def test_customer_lands_on_short_path(self):
        customer = next(p for p in DEFAULT_PROBES if p.role is Role.CUSTOMER)
        assert customer.probe_path == "/customer/dashboard"
        assert customer.redirect_target == "/c"


class TestRequireRole:

    def test_allowed(self):
        require_role(customer_session(), [Role.CUSTOMER, "OWNER"])

    def test_denied(self):
        with pytest.raises(AccessDenied, match="requires one of: OWNER"):
            require_role(customer_session(), ["owner"])


class TestSession:

    def test_with_credential_keeps_role(self):
        session = customer_session("nimal")
        rotated = session.with_credential(Credential.encode("nimal", "newpass"))
        assert rotated.role is Role.CUSTOMER
        assert rotated.credential == Credential.encode("nimal", "newpass")

    def test_with_credential_for_other_user_rejected(self):
        with pytest.raises(ValidationError, match="same username"):
            customer_session("nimal").with_credential(Credential.encode("kamal", "x"))

    def test_is_customer(self):
        owner = Session("boss", Credential.encode("boss", "x"), Role.OWNER, "/ceo/dashboard")
        assert not owner.is_customer


class TestOrderNumbers:

    def test_format(self):
        gen = OrderNumberGenerator(clock_ms=lambda: 1718000000123, rng=random.Random(1))
        number = gen.next()
        assert number.startswith("ORD1718000000123")
        assert len(number) == len("ORD") + 13 + 3

    def test_strictly_increasing_when_clock_stalls(self):
        gen = OrderNumberGenerator(clock_ms=lambda: 1000, rng=random.Random(1))
        stamps = [int(gen.next()[3:16]) for _ in range(5)]
        assert stamps == [1000, 1001, 1002, 1003, 1004]

    def test_clock_going_backwards(self):
        ticks = iter([5000, 4000, 6000])
        gen = OrderNumberGenerator(clock_ms=lambda: next(ticks), rng=random.Random(1))
        assert [int(gen.next()[3:16]) for _ in range(3)] == [5000, 5001, 6000]

    def test_unique_over_many_calls(self):
        gen = OrderNumberGenerator()
        numbers = [gen.next() for _ in range(500)]
        assert len(set(numbers)) == 500
