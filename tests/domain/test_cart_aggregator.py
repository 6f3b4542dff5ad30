"""Unit tests for cart normalization."""

from decimal import Decimal

import pytest
from structlog.testing import capture_logs

from storefront.domain.model.cart import CartShape, UNKNOWN_PRODUCT
from storefront.domain.service.cart_aggregator import normalize_cart
from tests.fakes import cart_entry

ITEMS = [
    cart_entry(1, "Tea", "100", 2, stock=10),
    cart_entry(2, "Rice", "50", 1, stock=4),
]


class TestShapes:

    def test_bare_sequence(self):
        cart = normalize_cart(ITEMS)
        assert cart.shape is CartShape.SEQUENCE
        assert [i.product_name for i in cart.items] == ["Tea", "Rice"]

    def test_wrapper_record(self):
        cart = normalize_cart({"items": ITEMS, "total": 250})
        assert cart.shape is CartShape.WRAPPER
        assert [i.product_name for i in cart.items] == ["Tea", "Rice"]

    def test_both_shapes_yield_identical_items(self):
        assert normalize_cart(ITEMS).items == normalize_cart({"items": ITEMS}).items

    def test_tuple_counts_as_sequence(self):
        assert normalize_cart(tuple(ITEMS)).shape is CartShape.SEQUENCE

    @pytest.mark.parametrize("payload", [None, "oops", 42, {"cart": []}, {"items": "x"}])
    def test_unrecognized_is_empty_and_warns(self, payload):
        with capture_logs() as logs:
            cart = normalize_cart(payload)
        assert cart.shape is CartShape.UNRECOGNIZED
        assert cart.is_empty
        assert [e["event"] for e in logs] == ["cart_normalization_warning"]
        assert logs[0]["log_level"] == "warning"

    def test_recognized_shapes_do_not_warn(self):
        with capture_logs() as logs:
            normalize_cart([])
            normalize_cart({"items": []})
        assert logs == []


class TestItems:

    def test_fields_are_mapped(self):
        item = normalize_cart([cart_entry(9, "Tea", 19.99, 3, stock=2)]).items[0]
        assert item.product_id == 9
        assert item.quantity == 3
        assert item.unit_price.amount == Decimal("19.99")
        assert item.stock_available == 2
        assert item.line_total.amount == Decimal("59.97")

    def test_missing_fields_fall_back(self):
        item = normalize_cart([{"quantity": 2}]).items[0]
        assert item.product_name == UNKNOWN_PRODUCT
        assert item.unit_price.is_zero
        assert item.stock_available == 0

    def test_order_is_preserved(self):
        entries = [cart_entry(n, f"P{n}", "1", 1) for n in range(5)]
        assert [i.product_id for i in normalize_cart(entries).items] == [0, 1, 2, 3, 4]

    def test_total_items(self):
        assert normalize_cart(ITEMS).total_items == 3


class TestMalformedEntries:

    def test_unparseable_price_is_zero(self):
        with capture_logs() as logs:
            cart = normalize_cart([
                cart_entry(1, "Tea", "N/A", 2),
                cart_entry(2, "Rice", "50", 1),
            ])
        assert cart.items[0].unit_price.is_zero
        assert cart.items[1].unit_price.amount == Decimal("50")
        assert [e["field"] for e in logs if e["event"] == "cart_item_normalization_warning"] == ["sellingPrice"]

    def test_negative_price_is_zero(self):
        item = normalize_cart([cart_entry(1, "Tea", "-5", 1)]).items[0]
        assert item.unit_price.is_zero

    def test_negative_quantity_is_clamped(self):
        with capture_logs() as logs:
            item = normalize_cart([cart_entry(1, "Tea", "100", -3, stock=-1)]).items[0]
        assert item.quantity == 0
        assert item.stock_available == 0
        assert item.line_total.is_zero
        assert sorted(e["field"] for e in logs) == ["quantity", "quantityInStock"]

    def test_non_numeric_quantity_is_zero(self):
        item = normalize_cart([cart_entry(1, "Tea", "100", "two")]).items[0]
        assert item.quantity == 0
