"""Cart model.

A CartItem captures the product price and stock at the moment the cart
was read.  Neither is reserved on the backend; both are snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money

logger = structlog.get_logger(__name__)

UNKNOWN_PRODUCT = "Unknown Product"


@dataclass(frozen=True)
class CartItem:
    product_id: Any
    product_name: str
    quantity: int
    unit_price: Money  # snapshot at cart-read time
    stock_available: int  # snapshot, not reserved

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity

    @property
    def label(self) -> str:
        if self.product_id is None:
            return self.product_name
        return f"{self.product_name} (#{self.product_id})"

    @staticmethod
    def from_raw(raw: Any, currency: str) -> CartItem:
        """Build from one backend cart entry.

        Missing or malformed fields fall back to neutral values: no price
        is 0, no quantity is 0, unknown stock is 0.  Negative counts are
        clamped to 0.
        """
        entry = raw if isinstance(raw, dict) else {}
        product = entry.get("product") or {}
        if not isinstance(product, dict):
            product = {}
        product_id = product.get("id")
        return CartItem(
            product_id=product_id,
            product_name=product.get("name") or UNKNOWN_PRODUCT,
            quantity=_as_count(entry.get("quantity"), "quantity", product_id),
            unit_price=_as_price(product.get("sellingPrice"), currency, product_id),
            stock_available=_as_count(product.get("quantityInStock"), "quantityInStock", product_id),
        )


class CartShape(Enum):
    SEQUENCE = "SEQUENCE"
    WRAPPER = "WRAPPER"
    UNRECOGNIZED = "UNRECOGNIZED"


@dataclass(frozen=True)
class NormalizedCart:
    """A cart payload resolved once into its canonical item sequence."""

    shape: CartShape
    items: tuple[CartItem, ...]

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)


def _as_count(value: Any, field: str, product_id: Any) -> int:
    if value is None:
        return 0
    count = None
    if not isinstance(value, bool):
        try:
            count = int(value)
        except (TypeError, ValueError):
            pass
    if count is None or count < 0:
        logger.warning("cart_item_normalization_warning", field=field, value=repr(value), product_id=product_id)
        return 0
    return count


def _as_price(value: Any, currency: str, product_id: Any) -> Money:
    if value is None:
        return Money.zero(currency)
    try:
        return Money.of(value, currency)
    except ValidationError:
        logger.warning(
            "cart_item_normalization_warning",
            field="sellingPrice",
            value=repr(value),
            product_id=product_id,
        )
        return Money.zero(currency)
