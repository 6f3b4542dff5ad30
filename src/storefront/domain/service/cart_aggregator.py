"""Domain service: Cart Aggregator.

The backend does not guarantee one serialization for the cart: some
calls return a bare list, others a record with an ``items`` list.  The
payload is classified here exactly once; everything downstream only
sees a NormalizedCart.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from storefront.domain.model.cart import CartItem, CartShape, NormalizedCart
from storefront.domain.model.value_objects import DEFAULT_CURRENCY

logger = structlog.get_logger(__name__)


def classify(payload: Any) -> tuple[CartShape, list[Any]]:
    """Return the payload's shape and its raw item list."""
    if isinstance(payload, (list, tuple)):
        return CartShape.SEQUENCE, list(payload)
    if isinstance(payload, Mapping):
        items = payload.get("items")
        if isinstance(items, (list, tuple)):
            return CartShape.WRAPPER, list(items)
    return CartShape.UNRECOGNIZED, []


def normalize_cart(payload: Any, currency: str = DEFAULT_CURRENCY) -> NormalizedCart:
    """Resolve *payload* into a NormalizedCart.

    An unrecognized payload is treated as an empty cart.  That is a
    warning, never an error: the caller decides what an empty cart means.
    """
    shape, raw_items = classify(payload)
    if shape is CartShape.UNRECOGNIZED:
        logger.warning(
            "cart_normalization_warning",
            payload_type=type(payload).__name__,
        )
    items = tuple(CartItem.from_raw(raw, currency) for raw in raw_items)
    return NormalizedCart(shape=shape, items=items)
