"""Checkout model: pricing policy, order summary, drafts and results.

All amounts are Money (Decimal).  The summary is computed from one
NormalizedCart and that same snapshot is what gets validated and
submitted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.cart import CartItem, NormalizedCart
from storefront.domain.model.value_objects import DEFAULT_CURRENCY, Money


class CheckoutState(Enum):
    LOADING = "LOADING"
    EMPTY = "EMPTY"
    READY = "READY"
    VALIDATING = "VALIDATING"
    PLACING = "PLACING"
    SUCCESS = "SUCCESS"
    PARTIAL_FAILURE = "PARTIAL_FAILURE"
    FAILURE = "FAILURE"


CASH_ON_DELIVERY = "Cash on Delivery"
CARD_PAYMENT = "Card Payment"
PAYMENT_METHODS = (CASH_ON_DELIVERY, CARD_PAYMENT)

NEW_ORDER_STATUS_ID = 1
EMPTY_CART_REDIRECT = "/products"


@dataclass(frozen=True)
class CheckoutPolicy:
    tax_rate: Decimal = Decimal("0.10")
    free_shipping_threshold: Money = field(default_factory=lambda: Money.of("5000"))
    flat_shipping_fee: Money = field(default_factory=lambda: Money.of("500"))
    compensate_partial_orders: bool = False

    def __post_init__(self) -> None:
        if self.tax_rate < 0:
            raise ValidationError("Tax rate cannot be negative")

    @property
    def currency(self) -> str:
        return self.free_shipping_threshold.currency


@dataclass(frozen=True)
class OrderSummary:
    subtotal: Money
    tax: Money
    shipping: Money
    total: Money
    total_items: int

    @staticmethod
    def compute(cart: NormalizedCart, policy: CheckoutPolicy) -> OrderSummary:
        currency = policy.currency if cart.is_empty else cart.items[0].unit_price.currency
        subtotal = Money.zero(currency)
        for item in cart.items:
            subtotal = subtotal + item.line_total
        if cart.is_empty:
            return OrderSummary(subtotal, subtotal, subtotal, subtotal, 0)
        tax = subtotal.apply_rate(policy.tax_rate)
        if subtotal >= policy.free_shipping_threshold:
            shipping = Money.zero(currency)
        else:
            shipping = policy.flat_shipping_fee
        return OrderSummary(
            subtotal=subtotal,
            tax=tax,
            shipping=shipping,
            total=subtotal + tax + shipping,
            total_items=cart.total_items,
        )


@dataclass(frozen=True)
class StockShortfall:
    product_id: Any
    product_label: str
    requested: int
    available: int

    def __str__(self) -> str:
        return (
            f"Insufficient stock for {self.product_label} "
            f"(requested: {self.requested}, available: {self.available})"
        )


def stock_shortfalls(cart: NormalizedCart) -> list[StockShortfall]:
    """Every item whose requested quantity exceeds the stock snapshot."""
    return [
        StockShortfall(item.product_id, item.label, item.quantity, item.stock_available)
        for item in cart.items
        if item.quantity > item.stock_available
    ]


@dataclass(frozen=True)
class OrderDraft:
    order_number: str
    product_id: Any
    quantity: int
    unit_price: Money
    line_total: Money
    shipping_address: str
    customer_id: Any
    payment_method: str
    order_date: str
    status_id: int = NEW_ORDER_STATUS_ID

    @staticmethod
    def for_item(
        item: CartItem,
        order_number: str,
        shipping_address: str,
        customer_id: Any,
        payment_method: str,
        order_date: str,
    ) -> OrderDraft:
        return OrderDraft(
            order_number=order_number,
            product_id=item.product_id,
            quantity=item.quantity,
            unit_price=item.unit_price,
            line_total=item.line_total,
            shipping_address=shipping_address,
            customer_id=customer_id,
            payment_method=payment_method,
            order_date=order_date,
        )


@dataclass(frozen=True)
class OrderResult:
    order_number: str
    succeeded: bool
    error_detail: str = ""
    product_label: str = ""


@dataclass
class CheckoutReport:
    """Outcome of one place-order attempt."""

    state: CheckoutState
    summary: OrderSummary
    placed: list[OrderResult] = field(default_factory=list)
    failed: OrderResult | None = None
    not_attempted: int = 0
    compensated: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def succeeded_count(self) -> int:
        return len(self.placed)

    @property
    def order_numbers(self) -> list[str]:
        return [r.order_number for r in self.placed]
