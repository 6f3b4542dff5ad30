"""Application service: Checkout use case.

Drives one checkout through its states:

    LOADING -> READY -> VALIDATING -> PLACING -> SUCCESS
       |                    ^  |                -> PARTIAL_FAILURE
       v                    +--+                -> FAILURE
     EMPTY

The cart is read once during LOADING.  Totals, validation and the order
fan-out all use that same snapshot; nothing is re-fetched in between.

Orders are created one cart item at a time, strictly in sequence.  The
first failure stops the fan-out.  Orders created before it are kept
(fail-forward) unless the policy enables compensation, in which case
they are cancelled again in reverse order.
"""

from __future__ import annotations

import asyncio
import dataclasses
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import structlog

from storefront.application.dto import CartLineDTO, OrderSummaryDTO
from storefront.domain.exceptions import (
    AccessDenied,
    CheckoutValidationFailure,
    RemoteCallError,
    SessionExpired,
    ValidationError,
)
from storefront.domain.model.cart import NormalizedCart
from storefront.domain.model.checkout import (
    EMPTY_CART_REDIRECT,
    CheckoutPolicy,
    CheckoutReport,
    CheckoutState,
    OrderDraft,
    OrderResult,
    OrderSummary,
    StockShortfall,
    stock_shortfalls,
)
from storefront.domain.model.session import Session
from storefront.domain.repository.storefront_api import StorefrontApi
from storefront.domain.service.cart_aggregator import normalize_cart
from storefront.domain.service.order_numbers import OrderNumberGenerator

logger = structlog.get_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CheckoutOrchestrator:

    def __init__(
        self,
        api: StorefrontApi,
        session: Session,
        policy: CheckoutPolicy | None = None,
        order_numbers: OrderNumberGenerator | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if not session.is_customer:
            raise AccessDenied(f"Role {session.role.value} has no cart to check out")
        self._api = api
        self._session = session
        self._policy = policy or CheckoutPolicy()
        self._order_numbers = order_numbers or OrderNumberGenerator()
        self._clock = clock

        self.state = CheckoutState.LOADING
        self.cart: NormalizedCart | None = None
        self.profile: dict[str, Any] = {}
        self.summary: OrderSummary | None = None
        self.load_error: str | None = None
        self.redirect_target: str | None = None
        self.violations: list[str] = []
        self.shortfalls: list[StockShortfall] = []

    # --- LOADING --------------------------------------------------------------

    async def load(self) -> CheckoutState:
        """Fetch cart and profile together and settle on READY or EMPTY.

        A failed fetch leaves the checkout in LOADING with ``load_error``
        set; calling ``load()`` again retries.  An empty cart is a normal
        outcome, not an error.
        """
        if self.state is not CheckoutState.LOADING:
            raise ValidationError(f"Checkout is already loaded (state {self.state.value})")

        cart_payload, profile = await asyncio.gather(
            self._api.fetch_cart(),
            self._api.fetch_customer_profile(),
            return_exceptions=True,
        )
        failures = [r for r in (cart_payload, profile) if isinstance(r, BaseException)]
        for failure in failures:
            if isinstance(failure, SessionExpired) or not isinstance(failure, RemoteCallError):
                raise failure
        if failures:
            self.load_error = str(failures[0])
            logger.warning("checkout_load_failed", error=self.load_error)
            return self.state

        self.load_error = None
        self.cart = normalize_cart(cart_payload, currency=self._policy.currency)
        self.profile = profile if isinstance(profile, dict) else {}

        if self.cart.is_empty:
            self.state = CheckoutState.EMPTY
            self.redirect_target = EMPTY_CART_REDIRECT
            logger.info("checkout_cart_empty", shape=self.cart.shape.value)
            return self.state

        self.summary = OrderSummary.compute(self.cart, self._policy)
        self.state = CheckoutState.READY
        logger.info(
            "checkout_ready",
            items=len(self.cart.items),
            total=str(self.summary.total.amount),
        )
        return self.state

    # --- READY ----------------------------------------------------------------

    @property
    def customer_id(self) -> Any:
        return self.profile.get("id")

    @property
    def default_shipping_address(self) -> str:
        """Multi-line address built from the profile, or "" without one."""
        p = self.profile
        if not p.get("address"):
            return ""
        province = p.get("province") or {}
        province_name = province.get("value", "") if isinstance(province, dict) else str(province)
        return "\n".join([
            p.get("fullName") or "",
            p.get("address") or "",
            f"{p.get('country') or ''}, {province_name}",
            f"Zip: {p.get('zipCode') or ''}",
            f"Mobile: {p.get('mobileNumber') or ''}",
        ])

    def summary_dto(self) -> OrderSummaryDTO:
        if self.cart is None or self.summary is None:
            raise ValidationError("Checkout has no cart loaded")
        s = self.summary
        return OrderSummaryDTO(
            lines=[
                CartLineDTO(
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price=str(item.unit_price),
                    line_total=str(item.line_total),
                    available=item.stock_available,
                )
                for item in self.cart.items
            ],
            subtotal=str(s.subtotal),
            tax=str(s.tax),
            shipping="FREE" if s.shipping.is_zero else str(s.shipping),
            total=str(s.total),
            total_items=s.total_items,
        )

    # --- VALIDATING / PLACING -------------------------------------------------

    async def place_order(self, shipping_address: str, payment_method: str) -> CheckoutReport:
        """Validate, then create one order per cart item.

        Raises CheckoutValidationFailure (state stays VALIDATING, nothing
        sent) when anything is wrong.  Otherwise returns a report whose
        state is SUCCESS, PARTIAL_FAILURE or FAILURE.
        """
        if self.state not in (CheckoutState.READY, CheckoutState.VALIDATING):
            raise ValidationError(f"Cannot place an order while checkout is {self.state.value}")

        self.state = CheckoutState.VALIDATING
        self.shortfalls = stock_shortfalls(self.cart) if self.cart is not None else []
        self.violations = self._validate(shipping_address, payment_method)
        if self.violations:
            logger.info("checkout_validation_failed", violations=len(self.violations))
            raise CheckoutValidationFailure(self.violations, self.shortfalls)

        self.state = CheckoutState.PLACING
        report = await self._fan_out(shipping_address.strip(), payment_method)
        self.state = report.state
        return report

    def _validate(self, shipping_address: str, payment_method: str) -> list[str]:
        violations: list[str] = []
        if not shipping_address or not shipping_address.strip():
            violations.append("Shipping address is required")
        if not payment_method or not payment_method.strip():
            violations.append("Please select a payment method")
        if self.cart is None or self.cart.is_empty:
            violations.append("Your cart is empty")
            return violations
        violations.extend(str(shortfall) for shortfall in self.shortfalls)
        return violations

    async def _fan_out(self, shipping_address: str, payment_method: str) -> CheckoutReport:
        if self.cart is None or self.summary is None:
            raise ValidationError("Checkout has no cart loaded")
        items = self.cart.items
        report = CheckoutReport(state=CheckoutState.PLACING, summary=self.summary)

        # One item at a time: a failure must never race an in-flight success.
        for index, item in enumerate(items):
            draft = OrderDraft.for_item(
                item,
                order_number=self._order_numbers.next(),
                shipping_address=shipping_address,
                customer_id=self.customer_id,
                payment_method=payment_method,
                order_date=self._clock().isoformat(),
            )
            try:
                result = await self._api.create_order(draft)
            except RemoteCallError as exc:
                result = OrderResult(draft.order_number, succeeded=False, error_detail=str(exc))

            result = dataclasses.replace(result, product_label=item.label)
            if not result.succeeded:
                report.failed = result
                report.not_attempted = len(items) - index - 1
                break
            report.placed.append(result)
            logger.info("order_created", order_number=result.order_number, product=item.label)

        if report.failed is not None:
            report.state = CheckoutState.PARTIAL_FAILURE if report.placed else CheckoutState.FAILURE
            logger.warning(
                "order_fan_out_stopped",
                state=report.state.value,
                succeeded=report.succeeded_count,
                failed_item=report.failed.product_label,
                error=report.failed.error_detail,
            )
            if report.placed and self._policy.compensate_partial_orders:
                await self._compensate(report)
            return report

        report.state = CheckoutState.SUCCESS
        try:
            await self._api.clear_cart()
        except RemoteCallError as exc:
            logger.warning("cart_clear_failed", error=str(exc))
            report.warnings.append(f"Your orders were placed, but the cart could not be cleared: {exc}")
        return report

    async def _compensate(self, report: CheckoutReport) -> None:
        for result in reversed(report.placed):
            try:
                await self._api.cancel_order(result.order_number)
            except RemoteCallError as exc:
                logger.error("order_compensation_failed", order_number=result.order_number, error=str(exc))
                report.warnings.append(f"Could not cancel order {result.order_number}: {exc}")
                continue
            report.compensated.append(result.order_number)
            logger.info("order_compensated", order_number=result.order_number)
