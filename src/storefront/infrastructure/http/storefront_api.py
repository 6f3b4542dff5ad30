"""HTTP implementation of StorefrontApi on top of the gateway."""

from __future__ import annotations

from typing import Any

from storefront.domain.exceptions import BackendError
from storefront.domain.model.checkout import OrderDraft, OrderResult
from storefront.domain.repository.storefront_api import StorefrontApi
from storefront.infrastructure.http.gateway import AuthenticatedGateway


class HttpStorefrontApi(StorefrontApi):

    def __init__(self, gateway: AuthenticatedGateway) -> None:
        self._gateway = gateway

    # --- StorefrontApi interface ----------------------------------------------

    async def fetch_cart(self) -> Any:
        return await self._gateway.get("/customer/cart")

    async def fetch_customer_profile(self) -> dict[str, Any]:
        profile = await self._gateway.get("/customer/current")
        return profile if isinstance(profile, dict) else {}

    async def create_order(self, draft: OrderDraft) -> OrderResult:
        body = await self._gateway.post("/orders", json=self._draft_to_raw(draft))
        order_number = draft.order_number
        if isinstance(body, dict) and body.get("orderNo"):
            order_number = str(body["orderNo"])
        return OrderResult(order_number=order_number, succeeded=True)

    async def clear_cart(self) -> None:
        await self._gateway.delete("/customer/cart/clear")

    async def change_credential(self, current_secret: str, new_secret: str) -> None:
        await self._gateway.post(
            "/auth/change-password",
            json={
                "currentPassword": current_secret,
                "newPassword": new_secret,
                "confirmPassword": new_secret,
            },
        )
        self._gateway.rotate_credential(new_secret)

    async def cancel_order(self, order_number: str) -> None:
        order = await self._gateway.get(f"/orders/order-no/{order_number}")
        if not isinstance(order, dict) or order.get("id") is None:
            raise BackendError(404, f"Order {order_number} not found")
        await self._gateway.delete(f"/orders/{order['id']}")

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _draft_to_raw(draft: OrderDraft) -> dict[str, Any]:
        return {
            "orderNo": draft.order_number,
            "quantity": draft.quantity,
            "unitPrice": str(draft.unit_price.amount),
            "totalPrice": str(draft.line_total.amount),
            "shippingAddress": draft.shipping_address,
            "orderDate": draft.order_date,
            "customer": {"id": draft.customer_id},
            "orderStatus": {"id": draft.status_id},
            "productId": draft.product_id,
            "paymentMethod": draft.payment_method,
        }
