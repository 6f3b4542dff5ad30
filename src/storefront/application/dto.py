"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LoginResultDTO:
    """Output: who logged in and where they should land."""

    username: str
    role: str
    redirect_target: str


@dataclass(frozen=True)
class CartLineDTO:
    product_name: str
    quantity: int
    unit_price: str  # formatted, e.g. "Rs. 15.00"
    line_total: str
    available: int


@dataclass(frozen=True)
class OrderSummaryDTO:
    lines: list[CartLineDTO]
    subtotal: str
    tax: str
    shipping: str  # "FREE" when waived
    total: str
    total_items: int
