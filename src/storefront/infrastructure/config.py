"""Runtime configuration.

Values come from ``STOREFRONT_*`` environment variables or a ``.env``
file in the working directory, validated by pydantic.
"""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from storefront.domain.exceptions import ValidationError as DomainValidationError
from storefront.domain.model.session import Role


class Settings(BaseSettings):

    # --- Backend ---
    api_base_url: str = "http://localhost:8083/api"
    request_timeout: float = Field(default=10.0, gt=0)

    # --- Local session ---
    session_file: Path = Path("~/.storefront/session.json")

    # --- Checkout pricing ---
    currency: str = "LKR"
    tax_rate: Decimal = Decimal("0.10")
    free_shipping_threshold: Decimal = Decimal("5000")
    flat_shipping_fee: Decimal = Decimal("500")

    # --- Login ---
    role_priority: Annotated[list[Role], NoDecode] = Field(
        default_factory=lambda: [
            Role.OWNER,
            Role.PRODUCT_MANAGER,
            Role.MERCHANDISE_MANAGER,
            Role.DISPATCH_OFFICER,
            Role.CUSTOMER,
        ]
    )

    # --- Feature flags ---
    # Cancel already-created orders when a later item of the same cart fails.
    compensate_partial_orders: bool = False

    # --- Logging ---
    log_level: str = "WARNING"
    log_format: Literal["console", "json"] = "console"

    model_config = SettingsConfigDict(env_prefix="STOREFRONT_", env_file=".env", extra="ignore")

    @field_validator("role_priority", mode="before")
    @classmethod
    def _parse_roles(cls, value: object) -> object:
        """Accept ``OWNER,CUSTOMER`` as well as a JSON list."""
        if isinstance(value, str):
            text = value.strip()
            if text.startswith("["):
                value = json.loads(text)
            else:
                value = [part for part in text.split(",") if part.strip()]
        if isinstance(value, (list, tuple)):
            try:
                return [Role.parse(v) if isinstance(v, str) else v for v in value]
            except DomainValidationError as exc:
                raise ValueError(str(exc)) from exc
        return value

    @property
    def resolved_session_file(self) -> Path:
        return self.session_file.expanduser()
