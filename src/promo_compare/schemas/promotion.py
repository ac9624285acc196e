"""Promotion record schema."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import Field, model_validator

from promo_compare.schemas.base import APIResponse, DomainModel
from promo_compare.schemas.enums import StoreName


class PromotionRecord(DomainModel):
    """One retailer's advertised price for a product (a promotions table row)."""

    product_name: str = Field(
        ..., min_length=1, description="Product name as printed in the flyer"
    )
    store_name: StoreName = Field(..., description="Retailer identifier")
    regular_price: Decimal | None = Field(
        default=None,
        gt=0,
        description="Regular (non-promotional) price, when the flyer shows one",
    )
    sale_price: Decimal = Field(..., gt=0, description="Advertised promotional price")
    valid_from: date = Field(..., description="First day the offer is valid")
    valid_to: date = Field(..., description="Last day the offer is valid")
    source_id: str | None = Field(
        default=None, description="Flyer or import batch identifier"
    )
    category: str | None = Field(
        default=None, description="Optional classification tag"
    )

    @model_validator(mode="after")
    def _check_dates(self) -> PromotionRecord:
        if self.valid_to < self.valid_from:
            msg = "valid_to must not be before valid_from"
            raise ValueError(msg)
        return self

    def is_active(self, on: date) -> bool:
        """Whether the offer is valid on the given day."""
        return self.valid_from <= on <= self.valid_to

    @property
    def has_discount(self) -> bool:
        """True when a regular price is known and higher than the sale price."""
        return self.regular_price is not None and self.regular_price > self.sale_price


class StoreDiagnostics(APIResponse):
    """Row counts of the promotions table for one store."""

    total: int = Field(default=0, ge=0)
    active: int = Field(default=0, ge=0, description="Offers ending today or later")
    discounted: int = Field(
        default=0,
        ge=0,
        description="Active offers with a known regular price",
    )


class PromotionDiagnostics(APIResponse):
    """Row counts of the promotions table, overall and per store."""

    as_of: date
    total: int = Field(default=0, ge=0)
    active: int = Field(default=0, ge=0)
    discounted: int = Field(default=0, ge=0)
    stores: dict[StoreName, StoreDiagnostics] = Field(default_factory=dict)
