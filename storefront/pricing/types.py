# storefront/pricing/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from ..utils.money import D, ZERO, to_float


class CouponType(str, Enum):
    FIXED = "fixed"
    PERCENT = "percent"
    FREE_SHIPPING = "free_shipping"


@dataclass(frozen=True)
class ProductSnapshot:
    """Catalog values copied at add-to-cart time.

    Later catalog edits never reach a snapshot that is already in a session.
    """
    product_id: int
    name: str
    price: Decimal
    discount_percent: Decimal = ZERO
    shipping_cost: Decimal = ZERO
    category: str | None = None

    @classmethod
    def of(cls, product) -> "ProductSnapshot":
        return cls(
            product_id=product.id,
            name=product.name,
            price=D(product.price),
            discount_percent=D(product.discount_percent),
            shipping_cost=D(product.shipping_cost),
            category=product.category,
        )


@dataclass(frozen=True)
class CartLine:
    product: ProductSnapshot
    quantity: int


@dataclass(frozen=True)
class CouponRule:
    code: str
    type: CouponType
    value: Decimal = ZERO
    is_active: bool = True

    def describe(self) -> str:
        if self.type is CouponType.FREE_SHIPPING:
            return "Free Ship"
        if self.type is CouponType.PERCENT:
            return f"-{self.value.normalize():f}%"
        return f"-{self.value.normalize():f}"


@dataclass(frozen=True)
class FinancialBreakdown:
    subtotal: Decimal = ZERO
    shipping_total: Decimal = ZERO
    tax_amount: Decimal = ZERO
    discount_total: Decimal = ZERO
    taxable_amount: Decimal = ZERO
    total_amount: Decimal = ZERO
    tax_rate_percent: Decimal = ZERO
    is_free_shipping: bool = False
    applied_coupons: tuple[str, ...] = field(default_factory=tuple)

    def as_api(self):
        return {
            "subtotal": to_float(self.subtotal),
            "discount_total": to_float(self.discount_total),
            "taxable_amount": to_float(self.taxable_amount),
            "tax_rate_percent": float(self.tax_rate_percent),
            "tax_amount": to_float(self.tax_amount),
            "shipping_total": to_float(self.shipping_total),
            "is_free_shipping": self.is_free_shipping,
            "total_amount": to_float(self.total_amount),
            "applied_coupons": list(self.applied_coupons),
        }
