# storefront/checkout/ports.py
"""
Collaborators the checkout session talks to. The SQL-backed implementations
live in ``storefront.services``; tests pass in-memory ones.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Protocol

from ..pricing import CartLine, CouponRule, FinancialBreakdown


class PersistenceError(Exception):
    """Order store could not persist an order. Safe to retry."""


class CouponRegistry(Protocol):
    def find_active_coupon_by_code(self, code: str) -> CouponRule | None: ...


@dataclass(frozen=True)
class OrderDraft:
    user_id: int | None
    lines: tuple[CartLine, ...]
    breakdown: FinancialBreakdown
    status: str = "verified"
    payment_method: str = "promptpay"
    slip_image: str | None = None

    @property
    def subtotal(self) -> Decimal:
        return self.breakdown.subtotal

    @property
    def shipping_total(self) -> Decimal:
        return self.breakdown.shipping_total

    @property
    def tax_amount(self) -> Decimal:
        return self.breakdown.tax_amount

    @property
    def discount_total(self) -> Decimal:
        return self.breakdown.discount_total

    @property
    def total_amount(self) -> Decimal:
        return self.breakdown.total_amount

    @property
    def applied_coupons(self) -> list[str]:
        return list(self.breakdown.applied_coupons)


class OrderStore(Protocol):
    def create_order(self, draft: OrderDraft) -> Any: ...


@dataclass(frozen=True)
class Outcome:
    """Result of a checkout operation. Rejections are values, not exceptions."""
    ok: bool
    message: str
    data: Any = field(default=None)
    reason: str | None = None

    @classmethod
    def success(cls, message: str, data=None) -> "Outcome":
        return cls(True, message, data)

    @classmethod
    def fail(cls, reason: str, message: str, data=None) -> "Outcome":
        return cls(False, message, data, reason)

    def __bool__(self) -> bool:
        return self.ok
