# storefront/pricing/engine.py
"""
Order pricing: cart lines + applied coupons + flat tax rate -> FinancialBreakdown.

Pure functions only. Amounts are exact Decimals end to end; rounding happens
at the display/JSON boundary, never here.

Order of operations:
  1) per-item net price (product's own discount_percent)
  2) subtotal = sum of net line totals
  3) coupons, in the order they were applied:
       fixed          -> + value
       percent        -> + subtotal * value / 100   (always the original subtotal)
       free_shipping  -> shipping waived
  4) shipping = sum(shipping_cost * qty), or 0 when waived
  5) taxable = max(0, subtotal - discount)
  6) tax = taxable * rate / 100
  7) total = taxable + tax + shipping
"""
from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from ..utils.money import D, ZERO, HUNDRED
from .types import CartLine, CouponRule, CouponType, FinancialBreakdown, ProductSnapshot


def net_unit_price(product: ProductSnapshot) -> Decimal:
    return product.price * (1 - product.discount_percent / HUNDRED)


def line_total(line: CartLine) -> Decimal:
    return net_unit_price(line.product) * line.quantity


def shipping_for(line: CartLine) -> Decimal:
    return line.product.shipping_cost * line.quantity


def _coupon_discount(coupon: CouponRule, subtotal: Decimal) -> Decimal:
    if coupon.type is CouponType.FIXED:
        return coupon.value
    if coupon.type is CouponType.PERCENT:
        return subtotal * coupon.value / HUNDRED
    return ZERO


def compute_breakdown(
    lines: Iterable[CartLine],
    coupons: Iterable[CouponRule],
    tax_rate_percent,
) -> FinancialBreakdown:
    lines = tuple(lines)
    coupons = tuple(coupons)
    rate = D(tax_rate_percent)

    subtotal = sum((line_total(l) for l in lines), ZERO)

    discount_total = ZERO
    free_shipping = False
    for c in coupons:
        if c.type is CouponType.FREE_SHIPPING:
            free_shipping = True
            continue
        discount_total += _coupon_discount(c, subtotal)

    shipping_total = ZERO if free_shipping else sum((shipping_for(l) for l in lines), ZERO)

    taxable = max(ZERO, subtotal - discount_total)
    tax_amount = taxable * rate / HUNDRED
    total = taxable + tax_amount + shipping_total

    return FinancialBreakdown(
        subtotal=subtotal,
        shipping_total=shipping_total,
        tax_amount=tax_amount,
        discount_total=discount_total,
        taxable_amount=taxable,
        total_amount=total,
        tax_rate_percent=rate,
        is_free_shipping=free_shipping,
        applied_coupons=tuple(c.code for c in coupons),
    )
