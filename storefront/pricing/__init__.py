from .types import CouponType, CouponRule, ProductSnapshot, CartLine, FinancialBreakdown
from .engine import compute_breakdown, net_unit_price, line_total, shipping_for

__all__ = [
    "CouponType",
    "CouponRule",
    "ProductSnapshot",
    "CartLine",
    "FinancialBreakdown",
    "compute_breakdown",
    "net_unit_price",
    "line_total",
    "shipping_for",
]
