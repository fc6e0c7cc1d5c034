# ------ storefront/model/__init__.py ------

from .user import User
from .product import Product
from .coupon import Coupon
from .order import Order, OrderItem, ORDER_STATUSES
from .setting import Setting

__all__ = [
    "User",
    "Product",
    "Coupon",
    "Order",
    "OrderItem",
    "ORDER_STATUSES",
    "Setting",
]
