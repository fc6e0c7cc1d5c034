from flask import Blueprint

from .ports import CouponRegistry, OrderDraft, OrderStore, Outcome, PersistenceError
from .session import CheckoutSession, CheckoutStep
from .registry import CheckoutRegistry

bp = Blueprint("checkout", __name__, url_prefix="/api/checkout")

from . import routes  # noqa: E402,F401
