# storefront/services/coupon_service.py
from __future__ import annotations

import logging

from ..extensions import db
from ..model import Coupon
from ..model.coupon import COUPON_TYPES
from ..pricing import CouponRule
from ..utils.money import D, HUNDRED

log = logging.getLogger(__name__)


class SqlCouponRegistry:
    """Coupon lookup for checkout sessions. Codes match case-insensitively."""

    def find_active_coupon_by_code(self, code: str) -> CouponRule | None:
        code = (code or "").strip().upper()
        if not code:
            return None
        c = Coupon.query.filter(Coupon.code == code, Coupon.active.is_(True)).first()
        return c.to_rule() if c else None


def list_coupons(active: bool | None = None) -> list[Coupon]:
    q = Coupon.query
    if active is not None:
        q = q.filter(Coupon.active.is_(active))
    return q.order_by(Coupon.id.desc()).all()


def create_coupon_from_payload(data: dict) -> Coupon:
    code = (data.get("code") or "").strip().upper()
    ctype = (data.get("ctype") or data.get("type") or "fixed").lower().strip()
    try:
        value = D(data.get("value") or 0)
    except Exception:
        raise ValueError("value must be numeric")
    if not value.is_finite():
        raise ValueError("value must be numeric")
    active = bool(data.get("active", True))

    if not code:
        raise ValueError("code is required")
    if ctype not in COUPON_TYPES:
        raise ValueError("ctype must be 'fixed', 'percent' or 'free_shipping'")
    if ctype == "free_shipping":
        value = D(0)
    elif value <= 0:
        raise ValueError("value must be > 0")
    if ctype == "percent" and value > HUNDRED:
        raise ValueError("percent coupon must be <= 100")

    if Coupon.query.filter(Coupon.code == code).first():
        raise ValueError("Coupon code already exists")

    c = Coupon(code=code, ctype=ctype, value=value, active=active)
    db.session.add(c)
    db.session.commit()
    log.info("coupon %s created (%s %s)", c.code, c.ctype, c.value)
    return c


def toggle_coupon(coupon: Coupon) -> Coupon:
    coupon.active = not coupon.active
    db.session.commit()
    log.info("coupon %s %s", coupon.code, "activated" if coupon.active else "deactivated")
    return coupon
