# --- storefront/model/coupon.py ---
from sqlalchemy.sql import func

from ..extensions import db
from ..pricing import CouponRule, CouponType
from ..utils.money import D

COUPON_TYPES = {t.value for t in CouponType}


class Coupon(db.Model):
    __tablename__ = "coupon"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), unique=True, nullable=False, index=True)  # stored upper-case

    # "fixed" | "percent" | "free_shipping"
    ctype = db.Column(db.String(16), nullable=False, default="fixed")
    value = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    active = db.Column(db.Boolean, default=True, index=True)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    def to_rule(self) -> CouponRule:
        return CouponRule(
            code=self.code,
            type=CouponType(self.ctype),
            value=D(self.value),
            is_active=bool(self.active),
        )

    def as_api(self):
        return {
            "id": self.id,
            "code": self.code,
            "ctype": self.ctype,
            "value": float(self.value or 0),
            "active": self.active,
            "label": self.to_rule().describe(),
        }
