# storefront/model/order.py
from datetime import datetime, timezone

from ..extensions import db
from .types import ExactDecimal
from ..utils.money import to_float, format_money

# pending -> paid -> verified -> shipped; issue_reported is terminal
ORDER_STATUSES = ("pending", "paid", "verified", "shipped", "issue_reported")
TERMINAL_STATUSES = frozenset({"issue_reported"})


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(40), unique=True, index=True, nullable=False)  # e.g. "ORD-20251022-..."
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=True, index=True)
    status = db.Column(db.String(20), default="pending", index=True, nullable=False)
    payment_method = db.Column(db.String(20), default="promptpay", nullable=False)

    # Money snapshot, exactly as the breakdown computed it; never recomputed
    subtotal = db.Column(ExactDecimal, nullable=False)
    shipping_total = db.Column(ExactDecimal, nullable=False)
    tax_amount = db.Column(ExactDecimal, nullable=False)
    discount_total = db.Column(ExactDecimal, nullable=False, default=0)
    total_amount = db.Column(ExactDecimal, nullable=False)
    tax_rate_percent = db.Column(ExactDecimal)

    applied_coupons = db.Column(db.JSON, default=list)
    slip_image = db.Column(db.String(1024))
    admin_note = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=_utcnow, index=True)

    items = db.relationship(
        "OrderItem",
        backref="order",
        cascade="all, delete-orphan",
        lazy="joined",
        order_by="OrderItem.id.asc()",
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def as_api(self):
        return {
            "id": self.id,
            "code": self.code,
            "user_id": self.user_id,
            "status": self.status,
            "payment_method": self.payment_method,
            "money": {
                "subtotal": to_float(self.subtotal),
                "discount_total": to_float(self.discount_total),
                "tax_rate_percent": float(self.tax_rate_percent or 0),
                "tax_amount": to_float(self.tax_amount),
                "shipping_total": to_float(self.shipping_total),
                "total_amount": to_float(self.total_amount),
                "total_format": format_money(self.total_amount),
            },
            "applied_coupons": list(self.applied_coupons or []),
            "items": [i.as_api() for i in self.items],
            "slip_image": self.slip_image,
            "admin_note": self.admin_note,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "timestamp": int(self.created_at.replace(tzinfo=timezone.utc).timestamp() * 1000) if self.created_at else None,
        }


class OrderItem(db.Model):
    __tablename__ = "order_items"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)

    product_id = db.Column(db.Integer, index=True)  # not a FK: products may be deleted later
    name = db.Column(db.String(255))
    category = db.Column(db.String(120), index=True)

    price = db.Column(db.Numeric(12, 2))
    discount_percent = db.Column(db.Numeric(5, 2))
    shipping_cost = db.Column(db.Numeric(12, 2))
    quantity = db.Column(db.Integer, nullable=False)
    line_total = db.Column(ExactDecimal)

    def as_api(self):
        return {
            "product_id": self.product_id,
            "name": self.name,
            "category": self.category,
            "price": to_float(self.price),
            "discount_percent": float(self.discount_percent or 0),
            "shipping_cost": to_float(self.shipping_cost),
            "quantity": self.quantity,
            "line_total": to_float(self.line_total),
        }
