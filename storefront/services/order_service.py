# storefront/services/order_service.py
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError

from ..checkout.ports import OrderDraft, PersistenceError
from ..extensions import db
from ..model import Order, OrderItem
from ..pricing.engine import line_total

log = logging.getLogger(__name__)


def _gen_order_code():
    now = datetime.now(timezone.utc)
    return f"ORD-{now:%Y%m%d-%H%M%S}-{uuid.uuid4().hex[:6].upper()}"


class SqlOrderStore:
    """Append-only order persistence used by checkout sessions."""

    def create_order(self, draft: OrderDraft) -> Order:
        b = draft.breakdown
        order = Order(
            code=_gen_order_code(),
            user_id=draft.user_id,
            status=draft.status,
            payment_method=draft.payment_method,
            subtotal=b.subtotal,
            shipping_total=b.shipping_total,
            tax_amount=b.tax_amount,
            discount_total=b.discount_total,
            total_amount=b.total_amount,
            tax_rate_percent=b.tax_rate_percent,
            applied_coupons=list(b.applied_coupons),
            slip_image=draft.slip_image,
        )
        for line in draft.lines:
            p = line.product
            order.items.append(OrderItem(
                product_id=p.product_id,
                name=p.name,
                category=p.category,
                price=p.price,
                discount_percent=p.discount_percent,
                shipping_cost=p.shipping_cost,
                quantity=line.quantity,
                line_total=line_total(line),
            ))
        try:
            db.session.add(order)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            log.error("order persistence failed: %s", e)
            raise PersistenceError(str(e)) from e
        log.info("[Order: %s] created for user %s, total %s", order.code, order.user_id, order.total_amount)
        return order


def list_orders(user_id: int | None = None, status: str | None = None) -> list[Order]:
    q = Order.query
    if user_id is not None:
        q = q.filter(Order.user_id == user_id)
    if status:
        q = q.filter(Order.status == status)
    return q.order_by(Order.created_at.desc(), Order.id.desc()).all()


def get_order(order_id: int) -> Order | None:
    return db.session.get(Order, order_id)


# ---- admin status actions --------------------------------------------------
def verify_order(order: Order) -> tuple[bool, str | None]:
    """verified -> shipped."""
    if order.status != "verified":
        return False, f"only verified orders can be shipped (order is '{order.status}')"
    order.status = "shipped"
    db.session.commit()
    log.info("[Order: %s] verified and marked as shipped", order.code)
    return True, None


def report_issue(order: Order, note: str | None) -> tuple[bool, str | None]:
    """Any non-terminal status -> issue_reported, with the admin's note."""
    note = (note or "").strip()
    if not note:
        return False, "note is required"
    if order.is_terminal:
        return False, f"order is already '{order.status}'"
    order.status = "issue_reported"
    order.admin_note = note
    db.session.commit()
    log.warning("[Order: %s] issue reported: %s", order.code, note)
    return True, None
