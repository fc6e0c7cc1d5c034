# storefront/order/routes.py
from flask import request

from . import bp
from ..model import ORDER_STATUSES
from ..services import order_service
from ..utils.api import ok, err
from ..utils.decorators import _current_user, admin_required, login_required


@bp.get("")
@login_required
def list_orders():
    """
    Query params:
      - status=pending|paid|verified|shipped|issue_reported
    Shoppers see their own orders; admins see everyone's.
    """
    u = _current_user()
    status = request.args.get("status")
    if status and status not in ORDER_STATUSES:
        return err(f"unknown status '{status}'", 422)
    orders = order_service.list_orders(
        user_id=None if u.role == "admin" else u.id,
        status=status,
    )
    return ok("orders", {"total": len(orders), "items": [o.as_api() for o in orders]})


@bp.get("/<int:order_id>")
@login_required
def get_order(order_id: int):
    u = _current_user()
    o = order_service.get_order(order_id)
    if not o or (u.role != "admin" and o.user_id != u.id):
        return err("order not found", 404)
    return ok("order", o.as_api())


@bp.post("/<int:order_id>/verify")
@admin_required
def verify_order(order_id: int):
    o = order_service.get_order(order_id)
    if not o:
        return err("order not found", 404)
    done, reason = order_service.verify_order(o)
    if not done:
        return err(reason, 409)
    return ok(f"Order {o.code} verified and marked as shipped.", o.as_api())


@bp.post("/<int:order_id>/issue")
@admin_required
def report_issue(order_id: int):
    """Body: { "note": "Customer reported damaged box upon arrival." }"""
    o = order_service.get_order(order_id)
    if not o:
        return err("order not found", 404)
    data = request.get_json(silent=True) or {}
    done, reason = order_service.report_issue(o, data.get("note"))
    if not done:
        return err(reason, 422 if reason == "note is required" else 409)
    return ok("Issue reported for order.", o.as_api())
