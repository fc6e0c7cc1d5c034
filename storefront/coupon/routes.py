# storefront/coupon/routes.py
from flask import request

from . import bp
from ..extensions import db
from ..model import Coupon
from ..services import coupon_service
from ..utils.api import ok, err
from ..utils.decorators import admin_required


@bp.post("")
@admin_required
def create_coupon():
    """Body: { "code": "WELCOME100", "ctype": "fixed"|"percent"|"free_shipping", "value": 100 }"""
    data = request.get_json(silent=True) or {}
    try:
        c = coupon_service.create_coupon_from_payload(data)
    except ValueError as e:
        status = 409 if "already exists" in str(e) else 422
        return err(str(e), status)
    return ok("Coupon created", c.as_api(), status=201)


@bp.get("")
@admin_required
def list_coupons():
    active = request.args.get("active")
    items = coupon_service.list_coupons(None if active is None else active.lower() == "true")
    return ok("coupons", [c.as_api() for c in items])


@bp.patch("/<int:coupon_id>/toggle")
@admin_required
def toggle_coupon(coupon_id: int):
    c = db.session.get(Coupon, coupon_id)
    if not c:
        return err("coupon not found", 404)
    coupon_service.toggle_coupon(c)
    return ok("Coupon updated", c.as_api())
