# storefront/checkout/routes.py
from __future__ import annotations

import os

from flask import current_app, request
from werkzeug.utils import secure_filename

from ..pricing import ProductSnapshot
from ..services.catalog_service import get_product
from ..utils.api import ok, err
from ..utils.decorators import _current_user, login_required, current_user_id
from . import bp
from .ports import Outcome
from .registry import CheckoutRegistry

ALLOWED_SLIP_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp", "pdf"}

# Outcome.reason -> HTTP status; anything unlisted is a plain 422
_REASON_STATUS = {
    "invalid_coupon": 404,
    "not_in_cart": 404,
    "not_applied": 404,
    "duplicate_coupon": 409,
    "in_flight": 409,
    "wrong_step": 409,
    "cancelled": 409,
    "persistence": 503,
}


def _registry() -> CheckoutRegistry:
    return current_app.extensions["checkout_registry"]


def _resolve_session(uid):
    return _registry().resolve(request.headers.get("X-Checkout-Id"), uid)


def _reply(session, outcome: Outcome, status: int = 200):
    if outcome.ok:
        resp = ok(outcome.message, session.as_api(), status=status)
    else:
        resp = err(outcome.message, _REASON_STATUS.get(outcome.reason, 422),
                   data={"reason": outcome.reason, "checkout": session.as_api()})
    resp.headers["X-Checkout-Id"] = session.id
    return resp


def _parse_qty(data, default=None):
    raw = data.get("quantity", data.get("qty", default))
    # bools are ints in Python; floats are never truncated
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().lstrip("-").isdigit():
        return int(raw)
    return None


# ---- session ---------------------------------------------------------------
@bp.post("")
@login_required
def open_checkout():
    s = _resolve_session(current_user_id())
    return _reply(s, Outcome.success("checkout ready"), status=201)


@bp.get("")
@login_required
def get_checkout():
    s = _resolve_session(current_user_id())
    return _reply(s, Outcome.success("checkout"))


@bp.delete("")
@login_required
def abandon_checkout():
    """Drop the session (cancels any in-flight verification) and hand back a fresh one."""
    uid = current_user_id()
    s = _registry().get(request.headers.get("X-Checkout-Id"), uid)
    if s is not None:
        _registry().discard(s.id)
    fresh = _registry().open(uid)
    return _reply(fresh, Outcome.success("checkout abandoned; new checkout ready"))


# ---- items -------------------------------------------------------------------
@bp.post("/items")
@login_required
def add_item():
    """
    Body: { "product_id": int, "quantity" | "qty": int }
    Header: X-Checkout-Id: <uuid>
    """
    s = _resolve_session(current_user_id())
    data = request.get_json(silent=True) or {}
    product_id = data.get("product_id")
    qty = _parse_qty(data, default=1)

    if not product_id:
        return err("product_id is required", 422)
    if qty is None:
        return err("quantity must be an integer", 422)

    product = get_product(product_id)
    if not product:
        return err("product not found", 404)
    if int(product.stock or 0) <= 0:
        return err("out of stock", 409)

    return _reply(s, s.add_item(ProductSnapshot.of(product), qty), status=201)


@bp.patch("/items/<int:product_id>")
@login_required
def update_item(product_id: int):
    s = _resolve_session(current_user_id())
    data = request.get_json(silent=True) or {}
    qty = _parse_qty(data)
    if qty is None:
        return err("quantity must be an integer", 422)
    return _reply(s, s.set_quantity(product_id, qty))


@bp.delete("/items/<int:product_id>")
@login_required
def remove_item(product_id: int):
    s = _resolve_session(current_user_id())
    return _reply(s, s.remove_item(product_id))


@bp.delete("/items")
@login_required
def clear_items():
    s = _resolve_session(current_user_id())
    return _reply(s, s.clear_cart())


# ---- coupons -----------------------------------------------------------------
@bp.post("/coupons")
@login_required
def apply_coupon():
    """Body: { "code": "SALE5" }"""
    s = _resolve_session(current_user_id())
    data = request.get_json(silent=True) or {}
    return _reply(s, s.apply_coupon(data.get("code") or ""))


@bp.delete("/coupons/<code>")
@login_required
def remove_coupon(code: str):
    s = _resolve_session(current_user_id())
    return _reply(s, s.remove_coupon(code))


# ---- review -> payment -> confirmed ------------------------------------------
@bp.post("/confirm")
@login_required
def confirm_review():
    s = _resolve_session(current_user_id())
    return _reply(s, s.confirm_review())


def _allowed_slip(filename: str) -> bool:
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_SLIP_EXTENSIONS


def _save_slip(file_storage, checkout_id: str) -> str:
    """Save the uploaded slip under the upload folder; returns its public url."""
    if not _allowed_slip(file_storage.filename):
        raise ValueError("Unsupported file type")
    ext = os.path.splitext(secure_filename(file_storage.filename))[1].lower()
    filename = f"slip-{checkout_id}{ext}"

    subdir = current_app.config["UPLOAD_SUBDIR"]
    upload_dir = os.path.join(current_app.instance_path, subdir)
    os.makedirs(upload_dir, exist_ok=True)
    file_storage.save(os.path.join(upload_dir, filename))
    return f"/{subdir}/{filename}"


@bp.post("/slip")
@login_required
def upload_slip():
    """multipart: file=<image>; or JSON { "slip_image": "<reference>" }"""
    s = _resolve_session(current_user_id())
    slip_ref = None
    fs = request.files.get("file")
    if fs is not None and fs.filename:
        slip_ref = _save_slip(fs, s.id)
    else:
        data = request.get_json(silent=True) or {}
        slip_ref = data.get("slip_image")
        if not slip_ref:
            return err("payment slip file is required", 422)
    return _reply(s, s.acknowledge_payment_proof(slip_ref))


@bp.post("/pay")
async def confirm_payment():
    u = _current_user()
    if not u:
        return err("Unauthorized", 401)
    s = _resolve_session(u.id)
    outcome = await s.confirm_payment()
    if not outcome.ok:
        return _reply(s, outcome)
    order = outcome.data
    nxt = _registry().finish(s.id, u.id)
    resp = ok(outcome.message, {"order": order.as_api(), "checkout": nxt.as_api()}, status=201)
    resp.headers["X-Checkout-Id"] = nxt.id
    resp.headers["X-Order-Id"] = str(order.id)
    return resp
