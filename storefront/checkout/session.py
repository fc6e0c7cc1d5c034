# storefront/checkout/session.py
"""
Checkout state machine: review -> payment -> confirmed.

One session holds one user's cart (frozen product snapshots), the applied
coupon set and the payment-proof flag. Every read of ``breakdown()`` goes
back through the pricing engine; nothing financial is cached.

The only suspension point is the simulated payment verification inside
``confirm_payment``. It can be cancelled from any thread with
``cancel_verification``; a cancelled verification creates no order and
leaves the session untouched.
"""
from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from decimal import Decimal
from enum import Enum
from typing import Callable

from ..pricing import CartLine, CouponRule, FinancialBreakdown, ProductSnapshot, compute_breakdown
from ..pricing.engine import line_total, net_unit_price
from ..utils.money import D, to_float
from .ports import CouponRegistry, OrderDraft, OrderStore, Outcome, PersistenceError

log = logging.getLogger(__name__)


class CheckoutStep(str, Enum):
    REVIEW = "review"
    PAYMENT = "payment"
    CONFIRMED = "confirmed"


class CheckoutSession:
    def __init__(
        self,
        coupons: CouponRegistry,
        orders: OrderStore,
        tax_rate: Callable[[], Decimal],
        *,
        user_id: int | None = None,
        verify_delay: float = 3.0,
        payment_method: str = "promptpay",
        session_id: str | None = None,
    ):
        self.id = session_id or str(uuid.uuid4())
        self.user_id = user_id
        self.step = CheckoutStep.REVIEW
        self.payment_method = payment_method
        self.slip_image: str | None = None
        self.last_order = None

        self._coupon_registry = coupons
        self._orders = orders
        self._tax_rate = tax_rate
        self._verify_delay = verify_delay

        self._lines: dict[int, CartLine] = {}
        self._coupons: list[CouponRule] = []
        self._frozen_rate: Decimal | None = None
        self._proof = False

        self._lock = threading.RLock()
        self._in_flight = False
        self._cancel_requested = False
        self._pending: asyncio.Future | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    # ---- read side ---------------------------------------------------------
    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines.values())

    @property
    def coupons(self) -> tuple[CouponRule, ...]:
        return tuple(self._coupons)

    @property
    def has_proof(self) -> bool:
        return self._proof

    @property
    def verifying(self) -> bool:
        return self._in_flight

    def tax_rate(self) -> Decimal:
        if self._frozen_rate is not None:
            return self._frozen_rate
        return D(self._tax_rate())

    def breakdown(self) -> FinancialBreakdown:
        return compute_breakdown(self.lines, self.coupons, self.tax_rate())

    def _log(self, msg, *args, level=logging.INFO):
        log.log(level, "[Checkout: %s] " + msg, self.id, *args)

    def _require_review(self) -> Outcome | None:
        if self.step is not CheckoutStep.REVIEW:
            return Outcome.fail("wrong_step", f"checkout is in '{self.step.value}' step; cart and coupons are locked")
        return None

    # ---- cart ------------------------------------------------------------------
    def add_item(self, product: ProductSnapshot, quantity: int = 1) -> Outcome:
        with self._lock:
            if (rejected := self._require_review()) is not None:
                return rejected
            if not isinstance(quantity, int) or quantity < 1:
                return Outcome.fail("invalid_quantity", "quantity must be >= 1")
            existing = self._lines.get(product.product_id)
            if existing:
                # keep the original snapshot; only the quantity grows
                self._lines[product.product_id] = CartLine(existing.product, existing.quantity + quantity)
            else:
                self._lines[product.product_id] = CartLine(product, quantity)
            return Outcome.success("item added", self.breakdown())

    def set_quantity(self, product_id: int, quantity: int) -> Outcome:
        with self._lock:
            if (rejected := self._require_review()) is not None:
                return rejected
            line = self._lines.get(product_id)
            if not line:
                return Outcome.fail("not_in_cart", "item not found in this cart")
            if not isinstance(quantity, int) or quantity < 1:
                return Outcome.fail("invalid_quantity", "quantity must be >= 1")
            self._lines[product_id] = CartLine(line.product, quantity)
            return Outcome.success("item updated", self.breakdown())

    def remove_item(self, product_id: int) -> Outcome:
        with self._lock:
            if (rejected := self._require_review()) is not None:
                return rejected
            if self._lines.pop(product_id, None) is None:
                return Outcome.fail("not_in_cart", "item not found in this cart")
            return Outcome.success("item removed", self.breakdown())

    def clear_cart(self) -> Outcome:
        with self._lock:
            if (rejected := self._require_review()) is not None:
                return rejected
            self._lines.clear()
            self._coupons.clear()
            return Outcome.success("all items removed", self.breakdown())

    # ---- coupons ---------------------------------------------------------------
    def apply_coupon(self, code: str) -> Outcome:
        with self._lock:
            if (rejected := self._require_review()) is not None:
                return rejected
            code = (code or "").strip().upper()
            if not code:
                return Outcome.fail("invalid_coupon", "code is required")
            found = self._coupon_registry.find_active_coupon_by_code(code)
            if not found or not found.is_active:
                return Outcome.fail("invalid_coupon", "Invalid or expired coupon code.")
            if any(c.code == found.code for c in self._coupons):
                return Outcome.fail("duplicate_coupon", "This coupon is already applied.")
            self._coupons.append(found)
            self._log("coupon %s applied (%s)", found.code, found.type.value)
            return Outcome.success("coupon applied", self.breakdown())

    def remove_coupon(self, code: str) -> Outcome:
        with self._lock:
            if (rejected := self._require_review()) is not None:
                return rejected
            code = (code or "").strip().upper()
            kept = [c for c in self._coupons if c.code != code]
            if len(kept) == len(self._coupons):
                return Outcome.fail("not_applied", "coupon not applied to this checkout")
            self._coupons = kept
            return Outcome.success("coupon removed", self.breakdown())

    # ---- transitions -----------------------------------------------------------
    def confirm_review(self) -> Outcome:
        """Review -> Payment. Freezes coupons and tax rate; returns the amount due."""
        with self._lock:
            if (rejected := self._require_review()) is not None:
                return rejected
            if not self._lines:
                return Outcome.fail("empty_cart", "Your cart is empty.")
            for c in self._coupons:
                if self._coupon_registry.find_active_coupon_by_code(c.code) is None:
                    return Outcome.fail("stale_coupon", f"coupon '{c.code}' is no longer active; remove it to continue")
            self._frozen_rate = D(self._tax_rate())
            self.step = CheckoutStep.PAYMENT
            due = self.breakdown()
            self._log("awaiting payment of %s", due.total_amount)
            return Outcome.success("awaiting payment", due)

    def acknowledge_payment_proof(self, slip_ref: str | None = None) -> Outcome:
        with self._lock:
            if self.step is not CheckoutStep.PAYMENT:
                return Outcome.fail("wrong_step", "payment slip can only be uploaded during payment")
            self._proof = True
            self.slip_image = slip_ref
            self._log("payment slip received")
            return Outcome.success("payment slip received")

    async def confirm_payment(self) -> Outcome:
        """Payment -> Confirmed after the simulated verification delay.

        Order creation happens before the session reset, so a failing order
        store leaves cart and coupons intact for a retry.
        """
        with self._lock:
            if self.step is not CheckoutStep.PAYMENT:
                return Outcome.fail("wrong_step", "checkout is not awaiting payment")
            if not self._proof:
                return Outcome.fail("no_proof", "Please upload your payment slip first.")
            if self._in_flight:
                return Outcome.fail("in_flight", "payment verification already in progress")
            self._in_flight = True
            self._cancel_requested = False
            self._loop = asyncio.get_running_loop()
            self._pending = self._loop.create_task(asyncio.sleep(self._verify_delay))

        try:
            try:
                await self._pending
            except asyncio.CancelledError:
                if not self._cancel_requested:
                    raise
                self._log("payment verification cancelled")
                return Outcome.fail("cancelled", "payment verification cancelled")

            draft = OrderDraft(
                user_id=self.user_id,
                lines=self.lines,
                breakdown=self.breakdown(),
                payment_method=self.payment_method,
                slip_image=self.slip_image,
            )
            try:
                order = self._orders.create_order(draft)
            except PersistenceError as e:
                self._log("order creation failed: %s", e, level=logging.ERROR)
                return Outcome.fail("persistence", "could not place the order, please try again")

            with self._lock:
                self._lines.clear()
                self._coupons.clear()
                self._proof = False
                self.step = CheckoutStep.CONFIRMED
                self.last_order = order
            self._log("order placed, total %s", draft.total_amount)
            return Outcome.success("Order Confirmed!", order)
        finally:
            with self._lock:
                self._in_flight = False
                self._pending = None
                self._loop = None

    def cancel_verification(self) -> bool:
        """Abort an in-flight verification. Safe to call from another thread."""
        with self._lock:
            pending, loop = self._pending, self._loop
            if pending is None or pending.done():
                return False
            self._cancel_requested = True
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            pending.cancel()
        else:
            loop.call_soon_threadsafe(pending.cancel)
        return True

    # ---- api ---------------------------------------------------------------------
    def as_api(self):
        b = self.breakdown()
        return {
            "id": self.id,
            "step": self.step.value,
            "items": [
                {
                    "product_id": l.product.product_id,
                    "name": l.product.name,
                    "category": l.product.category,
                    "price": to_float(l.product.price),
                    "discount_percent": float(l.product.discount_percent),
                    "unit_final_price": to_float(net_unit_price(l.product)),
                    "shipping_cost": to_float(l.product.shipping_cost),
                    "quantity": l.quantity,
                    "line_total": to_float(line_total(l)),
                }
                for l in self.lines
            ],
            "coupons": [
                {"code": c.code, "type": c.type.value, "value": float(c.value), "label": c.describe()}
                for c in self.coupons
            ],
            "totals": b.as_api(),
            "payment": {
                "method": self.payment_method,
                "slip_uploaded": self._proof,
                "verifying": self._in_flight,
            },
        }
