# storefront/checkout/registry.py
from __future__ import annotations

import logging
import threading
from typing import Callable

from .session import CheckoutSession, CheckoutStep

log = logging.getLogger(__name__)


class CheckoutRegistry:
    """In-process handles for live checkout sessions, keyed by session id.

    Sessions are never persisted; abandoning one simply drops it, and a
    confirmed session is dropped as soon as its order is placed.
    """

    def __init__(self, factory: Callable[[int | None], CheckoutSession]):
        self._factory = factory
        self._sessions: dict[str, CheckoutSession] = {}
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._sessions)

    def get(self, session_id: str | None, user_id: int | None = None) -> CheckoutSession | None:
        if not session_id:
            return None
        with self._lock:
            s = self._sessions.get(session_id)
        if s is None or s.user_id != user_id:
            return None
        return s

    def open(self, user_id: int | None) -> CheckoutSession:
        s = self._factory(user_id)
        with self._lock:
            self._sessions[s.id] = s
        log.info("[Checkout: %s] opened for user %s", s.id, user_id)
        return s

    def resolve(self, session_id: str | None, user_id: int | None) -> CheckoutSession:
        """Session named by the client, else the user's open one, else a new one.

        Confirmed sessions never resolve; they are evicted on the way.
        """
        s = self.get(session_id, user_id)
        if s is not None and s.step is not CheckoutStep.CONFIRMED:
            return s
        with self._lock:
            for sid in [k for k, x in self._sessions.items()
                        if x.user_id == user_id and x.step is CheckoutStep.CONFIRMED]:
                del self._sessions[sid]
            s = next((x for x in self._sessions.values() if x.user_id == user_id), None)
        return s or self.open(user_id)

    def finish(self, session_id: str, user_id: int | None) -> CheckoutSession:
        """Drop a confirmed session and hand back the user's next one."""
        with self._lock:
            self._sessions.pop(session_id, None)
        log.info("[Checkout: %s] completed", session_id)
        return self.open(user_id)

    def discard(self, session_id: str) -> bool:
        with self._lock:
            s = self._sessions.pop(session_id, None)
        if s is None:
            return False
        s.cancel_verification()
        log.info("[Checkout: %s] abandoned", session_id)
        return True
