"""Cart sessions.

A session pairs one Cart with the caller's pricing selection (surcharge
percent and display currency). Sessions live in process memory only and are
keyed by an opaque id the client echoes back in the X-Session-Id header.
Idle sessions expire and the store is capped, so it stays bounded.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Optional

from pharmacart.models.cart import PricingSelection
from pharmacart.models.constants import BASE_CURRENCY
from pharmacart.models.pricing import Totals
from pharmacart.models.rates import RateTable
from pharmacart.services.cart import Cart
from pharmacart.services.pricing import compute_totals, parse_surcharge

logger = logging.getLogger("pharmacart.session")

DEFAULT_IDLE_TTL = 3600.0
DEFAULT_MAX_SESSIONS = 10000


@dataclass
class CartSession:
    id: str
    cart: Cart = field(default_factory=Cart)
    selection: PricingSelection = field(default_factory=PricingSelection)
    last_seen: float = 0.0

    def set_surcharge(self, value: Any) -> Decimal:
        # invalid input raises before the selection changes
        pct = parse_surcharge(value)
        self.selection = self.selection.model_copy(update={"surcharge_percent": pct})
        return pct

    def set_currency(self, code: str) -> str:
        code = code.strip().upper()
        self.selection = self.selection.model_copy(update={"currency": code})
        return code

    def clear(self) -> None:
        """Empty the cart and drop the surcharge back to 0."""
        self.cart.clear()
        self.selection = self.selection.model_copy(
            update={"surcharge_percent": Decimal("0")}
        )

    def totals(self, rate_table: RateTable) -> Totals:
        return compute_totals(
            self.cart,
            self.selection.surcharge_percent,
            self.selection.currency,
            rate_table,
        )


class SessionStore:
    """In-memory sessions, least recently used first.

    Sessions idle for longer than `idle_ttl_seconds` are purged, and once
    `max_sessions` is reached the least recently used one is evicted.
    """

    def __init__(
        self,
        *,
        idle_ttl_seconds: float = DEFAULT_IDLE_TTL,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if idle_ttl_seconds <= 0:
            raise ValueError("session idle ttl must be positive seconds")
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._ttl = idle_ttl_seconds
        self._max = max_sessions
        self._clock = clock
        self._sessions: "OrderedDict[str, CartSession]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def _purge_expired(self, now: float) -> None:
        while self._sessions:
            sid, oldest = next(iter(self._sessions.items()))
            if now - oldest.last_seen < self._ttl:
                break
            self._sessions.pop(sid)
            logger.debug("session expired %s", sid)

    def _touch(self, session: CartSession, now: float) -> CartSession:
        session.last_seen = now
        self._sessions.move_to_end(session.id)
        return session

    def get(self, session_id: Optional[str]) -> Optional[CartSession]:
        """Existing session or None; never creates one."""
        now = self._clock()
        self._purge_expired(now)
        if not session_id or session_id not in self._sessions:
            return None
        return self._touch(self._sessions[session_id], now)

    def get_or_create(self, session_id: Optional[str] = None) -> CartSession:
        existing = self.get(session_id)
        if existing is not None:
            return existing
        now = self._clock()
        while len(self._sessions) >= self._max:
            sid, _ = self._sessions.popitem(last=False)
            logger.info("session store full; evicted %s", sid)
        sid = session_id or uuid.uuid4().hex
        session = CartSession(
            id=sid, selection=PricingSelection(currency=BASE_CURRENCY), last_seen=now
        )
        self._sessions[sid] = session
        logger.debug("session created %s", sid)
        return session

    def drop(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None
