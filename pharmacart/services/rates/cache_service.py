from __future__ import annotations

"""Process-wide rate cache with an owned background refresh task.

Purpose:
    Hold the most recently resolved RateTable so pricing never waits on the
    network, and keep it fresh by re-resolving on a fixed interval.

Design:
    - `current()` is a plain attribute read; before the first resolution it
      returns the static fallback table, so readers always get a complete one.
    - `refresh_now()` awaits the resolver and swaps the stored table with a
      single assignment. Overlapping refreshes are neither cancelled nor
      queued: each completes and the last one to finish is what readers see.
    - `start()` / `stop()` bind the periodic task to the owner's lifetime (the
      FastAPI lifespan); nothing keeps running after `stop()`.
"""
import asyncio
import logging
from typing import Optional

from pharmacart.models.rates import RateTable
from .resolver import RateResolver, fallback_table

logger = logging.getLogger("pharmacart.rates.cache")

DEFAULT_REFRESH_INTERVAL = 120.0


class RateCache:
    def __init__(
        self,
        resolver: RateResolver,
        *,
        interval_seconds: float = DEFAULT_REFRESH_INTERVAL,
        initial: Optional[RateTable] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("refresh interval must be positive seconds")
        self._resolver = resolver
        self._interval = interval_seconds
        self._table: RateTable = initial or fallback_table()
        self._in_flight = 0
        self._task: Optional[asyncio.Task] = None
        self._refreshed_once = False

    # Read side ------------------------------------------------
    def current(self) -> RateTable:
        return self._table

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def has_resolved(self) -> bool:
        return self._refreshed_once

    # Refresh --------------------------------------------------
    async def refresh_now(self) -> RateTable:
        self._in_flight += 1
        try:
            table = await self._resolver.resolve()
        finally:
            self._in_flight -= 1
        self._table = table
        self._refreshed_once = True
        logger.info(
            "rate table replaced (fallback=%s, source=%s)",
            table.is_fallback,
            table.source or "-",
        )
        return table

    async def _run(self) -> None:
        while True:
            try:
                await self.refresh_now()
            except asyncio.CancelledError:
                raise
            except Exception:
                # resolve() does not raise; this guards the loop itself
                logger.exception("periodic rate refresh failed")
            await asyncio.sleep(self._interval)

    # Lifecycle ------------------------------------------------
    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="rate-cache-refresh"
        )
        logger.info("rate refresh task started (every %ss)", self._interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("rate refresh task stopped")
