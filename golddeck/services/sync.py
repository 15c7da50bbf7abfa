"""
Market-price synchronizer.

One cycle: fetch the spot quote, derive the per-gram price, remember it as
the last known good price, rebuild the synthetic chart series, ask the
insight provider for commentary, publish a ``MarketUpdate``. Cycles run once
on ``start()`` and then every ``REFRESH_SECONDS``; a manual ``refresh_now()``
waits for any cycle in flight and then runs its own, so two cycles never
overlap.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, List, Optional

from golddeck.config import settings
from .api import fetch_spot_quote
from .history import HistoryGenerator
from .insight import DEFAULT_INSIGHT, InsightError, InsightProvider, QuotaExhaustedError
from .model import MarketUpdate, PriceHistoryPoint, PriceSnapshot, SpotQuote, SyncState
from .pricing import derive_unit_price
from .tasks import TaskRegistry

logger = logging.getLogger(__name__)

Observer = Callable[[MarketUpdate], None]


class PriceSynchronizer:
    def __init__(
        self,
        fetch_quote: Callable[[], SpotQuote] = fetch_spot_quote,
        insight_provider: Optional[InsightProvider] = None,
        *,
        registry: Optional[TaskRegistry] = None,
        interval: Optional[float] = None,
        history: Optional[Callable[[Decimal], tuple]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._fetch_quote = fetch_quote
        self._insight_provider = insight_provider
        self._registry = registry if registry is not None else TaskRegistry()
        self.interval = settings()["REFRESH_SECONDS"] if interval is None else interval
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._build_history = history or HistoryGenerator(clock=self._clock)

        self._lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None
        self._observers: List[Observer] = []

        self.state = SyncState.IDLE
        self.last_known_good = Decimal("0")
        self._snapshot: Optional[PriceSnapshot] = None
        self._history: tuple[PriceHistoryPoint, ...] = ()
        self._last_insight: Optional[str] = None
        self._latest: Optional[MarketUpdate] = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def snapshot(self) -> Optional[PriceSnapshot]:
        return self._snapshot

    @property
    def history(self) -> tuple[PriceHistoryPoint, ...]:
        return self._history

    @property
    def insight(self) -> str:
        """Last successful commentary, or the static default."""
        return self._last_insight or DEFAULT_INSIGHT

    @property
    def latest(self) -> Optional[MarketUpdate]:
        return self._latest

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def subscribe(self, observer: Observer) -> Callable[[], None]:
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def _publish(self, update: MarketUpdate) -> None:
        for observer in list(self._observers):
            try:
                observer(update)
            except Exception:
                logger.exception("Market observer %r failed", observer)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self.running:
            return
        self._task = self._registry.spawn(self._run(), name="price-sync")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        self.state = SyncState.IDLE

    async def _run(self) -> None:
        while True:
            await self.run_cycle()
            await asyncio.sleep(self.interval)

    async def refresh_now(self) -> MarketUpdate:
        return await self.run_cycle()

    async def run_cycle(self) -> MarketUpdate:
        async with self._lock:
            update = await self._cycle()
        self._latest = update
        self._publish(update)
        self.state = SyncState.IDLE
        return update

    # ------------------------------------------------------------------
    # One cycle
    # ------------------------------------------------------------------
    async def _cycle(self) -> MarketUpdate:
        self.state = SyncState.FETCHING
        stale = False
        try:
            quote = await asyncio.to_thread(self._fetch_quote)
            if quote.is_live or self._snapshot is None:
                unit_price = derive_unit_price(quote.price)
                snapshot = PriceSnapshot(
                    spot_price=quote.price,
                    unit_price=unit_price,
                    timestamp=self._clock(),
                    is_live=quote.is_live,
                )
                history = self._build_history(unit_price)
                self._snapshot, self._history = snapshot, history
                self.last_known_good = unit_price
            else:
                stale = True
                logger.warning("Spot feed degraded (%s); keeping %s/g", quote.reason, self.last_known_good)

            insight = await self._fetch_insight(self.last_known_good)

        except QuotaExhaustedError as exc:
            logger.warning("Insight quota exhausted: %s", exc)
            self.state = SyncState.FAILED
            return MarketUpdate(
                state=SyncState.FAILED,
                snapshot=self._snapshot,
                history=self._history,
                insight=self.insight,
                error="quota_exhausted",
                stale=stale,
            )
        except Exception:
            logger.exception("Market synchronization cycle failed")
            self.state = SyncState.FAILED
            return MarketUpdate(
                state=SyncState.FAILED,
                snapshot=self._snapshot,
                history=self._history,
                insight=self.insight,
                error="market_connection_error",
            )

        self.state = SyncState.UPDATED
        logger.info("Market updated: %s/g (live=%s)", self.last_known_good, self._snapshot.is_live)
        return MarketUpdate(
            state=SyncState.UPDATED,
            snapshot=self._snapshot,
            history=self._history,
            insight=insight,
            stale=stale,
        )

    async def _fetch_insight(self, unit_price: Decimal) -> str:
        if self._insight_provider is None:
            return self.insight
        try:
            text = await asyncio.to_thread(self._insight_provider.generate, unit_price)
        except QuotaExhaustedError:
            raise
        except InsightError as exc:
            logger.warning("Insight unavailable, keeping previous text: %s", exc)
            return self.insight
        self._last_insight = text
        return text
