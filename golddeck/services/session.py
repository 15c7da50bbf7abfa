"""session.py

One **dashboard session** per browser tab.

Streamlit re-runs page scripts on its own threads, while the core services
are asyncio objects that must only be touched from a single event loop.
`DashboardSession` owns that loop (running in a daemon thread) together
with the synchronizer, ledger, wallet and notifier, and exposes blocking,
thread-safe wrappers for the pages.

Teardown (`close()`) cancels *every* task registered for the session – the
periodic resync and all settlement timers still pending – before the loop
is stopped. When an ``is_alive`` check is supplied, a watchdog polls it every
``SESSION_WATCH_SECONDS`` and performs the same teardown once the browser
session behind it is gone.
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
import asyncio
import logging
import threading
from decimal import Decimal
from typing import Callable, Optional

# Project
from golddeck.config import settings
from .api import fetch_spot_quote
from .insight import GeminiInsightProvider, InsightProvider
from .ledger import TransactionLedger
from .model import MarketUpdate, OrderQuote, Side, SpotQuote, Transaction, WalletState
from .notify import MailtoNotifier
from .pricing import quote_order
from .sync import PriceSynchronizer
from .tasks import TaskRegistry
from .wallet import WalletView

logger = logging.getLogger(__name__)

_CALL_TIMEOUT = 30  # seconds a page waits on the loop before giving up


class DashboardSession:
    """Owns the event loop and every stateful service of one session."""

    def __init__(
        self,
        insight_provider: Optional[InsightProvider] = None,
        *,
        fetch_quote: Callable[[], SpotQuote] = fetch_spot_quote,
        wallet: Optional[WalletView] = None,
        refresh_interval: Optional[float] = None,
        settlement_delay: Optional[float] = None,
        is_alive: Optional[Callable[[], bool]] = None,
        watch_interval: Optional[float] = None,
    ):
        self.registry = TaskRegistry()
        self._is_alive = is_alive
        self.watch_interval = settings()["SESSION_WATCH_SECONDS"] if watch_interval is None else watch_interval
        self._expiry: Optional[asyncio.Task] = None
        self.wallet = wallet or WalletView()
        self.synchronizer = PriceSynchronizer(
            fetch_quote,
            insight_provider or GeminiInsightProvider(),
            registry=self.registry,
            interval=refresh_interval,
        )
        self.notifier = MailtoNotifier()
        self.ledger = TransactionLedger(
            self.wallet,
            lambda: self.synchronizer.last_known_good,
            registry=self.registry,
            notifier=self.notifier,
            settlement_delay=settlement_delay,
        )
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------
    # Loop plumbing
    # ------------------------------------------------------------------
    def start(self) -> "DashboardSession":
        if self._thread is not None:
            return self
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, args=(self._loop,), name="golddeck-session", daemon=True)
        self._thread.start()
        self._call(self._start_services())
        logger.info("Dashboard session started")
        return self

    @property
    def active(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @staticmethod
    def _run_loop(loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        try:
            loop.run_forever()
        finally:
            loop.close()

    async def _start_services(self) -> None:
        self.synchronizer.start()
        if self._is_alive is not None:
            self.registry.spawn(self._watch(), name="session-watch")

    def _call(self, coro, timeout: float = _CALL_TIMEOUT):
        """Run *coro* on the session loop and block for its result."""
        if not self.active:
            coro.close()
            raise RuntimeError("Session is not running")
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result(timeout)

    def close(self) -> None:
        if self._loop is None:
            return
        try:
            if self.active and not self.registry.closed:
                self._call(self._shutdown())
        finally:
            if not self._loop.is_closed():
                self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(timeout=5)
            self._loop, self._thread = None, None
        logger.info("Dashboard session closed")

    async def _shutdown(self) -> None:
        await self.synchronizer.stop()
        await self.registry.cancel_all()

    async def _watch(self) -> None:
        while self._is_alive():
            await asyncio.sleep(self.watch_interval)
        logger.info("Browser session is gone; releasing its dashboard session")
        # Outside the registry: cancel_all() would cancel this task as well.
        self._expiry = asyncio.get_running_loop().create_task(self._expire())

    async def _expire(self) -> None:
        try:
            await self._shutdown()
        finally:
            asyncio.get_running_loop().stop()

    # ------------------------------------------------------------------
    # Page-facing API
    # ------------------------------------------------------------------
    @property
    def latest(self) -> Optional[MarketUpdate]:
        return self.synchronizer.latest

    @property
    def unit_price(self) -> Decimal:
        return self.synchronizer.last_known_good

    def wallet_state(self) -> WalletState:
        async def _read() -> WalletState:
            return self.wallet.state

        return self._call(_read())

    def connect_wallet(self) -> WalletState:
        async def _connect() -> WalletState:
            state = self.wallet.connect()
            self.notifier.account = state.address
            return state

        return self._call(_connect())

    def refresh_now(self) -> MarketUpdate:
        return self._call(self.synchronizer.refresh_now())

    def quote(self, quantity, side: Side) -> OrderQuote:
        return quote_order(quantity, side, self.unit_price)

    def submit_order(self, quantity, side: Side, reference: Optional[str] = None) -> Transaction:
        """Price the order at the current price and hand it to the ledger."""

        async def _submit() -> Transaction:
            quote = quote_order(quantity, side, self.unit_price)
            return self.ledger.create_order(quote, quote.side, reference)

        return self._call(_submit())

    def transactions(self) -> list[Transaction]:
        async def _read() -> list[Transaction]:
            return self.ledger.transactions()

        return self._call(_read())

    def notice_links(self) -> list[tuple[str, str]]:
        return self.notifier.links()
