"""
In-memory transaction ledger.

Orders enter as PENDING, most recent first, and are settled automatically
after ``SETTLEMENT_DELAY_SECONDS``. Settlement is the only path that moves
wallet balances, and it values them at the price current when it fires,
not at the price the order was quoted at.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from golddeck.config import settings
from .model import OrderQuote, Side, Transaction, TransactionStatus
from .tasks import TaskRegistry
from .wallet import WalletView

logger = logging.getLogger(__name__)

Notifier = Callable[[Transaction], None]


class LedgerError(Exception):
    pass


class InvalidOrderError(LedgerError):
    pass


class DuplicateTransactionError(LedgerError):
    pass


class UnknownTransactionError(LedgerError):
    pass


def _new_id() -> str:
    return uuid.uuid4().hex[:12].upper()


class TransactionLedger:
    def __init__(
        self,
        wallet: WalletView,
        price_provider: Callable[[], Decimal],
        *,
        registry: Optional[TaskRegistry] = None,
        notifier: Optional[Notifier] = None,
        settlement_delay: Optional[float] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._wallet = wallet
        self._price_provider = price_provider
        self._registry = registry if registry is not None else TaskRegistry()
        self._notifier = notifier
        self.settlement_delay = (
            settings()["SETTLEMENT_DELAY_SECONDS"] if settlement_delay is None else settlement_delay
        )
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._transactions: List[Transaction] = []
        self._by_id: Dict[str, Transaction] = {}

    def __len__(self) -> int:
        return len(self._transactions)

    def transactions(self) -> List[Transaction]:
        """Display order: most recent first."""
        return [tx.model_copy() for tx in self._transactions]

    def get(self, transaction_id: str) -> Transaction:
        try:
            return self._by_id[transaction_id].model_copy()
        except KeyError:
            raise UnknownTransactionError(transaction_id) from None

    def pending(self) -> List[Transaction]:
        return [tx.model_copy() for tx in self._transactions if tx.status is TransactionStatus.PENDING]

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------
    def record(self, quote: OrderQuote, side: Side, reference: Optional[str] = None) -> Transaction:
        """Add a PENDING transaction without scheduling its settlement."""
        if side != quote.side:
            raise InvalidOrderError(f"Quote was priced for {quote.side}, not {side}")
        if quote.quantity <= 0:
            raise InvalidOrderError("Order quantity must be positive")
        if quote.unit_price <= 0:
            raise InvalidOrderError("No market price yet; wait for the first price update")

        tx_id = reference.strip() if reference and reference.strip() else _new_id()
        if tx_id in self._by_id:
            raise DuplicateTransactionError(tx_id)

        tx = Transaction(
            id=tx_id,
            side=side,
            quantity=quote.quantity,
            unit_price=quote.unit_price,
            subtotal=quote.subtotal,
            fee=quote.fee,
            total=quote.total,
            created_at=self._clock(),
        )
        self._transactions.insert(0, tx)
        self._by_id[tx_id] = tx
        logger.info("Order %s created: %s %s g, total %s", tx_id, side, tx.quantity, tx.total)
        return tx.model_copy()

    def create_order(self, quote: OrderQuote, side: Side, reference: Optional[str] = None) -> Transaction:
        """Record the order, schedule its settlement and notify on BUY.

        Must be called from the event loop that owns the registry.
        """
        tx = self.record(quote, side, reference)
        self._registry.call_later(
            self.settlement_delay,
            lambda: self._settle_async(tx.id),
            name=f"settle-{tx.id}",
        )
        if side == "BUY" and self._notifier is not None:
            try:
                self._notifier(tx)
            except Exception:
                logger.exception("Settlement notice for %s failed", tx.id)
        return tx

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------
    async def _settle_async(self, transaction_id: str) -> None:
        self.settle(transaction_id)

    def settle(self, transaction_id: str) -> bool:
        """Complete a PENDING transaction. Returns ``False`` if it already was."""
        tx = self._by_id.get(transaction_id)
        if tx is None:
            raise UnknownTransactionError(transaction_id)
        if tx.status is TransactionStatus.COMPLETED:
            logger.debug("Order %s already settled", transaction_id)
            return False

        tx.status = TransactionStatus.COMPLETED
        tx.settled_at = self._clock()
        price = self._price_provider()
        state = self._wallet.apply_settlement(tx.side, tx.quantity, price)
        logger.info(
            "Order %s settled at %s/g; balance %s g (%s USD)",
            transaction_id, price, state.balance_tokens, state.balance_usd,
        )
        return True
