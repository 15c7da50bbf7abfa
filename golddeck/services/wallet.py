"""
Connected-account view.

There is no real wallet integration: ``connect()`` hands back a fixed mock
address. Balances change only through ``apply_settlement``, which the
ledger calls when a transaction completes.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from golddeck.config import settings
from .model import Side, WalletState

logger = logging.getLogger(__name__)


class WalletView:
    def __init__(self, address: Optional[str] = None, balance_tokens: Decimal = Decimal("0")):
        self._address = address
        self._state = WalletState(balance_tokens=balance_tokens)

    @property
    def state(self) -> WalletState:
        """Copy of the current state, safe to hand to the UI."""
        return self._state.model_copy()

    @property
    def is_connected(self) -> bool:
        return self._state.is_connected

    def connect(self) -> WalletState:
        address = self._address or settings()["MOCK_WALLET_ADDRESS"]
        self._state = self._state.model_copy(update={"address": address, "is_connected": True})
        logger.info("Wallet connected: %s", address)
        return self.state

    def apply_settlement(self, side: Side, quantity: Decimal, unit_price: Decimal) -> WalletState:
        """Move *quantity* grams in or out and revalue the whole balance at *unit_price*."""
        delta = quantity if side == "BUY" else -quantity
        tokens = self._state.balance_tokens + delta
        self._state = self._state.model_copy(
            update={"balance_tokens": tokens, "balance_usd": tokens * unit_price}
        )
        return self.state
