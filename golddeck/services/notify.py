"""
Settlement notice for the administrator.

Nothing is sent from here: the notice is a ``mailto:`` link that the UI
offers to the user, whose mail client does the delivery. The ledger fires
it once per BUY order and never waits on it.
"""

from __future__ import annotations

import logging
from collections import deque
from decimal import Decimal
from typing import Deque, Optional
from urllib.parse import quote

from golddeck.config import settings
from .model import Transaction
from .pricing import round_cents

logger = logging.getLogger(__name__)

_RULE = "-" * 48
_ACTIONS = {"BUY": "PURCHASE", "SELL": "REDEMPTION"}
_NOTES = {
    "BUY": "Note: payment in USDT for the total has been sent; expecting the net amount in GLDC.",
    "SELL": "Note: the GLDC amount has been returned; expecting the total in USDT.",
}


def compose_settlement_notice(
    tx: Transaction,
    account: Optional[str],
    treasury_wallet: str,
    admin_email: str,
) -> str:
    """Return a ``mailto:`` link describing *tx* for manual settlement."""
    action = _ACTIONS[tx.side]
    fee_grams = tx.quantity * (tx.fee / tx.subtotal) if tx.subtotal else Decimal("0")
    subject = f"GLDC ORDER: {tx.side} {tx.quantity}g"
    lines = [
        "ORDER DETAIL - GLDC GOLD DESK",
        _RULE,
        f"Operation: {action} ({tx.side})",
        _RULE,
        f"Requested amount: {tx.quantity} g",
        f"Fee (0.75%): -{fee_grams:.6f} g",
        f"Net gold amount: {tx.quantity - fee_grams:.6f} g",
        _RULE,
        f"Reference price: ${tx.unit_price:.4f} USDT/g",
        f"TOTAL DUE: ${round_cents(tx.total)} USDT",
        _RULE,
        f"User wallet: {account or 'not connected'}",
        f"Treasury wallet: {treasury_wallet}",
        f"Settlement reference: {tx.id}",
        _RULE,
        _NOTES[tx.side],
    ]
    body = "\n".join(lines)
    return f"mailto:{admin_email}?subject={quote(subject)}&body={quote(body)}"


class MailtoNotifier:
    """Collects notice links for the UI to hand to the browser."""

    def __init__(
        self,
        account: Optional[str] = None,
        treasury_wallet: Optional[str] = None,
        admin_email: Optional[str] = None,
        maxlen: int = 20,
    ):
        cfg = settings()
        self.account = account
        self.treasury_wallet = treasury_wallet or cfg["TREASURY_WALLET"]
        self.admin_email = admin_email or cfg["ADMIN_EMAIL"]
        self._links: Deque[tuple[str, str]] = deque(maxlen=maxlen)

    def __call__(self, tx: Transaction) -> None:
        link = compose_settlement_notice(tx, self.account, self.treasury_wallet, self.admin_email)
        self._links.appendleft((tx.id, link))
        logger.info("Settlement notice prepared for %s", tx.id)

    def links(self) -> list[tuple[str, str]]:
        """``(transaction_id, mailto_link)`` pairs, newest first."""
        return list(self._links)
