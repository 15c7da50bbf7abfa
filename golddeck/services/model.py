"""model.py

Pydantic **domain models** shared across the core services and the UI.

Prices and amounts are ``Decimal`` end to end so quotes stay exact; rounding
to cents only happens when a value is rendered.
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional

# Third-party
from pydantic import BaseModel, ConfigDict

Side = Literal["BUY", "SELL"]
MarketError = Literal["quota_exhausted", "market_connection_error"]

# -----------------------------------------------------------------------------
# Market data
# -----------------------------------------------------------------------------

class SpotQuote(BaseModel):
    """Result of one spot-price fetch – either live or a degraded fallback."""

    model_config = ConfigDict(frozen=True)

    price: Decimal                 # USD per troy ounce
    is_live: bool                  # False → fallback constant was used
    reason: Optional[str] = None   # why the fetch degraded


class PriceSnapshot(BaseModel):
    """Spot price and its per-gram token price at one point in time."""

    model_config = ConfigDict(frozen=True)

    spot_price: Decimal            # USD per troy ounce
    unit_price: Decimal            # USD per gram (one GLDC)
    timestamp: datetime
    is_live: bool = True


class PriceHistoryPoint(BaseModel):
    """One point of the synthetic chart series."""

    model_config = ConfigDict(frozen=True)

    label: str                     # e.g. "14:00"
    value: Decimal


class SyncState(str, Enum):
    IDLE = "IDLE"
    FETCHING = "FETCHING"
    UPDATED = "UPDATED"
    FAILED = "FAILED"


class MarketUpdate(BaseModel):
    """What the synchronizer publishes to its observers after each cycle."""

    model_config = ConfigDict(frozen=True)

    state: SyncState
    snapshot: Optional[PriceSnapshot] = None
    history: tuple[PriceHistoryPoint, ...] = ()
    insight: str = ""
    error: Optional[MarketError] = None
    stale: bool = False            # degraded fetch, previous price kept

# -----------------------------------------------------------------------------
# Orders & ledger
# -----------------------------------------------------------------------------

class OrderQuote(BaseModel):
    """Priced order – recomputed on every input change, never cached."""

    model_config = ConfigDict(frozen=True)

    side: Side
    quantity: Decimal              # grams of GLDC
    unit_price: Decimal
    subtotal: Decimal
    fee: Decimal
    total: Decimal

    @property
    def net_quantity(self) -> Decimal:
        """Grams left once the fee is expressed in gold."""
        return self.quantity - self.quantity * (self.fee / self.subtotal) if self.subtotal else self.quantity


class TransactionStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class Transaction(BaseModel):
    """Ledger row. Only ``TransactionLedger`` changes ``status``."""

    id: str
    side: Side
    quantity: Decimal
    unit_price: Decimal
    subtotal: Decimal
    fee: Decimal
    total: Decimal
    status: TransactionStatus = TransactionStatus.PENDING
    created_at: datetime
    settled_at: Optional[datetime] = None

# -----------------------------------------------------------------------------
# Wallet
# -----------------------------------------------------------------------------

class WalletState(BaseModel):
    """Connected account as shown in the wallet card."""

    address: Optional[str] = None
    balance_tokens: Decimal = Decimal("0")
    balance_usd: Decimal = Decimal("0")
    is_connected: bool = False
