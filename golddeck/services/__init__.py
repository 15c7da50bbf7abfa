"""Public service API."""
from .api import fetch_spot_price, fetch_spot_quote
from .insight import GeminiInsightProvider, InsightError, QuotaExhaustedError
from .ledger import TransactionLedger
from .model import (
    MarketUpdate,
    OrderQuote,
    PriceHistoryPoint,
    PriceSnapshot,
    SpotQuote,
    SyncState,
    Transaction,
    TransactionStatus,
    WalletState,
)
from .pricing import FEE_RATE, TROY_OUNCE_TO_GRAMS, quote_order, round_cents
from .session import DashboardSession
from .sync import PriceSynchronizer
from .wallet import WalletView

__all__ = [
    "fetch_spot_price",
    "fetch_spot_quote",
    "GeminiInsightProvider",
    "InsightError",
    "QuotaExhaustedError",
    "TransactionLedger",
    "MarketUpdate",
    "OrderQuote",
    "PriceHistoryPoint",
    "PriceSnapshot",
    "SpotQuote",
    "SyncState",
    "Transaction",
    "TransactionStatus",
    "WalletState",
    "FEE_RATE",
    "TROY_OUNCE_TO_GRAMS",
    "quote_order",
    "round_cents",
    "DashboardSession",
    "PriceSynchronizer",
    "WalletView",
]
