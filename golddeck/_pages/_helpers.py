"""_helpers.py

Utility helpers shared by multiple Streamlit pages.

The module groups three kinds of helpers:

1. **Session access** – `get_session` lazily creates the per-tab
   `DashboardSession` and keeps it in ``st.session_state``; the session
   tears itself down once Streamlit drops the browser session.
2. **Formatting helpers** – cents rounding, local timestamps, side markers.
3. **Shared widgets** – the market-status banner shown on top of the
   Market and Trade pages.
"""

from __future__ import annotations

# Standard library -------------------------------------------------------------
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable
from zoneinfo import ZoneInfo

# Third-party -----------------------------------------------------------------
import pandas as pd
import streamlit as st
from streamlit import runtime
from streamlit.runtime.scriptrunner import get_script_run_ctx

# Project ---------------------------------------------------------------------
from golddeck.config import settings
from golddeck.services import DashboardSession, MarketUpdate, Transaction, round_cents

SESSION_KEY = "gold_session"

# -----------------------------------------------------------------------------
# 0) Session access
# -----------------------------------------------------------------------------

def browser_liveness_check() -> Callable[[], bool] | None:
    """Return a check telling whether this tab's Streamlit session still exists.

    ``None`` outside a Streamlit script run (bare mode, tests).
    """
    ctx = get_script_run_ctx(suppress_warning=True)
    if ctx is None or not runtime.exists():
        return None
    session_id = ctx.session_id
    instance = runtime.get_instance()
    return lambda: instance.is_active_session(session_id)


def get_session() -> DashboardSession:
    """Return the running session of this browser tab, starting it if needed."""
    session = st.session_state.get(SESSION_KEY)
    if session is None or not session.active:
        session = DashboardSession(is_alive=browser_liveness_check()).start()
        st.session_state[SESSION_KEY] = session
    return session


def end_session() -> None:
    """Tear the session down – cancels the resync and pending settlements."""
    session = st.session_state.pop(SESSION_KEY, None)
    if session is not None:
        session.close()


def update_page(page: None | str = None) -> None:
    """Update the ?page=... query-parameter in the URL."""
    if page is None:
        st.query_params.update(page=st.session_state.sidebar_page)
    else:
        st.query_params.update(page=page)

# -----------------------------------------------------------------------------
# 1) Formatting helpers
# -----------------------------------------------------------------------------

LOCAL_TZ = ZoneInfo(settings()["LOCAL_TZ"])
TS_FMT = "%d/%m %H:%M:%S"  # Timestamp format for human-readable dates
ZERO_DISPLAY = "--"  # Default display for missing values
GOLD = "#D4AF37"

fmt_usd = lambda v: f"${round_cents(v):,}"  # noqa: E731
fmt_grams = lambda v: f"{Decimal(v):,.4f} g"  # noqa: E731
fmt_side_marker = lambda side: {"BUY": "↗ BUY", "SELL": "↘ SELL"}[side.upper()]  # noqa: E731


def convert_to_local_time(ts: datetime | None, fmt: str = TS_FMT) -> str:
    """Format a UTC datetime in the configured ``LOCAL_TZ``.

    Naive datetimes are assumed to be UTC; ``None`` renders as ``--``.
    """
    if not isinstance(ts, datetime):
        return ZERO_DISPLAY
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(LOCAL_TZ).strftime(fmt)


def short_address(address: str | None) -> str:
    if not address:
        return ZERO_DISPLAY
    return f"{address[:6]}...{address[-4:]}"

# -----------------------------------------------------------------------------
# 2) DataFrame builders
# -----------------------------------------------------------------------------

def transactions_frame(transactions: list[Transaction]) -> pd.DataFrame:
    """Ledger rows as a display-ready DataFrame (order preserved)."""
    rows = [
        {
            "Reference": tx.id,
            "Side": fmt_side_marker(tx.side),
            "Amount": fmt_grams(tx.quantity),
            "Price": f"${tx.unit_price:,.4f}",
            "Subtotal": fmt_usd(tx.subtotal),
            "Fee": fmt_usd(tx.fee),
            "Total": fmt_usd(tx.total),
            "Status": tx.status.value.title(),
            "Created": convert_to_local_time(tx.created_at),
            "Updated": tx.settled_at or tx.created_at,
        }
        for tx in transactions
    ]
    return pd.DataFrame(rows)

# -----------------------------------------------------------------------------
# 3) Shared widgets
# -----------------------------------------------------------------------------

def market_status_banner(update: MarketUpdate | None) -> None:
    """Warn about quota exhaustion, connection errors or a stale price."""
    if update is None:
        st.info("Connecting to the gold market…")
        return
    if update.error == "quota_exhausted":
        st.warning(
            "Market commentary quota exhausted. Set a different "
            "`INSIGHT_API_KEY` to resume insights; prices keep updating."
        )
    elif update.error == "market_connection_error":
        st.error("Market connection error – showing the last known price.")
    if update.stale or (update.snapshot is not None and not update.snapshot.is_live):
        st.caption("⚠️ Live feed unavailable – price may be stale.")
