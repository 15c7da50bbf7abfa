"""transactions.py

Streamlit page listing the **session ledger**, most recent first.

Rows are colour-coded by status (gold = pending, green = completed) and
fade as they age so a settlement that just happened stands out.
"""

from __future__ import annotations

import os

import streamlit as st

from ._colors import _STATUS_LIGHT, _row_style
from ._helpers import get_session, transactions_frame

# How long a row stays "fresh" (seconds) → affects row colouring.
FRESH_WINDOW_S = int(os.getenv("FRESH_WINDOW_S", 10))


def render() -> None:  # noqa: D401
    """Render the **Transactions** page."""
    st.title("Transactions")
    session = get_session()

    txs = session.transactions()
    if not txs:
        st.info("No transactions yet.")
        return

    pending = sum(1 for tx in txs if tx.status.value == "PENDING")
    c1, c2 = st.columns(2)
    c1.metric("Orders", len(txs))
    c2.metric("Pending settlement", pending)

    df = transactions_frame(txs)
    df["Light"] = df["Status"].str.lower().map(_STATUS_LIGHT).fillna("")
    styled = df.style.apply(_row_style, axis=1, fresh_window_s=FRESH_WINDOW_S)

    st.dataframe(
        styled,
        hide_index=True,
        use_container_width=True,
        height=min(35 * (1 + len(df)) + 5, 800),
        column_order=["Light", "Reference", "Side", "Amount", "Price", "Subtotal", "Fee", "Total", "Status", "Created"],
        column_config={"Light": st.column_config.TextColumn("")},
    )
