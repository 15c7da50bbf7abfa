"""trade.py

Streamlit page to **buy or redeem GLDC**.

Workflow
--------
1. Connect the (mock) wallet and show its gram balance and USD value.
2. Pick a side and a quantity in grams; the quote is recomputed on every
   change from the current per-gram price.
3. Confirm → the order is added to the ledger as *Pending* and settles on
   its own a few seconds later. BUY orders also produce an e-mail notice for
   the settlement desk, offered here as a link that opens the mail client.
"""

from __future__ import annotations

import streamlit as st

from golddeck.config import settings
from golddeck.services.ledger import LedgerError
from ._helpers import (
    fmt_grams,
    fmt_usd,
    get_session,
    market_status_banner,
    short_address,
)


def render() -> None:  # noqa: D401
    """Render the **Trade** page."""
    st.title("Trade GLDC")
    session = get_session()
    market_status_banner(session.latest)

    # ------------------------------------------------------------------
    # 1) Wallet card
    # ------------------------------------------------------------------
    wallet = session.wallet_state()
    if not wallet.is_connected:
        if st.button("🔗 Connect wallet", key="connect_wallet"):
            wallet = session.connect_wallet()
        else:
            st.info("Connect a wallet to place orders.")
            return

    col_usd, col_grams = st.columns(2)
    col_usd.metric("GLDC reserve", fmt_usd(wallet.balance_usd), delta=short_address(wallet.address), delta_color="off")
    col_grams.metric("Balance in grams", fmt_grams(wallet.balance_tokens))

    # ------------------------------------------------------------------
    # 2) Order form – quote recomputed on every rerun
    # ------------------------------------------------------------------
    side = st.radio("Operation", ("BUY", "SELL"), horizontal=True, key="order_side",
                    format_func=lambda s: "Acquire" if s == "BUY" else "Redeem")
    amount = st.text_input("Grams to trade", value="", placeholder="0.00", key="order_amount")
    quote = session.quote(amount, side)

    c1, c2, c3 = st.columns(3)
    c1.metric("Subtotal", fmt_usd(quote.subtotal))
    c2.metric("Fee (0.75%)", fmt_usd(quote.fee))
    c3.metric("USDT to transfer" if side == "BUY" else "USDT to receive", fmt_usd(quote.total))
    st.caption(f"Reference price {fmt_usd(quote.unit_price)}/g · net gold {fmt_grams(quote.net_quantity)}")

    if side == "BUY":
        st.text_input("Treasury wallet (send the USDT total here)", value=settings()["TREASURY_WALLET"], disabled=True)

    reference = st.text_input("Payment reference (optional, e.g. tx hash)", value="", key="order_reference")

    priced = session.latest is not None and quote.unit_price > 0
    if not priced:
        st.caption("Waiting for the first gold price before orders can be placed.")
    if st.button("Confirm order", type="primary", disabled=quote.quantity <= 0 or not priced, key="confirm_order"):
        try:
            tx = session.submit_order(amount, side, reference or None)
        except LedgerError as exc:
            st.error(f"Order rejected: {exc}")
        else:
            st.success(f"Order {tx.id} registered – settling shortly.")

    # ------------------------------------------------------------------
    # 3) Settlement notices (BUY only)
    # ------------------------------------------------------------------
    links = session.notice_links()
    if links:
        st.subheader("Notify the settlement desk")
        for tx_id, link in links[:5]:
            st.link_button(f"✉️ Send notice for {tx_id}", link)
