"""market.py

Streamlit page with the **live gold market**.

Main features
-------------
* Spot reference price (per troy ounce) and the derived GLDC price per gram.
* Area chart of the synthetic 13-hour series rebuilt every cycle. It only
  jitters the current price for display, it is *not* historical data.
* The latest market commentary and a *Refresh now* button that runs a
  cycle right away (serialized with the scheduled ones).
"""

# Standard library -------------------------------------------------------------
from __future__ import annotations

# Third-party ------------------------------------------------------------------
import pandas as pd
import plotly.graph_objects as go
import streamlit as st

# First-party / project --------------------------------------------------------
from ._helpers import GOLD, convert_to_local_time, fmt_usd, get_session, market_status_banner

# -----------------------------------------------------------------------------
# Page renderer
# -----------------------------------------------------------------------------

def render() -> None:  # noqa: D401 – imperative mood is fine
    """Entry-point for Streamlit – draw the **Market** page."""
    st.title("Gold market")
    session = get_session()

    # ------------------------------------------------------------------
    # 0) Manual refresh
    # ------------------------------------------------------------------
    if st.button("🔄 Refresh now", key="refresh_now"):
        with st.spinner("Syncing with the market…"):
            session.refresh_now()

    update = session.latest
    market_status_banner(update)
    if update is None or update.snapshot is None:
        return
    snap = update.snapshot

    # ------------------------------------------------------------------
    # 1) Headline metrics
    # ------------------------------------------------------------------
    col_spot, col_gram = st.columns(2)
    col_spot.metric("Global gold reference (oz)", fmt_usd(snap.spot_price))
    col_gram.metric(
        "GLDC per gram",
        fmt_usd(snap.unit_price),
        delta=convert_to_local_time(snap.timestamp),
        delta_color="off",
    )

    # ------------------------------------------------------------------
    # 2) Synthetic short-term chart
    # ------------------------------------------------------------------
    df = pd.DataFrame(
        {"time": [p.label for p in update.history], "price": [float(p.value) for p in update.history]}
    )
    fig = go.Figure(
        go.Scatter(
            x=df["time"],
            y=df["price"],
            mode="lines",
            line=dict(color=GOLD, width=3),
            fill="tozeroy",
            fillcolor="rgba(212,175,55,0.15)",
        )
    )
    if not df.empty:
        pad = (df["price"].max() - df["price"].min()) or df["price"].max() * 0.005
        fig.update_yaxes(range=[df["price"].min() - pad, df["price"].max() + pad])
    fig.update_layout(height=380, margin=dict(t=20, b=20, l=20, r=20))
    st.plotly_chart(fig, use_container_width=True)
    st.caption("Indicative intraday series (simulated around the current price).")

    # ------------------------------------------------------------------
    # 3) Commentary
    # ------------------------------------------------------------------
    st.markdown(f"> _{update.insight}_")
