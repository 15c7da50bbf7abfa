"""main.py

Streamlit **entry-point** for the GLDC gold desk.

Responsibilities
----------------
* Define global page layout (wide view, expanded sidebar, title).
* Configure logging once for the whole process.
* Implement a simple **navigation radio** – Market / Trade / Transactions –
  kept in the ``?page=`` query-param so links survive reloads.
* Trigger an **auto-refresh** so the UI picks up new prices and settlements
  produced by the session's background loop without manual reloads.

Run with ``streamlit run golddeck/main.py``.
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Third-party imports
# -----------------------------------------------------------------------------
import logging
from datetime import datetime, timezone

import streamlit as st
from streamlit_autorefresh import st_autorefresh

from golddeck import APP_ICON, APP_NAME, VERSION
from golddeck.config import settings

# -----------------------------------------------------------------------------
# 0) Global page configuration – must run before any Streamlit call
# -----------------------------------------------------------------------------
st.set_page_config(
    page_title=APP_NAME,
    page_icon=APP_ICON,
    layout="wide",
    initial_sidebar_state="expanded",
)

logging.basicConfig(
    level=settings()["LOG_LEVEL"],
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# -----------------------------------------------------------------------------
# Local imports (after Streamlit initialisation)
# -----------------------------------------------------------------------------
from golddeck._pages import registry
from golddeck._pages._helpers import (
    TS_FMT,
    convert_to_local_time,
    end_session,
    get_session,
    update_page,
)

PAGES = list(registry)
UI_REFRESH_MS = 2000  # short enough to show settlements land

# -----------------------------------------------------------------------------
# 1) Sidebar – navigation radio
# -----------------------------------------------------------------------------
st.sidebar.title(settings()["APP_TITLE"])
st.sidebar.caption(f"v{VERSION}")

initial_page = st.query_params.get("page", PAGES[0])
if initial_page not in PAGES:
    initial_page = PAGES[0]

page = st.sidebar.radio(
    "Navigate",
    PAGES,
    index=PAGES.index(initial_page),
    key="sidebar_page",
    on_change=update_page,
)

# -----------------------------------------------------------------------------
# 2) Auto-refresh – re-runs the script; the data itself is pushed by the
#    session loop every REFRESH_SECONDS
# -----------------------------------------------------------------------------
st_autorefresh(interval=UI_REFRESH_MS, key="refresh")

# -----------------------------------------------------------------------------
# 3) Routing
# -----------------------------------------------------------------------------
get_session()
registry[page]()

st.sidebar.markdown("---")
if st.sidebar.button("End session", help="Stops price sync and pending settlements"):
    end_session()
    st.sidebar.info("Session ended – a fresh one starts on the next refresh.")

local_time = convert_to_local_time(datetime.now(timezone.utc), TS_FMT)
st.sidebar.metric(
    label="🕒 Last refresh:",
    value=local_time,
    delta=settings()["LOCAL_TZ"],
    delta_color="off",
)
