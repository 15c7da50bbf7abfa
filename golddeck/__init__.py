"""Package init: shares constants used by the Streamlit entry-point."""
from __future__ import annotations

APP_NAME = "gold-deck"
APP_ICON = "🪙"
VERSION = "0.1.0"
