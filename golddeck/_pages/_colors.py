"""_colors.py

Colour utilities for the **Transactions** dataframe.

The module provides:
* Emoji *status lights* (`_STATUS_LIGHT`) used next to each transaction.
* A base background palette (`_BG0`) mapping transaction status → colour.
* Functions to:
  - Darken colours over time so freshly settled rows stand out and older
    rows gradually fade (`_color_interp`, `_create_color_rows_degradation`).
  - Pick an appropriate foreground (text) colour for legibility
    (`contrast_text_color`).
  - Generate a list of CSS style strings for the Streamlit Styler
    (`_row_style`).
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
from datetime import datetime, timezone
from typing import Dict, List, Tuple

# Third-party
import pandas as pd

# -----------------------------------------------------------------------------
# PUBLIC CONSTANTS – status → emoji / colour
# -----------------------------------------------------------------------------
_STATUS_LIGHT: dict[str, str] = {
    "pending": "🟡",
    "completed": "🟢",
}

# Freshest shade per status; faded toward black as the row ages.
_BG0: dict[str, str] = {
    "pending": "#d4af37",  # gold
    "completed": "#00dd0b",  # green
}

# -----------------------------------------------------------------------------
# Helper functions (internal)
# -----------------------------------------------------------------------------

def _color_interp(c0: str, t: float) -> str:
    """Blend hex *c0* toward black by fraction *t* (0 keeps it, 1 is black)."""
    r0, g0, b0 = int(c0[1:3], 16), int(c0[3:5], 16), int(c0[5:7], 16)
    return "#" + "".join(f"{round(v * (1 - t)):02x}" for v in (r0, g0, b0))


def contrast_text_color(bg_hex: str) -> str:
    h = bg_hex.lstrip("#")
    if len(h) == 3:
        h = "".join(ch * 2 for ch in h)
    r, g, b = int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)
    # YIQ luminance
    return "#000000" if (r * 299 + g * 587 + b * 114) / 1000 >= 128 else "#ffffff"


def _create_color_rows_degradation(levels: int = 3) -> Tuple[Dict[int, dict], Dict[int, dict]]:
    """``(bg, fg)`` palettes per fade step; the last step is black."""
    if levels < 2:
        raise ValueError("`levels` must be at least 2")

    bg: Dict[int, dict[str, str]] = {
        j: {status: _color_interp(c, j / (levels - 1)) for status, c in _BG0.items()}
        for j in range(levels)
    }
    fg = {lvl: {status: contrast_text_color(c) for status, c in pal.items()} for lvl, pal in bg.items()}
    return bg, fg

# -----------------------------------------------------------------------------
# Main styling hook used by dataframe.style.apply
# -----------------------------------------------------------------------------

def _row_style(
    row: pd.Series,
    *,
    levels: int = 3,
    fresh_window_s: float = 10,
    now: datetime | None = None,
) -> List[str]:
    """Return CSS style strings for *row* based on its status and age.

    Rows updated within *fresh_window_s* get the full colour, each further
    window one shade darker, and rows past the last shade keep the default
    table style. The age comes from the ``Updated`` column.
    """
    bg_maps, fg_maps = _create_color_rows_degradation(levels)

    upd = row.get("Updated")
    if not isinstance(upd, datetime):
        return [""] * len(row)
    if upd.tzinfo is None:
        upd = upd.replace(tzinfo=timezone.utc)
    age = ((now or datetime.now(timezone.utc)) - upd).total_seconds()

    bucket = max(int(age // fresh_window_s), 0)
    if bucket >= len(bg_maps):
        return [""] * len(row)

    key = str(row["Status"]).lower()
    bg = bg_maps[bucket].get(key, "")
    if not bg:
        return [""] * len(row)
    fg = fg_maps[bucket].get(key, contrast_text_color(bg))
    return [f"background-color:{bg};color:{fg}"] * len(row)
