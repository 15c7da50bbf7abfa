"""api.py

Thin synchronous REST wrapper around the spot-gold ticker.

* Centralises **URL** + **symbol** handling so the synchronizer can simply
  call `fetch_spot_quote()`.
* Never raises: any network, HTTP or payload problem is turned into a
  *degraded* `SpotQuote` carrying the fallback constant and the reason, so
  callers can show staleness instead of trusting the constant blindly.
"""

from __future__ import annotations

# -----------------------------------------------------------------------------
# Standard library & 3rd-party imports
# -----------------------------------------------------------------------------
import logging
from decimal import Decimal, InvalidOperation

import requests

# Project settings helper – returns a dict of env-based config values
from golddeck.config import settings
from .model import SpotQuote

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Internal convenience helpers (prefixed with underscore)
# -----------------------------------------------------------------------------

def _get(url: str, params: dict | None = None, timeout: float | None = None):  # noqa: D401
    """Perform a **GET** request and return the decoded JSON body.

    Raises ``requests.exceptions.HTTPError`` on non-2xx responses so the
    caller can handle it explicitly.
    """
    r = requests.get(url, params=params, timeout=timeout or settings()["HTTP_TIMEOUT"])
    r.raise_for_status()
    return r.json()


def _extract_price(payload) -> Decimal:
    """Find the price field in a ticker payload (string or number)."""
    if isinstance(payload, list) and payload:
        payload = payload[0]  # some endpoints wrap a single ticker in a list
    if not isinstance(payload, dict) or "price" not in payload:
        raise ValueError("Ticker payload lacks a 'price' field")
    raw = payload["price"]
    if isinstance(raw, bool):
        raise ValueError(f"Unusable price value: {raw!r}")
    try:
        price = Decimal(str(raw))
    except InvalidOperation as exc:
        raise ValueError(f"Unusable price value: {raw!r}") from exc
    if not price.is_finite() or price <= 0:
        raise ValueError(f"Unusable price value: {raw!r}")
    return price


def fallback_spot_price() -> Decimal:
    """Spot price used whenever the feed cannot be reached."""
    return Decimal(str(settings()["FALLBACK_SPOT_PRICE"]))

# -----------------------------------------------------------------------------
# Public API helpers
# -----------------------------------------------------------------------------

def fetch_spot_quote(url: str | None = None, symbol: str | None = None) -> SpotQuote:
    """Return the current spot price of one troy ounce as a tagged result.

    Parameters
    ----------
    url : str | None
        Ticker endpoint; defaults to ``SPOT_API_URL``.
    symbol : str | None
        Trading pair, e.g. ``"PAXGUSDT"``; defaults to ``SPOT_SYMBOL``.

    Returns
    -------
    SpotQuote
        ``is_live=True`` with the feed price, or ``is_live=False`` with the
        fallback constant and a short ``reason``.
    """
    cfg = settings()
    url = url or cfg["SPOT_API_URL"]
    symbol = symbol or cfg["SPOT_SYMBOL"]

    try:
        price = _extract_price(_get(url, params={"symbol": symbol}))
    except (requests.RequestException, ValueError) as exc:
        # requests' JSONDecodeError subclasses both of these
        logger.warning("Spot feed unavailable for %s, using fallback: %s", symbol, exc)
        return SpotQuote(price=fallback_spot_price(), is_live=False, reason=str(exc) or type(exc).__name__)

    logger.debug("Spot %s = %s", symbol, price)
    return SpotQuote(price=price, is_live=True)


def fetch_spot_price(url: str | None = None, symbol: str | None = None) -> Decimal:
    """Plain price of :func:`fetch_spot_quote` – live or fallback, indistinguishable."""
    return fetch_spot_quote(url, symbol).price
