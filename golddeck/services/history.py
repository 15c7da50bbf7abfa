"""Synthetic short-term price series for the market chart.

This is *not* historical data: each point is the current price jittered by
a uniform offset within ±0.5 %. The series is rebuilt from scratch every
cycle; pass a seeded ``random.Random`` and a fixed ``now`` to get
reproducible output. Labels are hours in ``LOCAL_TZ`` unless *tz* is given.
"""

from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone, tzinfo
from decimal import Decimal
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from golddeck.config import settings
from .model import PriceHistoryPoint

HISTORY_POINTS = 13
HISTORY_SPACING = timedelta(hours=1)
JITTER = 0.005


def build_history(
    base_price: Decimal,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
    points: int = HISTORY_POINTS,
    tz: Optional[tzinfo] = None,
) -> tuple[PriceHistoryPoint, ...]:
    """Return *points* hourly points ending at *now*, oldest first."""
    rng = rng or random.Random()
    now = now or datetime.now(timezone.utc)
    tz = tz or ZoneInfo(settings()["LOCAL_TZ"])

    series = []
    for i in range(points):
        ts = (now - HISTORY_SPACING * (points - 1 - i)).astimezone(tz)
        offset = Decimal(str(rng.uniform(-JITTER, JITTER)))
        series.append(PriceHistoryPoint(label=ts.strftime("%H:00"), value=base_price * (1 + offset)))
    return tuple(series)


class HistoryGenerator:
    """Callable wrapper so the synchronizer can own its randomness and clock."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
        tz: Optional[tzinfo] = None,
    ):
        self._rng = rng or random.Random()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._tz = tz

    def __call__(self, base_price: Decimal) -> tuple[PriceHistoryPoint, ...]:
        return build_history(base_price, rng=self._rng, now=self._clock(), tz=self._tz)
