from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pandas as pd

from golddeck._pages._colors import _BG0, _row_style, contrast_text_color
from golddeck._pages._helpers import (
    ZERO_DISPLAY,
    convert_to_local_time,
    fmt_usd,
    short_address,
    transactions_frame,
)
from golddeck.services.model import Transaction, TransactionStatus


def _row(status, updated):
    return pd.Series({"Reference": "X", "Status": status, "Updated": updated})


def test_fresh_rows_get_their_status_colour():
    now = datetime(2026, 3, 2, 12, tzinfo=timezone.utc)
    styles = _row_style(_row("Pending", now - timedelta(seconds=1)), now=now, fresh_window_s=10)
    assert styles[0].startswith(f"background-color:{_BG0['pending']}")
    assert len(styles) == 3


def test_old_rows_and_unknown_status_are_unstyled():
    now = datetime(2026, 3, 2, 12, tzinfo=timezone.utc)
    assert _row_style(_row("Completed", now - timedelta(minutes=5)), now=now, fresh_window_s=10) == [""] * 3
    assert _row_style(_row("Failed", now), now=now) == [""] * 3
    assert _row_style(_row("Pending", None), now=now) == [""] * 3


def test_contrast_text_color():
    assert contrast_text_color("#ffffff") == "#000000"
    assert contrast_text_color("#000") == "#ffffff"


def test_formatting_helpers():
    assert fmt_usd(Decimal("761.16625")) == "$761.17"
    assert fmt_usd(Decimal("1234.5")) == "$1,234.50"
    assert short_address("0x71C7656EC7ab88b098defB751B7401B5f6d8976F") == "0x71C7...976F"
    assert short_address(None) == ZERO_DISPLAY
    assert convert_to_local_time(None) == ZERO_DISPLAY


def test_transactions_frame_keeps_ledger_order():
    created = datetime(2026, 3, 2, 12, tzinfo=timezone.utc)
    txs = [
        Transaction(id=i, side=s, quantity=Decimal("1"), unit_price=Decimal("75"), subtotal=Decimal("75"),
                    fee=Decimal("0.5625"), total=Decimal("75.5625"), status=st, created_at=created)
        for i, s, st in [("B", "SELL", TransactionStatus.PENDING), ("A", "BUY", TransactionStatus.COMPLETED)]
    ]
    df = transactions_frame(txs)
    assert list(df["Reference"]) == ["B", "A"]
    assert list(df["Status"]) == ["Pending", "Completed"]
    assert df.loc[1, "Side"] == "↗ BUY"


def test_rows_fade_toward_black_as_they_age():
    now = datetime(2026, 3, 2, 12, tzinfo=timezone.utc)
    fresh = _row_style(_row("Completed", now), now=now, fresh_window_s=10, levels=3)
    older = _row_style(_row("Completed", now - timedelta(seconds=15)), now=now, fresh_window_s=10, levels=3)
    oldest = _row_style(_row("Completed", now - timedelta(seconds=25)), now=now, fresh_window_s=10, levels=3)

    assert fresh[0] == "background-color:#00dd0b;color:#000000"
    assert older[0] == "background-color:#006e06;color:#ffffff"
    assert oldest[0] == "background-color:#000000;color:#ffffff"
