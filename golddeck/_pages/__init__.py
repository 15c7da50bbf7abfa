"""Registry of Streamlit pages so main.py can route dynamically."""
from typing import Callable

from . import market, trade, transactions

Page = Callable[[], None]

registry: dict[str, Page] = {
    "Market": market.render,
    "Trade": trade.render,
    "Transactions": transactions.render,
}

__all__ = ["registry"]
