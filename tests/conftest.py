from datetime import datetime, timezone
from decimal import Decimal

import pytest
import requests

from golddeck.services.model import SpotQuote


class FakeResponse:
    def __init__(self, status_code=200, payload=None, raise_on_json=False):
        self.status_code = status_code
        self._payload = payload
        self._raise_on_json = raise_on_json

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._raise_on_json:
            raise requests.exceptions.JSONDecodeError("Expecting value", "", 0)
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeInsight:
    """Replays a script of texts / exceptions, then repeats the last entry."""

    def __init__(self, *script):
        self.script = list(script) or ["Gold holds steady."]
        self.prices = []

    def generate(self, unit_price):
        self.prices.append(unit_price)
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, Exception):
            raise item
        return item


def live(price):
    return SpotQuote(price=Decimal(price), is_live=True)


def degraded(price="2400"):
    return SpotQuote(price=Decimal(price), is_live=False, reason="unreachable")


@pytest.fixture
def fixed_now():
    return datetime(2026, 3, 2, 12, 30, tzinfo=timezone.utc)
