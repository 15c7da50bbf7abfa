"""insight.py

Short market commentary from a text-generation service.

The provider is deliberately dumb: it builds a prompt around the current
per-gram price, posts it, and hands back the text. What to do when the call
fails is the synchronizer's decision – this module only makes the failure
*kind* visible:

* ``QuotaExhaustedError`` – the service is rate-limiting us (HTTP 429 or a
  ``RESOURCE_EXHAUSTED`` status). The UI asks the user for another key.
* ``InsightError`` – anything else (no key configured, network, bad payload).
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Protocol

import requests

from golddeck.config import settings

logger = logging.getLogger(__name__)

DEFAULT_INSIGHT = "GLDC: real gold backing with the liquidity of a digital asset."

PROMPT_TEMPLATE = (
    "Explain briefly why GLDC, a token backed by physical gold, is a sound "
    "store of value at ${price:.2f} per gram. Keep it under 20 words, "
    "professional and sophisticated."
)


class InsightError(Exception):
    """The commentary could not be produced."""


class QuotaExhaustedError(InsightError):
    """The text-generation service refused the call for quota reasons."""


class InsightProvider(Protocol):
    def generate(self, unit_price: Decimal) -> str: ...


def build_prompt(unit_price: Decimal) -> str:
    return PROMPT_TEMPLATE.format(price=unit_price)


def _is_quota_error(response: requests.Response) -> bool:
    if response.status_code == 429:
        return True
    try:
        body = response.json()
    except ValueError:
        return False
    error = body.get("error") if isinstance(body, dict) else None
    return isinstance(error, dict) and error.get("status") == "RESOURCE_EXHAUSTED"


class GeminiInsightProvider:
    """Calls the ``generateContent`` endpoint of a Gemini-style API."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        *,
        base_url: str | None = None,
        temperature: float | None = None,
        top_p: float | None = None,
        timeout: float | None = None,
    ):
        cfg = settings()
        self.api_key = cfg["INSIGHT_API_KEY"] if api_key is None else api_key
        self.model = model or cfg["INSIGHT_MODEL"]
        self.base_url = (base_url or cfg["INSIGHT_API_URL"]).rstrip("/")
        self.temperature = cfg["INSIGHT_TEMPERATURE"] if temperature is None else temperature
        self.top_p = cfg["INSIGHT_TOP_P"] if top_p is None else top_p
        self.timeout = timeout or cfg["HTTP_TIMEOUT"]

    def _payload(self, unit_price: Decimal) -> dict:
        return {
            "contents": [{"parts": [{"text": build_prompt(unit_price)}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "topP": self.top_p,
            },
        }

    def generate(self, unit_price: Decimal) -> str:
        if not self.api_key:
            raise InsightError("No INSIGHT_API_KEY configured")

        try:
            response = requests.post(
                f"{self.base_url}/models/{self.model}:generateContent",
                params={"key": self.api_key},
                json=self._payload(unit_price),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise InsightError(f"Insight request failed: {exc}") from exc

        if _is_quota_error(response):
            raise QuotaExhaustedError(f"Quota exhausted for model {self.model}")
        if not response.ok:
            raise InsightError(f"Insight service answered HTTP {response.status_code}")

        try:
            parts = response.json()["candidates"][0]["content"]["parts"]
            text = "".join(part.get("text", "") for part in parts).strip()
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise InsightError("Unexpected insight payload") from exc

        if not text:
            raise InsightError("Insight service returned no text")
        return text
