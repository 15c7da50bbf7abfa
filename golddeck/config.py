# config.py
from functools import lru_cache
from pathlib import Path
from dotenv import load_dotenv
import os

load_dotenv(Path(__file__).parent.parent / ".env")

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

@lru_cache
def settings():
    return {
        # Spot gold feed (PAXG tracks one troy ounce)
        "SPOT_API_URL": os.getenv("SPOT_API_URL", "https://api.binance.com/api/v3/ticker/price"),
        "SPOT_SYMBOL": os.getenv("SPOT_SYMBOL", "PAXGUSDT"),
        "FALLBACK_SPOT_PRICE": os.getenv("FALLBACK_SPOT_PRICE", "2400"),
        "HTTP_TIMEOUT": float(os.getenv("HTTP_TIMEOUT", "5")),
        # Timers
        "REFRESH_SECONDS": float(os.getenv("REFRESH_SECONDS", "30")),
        "SETTLEMENT_DELAY_SECONDS": float(os.getenv("SETTLEMENT_DELAY_SECONDS", "3")),
        "SESSION_WATCH_SECONDS": float(os.getenv("SESSION_WATCH_SECONDS", "15")),
        # Market commentary
        "INSIGHT_API_URL": os.getenv("INSIGHT_API_URL", "https://generativelanguage.googleapis.com/v1beta"),
        "INSIGHT_API_KEY": os.getenv("INSIGHT_API_KEY", ""),
        "INSIGHT_MODEL": os.getenv("INSIGHT_MODEL", "gemini-3-flash-preview"),
        "INSIGHT_TEMPERATURE": float(os.getenv("INSIGHT_TEMPERATURE", "0.7")),
        "INSIGHT_TOP_P": float(os.getenv("INSIGHT_TOP_P", "0.95")),
        # Manual settlement desk
        "TREASURY_WALLET": os.getenv("TREASURY_WALLET", ZERO_ADDRESS),
        "ADMIN_EMAIL": os.getenv("ADMIN_EMAIL", "support@example.com"),
        "MOCK_WALLET_ADDRESS": os.getenv("MOCK_WALLET_ADDRESS", "0x71C7656EC7ab88b098defB751B7401B5f6d8976F"),
        # UI
        "APP_TITLE": os.getenv("APP_TITLE", "GLDC Gold Desk"),
        "LOCAL_TZ": os.getenv("LOCAL_TZ", "UTC"),
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO"),
    }
