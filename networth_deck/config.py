# config.py
from functools import lru_cache
from pathlib import Path
from dotenv import load_dotenv
import os

load_dotenv(Path(__file__).parent.parent / ".env")

@lru_cache
def settings():
    return {
        "API_URL": os.getenv("API_URL", "http://localhost:8080"),
        "API_PREFIX": os.getenv("API_PREFIX", "/api/v1"),
        "API_TIMEOUT": float(os.getenv("API_TIMEOUT", "10")),
        # 0 turns the auto-refresh off on the read-only pages
        "REFRESH_SECONDS": int(os.getenv("REFRESH_SECONDS", "60")),
        # How long success banners stay visible after a mutation
        "MESSAGE_TTL_SECONDS": float(os.getenv("MESSAGE_TTL_SECONDS", "3")),
        "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),
        "CURRENCY": os.getenv("CURRENCY", "USD"),
        "APP_TITLE": os.getenv("APP_TITLE", "NetWorth Dashboard"),
    }
