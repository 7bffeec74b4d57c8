"""Package init: shared constants for the NetWorth dashboard UI."""
from __future__ import annotations

APP_NAME = "networth-deck"
APP_ICON = "💰"
VERSION = "0.1.0"
