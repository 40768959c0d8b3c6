"""Configuration for the finance tracker.

Paths, storage keys and thresholds live here, each overridable through an
environment variable.
"""

from __future__ import annotations

import os
from pathlib import Path

_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

DATA_DIR = Path(os.getenv("FINANCE_TRACKER_DATA_DIR", _PROJECT_ROOT / "data"))

# Storage keys, one blob per collection
TRANSACTIONS_KEY = "transactions"
BUDGETS_KEY = "budgets"

NEAR_LIMIT_PERCENT = 80.0
RECENT_LIMIT = int(os.getenv("FINANCE_TRACKER_RECENT_LIMIT", "5"))

LOG_LEVEL = os.getenv("FINANCE_TRACKER_LOG_LEVEL", "INFO").upper()

CURRENCY_SYMBOL = os.getenv("FINANCE_TRACKER_CURRENCY", "₹")


def ensure_data_directory() -> Path:
    """Create the data directory if it doesn't exist and return it."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    return DATA_DIR
