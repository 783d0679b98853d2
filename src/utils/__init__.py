"""Utility functions."""

from src.utils.audit import log_action
from src.utils.months import current_month, month_bounds, parse_month

__all__ = [
    "log_action",
    "current_month",
    "month_bounds",
    "parse_month",
]
