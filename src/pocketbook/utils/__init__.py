"""Utility functions for pocketbook."""

from pocketbook.utils.date_parser import parse_date, resolve_period_window
from pocketbook.utils.amount_parser import parse_amount

__all__ = ["parse_date", "resolve_period_window", "parse_amount"]
