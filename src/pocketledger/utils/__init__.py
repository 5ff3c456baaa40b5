"""Utility functions for pocketledger."""

from pocketledger.utils.date_parser import parse_date, format_date, to_date
from pocketledger.utils.amount_parser import parse_amount

__all__ = ["parse_date", "format_date", "to_date", "parse_amount"]
