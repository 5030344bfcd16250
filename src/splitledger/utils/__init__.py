"""Utility functions for splitledger."""

from splitledger.utils.date_parser import parse_date, parse_datetime, parse_statement_date
from splitledger.utils.amount_parser import parse_amount, separators_for_locale

__all__ = [
    "parse_date",
    "parse_datetime",
    "parse_statement_date",
    "parse_amount",
    "separators_for_locale",
]
