"""Utility functions for stmtimport."""

from stmtimport.utils.date_parser import parse_date
from stmtimport.utils.amount_parser import parse_amount

__all__ = ["parse_date", "parse_amount"]
