"""Statement file parsers."""

from stmtimport.parsers.delimited import parse_delimited
from stmtimport.parsers.ofx import parse_ofx

__all__ = ["parse_delimited", "parse_ofx"]
