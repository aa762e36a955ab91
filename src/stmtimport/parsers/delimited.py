"""Delimited-text (CSV) statement parser."""

import csv
import io
import logging
from typing import Optional

from stmtimport.domain.config import DelimitedTextOptions
from stmtimport.domain.entities import (
    ImportIssue,
    IssueKind,
    ParseResult,
    RawImportedEntry,
)
from stmtimport.domain.errors import (
    ConfigurationError,
    ParsingError,
    missing_required_column,
    safe_error_message,
)
from stmtimport.domain.mapping import normalize_key
from stmtimport.utils.amount_parser import parse_amount
from stmtimport.utils.date_parser import compile_patterns, parse_date

logger = logging.getLogger(__name__)

OPTIONAL_COLUMNS = (
    "type",
    "subtype",
    "source",
    "category",
    "subcategory",
    "counterparty",
    "external_id",
)


def _sanitize(value: Optional[str]) -> Optional[str]:
    return value.strip() if value is not None else None


class _Row:
    """A data record with header-position lookups."""

    def __init__(self, cells: list[str]):
        self.cells = cells

    def get(self, index: Optional[int]) -> Optional[str]:
        if index is None or index >= len(self.cells):
            return None
        return _sanitize(self.cells[index])


def _header_lookup(header: list[str]) -> dict[str, int]:
    lookup: dict[str, int] = {}
    for position, name in enumerate(header):
        lookup.setdefault(normalize_key(name), position)
    return lookup


def _resolve_column(desired: str, lookup: dict[str, int], kind: str) -> int:
    position = lookup.get(normalize_key(desired))
    if position is None:
        raise ConfigurationError(missing_required_column(kind, desired))
    return position


def _resolve_optional_column(desired: Optional[str], lookup: dict[str, int]) -> Optional[int]:
    if desired is None or not desired.strip():
        return None
    return lookup.get(normalize_key(desired))


def parse_delimited(content: bytes, options: DelimitedTextOptions, zone=None) -> ParseResult:
    """Parse a header-described delimited statement.

    The first non-empty record is the header. Each later record becomes a
    RawImportedEntry, or a parsing-error issue when it cannot be read.

    Args:
        content: Raw file bytes
        options: Delimited-text options from the import configuration
        zone: Import time zone (tzinfo) used for dates carrying an offset

    Returns:
        ParseResult with entries and issues in file order

    Raises:
        ConfigurationError: If the file has no header, a required column is
            missing, or a date pattern is invalid
    """
    # Undecodable bytes are replaced with U+FFFD
    text = content.decode(options.resolve_encoding(), errors="replace")

    patterns = compile_patterns(options.safe_date_patterns())
    decimal_separator = options.resolve_decimal_separator()
    grouping_separator = options.resolve_grouping_separator()

    reader = csv.reader(io.StringIO(text, newline=""), delimiter=options.delimiter)
    rows = (row for row in reader if row)

    try:
        header = next(rows, None)
    except csv.Error as e:
        raise ConfigurationError(f"Unable to read CSV file: {e}")
    if header is None:
        raise ConfigurationError("CSV file has no header row")
    lookup = _header_lookup(header)

    date_col = _resolve_column(options.date_column, lookup, "date")
    description_col = _resolve_column(options.description_column, lookup, "description")
    amount_col = _resolve_column(options.amount_column, lookup, "amount")
    optional_cols = {
        name: _resolve_optional_column(getattr(options, f"{name}_column"), lookup)
        for name in OPTIONAL_COLUMNS
    }

    result = ParseResult()
    try:
        records = list(rows)
    except csv.Error as e:
        raise ConfigurationError(f"Unable to read CSV file: {e}")

    for index, cells in enumerate(records, start=1):
        row = _Row(cells)
        external_id = row.get(optional_cols["external_id"]) or None
        try:
            description = row.get(description_col)
            if not description:
                raise ParsingError("Description cannot be blank")
            amount = parse_amount(row.get(amount_col), decimal_separator, grouping_separator)
            txn_date = parse_date(row.get(date_col), patterns, zone)

            result.entries.append(
                RawImportedEntry(
                    line_number=index,
                    external_id=external_id,
                    date=txn_date,
                    description=description,
                    amount=amount,
                    raw_type=row.get(optional_cols["type"]),
                    raw_subtype=row.get(optional_cols["subtype"]),
                    raw_source=row.get(optional_cols["source"]),
                    raw_category=row.get(optional_cols["category"]),
                    raw_subcategory=row.get(optional_cols["subcategory"]),
                    raw_counterparty=row.get(optional_cols["counterparty"]),
                )
            )
        except Exception as e:
            logger.debug("Skipping CSV record %d: %s", index, e)
            result.issues.append(
                ImportIssue(
                    line_number=index,
                    external_reference=external_id,
                    message=safe_error_message(e),
                    kind=IssueKind.PARSING_ERROR,
                )
            )

    logger.info(
        "Parsed CSV statement: %d entries, %d unreadable records",
        len(result.entries),
        len(result.issues),
    )
    return result
