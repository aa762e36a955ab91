"""OFX (Open Financial Exchange) statement parser.

Reads both OFX 1.x SGML files, whose leaf elements have no closing tag,
and OFX 2.x XML files. Only the transaction blocks (STMTTRN) of bank and
credit card statements are extracted.
"""

import html
import logging
import re
from datetime import datetime, tzinfo
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterator, Optional

from dateutil import tz

from stmtimport.domain.entities import (
    ImportIssue,
    IssueKind,
    ParseResult,
    RawImportedEntry,
    TransactionSource,
    TransactionType,
)
from stmtimport.domain.errors import (
    ConfigurationError,
    ParsingError,
    safe_error_message,
    unparseable_amount,
)
from stmtimport.utils.date_parser import to_local

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<(/?)([A-Za-z0-9_.]+)>([^<]*)")
_CHARSET_RE = re.compile(r"CHARSET:\s*([A-Za-z0-9-]+)", re.IGNORECASE)
_XML_ENCODING_RE = re.compile(r"<\?xml[^>]*encoding=[\"']([A-Za-z0-9_-]+)[\"']", re.IGNORECASE)
_DATE_RE = re.compile(
    r"^(\d{4})(\d{2})(\d{2})"
    r"(?:(\d{2})(\d{2})(?:(\d{2})(?:\.(\d{1,6}))?)?)?"
    r"\s*(?:\[\s*([+-]?\d+(?:\.\d+)?)(?::([A-Za-z]+))?\s*\])?$"
)

MESSAGE_SETS = (
    ("BANKMSGSRSV1", TransactionSource.BANK_TRANSACTION),
    ("CREDITCARDMSGSRSV1", TransactionSource.CREDIT_CARD),
)

INCOME_TYPES = {"CREDIT", "INT", "DIV", "REPEATPMT", "IN", "OTHER"}
EXPENSE_TYPES = {
    "DEBIT",
    "PAYMENT",
    "ATM",
    "POS",
    "DIRECTDEBIT",
    "DIRECTDEP",
    "DEP",
    "CHECK",
    "FEE",
    "SRVCHG",
    "XFER",
    "CASH",
    "OUT",
}

CENTS = Decimal("0.01")


class OFXElement:
    """Aggregate or leaf element of an OFX document."""

    def __init__(self, name: str):
        self.name = name
        self.value: Optional[str] = None
        self.children: list["OFXElement"] = []

    def iter(self, name: str) -> Iterator["OFXElement"]:
        """Yield descendants with the given tag name, in document order."""
        for child in self.children:
            if child.name == name:
                yield child
            yield from child.iter(name)

    def text(self, name: str) -> Optional[str]:
        """Return the value of a leaf, preferring direct children."""
        for child in self.children:
            if child.name == name and child.value is not None:
                return child.value
        for child in self.iter(name):
            if child.value is not None:
                return child.value
        return None


def _decode(content: bytes) -> str:
    head = content[:1024].decode("ascii", errors="ignore")
    encoding = "utf-8"
    match = _XML_ENCODING_RE.search(head)
    if match:
        encoding = match.group(1)
    else:
        match = _CHARSET_RE.search(head)
        if match and match.group(1).isdigit():
            encoding = f"cp{match.group(1)}"
    try:
        return content.decode(encoding)
    except (LookupError, UnicodeDecodeError):
        return content.decode("latin-1")


def build_tree(body: str) -> OFXElement:
    """Build an element tree from OFX markup.

    An opening tag followed by text is a leaf; otherwise it opens an
    aggregate, which a closing tag ends (closing any unclosed children).
    """
    root = OFXElement("#document")
    stack = [root]
    for closing, name, text in _TAG_RE.findall(body):
        name = name.upper()
        if closing:
            for depth in range(len(stack) - 1, 0, -1):
                if stack[depth].name == name:
                    del stack[depth:]
                    break
            continue
        element = OFXElement(name)
        stack[-1].children.append(element)
        value = text.strip()
        if value:
            element.value = html.unescape(value)
        else:
            stack.append(element)
    return root


def parse_ofx_datetime(raw: Optional[str], zone: Optional[tzinfo] = None) -> datetime:
    """Parse an OFX date such as ``20240110120000.000[-3:BRT]``.

    Values without an offset are taken as wall-clock time in ``zone``.

    Returns:
        Naive datetime in the import time zone

    Raises:
        ParsingError: If the value is missing or malformed
    """
    if raw is None or not raw.strip():
        raise ParsingError("Transaction date is required")
    match = _DATE_RE.match(raw.strip())
    if match is None:
        raise ParsingError(f'Unable to parse OFX date "{raw}"')
    year, month, day, hour, minute, second, fraction, offset, zone_name = match.groups()
    try:
        value = datetime(
            int(year),
            int(month),
            int(day),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
            int((fraction or "0").ljust(6, "0")),
        )
    except ValueError:
        raise ParsingError(f'Unable to parse OFX date "{raw}"')
    if offset is None:
        return value
    aware = value.replace(tzinfo=tz.tzoffset(zone_name, int(float(offset) * 3600)))
    return to_local(aware, zone)


def parse_ofx_amount(raw: Optional[str]) -> Decimal:
    """Parse TRNAMT, rounding half-up to cents."""
    if raw is None or not raw.strip():
        raise ParsingError("Transaction amount is required")
    try:
        amount = Decimal(raw.strip().replace(",", "."))
    except InvalidOperation:
        raise ParsingError(unparseable_amount(raw))
    if not amount.is_finite():
        raise ParsingError(unparseable_amount(raw))
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def map_transaction_type(trntype: Optional[str], amount: Optional[Decimal]) -> TransactionType:
    """Map an OFX TRNTYPE to income/expense, falling back to the amount sign."""
    code = (trntype or "").strip().upper()
    if code in INCOME_TYPES:
        return TransactionType.INCOME
    if code in EXPENSE_TYPES:
        return TransactionType.EXPENSE
    if amount is not None and amount < 0:
        return TransactionType.EXPENSE
    return TransactionType.INCOME


def _sort_key(block: OFXElement, zone: Optional[tzinfo]) -> tuple[bool, datetime]:
    try:
        return (False, parse_ofx_datetime(block.text("DTPOSTED"), zone))
    except ParsingError:
        return (True, datetime.min)


def _entry_from_block(
    block: OFXElement, line_number: int, source: TransactionSource, zone: Optional[tzinfo]
) -> RawImportedEntry:
    txn_date = parse_ofx_datetime(block.text("DTPOSTED"), zone)
    amount = parse_ofx_amount(block.text("TRNAMT"))
    memo = (block.text("MEMO") or "").strip()
    description = memo or (block.text("NAME") or "").strip()
    if not description:
        raise ParsingError("Description cannot be blank")
    return RawImportedEntry(
        line_number=line_number,
        external_id=block.text("FITID"),
        date=txn_date,
        description=description,
        amount=amount,
        detected_type=map_transaction_type(block.text("TRNTYPE"), amount),
        detected_source=source,
    )


def parse_ofx(content: bytes, zone: Optional[tzinfo] = None) -> ParseResult:
    """Parse an OFX statement into raw entries.

    Bank statements come first, then credit card statements; inside each
    statement transactions are numbered in posting-date order.

    Args:
        content: Raw file bytes
        zone: Import time zone (tzinfo)

    Returns:
        ParseResult with entries and issues

    Raises:
        ConfigurationError: If the content is not an OFX document
    """
    text = _decode(content)
    start = text.upper().find("<OFX>")
    if start < 0:
        raise ConfigurationError("Unable to parse OFX file: missing <OFX> element")
    document = build_tree(text[start:])

    result = ParseResult()
    index = 0
    for set_name, source in MESSAGE_SETS:
        for message_set in document.iter(set_name):
            for statement in message_set.children:
                blocks = list(statement.iter("STMTTRN"))
                blocks.sort(key=lambda block: _sort_key(block, zone))
                for block in blocks:
                    index += 1
                    try:
                        result.entries.append(_entry_from_block(block, index, source, zone))
                    except Exception as e:
                        logger.debug("Skipping OFX transaction %d: %s", index, e)
                        result.issues.append(
                            ImportIssue(
                                line_number=index,
                                external_reference=block.text("FITID"),
                                message=safe_error_message(e),
                                kind=IssueKind.PARSING_ERROR,
                            )
                        )

    logger.info(
        "Parsed OFX statement: %d entries, %d unreadable transactions",
        len(result.entries),
        len(result.issues),
    )
    return result
