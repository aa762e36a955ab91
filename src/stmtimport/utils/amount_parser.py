"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation

from stmtimport.domain.errors import ParsingError, unparseable_amount


def parse_amount(amount_str: str, decimal_separator: str = ".", grouping_separator: str = ",") -> Decimal:
    """Parse a statement amount string into a signed Decimal.

    Handles various formats:
    - "123.45" / "+123.45"
    - "-123.45" and "123.45-" (trailing minus)
    - "(123.45)" (negative in parentheses)
    - "1,234.56" or "1.234,56" depending on the separators
    - "1 234,56" (spaces as grouping)

    Args:
        amount_str: Amount string
        decimal_separator: Character used for decimals in the file
        grouping_separator: Character used for thousands in the file

    Returns:
        Decimal amount, negative for debits

    Raises:
        ParsingError: If amount string cannot be parsed
    """
    if amount_str is None or not amount_str.strip():
        raise ParsingError("Amount value is missing")

    raw = amount_str
    normalized = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = normalized.startswith("(") and normalized.endswith(")")
    if is_negative:
        normalized = normalized[1:-1]

    normalized = normalized.replace(" ", "")
    if grouping_separator:
        normalized = normalized.replace(grouping_separator, "")
    if decimal_separator:
        normalized = normalized.replace(decimal_separator, ".")
    normalized = normalized.replace(",", ".")
    normalized = normalized.replace("+", "")
    if normalized.endswith("-"):
        normalized = "-" + normalized[:-1]

    try:
        amount = Decimal(normalized)
    except InvalidOperation:
        raise ParsingError(unparseable_amount(raw))
    if not amount.is_finite():
        raise ParsingError(unparseable_amount(raw))

    if is_negative or amount < 0:
        return -abs(amount)
    return amount
