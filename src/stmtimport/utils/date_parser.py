"""Date parsing utilities for statement dates.

Statement date patterns use the familiar ``yyyy-MM-dd`` style letters
(as found in bank export settings), translated once to ``strptime``
directives. Parsed values are naive datetimes holding the wall-clock
time in the import's time zone.
"""

import re
from dataclasses import dataclass
from datetime import datetime, time, tzinfo
from typing import Iterable, Optional, Sequence

from stmtimport.domain.errors import ConfigurationError, ParsingError, unparseable_date

_TOKEN_RE = re.compile(r"'(?:[^']|'')*'|([A-Za-z])\1*|[^A-Za-z']+")

_TIME_LETTERS = set("HhmsSak")


@dataclass(frozen=True)
class DatePattern:
    """A configured pattern and its strptime translation."""

    pattern: str
    directive: str
    has_time: bool


def _translate_token(token: str, pattern: str) -> str:
    letter, width = token[0], len(token)
    if letter == "y" or letter == "u":
        return "%y" if width == 2 else "%Y"
    if letter == "M" or letter == "L":
        if width <= 2:
            return "%m"
        return "%b" if width == 3 else "%B"
    if letter == "d":
        return "%d"
    if letter == "H" or letter == "k":
        return "%H"
    if letter == "h":
        return "%I"
    if letter == "m":
        return "%M"
    if letter == "s":
        return "%S"
    if letter == "S":
        return "%f"
    if letter == "a":
        return "%p"
    if letter == "E":
        return "%a" if width <= 3 else "%A"
    if letter in ("X", "x", "Z"):
        return "%z"
    raise ConfigurationError(f"Unsupported letter '{letter}' in date pattern '{pattern}'")


def compile_pattern(pattern: str) -> DatePattern:
    """Translate a ``dd/MM/yyyy`` style pattern into a strptime directive.

    Patterns that already contain ``%`` directives are used as they are.

    Raises:
        ConfigurationError: If the pattern uses an unsupported letter
    """
    if not pattern or not pattern.strip():
        raise ConfigurationError("Date pattern cannot be blank")
    if "%" in pattern:
        has_time = any(d in pattern for d in ("%H", "%I", "%M", "%S", "%f", "%p"))
        return DatePattern(pattern=pattern, directive=pattern, has_time=has_time)

    parts = []
    has_time = False
    for match in _TOKEN_RE.finditer(pattern):
        token = match.group(0)
        if token.startswith("'"):
            parts.append(token[1:-1].replace("''", "'").replace("%", "%%") if len(token) > 2 else "'")
        elif match.group(1):
            has_time = has_time or token[0] in _TIME_LETTERS
            parts.append(_translate_token(token, pattern))
        else:
            parts.append(token.replace("%", "%%"))
    return DatePattern(pattern=pattern, directive="".join(parts), has_time=has_time)


def compile_patterns(patterns: Iterable[str]) -> list[DatePattern]:
    """Compile every configured pattern, preserving order."""
    return [compile_pattern(p) for p in patterns]


def parse_date(
    date_str: str,
    patterns: Sequence[DatePattern],
    zone: Optional[tzinfo] = None,
) -> datetime:
    """Parse a statement date using the first pattern that accepts it.

    Args:
        date_str: Raw date text
        patterns: Compiled patterns, tried in order
        zone: Import time zone; offsets in the text are converted to it

    Returns:
        Naive datetime; date-only values are at the start of the day

    Raises:
        ParsingError: If the value is blank or no pattern matches
    """
    if date_str is None or not date_str.strip():
        raise ParsingError("Date value is missing")

    raw = date_str.strip()
    for pattern in patterns:
        try:
            parsed = datetime.strptime(raw, pattern.directive)
        except ValueError:
            continue
        if not pattern.has_time:
            return datetime.combine(parsed.date(), time.min)
        return to_local(parsed, zone)

    raise ParsingError(unparseable_date(raw))


def to_local(value: datetime, zone: Optional[tzinfo]) -> datetime:
    """Convert an aware datetime to naive wall-clock time in ``zone``."""
    if value.tzinfo is None or zone is None:
        return value.replace(tzinfo=None)
    return value.astimezone(zone).replace(tzinfo=None)
