"""Tests for statement format detection."""

import pytest

from stmtimport.domain.entities import ImportFormat
from stmtimport.domain.errors import ConfigurationError, FormatDetectionError
from stmtimport.domain.format_resolver import resolve_format


def test_explicit_format_wins():
    """A concrete requested format is used regardless of the file name."""
    assert resolve_format(ImportFormat.OFX, "statement.csv", "text/csv") == ImportFormat.OFX


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("statement.csv", ImportFormat.CSV),
        ("EXTRATO.CSV", ImportFormat.CSV),
        ("statement.ofx", ImportFormat.OFX),
        ("Bank.OFX", ImportFormat.OFX),
    ],
)
def test_detect_by_suffix(filename, expected):
    """The file name suffix is checked case-insensitively."""
    assert resolve_format(ImportFormat.AUTO, filename, None) == expected


def test_suffix_before_content_type():
    """The file name takes precedence over the content type."""
    assert resolve_format(ImportFormat.AUTO, "statement.ofx", "text/csv") == ImportFormat.OFX


@pytest.mark.parametrize(
    "content_type, expected",
    [
        ("text/csv", ImportFormat.CSV),
        ("text/plain", ImportFormat.CSV),
        ("application/x-ofx", ImportFormat.OFX),
        ("application/OFX", ImportFormat.OFX),
    ],
)
def test_detect_by_content_type(content_type, expected):
    """Known content types are recognized when the name has no suffix."""
    assert resolve_format(None, "upload", content_type) == expected


def test_unresolvable_format():
    """No matching rule is a fatal configuration error."""
    with pytest.raises(FormatDetectionError) as excinfo:
        resolve_format(ImportFormat.AUTO, "statement.pdf", "application/pdf")
    assert isinstance(excinfo.value, ConfigurationError)
