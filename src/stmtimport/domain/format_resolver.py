"""Statement format detection."""

from typing import Optional

from stmtimport.domain.entities import ImportFormat
from stmtimport.domain.errors import FormatDetectionError

SUFFIX_FORMATS = {
    ".csv": ImportFormat.CSV,
    ".ofx": ImportFormat.OFX,
}


def resolve_format(
    requested: Optional[ImportFormat],
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
) -> ImportFormat:
    """Resolve the concrete format of an uploaded statement.

    An explicit format wins; otherwise the file name suffix is checked,
    then the declared content type.

    Args:
        requested: Format hint from the request (None or AUTO to detect)
        filename: Original file name
        content_type: Declared MIME type

    Returns:
        ImportFormat.CSV or ImportFormat.OFX

    Raises:
        FormatDetectionError: If no rule matches
    """
    if requested is not None and requested != ImportFormat.AUTO:
        return requested

    name = (filename or "").strip().lower()
    for suffix, fmt in SUFFIX_FORMATS.items():
        if name.endswith(suffix):
            return fmt

    mime = (content_type or "").strip().lower()
    if "csv" in mime or mime == "text/plain":
        return ImportFormat.CSV
    if "ofx" in mime:
        return ImportFormat.OFX

    raise FormatDetectionError("Unable to detect file format from filename or content type")
