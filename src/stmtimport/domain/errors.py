"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class ConfigurationError(ValidationError):
    """Import configuration is unusable for the whole request."""


class FormatDetectionError(ConfigurationError):
    """Statement format could not be determined."""


class ParsingError(DomainError):
    """A single statement record could not be parsed."""


class ClassificationError(DomainError):
    """A single entry could not be classified."""


DEFAULT_ENTRY_ERROR = "Failed to process entry"


def safe_error_message(error: BaseException) -> str:
    """Return the error text, or a generic message when it is empty."""
    message = str(error).strip()
    return message or DEFAULT_ENTRY_ERROR


def missing_required_column(kind: str, column: str) -> str:
    """Return message for a required column absent from the header."""
    return f'Required {kind} column "{column}" not found in CSV header'


def unparseable_amount(raw: str) -> str:
    """Return message for an amount that is not a decimal."""
    return f'Unable to parse amount "{raw}"'


def unparseable_date(raw: str) -> str:
    """Return message for a date no configured pattern accepts."""
    return f'Unable to parse date "{raw}" using configured patterns'
