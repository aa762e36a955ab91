"""Domain model entities for stmtimport.

These are pure data classes representing the statement import concepts,
independent of the database schema and of the file formats they come from.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Optional


class ImportFormat(str, Enum):
    """Statement file format requested by the caller or detected."""

    AUTO = "auto"
    CSV = "csv"
    OFX = "ofx"


class DuplicatePolicy(str, Enum):
    """What to do with entries matching an already stored transaction."""

    SKIP = "skip"
    ALLOW = "allow"


class IssueKind(str, Enum):
    """Category of a per-record import issue."""

    PARSING_ERROR = "parsing_error"
    DUPLICATE_SKIPPED = "duplicate_skipped"
    CONFIGURATION_REJECTED = "configuration_rejected"


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class TransactionSubtype(str, Enum):
    FIXED = "fixed"
    VARIABLE = "variable"
    INSTALLMENT = "installment"


class TransactionSource(str, Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    BANK_TRANSACTION = "bank_transaction"
    PIX = "pix"
    CASH = "cash"
    BANK_SLIP = "bank_slip"
    OTHER = "other"


@dataclass(frozen=True)
class RawImportedEntry:
    """One statement record after parsing, before classification.

    The amount keeps the statement sign (debits negative). Only the OFX
    parser fills the detected_* fields; only the delimited-text parser
    fills the raw_* text fields, copied from its user-mapped columns.
    """

    line_number: int
    date: Optional[datetime]
    description: str
    amount: Optional[Decimal]
    external_id: Optional[str] = None
    detected_type: Optional[TransactionType] = None
    detected_subtype: Optional[TransactionSubtype] = None
    detected_source: Optional[TransactionSource] = None
    raw_type: Optional[str] = None
    raw_subtype: Optional[str] = None
    raw_source: Optional[str] = None
    raw_category: Optional[str] = None
    raw_subcategory: Optional[str] = None
    raw_counterparty: Optional[str] = None


@dataclass(frozen=True)
class ImportIssue:
    """A problem encountered while processing a single record."""

    line_number: int
    message: str
    kind: IssueKind
    external_reference: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "line_number": self.line_number,
            "external_reference": self.external_reference,
            "message": self.message,
            "kind": self.kind.value,
        }


@dataclass(frozen=True)
class ResponsibilityAllocation:
    """Share of a transaction assigned to one responsible person.

    The same allocations are attached to every transaction of an import.
    """

    responsible_id: int
    percentage: Decimal
    notes: Optional[str] = None

    def normalized_percentage(self) -> Decimal:
        return self.percentage.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    def to_dict(self) -> dict[str, Any]:
        return {
            "responsible_id": self.responsible_id,
            "percentage": str(self.percentage),
            "notes": self.notes,
        }


@dataclass(frozen=True)
class TransactionCandidate:
    """Fully classified transaction ready for duplicate check and creation.

    The amount is an unsigned magnitude; direction lives in ``type``.
    """

    user_id: int
    date: datetime
    description: str
    amount: Decimal
    type: TransactionType
    category_id: int
    subcategory_id: Optional[int] = None
    counterparty_id: Optional[int] = None
    subtype: Optional[TransactionSubtype] = None
    source: Optional[TransactionSource] = None
    external_reference: Optional[str] = None
    responsibilities: tuple[ResponsibilityAllocation, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "date": self.date.isoformat(),
            "description": self.description,
            "amount": str(self.amount),
            "type": self.type.value,
            "subtype": self.subtype.value if self.subtype else None,
            "source": self.source.value if self.source else None,
            "category_id": self.category_id,
            "subcategory_id": self.subcategory_id,
            "counterparty_id": self.counterparty_id,
            "external_reference": self.external_reference,
            "responsibilities": [r.to_dict() for r in self.responsibilities],
        }


@dataclass(frozen=True)
class Transaction:
    """Stored transaction domain entity."""

    id: int
    user_id: int
    date: datetime
    description: str
    amount: Decimal
    type: TransactionType
    category_id: int
    subcategory_id: Optional[int]
    counterparty_id: Optional[int]
    subtype: Optional[TransactionSubtype]
    source: Optional[TransactionSource]
    external_reference: Optional[str]
    imported_at: datetime
    responsibilities: tuple[ResponsibilityAllocation, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "date": self.date.isoformat(),
            "description": self.description,
            "amount": str(self.amount),
            "type": self.type.value,
            "subtype": self.subtype.value if self.subtype else None,
            "source": self.source.value if self.source else None,
            "category_id": self.category_id,
            "subcategory_id": self.subcategory_id,
            "counterparty_id": self.counterparty_id,
            "external_reference": self.external_reference,
            "responsibilities": [r.to_dict() for r in self.responsibilities],
        }


@dataclass(frozen=True)
class ParseResult:
    """Entries and parser-level issues produced by one parser run."""

    entries: list[RawImportedEntry] = field(default_factory=list)
    issues: list[ImportIssue] = field(default_factory=list)

    @property
    def records_seen(self) -> int:
        return len(self.entries) + len(self.issues)


@dataclass(frozen=True)
class ImportResult:
    """Outcome of one statement import.

    ``total_entries`` counts every data record the parser saw and always
    equals ``processed_entries + ignored_entries + failed_entries``.
    """

    dry_run: bool
    total_entries: int
    processed_entries: int
    ignored_entries: int
    failed_entries: int
    created_count: int
    duplicate_count: int
    created_transactions: list[Transaction] = field(default_factory=list)
    previewed_transactions: list[TransactionCandidate] = field(default_factory=list)
    issues: list[ImportIssue] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "dry_run": self.dry_run,
            "total_entries": self.total_entries,
            "processed_entries": self.processed_entries,
            "ignored_entries": self.ignored_entries,
            "failed_entries": self.failed_entries,
            "created_count": self.created_count,
            "duplicate_count": self.duplicate_count,
            "created_transactions": [t.to_dict() for t in self.created_transactions],
            "previewed_transactions": [c.to_dict() for c in self.previewed_transactions],
            "issues": [i.to_dict() for i in self.issues],
        }
