"""Normalization and mapping of raw statement values to canonical ones.

Every classification axis is resolved by an ordered chain of resolver
functions; the first one returning a value wins. Dictionary keys and
lookups are both normalized (trimmed, lowercased) so matching is
case-insensitive.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional, Sequence, TypeVar

from stmtimport.domain.config import ImportConfiguration
from stmtimport.domain.entities import (
    RawImportedEntry,
    TransactionCandidate,
    TransactionSource,
    TransactionSubtype,
    TransactionType,
)
from stmtimport.domain.errors import ClassificationError, ConfigurationError

T = TypeVar("T")
E = TypeVar("E", bound=Enum)

Resolver = Callable[[], Optional[T]]


def normalize_key(value: Optional[str]) -> str:
    """Trim and lowercase a lookup key; None becomes the empty string."""
    if value is None:
        return ""
    return value.strip().lower()


def normalize_keys(source: Optional[Mapping[str, T]]) -> dict[str, T]:
    """Normalize dictionary keys; on collision the first key wins."""
    normalized: dict[str, T] = {}
    for key, value in (source or {}).items():
        normalized.setdefault(normalize_key(key), value)
    return normalized


def lookup(raw: Optional[str], dictionary: Mapping[str, T]) -> Optional[T]:
    """Look up non-blank raw text in a normalized dictionary."""
    key = normalize_key(raw)
    if not key:
        return None
    return dictionary.get(key)


def enum_from_text(enum_cls: type[E], raw: Optional[str]) -> Optional[E]:
    """Parse raw column text as an enum member by value or name.

    Unknown text is not an error; it simply resolves to nothing.
    """
    key = normalize_key(raw)
    if not key:
        return None
    for member in enum_cls:
        if key in (member.value, member.name.lower()):
            return member
    return None


def first_resolved(resolvers: Sequence[Resolver[T]]) -> Optional[T]:
    """Evaluate resolvers in order and return the first non-None result."""
    for resolver in resolvers:
        value = resolver()
        if value is not None:
            return value
    return None


@dataclass(frozen=True)
class MappingTables:
    """Normalized mapping dictionaries and ignore set for one import."""

    categories: Mapping[str, int]
    subcategories: Mapping[str, int]
    counterparties: Mapping[str, int]
    types: Mapping[str, TransactionType]
    subtypes: Mapping[str, TransactionSubtype]
    sources: Mapping[str, TransactionSource]
    ignored_descriptions: frozenset[str]

    @classmethod
    def from_config(cls, config: ImportConfiguration) -> "MappingTables":
        return cls(
            categories=normalize_keys(config.category_mappings),
            subcategories=normalize_keys(config.subcategory_mappings),
            counterparties=normalize_keys(config.counterparty_mappings),
            types=normalize_keys(config.type_mappings),
            subtypes=normalize_keys(config.subtype_mappings),
            sources=normalize_keys(config.source_mappings),
            ignored_descriptions=frozenset(
                key for key in (normalize_key(d) for d in config.ignore_descriptions) if key
            ),
        )

    def is_ignored(self, description: Optional[str]) -> bool:
        if not self.ignored_descriptions:
            return False
        return normalize_key(description) in self.ignored_descriptions


def resolve_category(raw: Optional[str], default_id: Optional[int], dictionary: Mapping[str, int]) -> int:
    """Resolve the mandatory category id.

    Raises:
        ConfigurationError: If neither a mapping nor a default applies
    """
    category_id = first_resolved([lambda: lookup(raw, dictionary), lambda: default_id])
    if category_id is None:
        raise ConfigurationError("No category mapping or default category provided")
    return category_id


def resolve_optional_mapping(raw: Optional[str], default: Optional[T], dictionary: Mapping[str, T]) -> Optional[T]:
    """Resolve a mapping that may stay unset (subcategory, counterparty)."""
    return first_resolved([lambda: lookup(raw, dictionary), lambda: default])


def sign_based_type(amount) -> Optional[TransactionType]:
    if amount is None or amount == 0:
        return None
    return TransactionType.EXPENSE if amount < 0 else TransactionType.INCOME


def resolve_type(
    entry: RawImportedEntry, config: ImportConfiguration, dictionary: Mapping[str, TransactionType]
) -> TransactionType:
    """Resolve the transaction type.

    Order: detected type, type column text, category text in the type
    dictionary, amount sign, configured default.

    Raises:
        ClassificationError: If nothing applies
    """
    resolved = first_resolved(
        [
            lambda: entry.detected_type,
            lambda: enum_from_text(TransactionType, entry.raw_type),
            lambda: lookup(entry.raw_category, dictionary),
            lambda: sign_based_type(entry.amount),
            lambda: config.default_type,
        ]
    )
    if resolved is None:
        raise ClassificationError("Unable to determine transaction type")
    return resolved


def resolve_subtype(
    entry: RawImportedEntry, config: ImportConfiguration, dictionary: Mapping[str, TransactionSubtype]
) -> Optional[TransactionSubtype]:
    return first_resolved(
        [
            lambda: entry.detected_subtype,
            lambda: enum_from_text(TransactionSubtype, entry.raw_subtype),
            lambda: lookup(entry.raw_category, dictionary),
            lambda: config.default_subtype,
        ]
    )


def resolve_source(
    entry: RawImportedEntry, config: ImportConfiguration, dictionary: Mapping[str, TransactionSource]
) -> Optional[TransactionSource]:
    return first_resolved(
        [
            lambda: entry.detected_source,
            lambda: enum_from_text(TransactionSource, entry.raw_source),
            lambda: lookup(entry.raw_counterparty, dictionary),
            lambda: config.default_source,
        ]
    )


def build_candidate(
    entry: RawImportedEntry, config: ImportConfiguration, tables: MappingTables
) -> TransactionCandidate:
    """Classify a raw entry into a transaction candidate.

    Raises:
        ClassificationError: If the entry lacks a date/amount or a type
        ConfigurationError: If no category can be resolved
    """
    if entry.date is None:
        raise ClassificationError("Transaction date is required")
    if entry.amount is None:
        raise ClassificationError("Transaction amount is required")

    return TransactionCandidate(
        user_id=config.user_id,
        date=entry.date,
        description=entry.description,
        amount=abs(entry.amount),
        type=resolve_type(entry, config, tables.types),
        subtype=resolve_subtype(entry, config, tables.subtypes),
        source=resolve_source(entry, config, tables.sources),
        category_id=resolve_category(entry.raw_category, config.default_category_id, tables.categories),
        subcategory_id=resolve_optional_mapping(
            entry.raw_subcategory, config.default_subcategory_id, tables.subcategories
        ),
        counterparty_id=resolve_optional_mapping(
            entry.raw_counterparty, config.default_counterparty_id, tables.counterparties
        ),
        external_reference=entry.external_id,
        responsibilities=config.responsibilities,
    )
