"""Import configuration supplied with each statement import request."""

import codecs
import json
from decimal import Decimal, InvalidOperation
from dataclasses import dataclass, field, replace
from datetime import tzinfo
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, TypeVar

from dateutil import tz

from stmtimport.domain.entities import (
    DuplicatePolicy,
    ImportFormat,
    ResponsibilityAllocation,
    TransactionSource,
    TransactionSubtype,
    TransactionType,
)
from stmtimport.domain.errors import ConfigurationError

E = TypeVar("E", bound=Enum)

DEFAULT_DATE_PATTERNS = ("dd/MM/yyyy", "yyyy-MM-dd", "dd-MM-yyyy")
FALLBACK_DATE_PATTERNS = ("dd/MM/yyyy",)

# Locales whose default decimal separator is a comma
COMMA_DECIMAL_LOCALES = {"pt-br", "pt_br"}

FULL_ALLOCATION = Decimal("100")


@dataclass(frozen=True)
class DelimitedTextOptions:
    """Parsing options for delimited-text (CSV) statements."""

    delimiter: str = ","
    encoding: str = "utf-8-sig"
    decimal_separator: Optional[str] = None
    grouping_separator: Optional[str] = None
    locale: str = "en-US"
    date_patterns: tuple[str, ...] = DEFAULT_DATE_PATTERNS
    date_column: str = "date"
    description_column: str = "description"
    amount_column: str = "amount"
    type_column: Optional[str] = None
    subtype_column: Optional[str] = None
    source_column: Optional[str] = None
    category_column: Optional[str] = None
    subcategory_column: Optional[str] = None
    counterparty_column: Optional[str] = None
    external_id_column: Optional[str] = None

    def __post_init__(self):
        for name in ("delimiter", "decimal_separator", "grouping_separator"):
            value = getattr(self, name)
            if value is not None and len(value) != 1:
                raise ConfigurationError(f"{name.replace('_', ' ').capitalize()} must be a single character")
        for name in ("date_column", "description_column", "amount_column"):
            if not getattr(self, name) or not getattr(self, name).strip():
                raise ConfigurationError(f"{name.replace('_', ' ').capitalize()} cannot be blank")

    def resolve_decimal_separator(self) -> str:
        if self.decimal_separator:
            return self.decimal_separator
        return "," if self.locale.strip().lower() in COMMA_DECIMAL_LOCALES else "."

    def resolve_grouping_separator(self) -> str:
        if self.grouping_separator:
            return self.grouping_separator
        return "." if self.locale.strip().lower() in COMMA_DECIMAL_LOCALES else ","

    def resolve_encoding(self) -> str:
        try:
            return codecs.lookup(self.encoding).name
        except LookupError:
            return "utf-8"

    def safe_date_patterns(self) -> tuple[str, ...]:
        return tuple(self.date_patterns) if self.date_patterns else FALLBACK_DATE_PATTERNS


@dataclass(frozen=True)
class ImportConfiguration:
    """Caller-supplied settings for one import, validated once per request."""

    user_id: int
    default_category_id: Optional[int] = None
    default_subcategory_id: Optional[int] = None
    default_counterparty_id: Optional[int] = None
    default_type: Optional[TransactionType] = None
    default_subtype: Optional[TransactionSubtype] = None
    default_source: Optional[TransactionSource] = None
    format: ImportFormat = ImportFormat.AUTO
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.SKIP
    dry_run: bool = False
    timezone: str = "UTC"
    csv: Optional[DelimitedTextOptions] = None
    category_mappings: Mapping[str, int] = field(default_factory=dict)
    subcategory_mappings: Mapping[str, int] = field(default_factory=dict)
    counterparty_mappings: Mapping[str, int] = field(default_factory=dict)
    type_mappings: Mapping[str, TransactionType] = field(default_factory=dict)
    subtype_mappings: Mapping[str, TransactionSubtype] = field(default_factory=dict)
    source_mappings: Mapping[str, TransactionSource] = field(default_factory=dict)
    ignore_descriptions: tuple[str, ...] = ()
    responsibilities: tuple[ResponsibilityAllocation, ...] = ()

    def resolve_zone(self) -> tzinfo:
        """Return the tzinfo for the configured time zone.

        Raises:
            ConfigurationError: If the zone name is unknown
        """
        zone = tz.gettz(self.timezone) if self.timezone else tz.UTC
        if zone is None:
            raise ConfigurationError(f"Timezone '{self.timezone}' is not a valid time zone")
        return zone

    def validate_for(self, resolved_format: ImportFormat) -> None:
        """Validate the configuration once the concrete format is known.

        Raises:
            ConfigurationError: If the configuration cannot drive this import
        """
        if resolved_format == ImportFormat.CSV and self.csv is None:
            raise ConfigurationError("CSV configuration is required to import CSV statements")
        if resolved_format == ImportFormat.OFX and self.csv is not None:
            raise ConfigurationError("CSV configuration cannot be used with OFX statements")
        if self.default_category_id is None and not self.category_mappings:
            raise ConfigurationError("A default category or category mappings must be provided")
        if self.responsibilities:
            total = sum((r.normalized_percentage() for r in self.responsibilities), Decimal("0"))
            if total != FULL_ALLOCATION:
                raise ConfigurationError("The sum of responsibility percentages must total 100%")
        self.resolve_zone()

    def with_overrides(self, **changes: Any) -> "ImportConfiguration":
        """Return a copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ImportConfiguration":
        """Build a configuration from a plain mapping such as parsed JSON.

        Raises:
            ConfigurationError: If a value has the wrong shape
        """
        if "user_id" not in data:
            raise ConfigurationError("user_id is required")

        csv_data = data.get("csv")
        csv_options = None
        if csv_data is not None:
            if not isinstance(csv_data, Mapping):
                raise ConfigurationError("csv must be an object")
            known = set(DelimitedTextOptions.__dataclass_fields__)
            unknown = set(csv_data) - known
            if unknown:
                raise ConfigurationError(f"Unknown CSV option(s): {', '.join(sorted(unknown))}")
            csv_kwargs = dict(csv_data)
            if "date_patterns" in csv_kwargs:
                csv_kwargs["date_patterns"] = _string_list(csv_kwargs["date_patterns"], "csv.date_patterns")
            csv_options = DelimitedTextOptions(**csv_kwargs)

        return cls(
            user_id=_to_int(data["user_id"], "user_id"),
            default_category_id=_optional_int(data.get("default_category_id"), "default_category_id"),
            default_subcategory_id=_optional_int(data.get("default_subcategory_id"), "default_subcategory_id"),
            default_counterparty_id=_optional_int(
                data.get("default_counterparty_id"), "default_counterparty_id"
            ),
            default_type=_optional_enum(TransactionType, data.get("default_type")),
            default_subtype=_optional_enum(TransactionSubtype, data.get("default_subtype")),
            default_source=_optional_enum(TransactionSource, data.get("default_source")),
            format=_optional_enum(ImportFormat, data.get("format")) or ImportFormat.AUTO,
            duplicate_policy=_optional_enum(DuplicatePolicy, data.get("duplicate_policy"))
            or DuplicatePolicy.SKIP,
            dry_run=_to_bool(data.get("dry_run", False), "dry_run"),
            timezone=data.get("timezone") or "UTC",
            csv=csv_options,
            category_mappings=_id_mapping(data.get("category_mappings"), "category_mappings"),
            subcategory_mappings=_id_mapping(data.get("subcategory_mappings"), "subcategory_mappings"),
            counterparty_mappings=_id_mapping(data.get("counterparty_mappings"), "counterparty_mappings"),
            type_mappings=_enum_mapping(TransactionType, data.get("type_mappings")),
            subtype_mappings=_enum_mapping(TransactionSubtype, data.get("subtype_mappings")),
            source_mappings=_enum_mapping(TransactionSource, data.get("source_mappings")),
            ignore_descriptions=_string_list(data.get("ignore_descriptions"), "ignore_descriptions"),
            responsibilities=_responsibilities(data.get("responsibilities")),
        )


def load_configuration(path: str | Path) -> ImportConfiguration:
    """Load an import configuration from a JSON file.

    Raises:
        ConfigurationError: If the file is not valid JSON or has bad values
        FileNotFoundError: If the file doesn't exist
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Configuration file is not valid JSON: {e}")
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must contain a JSON object")
    return ImportConfiguration.from_dict(data)


def parse_enum(enum_cls: type[E], raw: Any) -> E:
    """Parse an enum by value or member name, case-insensitively.

    Raises:
        ConfigurationError: If the value matches no member
    """
    if isinstance(raw, enum_cls):
        return raw
    text = str(raw).strip().lower()
    for member in enum_cls:
        if text in (member.value, member.name.lower()):
            return member
    allowed = ", ".join(m.value for m in enum_cls)
    raise ConfigurationError(f"Invalid {enum_cls.__name__} '{raw}'. Must be one of: {allowed}")


def _optional_enum(enum_cls: type[E], raw: Any) -> Optional[E]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    return parse_enum(enum_cls, raw)


def _to_int(raw: Any, name: str) -> int:
    if isinstance(raw, bool):
        raise ConfigurationError(f"{name} must be an integer")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'")


def _optional_int(raw: Any, name: str) -> Optional[int]:
    if raw is None:
        return None
    return _to_int(raw, name)


def _id_mapping(raw: Any, name: str) -> dict[str, int]:
    if not raw:
        return {}
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"{name} must be an object")
    return {str(key): _to_int(value, f"{name}['{key}']") for key, value in raw.items()}


def _enum_mapping(enum_cls: type[E], raw: Any) -> dict[str, E]:
    if not raw:
        return {}
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"{enum_cls.__name__} mappings must be an object")
    return {str(key): parse_enum(enum_cls, value) for key, value in raw.items()}


def _to_bool(raw: Any, name: str) -> bool:
    if not isinstance(raw, bool):
        raise ConfigurationError(f"{name} must be true or false, got '{raw}'")
    return raw


def _string_list(raw: Any, name: str) -> tuple[str, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, (list, tuple)) or not all(isinstance(item, str) for item in raw):
        raise ConfigurationError(f"{name} must be a list of strings")
    return tuple(raw)


def _to_decimal(raw: Any, name: str) -> Decimal:
    if isinstance(raw, bool):
        raise ConfigurationError(f"{name} must be a number")
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        raise ConfigurationError(f"{name} must be a number, got '{raw}'")
    if not value.is_finite():
        raise ConfigurationError(f"{name} must be a number, got '{raw}'")
    return value


def _responsibilities(raw: Any) -> tuple[ResponsibilityAllocation, ...]:
    if not raw:
        return ()
    if not isinstance(raw, (list, tuple)):
        raise ConfigurationError("responsibilities must be a list")
    allocations = []
    for position, item in enumerate(raw):
        name = f"responsibilities[{position}]"
        if not isinstance(item, Mapping):
            raise ConfigurationError(f"{name} must be an object")
        unknown = set(item) - {"responsible_id", "percentage", "notes"}
        if unknown:
            raise ConfigurationError(f"Unknown {name} option(s): {', '.join(sorted(unknown))}")
        if item.get("responsible_id") is None or item.get("percentage") is None:
            raise ConfigurationError(f"{name} requires responsible_id and percentage")
        notes = item.get("notes")
        allocations.append(
            ResponsibilityAllocation(
                responsible_id=_to_int(item["responsible_id"], f"{name}.responsible_id"),
                percentage=_to_decimal(item["percentage"], f"{name}.percentage"),
                notes=str(notes) if notes is not None else None,
            )
        )
    return tuple(allocations)
