"""Statement import domain service."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from stmtimport.domain.config import ImportConfiguration
from stmtimport.domain.duplicates import DuplicateDetector
from stmtimport.domain.entities import (
    ImportFormat,
    ImportIssue,
    ImportResult,
    IssueKind,
    ParseResult,
    RawImportedEntry,
    Transaction,
    TransactionCandidate,
)
from stmtimport.domain.errors import ConfigurationError, safe_error_message
from stmtimport.domain.format_resolver import resolve_format
from stmtimport.domain.mapping import MappingTables, build_candidate
from stmtimport.domain.transaction import TransactionService
from stmtimport.parsers.delimited import parse_delimited
from stmtimport.parsers.ofx import parse_ofx

if TYPE_CHECKING:
    from stmtimport.database.base import TransactionStore

logger = logging.getLogger(__name__)

IGNORED_MESSAGE = "Ignored due to configured description filter"
DUPLICATE_MESSAGE = "Skipped duplicate entry"


def _issue(entry: RawImportedEntry, message: str, kind: IssueKind) -> ImportIssue:
    return ImportIssue(
        line_number=entry.line_number,
        external_reference=entry.external_id,
        message=message,
        kind=kind,
    )


class StatementImportService:
    """Service for importing bank and card statements."""

    def __init__(self, store: TransactionStore):
        """Initialize statement import service.

        Args:
            store: Transaction store instance
        """
        self.store = store
        self.transaction_service = TransactionService(store)
        self.duplicate_detector = DuplicateDetector(store)

    def parse(self, content: bytes, fmt: ImportFormat, config: ImportConfiguration) -> ParseResult:
        """Parse statement content with the parser for ``fmt``."""
        zone = config.resolve_zone()
        if fmt == ImportFormat.CSV:
            return parse_delimited(content, config.csv, zone)
        elif fmt == ImportFormat.OFX:
            return parse_ofx(content, zone)
        raise ConfigurationError(f"Unsupported import format: {fmt.value}")

    def import_statement(
        self,
        content: bytes,
        config: ImportConfiguration,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> ImportResult:
        """Import a statement, creating transactions for its records.

        Args:
            content: Raw statement bytes
            config: Import configuration
            filename: Original file name, used for format detection
            content_type: Declared MIME type, used for format detection

        Returns:
            ImportResult with counters, created transactions and issues

        Raises:
            ConfigurationError: If the format can't be resolved, the
                configuration doesn't fit it, or the file header is unusable
        """
        fmt = resolve_format(config.format, filename, content_type)
        config.validate_for(fmt)
        tables = MappingTables.from_config(config)

        parsed = self.parse(content, fmt, config)
        issues: list[ImportIssue] = list(parsed.issues)
        created: list[Transaction] = []
        previewed: list[TransactionCandidate] = []
        processed = ignored = duplicates = 0
        failed = len(parsed.issues)

        for entry in parsed.entries:
            if tables.is_ignored(entry.description):
                ignored += 1
                issues.append(_issue(entry, IGNORED_MESSAGE, IssueKind.CONFIGURATION_REJECTED))
                continue

            try:
                candidate = build_candidate(entry, config, tables)
            except Exception as e:
                logger.debug("Failed to classify entry at line %d: %s", entry.line_number, e)
                failed += 1
                issues.append(_issue(entry, safe_error_message(e), IssueKind.PARSING_ERROR))
                continue

            processed += 1
            try:
                if self.duplicate_detector.should_skip(candidate, config.duplicate_policy):
                    duplicates += 1
                    issues.append(_issue(entry, DUPLICATE_MESSAGE, IssueKind.DUPLICATE_SKIPPED))
                    continue

                if config.dry_run:
                    previewed.append(candidate)
                    continue

                created.append(self.transaction_service.create_transaction(candidate))
            except Exception as e:
                logger.debug("Failed to import entry at line %d: %s", entry.line_number, e)
                issues.append(_issue(entry, safe_error_message(e), IssueKind.PARSING_ERROR))

        result = ImportResult(
            dry_run=config.dry_run,
            total_entries=parsed.records_seen,
            processed_entries=processed,
            ignored_entries=ignored,
            failed_entries=failed,
            created_count=len(created),
            duplicate_count=duplicates,
            created_transactions=created,
            previewed_transactions=previewed,
            issues=issues,
        )
        logger.info(
            "Imported %s statement for user %d: %d entries, %d created, %d duplicates, %d issues%s",
            fmt.value,
            config.user_id,
            result.total_entries,
            result.created_count,
            result.duplicate_count,
            len(result.issues),
            " (dry run)" if config.dry_run else "",
        )
        return result

    def import_file(
        self,
        file_path: str,
        config: ImportConfiguration,
        content_type: Optional[str] = None,
    ) -> ImportResult:
        """Import a statement file from disk.

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Statement file not found: {file_path}")
        return self.import_statement(
            path.read_bytes(), config, filename=path.name, content_type=content_type
        )
