"""Two-phase import orchestrator for the Yape importer.

``validate`` is a read-only dry run returning the full import report;
``confirm`` repeats the same analysis from the raw bytes, saves the unique
records and writes one upload history record. No state is kept between
the two calls, so both always derive the same result from the same bytes.

Error codes raised through this module:
    ERR_010, ERR_011, ERR_012: from the workbook reader / row parser
    ERR_020: from the header validator
    ERR_040 (PERSISTENCE_FAILED): a batch insert failed during confirm
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence

from yapeimport.duplicates import filter_stored_duplicates, find_duplicates_in_file
from yapeimport.errors import PersistenceError
from yapeimport.headers import map_headers
from yapeimport.models import (
    AppConfig,
    ConfirmResult,
    DuplicateScan,
    ParsedRecord,
    ParseOutcome,
    UploadResult,
    UploadSummary,
)
from yapeimport.reader import read_workbook
from yapeimport.repository import TransactionRepository
from yapeimport.row_parser import parse_rows
from yapeimport.utils import extract_phone_number

logger = logging.getLogger(__name__)


def analyze_upload(content: bytes, filename: str) -> tuple[ParseOutcome, DuplicateScan]:
    """Run reader, header validation, row parsing and duplicate detection.

    Pure with respect to storage. Structural errors propagate unchanged.

    Args:
        content: Raw bytes of the uploaded workbook.
        filename: Original file name (also the phone number source).

    Returns:
        Tuple of (parse outcome, in-file duplicate scan).

    Raises:
        ProcessingError: WorksheetNotFoundError, FileCorruptError,
            InvalidHeadersError or NoValidDataError.
    """
    sheet = read_workbook(content, filename)
    mapping = map_headers(sheet.header_cells, filename=filename)
    phone_number = extract_phone_number(filename)
    outcome = parse_rows(sheet, mapping, phone_number, filename)
    scan = find_duplicates_in_file(outcome.records)
    return outcome, scan


def build_upload_result(outcome: ParseOutcome, scan: DuplicateScan) -> UploadResult:
    """Assemble the client-facing report from the analysis results."""
    return UploadResult(
        total_records=outcome.total_records,
        valid_records=len(scan.unique_records),
        invalid_records=len(outcome.errors),
        duplicate_records=len(scan.duplicates),
        skipped_empty_rows=len(outcome.skipped),
        skipped_row_details=outcome.skipped,
        duplicates=scan.duplicates,
        errors=outcome.errors,
    )


class TransactionImporter:
    """Validates and imports Yape transaction reports into a repository.

    Attributes:
        repository: Storage used by ``confirm`` (never touched by ``validate``).
        config: Batch size and the optional cross-batch duplicate check.
    """

    def __init__(
        self, repository: TransactionRepository, config: AppConfig | None = None,
    ) -> None:
        self.repository = repository
        self.config = config or AppConfig()

    def validate(self, content: bytes, filename: str) -> UploadResult:
        """Preview an import without persisting anything.

        Safe to call any number of times; identical input yields an
        identical UploadResult.

        Args:
            content: Raw bytes of the uploaded workbook.
            filename: Original file name.

        Returns:
            UploadResult with counts and per-row details.

        Raises:
            ProcessingError: On any structural failure (no partial result).
        """
        logger.info("Validating file: %s", filename)
        outcome, scan = analyze_upload(content, filename)
        result = build_upload_result(outcome, scan)
        logger.info(
            "Validation complete: %d valid, %d duplicates, %d errors",
            result.valid_records, result.duplicate_records, result.invalid_records,
        )
        return result

    def confirm(self, content: bytes, filename: str) -> ConfirmResult:
        """Re-analyze the upload, save unique records and record the import.

        The analysis is redone from the bytes rather than reused from an
        earlier ``validate`` call. In-file duplicates are never saved.

        Args:
            content: Raw bytes of the uploaded workbook.
            filename: Original file name.

        Returns:
            ConfirmResult with the inserted count and the history record id.

        Raises:
            ProcessingError: On any structural failure, before anything is
                saved.
            PersistenceError: ERR_040 if a batch insert fails; later batches
                are not attempted and no history record is written.
        """
        logger.info("Confirming upload for file: %s", filename)
        outcome, scan = analyze_upload(content, filename)

        to_save = scan.unique_records
        already_stored: list[ParsedRecord] = []
        if self.config.check_stored_duplicates:
            to_save, already_stored = filter_stored_duplicates(to_save, self.repository)

        saved_count = self._save_in_batches(to_save, filename)

        errors_text = (
            json.dumps([e.to_json_dict() for e in outcome.errors], ensure_ascii=False)
            if outcome.errors
            else None
        )
        history = self.repository.create_upload_history(
            UploadSummary(
                file_name=filename,
                phone_number=outcome.phone_number,
                total_records=outcome.total_records,
                successful_records=saved_count,
                failed_records=len(outcome.errors),
                duplicate_records=len(scan.duplicates) + len(already_stored),
                errors=errors_text,
            )
        )
        logger.info("Upload confirmed: %d transactions saved", saved_count)
        return ConfirmResult(saved_count=saved_count, upload_history_id=history.id)

    def _save_in_batches(self, records: Sequence[ParsedRecord], filename: str) -> int:
        """Insert records sequentially in ``batch_size`` chunks.

        Returns:
            Total number of records the repository reported as inserted.

        Raises:
            PersistenceError: On the first failing batch.
        """
        batch_size = self.config.batch_size
        saved = 0
        for start in range(0, len(records), batch_size):
            batch = records[start:start + batch_size]
            try:
                saved += self.repository.create_many(batch)
            except Exception as e:  # noqa: BLE001
                logger.error(
                    "Batch starting at record %d failed after %d saved: %s",
                    start, saved, e,
                )
                raise PersistenceError(
                    f"Failed to save transactions {start + 1}-{start + len(batch)}: {e}",
                    filename=filename,
                    saved_before_failure=saved,
                ) from e
            logger.debug("Saved batch %d-%d", start + 1, start + len(batch))
        return saved
