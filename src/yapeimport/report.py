"""Upload summary reporting for the Yape importer.

Renders validate/confirm outcomes and the upload history through logging,
for the command-line interface and for server logs.
"""

from __future__ import annotations

import logging
from collections import Counter

from yapeimport.models import ConfirmResult, RowError, UploadHistory, UploadResult

logger = logging.getLogger(__name__)

_SEP_MAJOR = "==========================================================================="
_SEP_MINOR = "---------------------------------------------------------------------------"

# Detail lines shown per section before collapsing into "... and N more".
MAX_DETAIL_LINES = 20


def condense_errors(errors: list[RowError]) -> list[tuple[str, int]]:
    """Count row errors per violated column label.

    A row failing on two columns counts once for each column.

    Args:
        errors: Row errors from an UploadResult.

    Returns:
        (label, count) tuples, most frequent first, ties in first-seen order.
    """
    counts: Counter[str] = Counter()
    for err in errors:
        _, _, details = err.error.partition(": ")
        for violation in details.split("; "):
            label, sep, _ = violation.partition(": ")
            counts[label if sep else "row"] += 1
    return counts.most_common()


def print_upload_summary(filename: str, result: UploadResult) -> None:
    """Print the validation report via logging.

    Always completes without raising; report output failures are non-fatal.

    Display order:
        1. Count block (rows, valid, invalid, duplicates, blank).
        2. Errors section, only when invalid rows exist.
        3. Duplicates section, only when duplicates exist.

    Args:
        filename: Upload file name shown in the header.
        result: Outcome of the validate phase.
    """
    try:
        logger.info(_SEP_MAJOR)
        logger.info("UPLOAD VALIDATION: %s", filename)
        logger.info(_SEP_MAJOR)
        logger.info("Rows with data:     %d", result.total_records)
        logger.info("Valid (unique):     %d", result.valid_records)
        logger.info("Invalid:            %d", result.invalid_records)
        logger.info("Duplicates:         %d", result.duplicate_records)
        logger.info("Blank rows skipped: %d", result.skipped_empty_rows)
        logger.info(_SEP_MAJOR)

        if result.errors:
            logger.warning("INVALID ROWS:")
            for label, count in condense_errors(result.errors):
                logger.warning("  %s: %d rows", label, count)
            for err in result.errors[:MAX_DETAIL_LINES]:
                logger.warning("  row %d: %s", err.row, err.error)
            _log_remaining(len(result.errors))

        if result.errors and result.duplicates:
            logger.info(_SEP_MINOR)

        if result.duplicates:
            logger.info("DUPLICATE ROWS (not imported):")
            for dup in result.duplicates[:MAX_DETAIL_LINES]:
                logger.info("  row %d: %s", dup.row, dup.reason)
            _log_remaining(len(result.duplicates))
    except Exception as exc:  # noqa: BLE001
        logger.error("Failed to generate upload summary report: %s", exc)


def print_confirm_summary(filename: str, result: ConfirmResult) -> None:
    """Print the outcome of a confirmed import via logging."""
    logger.info(
        "Imported %s: %d transactions saved (upload history #%d)",
        filename, result.saved_count, result.upload_history_id,
    )


def print_upload_history(history: list[UploadHistory]) -> None:
    """Print one line per confirmed import, oldest first."""
    if not history:
        logger.info("No uploads recorded yet")
        return
    for entry in history:
        logger.info(
            "#%d %s %s phone=%s total=%d saved=%d failed=%d duplicates=%d",
            entry.id,
            entry.upload_date.strftime("%Y-%m-%d %H:%M"),
            entry.file_name,
            entry.phone_number or "-",
            entry.total_records,
            entry.successful_records,
            entry.failed_records,
            entry.duplicate_records,
        )


def _log_remaining(total: int) -> None:
    if total > MAX_DETAIL_LINES:
        logger.info("  ... and %d more", total - MAX_DETAIL_LINES)
