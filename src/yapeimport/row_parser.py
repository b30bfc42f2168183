"""Row parsing with per-row error isolation for the Yape importer.

Runs every non-empty data row through the row schema. A failing row is
recorded with its sheet row number and the batch moves on; only a file
with no valid row at all is rejected.

Error codes owned by this module:
    ERR_012 (NO_VALID_DATA): raised by parse_rows when nothing is valid
"""

from __future__ import annotations

import logging
from typing import Any

from yapeimport.errors import NoValidDataError, RowValidationError
from yapeimport.models import (
    ColumnMapping,
    ParsedRecord,
    ParseOutcome,
    RawRow,
    RowError,
    SheetData,
)
from yapeimport.schema import validate_row

logger = logging.getLogger(__name__)


def row_to_fields(row: RawRow, mapping: ColumnMapping) -> dict[str, Any]:
    """Look up each mapped label's cell in a raw row."""
    return {label: row.cells[col] for label, col in mapping.field_map.items()}


def parse_rows(
    sheet: SheetData,
    mapping: ColumnMapping,
    phone_number: str | None,
    filename: str | None = None,
) -> ParseOutcome:
    """Validate every candidate row, collecting failures instead of raising.

    Args:
        sheet: Output of the workbook reader (blank rows already removed).
        mapping: Column positions resolved by the header validator.
        phone_number: Phone number derived once from the file name and
            attached to every record.
        filename: Upload file name, used in logs and errors.

    Returns:
        ParseOutcome with valid records and row errors in sheet order, and
        the reader's skipped blank rows.

    Raises:
        NoValidDataError: ERR_012 if no row passed validation.
    """
    records: list[ParsedRecord] = []
    errors: list[RowError] = []

    for row in sheet.rows:
        try:
            record = validate_row(row_to_fields(row, mapping), row.row_number, phone_number)
        except RowValidationError as e:
            errors.append(RowError(row=row.row_number, error=e.message))
            logger.warning("Row %d validation failed: %s", row.row_number, e.message)
            continue
        records.append(record)

    if not records:
        raise NoValidDataError(filename)

    logger.info(
        "Parsing complete: %d valid, %d invalid, %d blank",
        len(records), len(errors), len(sheet.skipped),
    )
    return ParseOutcome(
        records=records,
        errors=errors,
        skipped=list(sheet.skipped),
        phone_number=phone_number,
    )
