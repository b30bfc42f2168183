"""Workbook reader for the Yape importer.

Opens the uploaded bytes, takes the first worksheet and splits it into the
fixed header row and the candidate data rows. Fully blank data rows are
recorded as skipped here, before any validation.

Error codes owned by this module:
    ERR_010 (WORKSHEET_NOT_FOUND): the workbook has no worksheet
    ERR_011 (FILE_CORRUPT): the bytes are not a readable workbook
    ERR_012 (NO_VALID_DATA): fewer rows than the fixed layout requires
"""

from __future__ import annotations

import logging
import zipfile
from io import BytesIO
from pathlib import PurePath
from typing import Any

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from yapeimport.errors import FileCorruptError, NoValidDataError, WorksheetNotFoundError
from yapeimport.models import RawRow, SheetData, SkippedRow
from yapeimport.utils import (
    EMPTY_ROW_REASON,
    EXPECTED_HEADERS,
    FIRST_DATA_ROW,
    HEADER_ROW,
    MIN_SHEET_ROWS,
    is_row_empty,
)

logger = logging.getLogger(__name__)

# Compound File Binary signature shared by all legacy .xls workbooks.
_OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def read_workbook(content: bytes, filename: str) -> SheetData:
    """Read the first worksheet of an uploaded report.

    The layout is fixed: row 1 is a title, rows 2-4 are metadata, row 5
    holds the headers and data starts at row 6. Every data row keeps its
    1-based sheet row number for error reporting.

    Args:
        content: Raw bytes of the uploaded file (.xlsx or legacy .xls).
        filename: Original file name, used to pick the format and in errors.

    Returns:
        SheetData with the header cells, non-empty data rows and the
        skipped blank rows.

    Raises:
        FileCorruptError: ERR_011 if the bytes cannot be opened.
        WorksheetNotFoundError: ERR_010 if the workbook has no worksheet.
        NoValidDataError: ERR_012 if the sheet has fewer than 6 rows.
    """
    sheets = _open_sheets(content, filename)
    if not sheets:
        raise WorksheetNotFoundError(filename)

    sheet = sheets[0]
    all_rows = [list(row) for row in sheet.iter_rows(values_only=True)]
    logger.debug(
        "Sheet '%s' of %s has %d rows", sheet.title, filename, len(all_rows),
    )
    if len(all_rows) < MIN_SHEET_ROWS:
        raise NoValidDataError(filename)

    width = max(len(EXPECTED_HEADERS), *(len(row) for row in all_rows))
    header_cells = _pad(all_rows[HEADER_ROW - 1], width)

    rows: list[RawRow] = []
    skipped: list[SkippedRow] = []
    for row_number, cells in enumerate(all_rows[HEADER_ROW:], start=FIRST_DATA_ROW):
        if is_row_empty(cells):
            skipped.append(SkippedRow(row=row_number, reason=EMPTY_ROW_REASON))
            continue
        rows.append(RawRow(row_number=row_number, cells=_pad(cells, width)))

    logger.info(
        "Read %d data rows (%d blank) from sheet '%s'",
        len(rows), len(skipped), sheet.title,
    )
    return SheetData(
        sheet_name=sheet.title,
        header_cells=header_cells,
        rows=rows,
        skipped=skipped,
    )


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _open_sheets(content: bytes, filename: str) -> list[Any]:
    """Open the workbook bytes and return its worksheets in tab order.

    Legacy .xls (by extension or OLE2 signature) goes through xlrd and the
    XlrdSheetAdapter wrapper; everything else through openpyxl with
    data_only=True so formulas yield their cached values.

    Raises:
        FileCorruptError: If the selected backend cannot parse the bytes.
    """
    if PurePath(filename).suffix.lower() == ".xls" or content.startswith(_OLE2_SIGNATURE):
        return _open_xls_sheets(content, filename)

    try:
        workbook = openpyxl.load_workbook(
            BytesIO(content), data_only=True, read_only=False,
        )
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as e:
        raise FileCorruptError(str(e) or type(e).__name__, filename) from e
    # Reason: .worksheets excludes chartsheets, which hold no cells.
    return list(workbook.worksheets)


def _open_xls_sheets(content: bytes, filename: str) -> list[Any]:
    """Open legacy .xls bytes via xlrd and wrap each sheet in an adapter."""
    import xlrd  # type: ignore[import-untyped]
    import xlrd.compdoc  # type: ignore[import-untyped]

    from yapeimport.xlrd_adapter import XlrdSheetAdapter

    try:
        book = xlrd.open_workbook(file_contents=content)
    except (xlrd.XLRDError, xlrd.compdoc.CompDocError, ValueError, OSError) as e:
        raise FileCorruptError(str(e) or type(e).__name__, filename) from e

    logger.debug("Opened .xls file via xlrd adapter: %s", filename)
    return [XlrdSheetAdapter(sheet, book.datemode) for sheet in book.sheets()]


def _pad(cells: list[Any], width: int) -> list[Any]:
    """Right-pad a row with None so every row has the same width."""
    return cells + [None] * (width - len(cells))
