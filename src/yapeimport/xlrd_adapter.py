"""Lightweight adapter wrapping xlrd.Sheet to provide an openpyxl-like interface.

Lets the workbook reader treat legacy .xls exports exactly like .xlsx ones:
rows come out of ``iter_rows(values_only=True)`` as tuples, blank cells are
None, and date cells are datetime objects.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import xlrd  # type: ignore[import-untyped]


class XlrdSheetAdapter:
    """Adapts an xlrd.Sheet to the subset of openpyxl Worksheet used here.

    Attributes:
        _sheet: The underlying xlrd.Sheet object.
        _datemode: The owning book's datemode, needed to decode date cells.
        max_row: Number of rows (matches openpyxl convention).
        max_column: Number of columns (matches openpyxl convention).
        title: Sheet name string.
    """

    def __init__(self, sheet: xlrd.sheet.Sheet, datemode: int = 0) -> None:
        """Initialize the adapter from an xlrd sheet.

        Args:
            sheet: An xlrd Sheet object.
            datemode: ``Book.datemode`` of the workbook the sheet belongs to.
        """
        self._sheet = sheet
        self._datemode = datemode
        self.max_row: int = sheet.nrows
        self.max_column: int = sheet.ncols
        self.title: str = sheet.name

    def iter_rows(self, values_only: bool = True) -> Iterator[tuple[Any, ...]]:
        """Yield every row as a tuple of converted cell values.

        Args:
            values_only: Accepted for openpyxl compatibility; values are
                always returned.

        Yields:
            One tuple per row, ``max_column`` wide.
        """
        for row_idx in range(self._sheet.nrows):
            yield tuple(
                self._convert(self._sheet.cell(row_idx, col_idx))
                for col_idx in range(self._sheet.ncols)
            )

    def _convert(self, cell: Any) -> Any:
        """Convert an xlrd cell into the value openpyxl would return."""
        if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
            return None
        if cell.ctype == xlrd.XL_CELL_DATE:
            return xlrd.xldate.xldate_as_datetime(cell.value, self._datemode)
        if cell.ctype == xlrd.XL_CELL_BOOLEAN:
            return bool(cell.value)
        # Reason: xlrd returns empty strings for some empty cells;
        # openpyxl returns None. Normalize to openpyxl convention.
        if cell.value == "":
            return None
        return cell.value
