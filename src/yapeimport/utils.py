"""Shared utility functions and constants for the Yape importer.

Pure functions and constants imported by 2+ consumer modules.
No file I/O, no logging, no global state mutation.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from decimal import Decimal

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EXPECTED_HEADERS: tuple[str, ...] = (
    "Tipo de Transacción",
    "Origen",
    "Destino",
    "Monto",
    "Mensaje",
    "Fecha de operación",
)
"""Header labels of the Yape export, in column order A-F."""

HEADER_ROW = 5
"""1-based sheet row holding the column headers (title + 3 metadata rows above)."""

FIRST_DATA_ROW = HEADER_ROW + 1
"""1-based sheet row where transaction data begins."""

MIN_SHEET_ROWS = FIRST_DATA_ROW
"""Title, three metadata rows, header row and at least one data row."""

OPERATION_DATE_FORMAT = "%d/%m/%Y %H:%M:%S"
"""strptime/strftime form of the export's dd/MM/yyyy HH:mm:ss date cells."""

EMPTY_ROW_REASON = "Empty row (all cells are blank)"

_PHONE_RE: re.Pattern[str] = re.compile(r"\+?\d{11,15}")

# ---------------------------------------------------------------------------
# Functions
# ---------------------------------------------------------------------------


def is_cell_empty(value: object) -> bool:
    """Return True if a cell value is None or a whitespace-only string.

    Args:
        value: Raw cell value from openpyxl or the xlrd adapter.

    Returns:
        True when the value is None or a string containing only whitespace.
    """
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def is_row_empty(cells: Sequence[object]) -> bool:
    """Return True when every cell of a row is empty (see is_cell_empty)."""
    return all(is_cell_empty(cell) for cell in cells)


def normalize_header(value: object) -> str:
    """Normalize a header cell for exact label comparison.

    Collapses internal whitespace runs (including newlines) to one space
    and strips both ends. Case and accents are preserved because the
    expected labels are matched exactly.

    Args:
        value: The raw header cell value.

    Returns:
        Normalized header text, or "" for blank cells.
    """
    if value is None:
        return ""
    return re.sub(r"\s+", " ", str(value)).strip()


def extract_phone_number(filename: str) -> str | None:
    """Extract the account phone number embedded in an export file name.

    Yape names its exports like "ReporteTransacciones+51922076456.xlsx".
    The first run of 11-15 digits (optionally prefixed with "+") wins.

    Args:
        filename: Original file name of the upload.

    Returns:
        The matched phone number including any "+", or None.
    """
    match = _PHONE_RE.search(filename)
    return match.group(0) if match else None


def format_amount_key(amount: Decimal) -> str:
    """Render an amount so that numerically equal values compare equal.

    "50", "50.0" and "50.00" all render as "50"; "12.50" renders as "12.5".

    Args:
        amount: A finite Decimal.

    Returns:
        Canonical fixed-point string without exponent or trailing zeros.
    """
    normalized = amount.normalize()
    # Reason: normalize() turns 100 into 1E+2; "f" formatting restores digits.
    return format(normalized, "f")
