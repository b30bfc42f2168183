"""Shared test fixtures for the Yape importer test suite.

Provides a factory that builds Yape-style report workbooks in memory
(title row, three metadata rows, header row 5, data from row 6) and
returns them as the raw bytes an upload would carry.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from io import BytesIO
from typing import Any

import openpyxl
import pytest

from yapeimport.utils import EXPECTED_HEADERS

REPORT_NAME = "ReporteTransacciones+51922076456.xlsx"


def yape_row(
    origin: str | None = "Jean C. Guevara M.",
    destination: str | None = "Philip J. Perez C.",
    amount: Any = 25.5,
    date: Any = "10/11/2025 21:49:04",
    message: Any = "Pago",
    transaction_type: Any = "TE PAGÓ",
) -> list[Any]:
    """Build one data row in the export's column order."""
    return [transaction_type, origin, destination, amount, message, date]


def build_report(
    rows: Sequence[Sequence[Any]],
    headers: Sequence[Any] = EXPECTED_HEADERS,
    title: str = "Reporte de Transacciones",
) -> bytes:
    """Create a Yape report workbook and return its .xlsx bytes.

    Args:
        rows: Data rows written from sheet row 6 onwards. A row of all
            None values leaves a blank line in the sheet.
        headers: Cells written to the header row (row 5).
        title: Text of the title cell (A1).

    Returns:
        The saved workbook as bytes.
    """
    wb = openpyxl.Workbook()
    ws = wb.active
    assert ws is not None
    ws.title = "Transacciones"
    ws.cell(row=1, column=1, value=title)
    ws.cell(row=2, column=1, value="Celular: +51922076456")
    for col_idx, header in enumerate(headers, start=1):
        ws.cell(row=5, column=col_idx, value=header)
    for row_idx, row in enumerate(rows, start=6):
        for col_idx, value in enumerate(row, start=1):
            if value is not None:
                ws.cell(row=row_idx, column=col_idx, value=value)

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture()
def make_report() -> Callable[..., bytes]:
    """Factory fixture returning build_report (see its signature)."""
    return build_report


@pytest.fixture()
def scenario_rows() -> list[list[Any]]:
    """Twelve data rows (sheet rows 6-17) with known defects.

    Rows 8, 10, 13, 16 are invalid (missing amount, negative amount,
    missing origin, bad date); rows 11 and 14 repeat rows 6 and 7.
    """
    return [
        yape_row("Ana Q.", "Luis R.", 25.5, "10/11/2025 21:49:04"),            # 6
        yape_row("Luis R.", "Ana Q.", "10,00", "11/11/2025 08:00:00"),         # 7
        yape_row("Carla M.", "Ana Q.", None, "11/11/2025 09:15:00"),           # 8
        yape_row("Carla M.", "Luis R.", 40, "12/11/2025 10:00:00"),            # 9
        yape_row("Pedro S.", "Ana Q.", -5, "12/11/2025 11:30:00"),             # 10
        yape_row("Ana Q.", "Luis R.", "25,50", "10/11/2025 21:49:04", "Otro"), # 11
        yape_row("Pedro S.", "Luis R.", 12.3, "13/11/2025 12:00:00"),          # 12
        yape_row(None, "Luis R.", 7, "13/11/2025 13:00:00"),                   # 13
        yape_row("Luis R.", "Ana Q.", 10, "11/11/2025 08:00:00"),              # 14
        yape_row("Ana Q.", "Pedro S.", 3.2, "14/11/2025 18:45:10"),            # 15
        yape_row("Ana Q.", "Carla M.", 8, "2025-11-14 19:00:00"),              # 16
        yape_row("Carla M.", "Pedro S.", 99.99, "15/11/2025 07:05:00"),        # 17
    ]
