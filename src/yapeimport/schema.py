"""Row schema and type coercion for the Yape importer.

Validates one raw worksheet row (header label -> cell value) and coerces
it into a ParsedRecord. Every violated constraint of the row is reported,
not just the first one.

Error codes owned by this module:
    ERR_030 (ROW_VALIDATION_FAILED): raised by validate_row
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)
from pydantic_core import ErrorDetails

from yapeimport.errors import RowValidationError
from yapeimport.models import ParsedRecord
from yapeimport.utils import EXPECTED_HEADERS, OPERATION_DATE_FORMAT, is_cell_empty

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_DATE_SHAPE_RE: re.Pattern[str] = re.compile(r"^\d{2}/\d{2}/\d{4} \d{2}:\d{2}:\d{2}$")
"""Exact dd/MM/yyyy HH:mm:ss shape; strptime alone also accepts single digits."""

_CURRENCY_PREFIX_RE: re.Pattern[str] = re.compile(r"^S/\.?", re.IGNORECASE)

_PLAIN_NUMBER_RE: re.Pattern[str] = re.compile(r"^[+-]?\d+(?:\.\d+)?$")

_GROUPED_INTEGER_RE: dict[str, re.Pattern[str]] = {
    ",": re.compile(r"^[+-]?\d{1,3}(?:,\d{3})+$"),
    ".": re.compile(r"^[+-]?\d{1,3}(?:\.\d{3})+$"),
}

_REQUIRED_MESSAGES: dict[str, str] = {
    "transaction_type": "Transaction type is required",
    "origin": "Origin is required",
    "destination": "Destination is required",
}


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------


def parse_amount(value: Any) -> Decimal:
    """Coerce a Monto cell into a Decimal.

    Numbers are taken as-is. Strings may carry a "S/" currency prefix,
    spaces, thousands separators and either "," or "." as decimal
    separator: when both appear the right-most one is the decimal
    separator; a lone comma is a decimal comma ("50,00" -> 50.00);
    repeated separators of a single kind are thousands separators and
    must split the integer part into groups of three.

    Args:
        value: Raw cell value (str, int, float or Decimal).

    Returns:
        The parsed amount. Sign is preserved; positivity is checked by
        the schema.

    Raises:
        ValueError: When the value is blank or not a number.
    """
    if is_cell_empty(value):
        raise ValueError("Amount is required")
    if isinstance(value, bool):
        # Reason: bool is a subclass of int in Python; we must reject it explicitly.
        raise ValueError(f"Invalid amount '{value}'")
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Invalid amount '{value}'")
        return value
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Invalid amount '{value}'")
        # Reason: Decimal(str(float)) avoids floating-point artifacts like 2.2800000...02.
        return Decimal(str(value))
    if not isinstance(value, str):
        raise ValueError(f"Invalid amount '{value}'")

    text = _CURRENCY_PREFIX_RE.sub("", value.strip())
    text = re.sub(r"\s+", "", text)
    normalized = _normalize_separators(text)
    if normalized is None or not _PLAIN_NUMBER_RE.match(normalized):
        raise ValueError(f"Invalid amount '{value}'")
    try:
        return Decimal(normalized)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount '{value}'") from exc


def _normalize_separators(text: str) -> str | None:
    """Rewrite locale thousand/decimal separators to a plain "1234.56" form.

    Returns None when thousands separators do not split the integer part
    into groups of three ("1,2,3", "12,34,567").
    """
    if "," in text and "." in text:
        decimal_sep = "," if text.rfind(",") > text.rfind(".") else "."
        thousands_sep = "." if decimal_sep == "," else ","
        integer, _, fraction = text.rpartition(decimal_sep)
        integer = _strip_grouping(integer, thousands_sep)
        if integer is None:
            return None
        return f"{integer}.{fraction}"
    for sep in (",", "."):
        if text.count(sep) > 1:
            return _strip_grouping(text, sep)
    return text.replace(",", ".")


def _strip_grouping(text: str, sep: str) -> str | None:
    """Remove thousands separators, or return None if the grouping is malformed."""
    if not _GROUPED_INTEGER_RE[sep].match(text):
        return None
    return text.replace(sep, "")


def parse_operation_date(value: Any) -> datetime:
    """Parse a "Fecha de operación" cell.

    Text must match dd/MM/yyyy HH:mm:ss exactly. A cell openpyxl already
    typed as a datetime is accepted unchanged.

    Args:
        value: Raw cell value.

    Returns:
        Naive local datetime of the operation.

    Raises:
        ValueError: On a blank cell, a different shape, or an impossible
            calendar date; the message names the offending value.
    """
    if isinstance(value, datetime):
        return value
    if is_cell_empty(value):
        raise ValueError("Operation date is required")
    text = str(value).strip()
    if not _DATE_SHAPE_RE.match(text):
        raise ValueError(
            f"Invalid operation date '{text}': expected dd/MM/yyyy HH:mm:ss"
        )
    try:
        return datetime.strptime(text, OPERATION_DATE_FORMAT)
    except ValueError as exc:
        raise ValueError(
            f"Invalid operation date '{text}': expected dd/MM/yyyy HH:mm:ss"
        ) from exc


def _cell_to_text(value: Any) -> Any:
    """Render numeric cells as text; 51922076456.0 becomes "51922076456"."""
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    return value


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


class ExcelRow(BaseModel):
    """Validated shape of one export row, keyed by the report's labels."""

    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    transaction_type: str = Field(alias="Tipo de Transacción")
    origin: str = Field(alias="Origen")
    destination: str = Field(alias="Destino")
    amount: Decimal = Field(alias="Monto")
    message: str = Field(default="", alias="Mensaje")
    operation_date: datetime = Field(alias="Fecha de operación")

    @field_validator("transaction_type", "origin", "destination", mode="before")
    @classmethod
    def _require_text(cls, value: Any, info: ValidationInfo) -> Any:
        if is_cell_empty(value):
            raise ValueError(_REQUIRED_MESSAGES[info.field_name])
        return _cell_to_text(value)

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Decimal:
        amount = parse_amount(value)
        if amount <= 0:
            raise ValueError(f"Amount must be positive (got {value})")
        return amount

    @field_validator("message", mode="before")
    @classmethod
    def _default_message(cls, value: Any) -> Any:
        if value is None:
            return ""
        return _cell_to_text(value)

    @field_validator("operation_date", mode="before")
    @classmethod
    def _coerce_operation_date(cls, value: Any) -> datetime:
        return parse_operation_date(value)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_row(
    fields: Mapping[str, Any], row_number: int, phone_number: str | None,
) -> ParsedRecord:
    """Validate one row's label -> cell map and build a ParsedRecord.

    Pure function: no logging, no state. Labels absent from ``fields``
    are treated as blank cells.

    Args:
        fields: Header label to raw cell value for one row.
        row_number: 1-based sheet row, carried into the record and errors.
        phone_number: Phone number derived from the file name.

    Returns:
        The validated, coerced record.

    Raises:
        RowValidationError: ERR_030 listing every violated constraint.
    """
    try:
        row = ExcelRow.model_validate(
            {label: fields.get(label) for label in EXPECTED_HEADERS}
        )
    except ValidationError as exc:
        violations = [_format_violation(err) for err in exc.errors()]
        raise RowValidationError(row_number, violations) from exc

    return ParsedRecord(
        row_number=row_number,
        transaction_type=row.transaction_type,
        origin=row.origin,
        destination=row.destination,
        amount=row.amount,
        message=row.message,
        operation_date=row.operation_date,
        phone_number=phone_number,
    )


def _format_violation(err: ErrorDetails) -> str:
    """Render one pydantic error as "<label>: <message>"."""
    label = ".".join(str(part) for part in err["loc"]) or "row"
    ctx = err.get("ctx") or {}
    if err["type"] == "value_error" and "error" in ctx:
        # Reason: pydantic prefixes custom messages with "Value error, ".
        message = str(ctx["error"])
    else:
        message = err["msg"]
    return f"{label}: {message}"
