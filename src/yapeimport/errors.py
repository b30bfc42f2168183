"""Error types and error code enum for the Yape importer.

Defines ErrorCode (ERR_001-ERR_040), ProcessingError with its structural
subclasses, and the ConfigError exception class.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum


class ErrorCode(StrEnum):
    """Error codes for import failures.

    Each member's string value equals its name (e.g., ErrorCode.ERR_001 == "ERR_001").
    Codes are grouped by processing phase:
        ERR_001-003: Config errors (fatal startup)
        ERR_010-012: Workbook/sheet structure errors
        ERR_020: Header errors
        ERR_030: Row validation errors (isolated, never abort a batch)
        ERR_040: Persistence errors
    """

    # Config errors (fatal startup)
    ERR_001 = "ERR_001"
    ERR_002 = "ERR_002"
    ERR_003 = "ERR_003"

    # Workbook structure errors
    ERR_010 = "ERR_010"
    ERR_011 = "ERR_011"
    ERR_012 = "ERR_012"

    # Header errors
    ERR_020 = "ERR_020"

    # Row validation errors
    ERR_030 = "ERR_030"

    # Persistence errors
    ERR_040 = "ERR_040"


class ProcessingError(Exception):
    """Exception raised while importing a transaction report.

    Structural subclasses abort a whole validate/confirm call and are
    mapped to client-facing errors by the caller. Row-level errors are
    caught by the row parser and accumulated instead.

    Attributes:
        code: The ERR_NNN error code string.
        message: Human-readable description with actionable context.
        filename: The uploaded file name (None when unknown).
        row: Sheet row number where the error occurred (1-based).
        field: Field name involved (e.g., "Monto").
    """

    def __init__(
        self,
        code: str,
        message: str,
        filename: str | None = None,
        row: int | None = None,
        field: str | None = None,
    ) -> None:
        """Initialize a ProcessingError.

        Args:
            code: The ERR_NNN error code string.
            message: Human-readable description with actionable context.
            filename: The uploaded file name.
            row: Row number where the error occurred (1-based).
            field: Field name involved.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.filename = filename
        self.row = row
        self.field = field


class WorksheetNotFoundError(ProcessingError):
    """Raised when the workbook contains no worksheet at all."""

    def __init__(self, filename: str | None = None) -> None:
        super().__init__(
            code=ErrorCode.ERR_010,
            message="No worksheet found in Excel file",
            filename=filename,
        )


class FileCorruptError(ProcessingError):
    """Raised when the uploaded bytes cannot be opened as a workbook."""

    def __init__(self, detail: str, filename: str | None = None) -> None:
        super().__init__(
            code=ErrorCode.ERR_011,
            message=f"File is corrupt or not a supported workbook: {detail}",
            filename=filename,
        )


class NoValidDataError(ProcessingError):
    """Raised when a report has no data rows or every row failed validation."""

    def __init__(self, filename: str | None = None) -> None:
        super().__init__(
            code=ErrorCode.ERR_012,
            message="No valid data found in Excel file",
            filename=filename,
        )


class InvalidHeadersError(ProcessingError):
    """Raised when the header row lacks one or more expected labels.

    Attributes:
        expected: The full expected label list, in column order.
        actual: The non-blank header cells found in the header row.
        missing: Expected labels absent from ``actual``.
    """

    def __init__(
        self,
        expected: Sequence[str],
        actual: Sequence[str],
        filename: str | None = None,
    ) -> None:
        self.expected = list(expected)
        self.actual = list(actual)
        self.missing = [label for label in self.expected if label not in self.actual]
        super().__init__(
            code=ErrorCode.ERR_020,
            message=(
                f"Invalid Excel headers. Expected: [{', '.join(self.expected)}], "
                f"Found: [{', '.join(self.actual)}]"
            ),
            filename=filename,
        )


class RowValidationError(ProcessingError):
    """Raised by the row schema when one row violates one or more constraints.

    Attributes:
        violations: Every violated constraint, one message each.
    """

    def __init__(self, row: int, violations: Sequence[str]) -> None:
        self.violations = list(violations)
        super().__init__(
            code=ErrorCode.ERR_030,
            message=f"Validation error at row {row}: {'; '.join(self.violations)}",
            row=row,
        )


class PersistenceError(ProcessingError):
    """Raised when the repository fails while saving a batch.

    Attributes:
        saved_before_failure: Records inserted by earlier batches.
    """

    def __init__(
        self,
        message: str,
        filename: str | None = None,
        saved_before_failure: int = 0,
    ) -> None:
        super().__init__(code=ErrorCode.ERR_040, message=message, filename=filename)
        self.saved_before_failure = saved_before_failure


class ConfigError(Exception):
    """Exception raised for fatal configuration errors during startup.

    Raised only by config.py. Caught by cli.py which exits with code 2.

    Attributes:
        code: The ERR_NNN error code string (ERR_001 through ERR_003).
        message: Human-readable description of the config problem.
        path: Path to the config file that caused the error.
    """

    def __init__(
        self,
        code: str,
        message: str,
        path: str | None = None,
    ) -> None:
        """Initialize a ConfigError.

        Args:
            code: The ERR_NNN error code string.
            message: Human-readable description of the config problem.
            path: Path to the config file that caused the error.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.path = path
