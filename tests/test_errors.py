"""Tests for yapeimport.errors."""

from __future__ import annotations

import pytest

from yapeimport.errors import (
    ConfigError,
    ErrorCode,
    FileCorruptError,
    InvalidHeadersError,
    NoValidDataError,
    PersistenceError,
    ProcessingError,
    RowValidationError,
    WorksheetNotFoundError,
)


def test_error_code_values_equal_names() -> None:
    for code in ErrorCode:
        assert code.value == code.name
    assert ErrorCode.ERR_020 == "ERR_020"


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (WorksheetNotFoundError("a.xlsx"), ErrorCode.ERR_010),
        (FileCorruptError("bad zip", "a.xlsx"), ErrorCode.ERR_011),
        (NoValidDataError("a.xlsx"), ErrorCode.ERR_012),
        (InvalidHeadersError(["A"], [], "a.xlsx"), ErrorCode.ERR_020),
        (RowValidationError(7, ["Monto: bad"]), ErrorCode.ERR_030),
        (PersistenceError("boom", "a.xlsx"), ErrorCode.ERR_040),
    ],
)
def test_structural_errors_are_processing_errors(
    error: ProcessingError, code: ErrorCode,
) -> None:
    assert isinstance(error, ProcessingError)
    assert error.code == code
    assert str(error) == error.message


def test_client_facing_messages() -> None:
    assert WorksheetNotFoundError().message == "No worksheet found in Excel file"
    assert NoValidDataError().message == "No valid data found in Excel file"
    assert FileCorruptError("bad zip").message.endswith(": bad zip")


def test_invalid_headers_lists_expected_and_found() -> None:
    err = InvalidHeadersError(["Origen", "Monto"], ["Origen", "Total"])
    assert err.message == "Invalid Excel headers. Expected: [Origen, Monto], Found: [Origen, Total]"
    assert err.missing == ["Monto"]


def test_row_validation_joins_violations() -> None:
    err = RowValidationError(9, ["Origen: Origin is required", "Monto: Amount is required"])
    assert err.row == 9
    assert err.message == (
        "Validation error at row 9: Origen: Origin is required; Monto: Amount is required"
    )


def test_persistence_error_keeps_progress() -> None:
    assert PersistenceError("boom", saved_before_failure=200).saved_before_failure == 200


def test_config_error_is_separate() -> None:
    err = ConfigError(ErrorCode.ERR_001, "Config file not found: x", path="x")
    assert not isinstance(err, ProcessingError)
    assert err.path == "x"
    assert str(err) == "Config file not found: x"


def test_error_code_renders_as_bare_code() -> None:
    """Codes interpolate into log lines as "ERR_NNN", not the enum repr."""
    assert str(ErrorCode.ERR_020) == "ERR_020"
    assert "[%s]" % InvalidHeadersError(["A"], []).code == "[ERR_020]"
