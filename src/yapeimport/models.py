"""Pydantic data models for the Yape importer.

Defines the entities passed between pipeline stages and returned to the
caller: RawRow, SheetData, ColumnMapping, ParsedRecord, RecordSnapshot,
SkippedRow, RowError, DuplicateEntry, ParseOutcome, DuplicateScan,
UploadResult, UploadSummary, UploadHistory, StoredTransaction,
ConfirmResult, AppConfig.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from yapeimport.utils import OPERATION_DATE_FORMAT

# Reason: the HTTP layer expects plain JSON numbers, not Decimal strings.
JsonAmount = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json")
]


class _CamelModel(BaseModel):
    """Base for models serialized to the camelCase JSON consumed by clients."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    def to_json_dict(self) -> dict[str, Any]:
        """Dump the model as a JSON-compatible dict using camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class RawRow(BaseModel):
    """One data row read from the worksheet, before any validation.

    Attributes:
        row_number: 1-based sheet row number (the number shown by Excel).
        cells: Cell values padded to the sheet width; None for blank cells.
    """

    model_config = ConfigDict(frozen=True)

    row_number: int
    cells: list[Any]


class SheetData(BaseModel):
    """Header and data rows extracted from the first worksheet.

    Attributes:
        sheet_name: Title of the worksheet that was read.
        header_cells: Raw cells of the fixed header row.
        rows: Non-empty candidate data rows, in sheet order.
        skipped: Fully blank rows found after the header row.
    """

    model_config = ConfigDict(frozen=True)

    sheet_name: str
    header_cells: list[Any]
    rows: list[RawRow]
    skipped: list[SkippedRow]


class ColumnMapping(BaseModel):
    """Maps each expected header label to its 0-based column position.

    Built once per file by the header validator and reused for every row.

    Attributes:
        field_map: Header label to 0-based column index.
        actual_headers: Non-blank header cells in sheet order.
    """

    model_config = ConfigDict(frozen=True)

    field_map: dict[str, int]
    actual_headers: list[str]


class ParsedRecord(BaseModel):
    """One validated transaction row.

    Attributes:
        row_number: 1-based sheet row the record came from.
        transaction_type: Operation label, e.g. "TE PAGÓ" or "PAGASTE".
        origin: Sender name.
        destination: Recipient name.
        amount: Strictly positive amount in soles.
        message: Free-text message, empty when the cell was blank.
        operation_date: Local date and time of the operation.
        phone_number: Account phone number taken from the file name.
    """

    model_config = ConfigDict(frozen=True)

    row_number: int
    transaction_type: str
    origin: str
    destination: str
    amount: Decimal
    message: str = ""
    operation_date: datetime
    phone_number: str | None = None


class RecordSnapshot(BaseModel):
    """Display copy of a record keyed by the report's own column labels."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    transaction_type: str = Field(alias="Tipo de Transacción")
    origin: str = Field(alias="Origen")
    destination: str = Field(alias="Destino")
    amount: JsonAmount = Field(alias="Monto")
    message: str = Field(alias="Mensaje")
    operation_date: str = Field(alias="Fecha de operación")

    @classmethod
    def from_record(cls, record: ParsedRecord) -> RecordSnapshot:
        """Build a snapshot from a parsed record."""
        return cls(
            transaction_type=record.transaction_type,
            origin=record.origin,
            destination=record.destination,
            amount=record.amount,
            message=record.message,
            operation_date=record.operation_date.strftime(OPERATION_DATE_FORMAT),
        )


class SkippedRow(_CamelModel):
    """A row skipped without being treated as an error."""

    row: int
    reason: str


class RowError(_CamelModel):
    """A row rejected by validation, with the collected violations."""

    row: int
    error: str


class DuplicateEntry(_CamelModel):
    """A valid row whose identity key matches an earlier row of the same file.

    Attributes:
        row: Sheet row of the duplicate.
        data: Snapshot of the duplicate record.
        reason: Human-readable reason, e.g. "Duplicate of row 6".
        original_row: Sheet row of the first occurrence (kept as unique).
        original_data: Snapshot of the first occurrence.
    """

    row: int
    data: RecordSnapshot
    reason: str
    original_row: int
    original_data: RecordSnapshot


class ParseOutcome(BaseModel):
    """Result of running every non-empty row through the row schema.

    Attributes:
        records: Valid records in sheet order.
        errors: One entry per invalid row.
        skipped: Fully blank rows, reported separately from errors.
        phone_number: Phone number derived from the file name.
    """

    model_config = ConfigDict(frozen=True)

    records: list[ParsedRecord]
    errors: list[RowError]
    skipped: list[SkippedRow]
    phone_number: str | None

    @property
    def total_records(self) -> int:
        """Number of non-empty data rows (valid plus invalid)."""
        return len(self.records) + len(self.errors)


class DuplicateScan(BaseModel):
    """Partition of parsed records into first occurrences and repeats."""

    model_config = ConfigDict(frozen=True)

    unique_records: list[ParsedRecord]
    duplicates: list[DuplicateEntry]


class UploadResult(_CamelModel):
    """Preview returned by the validate phase.

    A pure function of the uploaded bytes and file name. ``valid_records``
    counts the unique valid rows, i.e. the rows confirm would persist.
    """

    total_records: int
    valid_records: int
    invalid_records: int
    duplicate_records: int
    skipped_empty_rows: int
    skipped_row_details: list[SkippedRow]
    duplicates: list[DuplicateEntry]
    errors: list[RowError]


class UploadSummary(_CamelModel):
    """Totals handed to the repository to create an upload history record."""

    file_name: str
    phone_number: str | None
    total_records: int
    successful_records: int
    failed_records: int
    duplicate_records: int
    errors: str | None


class UploadHistory(UploadSummary):
    """Audit record of one confirmed import. Immutable once created."""

    id: int
    upload_date: datetime


class StoredTransaction(_CamelModel):
    """A transaction already persisted by the repository."""

    id: int
    transaction_type: str
    origin: str
    destination: str
    amount: JsonAmount
    message: str | None
    operation_date: datetime
    phone_number: str | None
    created_at: datetime


class ConfirmResult(_CamelModel):
    """Outcome of the confirm phase."""

    saved_count: int
    upload_history_id: int


class AppConfig(BaseModel):
    """Runtime settings loaded from YAML.

    The report layout (header row, labels, date format) is fixed and
    deliberately absent from here.

    Attributes:
        batch_size: Records per insert statement.
        check_stored_duplicates: Also drop records already in storage
            before confirm persists them.
        database_path: SQLite file used by the command-line interface.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    batch_size: int = Field(default=100, ge=1)
    check_stored_duplicates: bool = False
    database_path: Path = Path("data/transactions.db")


SheetData.model_rebuild()
