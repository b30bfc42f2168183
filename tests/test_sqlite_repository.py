"""Tests for yapeimport.sqlite_repository."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest

from yapeimport.models import ParsedRecord, UploadSummary
from yapeimport.sqlite_repository import SqliteTransactionRepository


def _record(row: int, amount: str, origin: str = "Ana Q.", message: str = "Pago") -> ParsedRecord:
    return ParsedRecord(
        row_number=row,
        transaction_type="TE PAGÓ",
        origin=origin,
        destination="Luis R.",
        amount=Decimal(amount),
        message=message,
        operation_date=datetime(2025, 11, 10, 21, 49, 4),
        phone_number="+51922076456",
    )


def _summary(**overrides: object) -> UploadSummary:
    values: dict[str, object] = {
        "file_name": "ReporteTransacciones+51922076456.xlsx",
        "phone_number": "+51922076456",
        "total_records": 12,
        "successful_records": 6,
        "failed_records": 4,
        "duplicate_records": 2,
        "errors": '[{"row": 8, "error": "bad"}]',
    }
    values.update(overrides)
    return UploadSummary.model_validate(values)


@pytest.fixture()
def repo(tmp_path: Path) -> Iterator[SqliteTransactionRepository]:
    with SqliteTransactionRepository(tmp_path / "data" / "transactions.db") as repository:
        yield repository


class TestTransactions:
    """Tests for transaction inserts and lookups."""

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        db_path = tmp_path / "nested" / "dir" / "t.db"
        SqliteTransactionRepository(db_path).close()
        assert db_path.exists()

    def test_create_many_returns_inserted_count(self, repo: SqliteTransactionRepository) -> None:
        assert repo.create_many([_record(6, "1"), _record(7, "2")]) == 2
        assert repo.create_many([]) == 0

    def test_identity_duplicates_are_skipped(self, repo: SqliteTransactionRepository) -> None:
        repo.create_many([_record(6, "50")])
        inserted = repo.create_many([_record(7, "50.00", message="otro"), _record(8, "3")])
        assert inserted == 1

    def test_find_duplicates_round_trips_values(
        self, repo: SqliteTransactionRepository,
    ) -> None:
        repo.create_many([_record(6, "12.50"), _record(7, "3", message="")])

        found = repo.find_duplicates([_record(20, "12.5"), _record(21, "3"), _record(22, "99")])

        assert [t.amount for t in found] == [Decimal("12.5"), Decimal("3")]
        assert found[0].message == "Pago"
        assert found[1].message is None
        assert found[0].operation_date == datetime(2025, 11, 10, 21, 49, 4)
        assert found[0].phone_number == "+51922076456"
        assert found[0].id == 1

    def test_find_duplicates_in_large_chunks(self, repo: SqliteTransactionRepository) -> None:
        records = [_record(idx, str(idx + 1)) for idx in range(250)]
        repo.create_many(records)
        assert len(repo.find_duplicates(records)) == 250

    def test_find_duplicates_empty(self, repo: SqliteTransactionRepository) -> None:
        assert repo.find_duplicates([]) == []

    def test_data_survives_reopen(self, tmp_path: Path) -> None:
        db_path = tmp_path / "t.db"
        with SqliteTransactionRepository(db_path) as first:
            first.create_many([_record(6, "1")])
        with SqliteTransactionRepository(db_path) as second:
            assert second.create_many([_record(6, "1.0")]) == 0

    def test_in_memory_database(self) -> None:
        with SqliteTransactionRepository(":memory:") as memory_repo:
            assert memory_repo.create_many([_record(6, "1")]) == 1


class TestUploadHistory:
    """Tests for upload history records."""

    def test_create_assigns_id_and_date(self, repo: SqliteTransactionRepository) -> None:
        history = repo.create_upload_history(_summary())
        assert history.id == 1
        assert history.upload_date.tzinfo is not None
        assert history.successful_records == 6

    def test_list_returns_oldest_first(self, repo: SqliteTransactionRepository) -> None:
        repo.create_upload_history(_summary(file_name="a.xlsx"))
        repo.create_upload_history(_summary(file_name="b.xlsx", errors=None, phone_number=None))

        listed = repo.list_upload_history()

        assert [h.file_name for h in listed] == ["a.xlsx", "b.xlsx"]
        assert [h.id for h in listed] == [1, 2]
        assert listed[0].errors == '[{"row": 8, "error": "bad"}]'
        assert listed[1].errors is None
        assert listed[1].phone_number is None
        assert listed[0].duplicate_records == 2

    def test_empty_history(self, repo: SqliteTransactionRepository) -> None:
        assert repo.list_upload_history() == []
