"""Tests for yapeimport.duplicates."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from yapeimport.duplicates import (
    IdentityKey,
    filter_stored_duplicates,
    find_duplicates_in_file,
    identity_key,
)
from yapeimport.models import ParsedRecord
from yapeimport.repository import InMemoryTransactionRepository


def _record(
    row: int,
    amount: str = "25.50",
    origin: str = "Ana Q.",
    destination: str = "Luis R.",
    when: datetime = datetime(2025, 11, 10, 21, 49, 4),
    message: str = "Pago",
) -> ParsedRecord:
    return ParsedRecord(
        row_number=row,
        transaction_type="TE PAGÓ",
        origin=origin,
        destination=destination,
        amount=Decimal(amount),
        message=message,
        operation_date=when,
        phone_number="+51922076456",
    )


# ---------------------------------------------------------------------------
# identity_key
# ---------------------------------------------------------------------------


class TestIdentityKey:
    """Tests for identity_key."""

    def test_fields(self) -> None:
        key = identity_key(_record(6))
        assert key == IdentityKey("2025-11-10T21:49:04", "25.5", "Ana Q.", "Luis R.")
        assert str(key) == "2025-11-10T21:49:04|25.5|Ana Q.|Luis R."

    def test_amount_scale_is_ignored(self) -> None:
        assert identity_key(_record(6, "50")) == identity_key(_record(7, "50.00"))

    def test_message_and_type_are_not_part_of_key(self) -> None:
        assert identity_key(_record(6, message="a")) == identity_key(_record(7, message="b"))

    def test_one_second_apart_is_distinct(self) -> None:
        later = datetime(2025, 11, 10, 21, 49, 5)
        assert identity_key(_record(6)) != identity_key(_record(7, when=later))

    def test_origin_and_destination_are_directional(self) -> None:
        swapped = _record(7, origin="Luis R.", destination="Ana Q.")
        assert identity_key(_record(6)) != identity_key(swapped)


# ---------------------------------------------------------------------------
# find_duplicates_in_file
# ---------------------------------------------------------------------------


class TestFindDuplicatesInFile:
    """Tests for find_duplicates_in_file."""

    def test_no_duplicates(self) -> None:
        records = [_record(6), _record(7, "10")]
        scan = find_duplicates_in_file(records)
        assert scan.unique_records == records
        assert scan.duplicates == []

    def test_first_occurrence_wins(self) -> None:
        """Rows 6, 9 and 12 share a key: 6 is kept, 9 and 12 point at it."""
        records = [_record(6), _record(7, "10"), _record(9), _record(12)]
        scan = find_duplicates_in_file(records)

        assert [r.row_number for r in scan.unique_records] == [6, 7]
        assert [d.row for d in scan.duplicates] == [9, 12]
        assert all(d.original_row == 6 for d in scan.duplicates)
        assert scan.duplicates[0].reason == "Duplicate of row 6"

    def test_comma_decimal_and_plain_amount_collide(self) -> None:
        scan = find_duplicates_in_file([_record(6, "50"), _record(11, "50.00")])
        assert len(scan.unique_records) == 1
        assert scan.duplicates[0].row == 11

    def test_entries_carry_both_snapshots(self) -> None:
        scan = find_duplicates_in_file([_record(6), _record(8, message="Otro")])
        entry = scan.duplicates[0]
        assert entry.data.message == "Otro"
        assert entry.original_data.message == "Pago"
        assert entry.original_data.operation_date == "10/11/2025 21:49:04"

    def test_snapshot_json_uses_report_labels(self) -> None:
        scan = find_duplicates_in_file([_record(6), _record(8)])
        payload = scan.duplicates[0].to_json_dict()
        assert payload["originalRow"] == 6
        assert payload["data"] == {
            "Tipo de Transacción": "TE PAGÓ",
            "Origen": "Ana Q.",
            "Destino": "Luis R.",
            "Monto": 25.5,
            "Mensaje": "Pago",
            "Fecha de operación": "10/11/2025 21:49:04",
        }

    def test_empty_input(self) -> None:
        scan = find_duplicates_in_file([])
        assert scan.unique_records == []
        assert scan.duplicates == []


# ---------------------------------------------------------------------------
# filter_stored_duplicates
# ---------------------------------------------------------------------------


class TestFilterStoredDuplicates:
    """Tests for filter_stored_duplicates."""

    def test_splits_new_and_stored(self) -> None:
        repo = InMemoryTransactionRepository()
        repo.create_many([_record(6), _record(7, "10")])

        candidates = [_record(6, "10.00"), _record(7, "3"), _record(8, "25.5")]
        new, stored = filter_stored_duplicates(candidates, repo)

        assert [r.row_number for r in new] == [7]
        assert [r.row_number for r in stored] == [6, 8]

    def test_empty_candidates_skip_lookup(self) -> None:
        class _Unreachable:
            def find_duplicates(self, records: object) -> list[object]:
                raise AssertionError("repository must not be queried")

        assert filter_stored_duplicates([], _Unreachable()) == ([], [])  # type: ignore[arg-type]
