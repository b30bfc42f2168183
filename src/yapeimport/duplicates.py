"""Duplicate transaction detection for the Yape importer.

Two records are the same transaction when their identity keys match
exactly: operation date, amount, origin and destination. Within one file
the first occurrence is kept and every later one is reported against it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, NamedTuple

from yapeimport.models import (
    DuplicateEntry,
    DuplicateScan,
    ParsedRecord,
    RecordSnapshot,
    StoredTransaction,
)
from yapeimport.utils import format_amount_key

if TYPE_CHECKING:
    from yapeimport.repository import TransactionRepository

logger = logging.getLogger(__name__)


class IdentityKey(NamedTuple):
    """Composite key identifying one transaction."""

    operation_date: str
    amount: str
    origin: str
    destination: str

    def __str__(self) -> str:
        return "|".join(self)


def identity_key(record: ParsedRecord | StoredTransaction) -> IdentityKey:
    """Build the identity key of a parsed or stored transaction.

    The date is rendered in ISO-8601 and the amount canonically, so 50 and
    50.00 collide. No tolerance window is applied to either.
    """
    return IdentityKey(
        operation_date=record.operation_date.isoformat(),
        amount=format_amount_key(record.amount),
        origin=record.origin,
        destination=record.destination,
    )


def find_duplicates_in_file(records: Sequence[ParsedRecord]) -> DuplicateScan:
    """Split records into first occurrences and later repeats.

    Records are expected in sheet order; the earliest row of each key is
    the original. The key map lives only for the duration of the call.

    Args:
        records: Valid records of one file, in sheet order.

    Returns:
        DuplicateScan whose unique_records keep first-seen order and whose
        duplicates carry one entry per non-first occurrence.
    """
    seen: dict[IdentityKey, ParsedRecord] = {}
    unique_records: list[ParsedRecord] = []
    duplicates: list[DuplicateEntry] = []

    for record in records:
        key = identity_key(record)
        original = seen.get(key)
        if original is None:
            seen[key] = record
            unique_records.append(record)
            continue

        duplicates.append(
            DuplicateEntry(
                row=record.row_number,
                data=RecordSnapshot.from_record(record),
                reason=f"Duplicate of row {original.row_number}",
                original_row=original.row_number,
                original_data=RecordSnapshot.from_record(original),
            )
        )
        logger.debug(
            "Row %d duplicates row %d (%s)",
            record.row_number, original.row_number, key,
        )

    if duplicates:
        logger.info("Found %d duplicate rows within the file", len(duplicates))
    return DuplicateScan(unique_records=unique_records, duplicates=duplicates)


def filter_stored_duplicates(
    records: Sequence[ParsedRecord], repository: TransactionRepository,
) -> tuple[list[ParsedRecord], list[ParsedRecord]]:
    """Separate records that already exist in storage.

    Optional cross-batch check; the importer only calls it when
    ``check_stored_duplicates`` is enabled.

    Args:
        records: Candidate records, usually the unique records of a file.
        repository: Storage queried through ``find_duplicates``.

    Returns:
        Tuple of (new_records, already_stored), both in input order.
    """
    if not records:
        return [], []
    stored_keys = {identity_key(t) for t in repository.find_duplicates(records)}
    new_records: list[ParsedRecord] = []
    already_stored: list[ParsedRecord] = []
    for record in records:
        if identity_key(record) in stored_keys:
            already_stored.append(record)
        else:
            new_records.append(record)
    if already_stored:
        logger.info("%d records already exist in storage", len(already_stored))
    return new_records, already_stored
