"""Transaction storage interface and in-memory implementation.

The importer only talks to storage through TransactionRepository. Inserts
skip records whose identity key is already stored, so re-submitting a
partially saved file never double-counts rows.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Protocol

from yapeimport.duplicates import IdentityKey, identity_key
from yapeimport.models import (
    ParsedRecord,
    StoredTransaction,
    UploadHistory,
    UploadSummary,
)

logger = logging.getLogger(__name__)


class TransactionRepository(Protocol):
    """Storage capability required by the importer."""

    def create_many(self, records: Sequence[ParsedRecord]) -> int:
        """Insert records, skipping ones already stored; return inserted count."""
        ...

    def find_duplicates(self, records: Sequence[ParsedRecord]) -> list[StoredTransaction]:
        """Return stored transactions sharing an identity key with ``records``."""
        ...

    def create_upload_history(self, summary: UploadSummary) -> UploadHistory:
        """Persist one audit record for a confirmed import."""
        ...

    def list_upload_history(self) -> list[UploadHistory]:
        """Return all audit records, oldest first."""
        ...


class InMemoryTransactionRepository:
    """Process-local repository used by tests and dry runs."""

    def __init__(self) -> None:
        self._transactions: dict[IdentityKey, StoredTransaction] = {}
        self._history: list[UploadHistory] = []

    @property
    def transactions(self) -> list[StoredTransaction]:
        """Stored transactions in insertion order."""
        return list(self._transactions.values())

    def create_many(self, records: Sequence[ParsedRecord]) -> int:
        inserted = 0
        for record in records:
            key = identity_key(record)
            if key in self._transactions:
                continue
            self._transactions[key] = StoredTransaction(
                id=len(self._transactions) + 1,
                transaction_type=record.transaction_type,
                origin=record.origin,
                destination=record.destination,
                amount=record.amount,
                message=record.message or None,
                operation_date=record.operation_date,
                phone_number=record.phone_number,
                created_at=datetime.now(UTC),
            )
            inserted += 1
        logger.debug("Inserted %d of %d records", inserted, len(records))
        return inserted

    def find_duplicates(self, records: Sequence[ParsedRecord]) -> list[StoredTransaction]:
        found: list[StoredTransaction] = []
        for key in dict.fromkeys(identity_key(r) for r in records):
            stored = self._transactions.get(key)
            if stored is not None:
                found.append(stored)
        return found

    def create_upload_history(self, summary: UploadSummary) -> UploadHistory:
        history = UploadHistory(
            id=len(self._history) + 1,
            upload_date=datetime.now(UTC),
            **summary.model_dump(),
        )
        self._history.append(history)
        return history

    def list_upload_history(self) -> list[UploadHistory]:
        return list(self._history)
