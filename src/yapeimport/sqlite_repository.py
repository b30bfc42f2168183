"""SQLite-backed transaction repository.

Mirrors the web application's two tables, ``transactions`` and
``upload_history``. A unique index on the identity key columns gives
inserts their skip-duplicate-on-conflict behaviour.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Sequence
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path
from types import TracebackType

from yapeimport.models import (
    ParsedRecord,
    StoredTransaction,
    UploadHistory,
    UploadSummary,
)
from yapeimport.utils import format_amount_key

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    transaction_type TEXT NOT NULL,
    origin TEXT NOT NULL,
    destination TEXT NOT NULL,
    amount TEXT NOT NULL,
    message TEXT,
    operation_date TEXT NOT NULL,
    phone_number TEXT,
    status TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_transactions_identity
    ON transactions(operation_date, amount, origin, destination);

CREATE TABLE IF NOT EXISTS upload_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    file_name TEXT NOT NULL,
    phone_number TEXT,
    total_records INTEGER NOT NULL,
    successful_records INTEGER NOT NULL,
    failed_records INTEGER NOT NULL,
    duplicate_records INTEGER NOT NULL DEFAULT 0,
    errors TEXT,
    upload_date TEXT NOT NULL
);
"""

# SQLite caps bound parameters per statement; 4 per record keeps lookups small.
_LOOKUP_CHUNK = 100


class SqliteTransactionRepository:
    """TransactionRepository backed by a single SQLite database file.

    Each ``create_many`` call commits on its own, so batches saved before
    a failing batch stay saved.
    """

    def __init__(self, db_path: Path | str) -> None:
        if str(db_path) != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(db_path))
        self._conn.row_factory = sqlite3.Row
        self._conn.executescript(SCHEMA)
        logger.debug("Opened transaction store at %s", db_path)

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> SqliteTransactionRepository:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def create_many(self, records: Sequence[ParsedRecord]) -> int:
        if not records:
            return 0
        now = datetime.now(UTC).isoformat()
        rows = [
            (
                r.transaction_type,
                r.origin,
                r.destination,
                format_amount_key(r.amount),
                r.message or None,
                r.operation_date.isoformat(),
                r.phone_number,
                now,
                now,
            )
            for r in records
        ]
        with self._conn:
            before = self._conn.total_changes
            self._conn.executemany(
                "INSERT OR IGNORE INTO transactions (transaction_type, origin, "
                "destination, amount, message, operation_date, phone_number, "
                "created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                rows,
            )
            inserted = self._conn.total_changes - before
        logger.debug("Inserted %d of %d records", inserted, len(records))
        return inserted

    def find_duplicates(self, records: Sequence[ParsedRecord]) -> list[StoredTransaction]:
        found: list[StoredTransaction] = []
        for start in range(0, len(records), _LOOKUP_CHUNK):
            chunk = records[start:start + _LOOKUP_CHUNK]
            clause = " OR ".join(
                "(operation_date = ? AND amount = ? AND origin = ? AND destination = ?)"
                for _ in chunk
            )
            params: list[str] = []
            for r in chunk:
                params.extend(
                    (r.operation_date.isoformat(), format_amount_key(r.amount),
                     r.origin, r.destination)
                )
            cursor = self._conn.execute(
                f"SELECT * FROM transactions WHERE {clause} ORDER BY id", params,
            )
            found.extend(_row_to_transaction(row) for row in cursor.fetchall())
        return found

    def create_upload_history(self, summary: UploadSummary) -> UploadHistory:
        upload_date = datetime.now(UTC)
        with self._conn:
            cursor = self._conn.execute(
                "INSERT INTO upload_history (file_name, phone_number, total_records, "
                "successful_records, failed_records, duplicate_records, errors, "
                "upload_date) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    summary.file_name,
                    summary.phone_number,
                    summary.total_records,
                    summary.successful_records,
                    summary.failed_records,
                    summary.duplicate_records,
                    summary.errors,
                    upload_date.isoformat(),
                ),
            )
        history_id = cursor.lastrowid
        assert history_id is not None
        return UploadHistory(id=history_id, upload_date=upload_date, **summary.model_dump())

    def list_upload_history(self) -> list[UploadHistory]:
        cursor = self._conn.execute("SELECT * FROM upload_history ORDER BY upload_date, id")
        return [
            UploadHistory(
                id=row["id"],
                file_name=row["file_name"],
                phone_number=row["phone_number"],
                total_records=row["total_records"],
                successful_records=row["successful_records"],
                failed_records=row["failed_records"],
                duplicate_records=row["duplicate_records"],
                errors=row["errors"],
                upload_date=datetime.fromisoformat(row["upload_date"]),
            )
            for row in cursor.fetchall()
        ]


def _row_to_transaction(row: sqlite3.Row) -> StoredTransaction:
    """Convert a ``transactions`` row into a StoredTransaction."""
    return StoredTransaction(
        id=row["id"],
        transaction_type=row["transaction_type"],
        origin=row["origin"],
        destination=row["destination"],
        amount=Decimal(row["amount"]),
        message=row["message"],
        operation_date=datetime.fromisoformat(row["operation_date"]),
        phone_number=row["phone_number"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )
