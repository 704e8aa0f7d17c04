"""
Result Store - SQLite-backed persistence for operation results.

CHOICE: SQLite
--------------
- Embedded: one file, no server
- ACID: every create is a single transaction
- WAL: readers see a committed snapshot while a writer is active
- Schema: explicit versioning with the user_version pragma

GUARANTEES:
-----------
- id and created are assigned exactly once, by the store
- No partial records are ever visible to readers
- Concurrent writers serialize on SQLite's write lock (BEGIN IMMEDIATE)
- Listing order is created DESC, ties broken by insertion order
- The count and fetch passes of a paged query share one read transaction

NOT PROVIDED:
-------------
- Updates or deletes
- Retention policies
- Automatic migration between schema versions
"""

import logging
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterator, List, Optional, Union

from .errors import InvalidArgumentError, NotFoundError, SchemaError, StorageError
from .filters import ResultFilter
from .models import OperationResult, PagedResults
from .utils import as_utc, deserialize_timestamp, serialize_timestamp, utc_now

if TYPE_CHECKING:
    from .config import Settings


# Schema version - increment on breaking changes
STORAGE_SCHEMA_VERSION = 1

TABLE_NAME = "OPRESULTS"

DEFAULT_MAX_OUTPUT_LENGTH = 64 * 1024
DEFAULT_BUSY_TIMEOUT = 5.0

MEMORY_DB = ":memory:"

_COLUMNS = "id, application, success, output, created"

# rowid records insertion order; it breaks ties between equal timestamps
_ORDER_BY = "ORDER BY created DESC, rowid DESC"


def _row_to_result(row: sqlite3.Row) -> OperationResult:
    return OperationResult(
        id=row["id"],
        application=row["application"],
        success=bool(row["success"]),
        output=row["output"],
        created=deserialize_timestamp(row["created"]),
    )


class ResultStore:
    """
    Durable, queryable repository of OperationResult records.

    One SQLite connection per store instance. Within a process, a lock
    serializes use of the connection; across processes, SQLite's file
    locking serializes writers with a bounded busy timeout.

    Usage:
        with ResultStore("./cronlog-store.db") as store:
            store.create(OperationResult(application="backup", success=True, output="ok"))
            page = store.get_paged_items(20, 0)
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        *,
        logger: Optional[logging.Logger] = None,
        clock: Optional[Callable[[], datetime]] = None,
        max_output_length: int = DEFAULT_MAX_OUTPUT_LENGTH,
        busy_timeout: float = DEFAULT_BUSY_TIMEOUT,
    ):
        """
        Open the store and bootstrap its schema.

        Args:
            db_path: Path to the SQLite database file, or ":memory:".
                     Parent directories are created if needed.
            logger: Logger for store diagnostics (defaults to module logger)
            clock: Callable returning the current time (defaults to UTC now)
            max_output_length: Output longer than this is truncated on create
            busy_timeout: Seconds to wait for another writer's lock

        Raises:
            StorageError: If the database cannot be opened
            SchemaError: If the database holds an incompatible schema version
        """
        self.db_path = str(db_path)
        self._logger = logger or logging.getLogger(__name__)
        self._clock = clock or utc_now
        self._max_output_length = max_output_length
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = self._open(busy_timeout)
        try:
            self._bootstrap()
        except StorageError:
            self.close()
            raise

    @classmethod
    def from_settings(
        cls, settings: "Settings", logger: Optional[logging.Logger] = None
    ) -> "ResultStore":
        """Create a store configured from a Settings value."""
        return cls(
            settings.db_path,
            logger=logger,
            max_output_length=settings.max_output_length,
            busy_timeout=settings.busy_timeout,
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def _open(self, busy_timeout: float) -> sqlite3.Connection:
        try:
            if self.db_path != MEMORY_DB:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

            conn = sqlite3.connect(
                self.db_path,
                timeout=busy_timeout,
                isolation_level=None,  # Explicit BEGIN/COMMIT only
                check_same_thread=False,
            )
            conn.row_factory = sqlite3.Row

            if self.db_path != MEMORY_DB:
                conn.execute("PRAGMA journal_mode=WAL")
            return conn
        except (sqlite3.Error, OSError) as e:
            self._logger.error(f"Could not open result store at '{self.db_path}': {e}")
            raise StorageError("open", str(e)) from e

    def _bootstrap(self) -> None:
        """
        Create the schema if missing. Idempotent.

        Runs once at construction. A database created by an incompatible
        version fails loudly instead of being migrated.
        """
        with self._transaction("bootstrap", "IMMEDIATE") as conn:
            current_version = conn.execute("PRAGMA user_version").fetchone()[0]

            if current_version == 0:
                conn.execute(f"""
                    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
                        id TEXT PRIMARY KEY,
                        application TEXT NOT NULL CHECK (application <> ''),
                        success INTEGER NOT NULL DEFAULT 0,
                        output TEXT NOT NULL DEFAULT '',
                        created TEXT NOT NULL
                    )
                """)
                conn.execute(f"""
                    CREATE INDEX IF NOT EXISTS idx_opresults_created
                    ON {TABLE_NAME} (created)
                """)
                conn.execute(f"""
                    CREATE INDEX IF NOT EXISTS idx_opresults_application
                    ON {TABLE_NAME} (application)
                """)
                conn.execute(f"PRAGMA user_version = {STORAGE_SCHEMA_VERSION}")
                self._logger.debug(f"Created result store schema v{STORAGE_SCHEMA_VERSION}")
            elif current_version != STORAGE_SCHEMA_VERSION:
                raise SchemaError(
                    f"schema version mismatch: expected {STORAGE_SCHEMA_VERSION}, "
                    f"found {current_version}",
                    found_version=current_version,
                )

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def __enter__(self) -> "ResultStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def schema_version(self) -> int:
        with self._transaction("schema_version") as conn:
            return conn.execute("PRAGMA user_version").fetchone()[0]

    @contextmanager
    def _transaction(self, operation: str, mode: str = "DEFERRED") -> Iterator[sqlite3.Connection]:
        """
        Run a block inside one SQLite transaction.

        DEFERRED transactions give readers a consistent snapshot;
        IMMEDIATE transactions take the write lock up front.

        Raises:
            StorageError: If the store is closed or SQLite fails
        """
        with self._lock:
            conn = self._conn
            if conn is None:
                raise StorageError(operation, "store is closed")

            try:
                conn.execute(f"BEGIN {mode}")
            except sqlite3.Error as e:
                self._logger.error(f"{operation}: could not begin transaction: {e}")
                raise StorageError(operation, str(e)) from e

            try:
                yield conn
            except sqlite3.Error as e:
                self._rollback(conn)
                self._logger.error(f"{operation}: {e}")
                raise StorageError(operation, str(e)) from e
            except BaseException:
                self._rollback(conn)
                raise

            try:
                conn.execute("COMMIT")
            except sqlite3.Error as e:
                self._rollback(conn)
                self._logger.error(f"{operation}: commit failed: {e}")
                raise StorageError(operation, str(e)) from e

    def _rollback(self, conn: sqlite3.Connection) -> None:
        if conn.in_transaction:
            try:
                conn.execute("ROLLBACK")
            except sqlite3.Error as e:
                self._logger.warning(f"Rollback failed: {e}")

    # =========================================================================
    # Write path
    # =========================================================================

    def create(self, item: OperationResult) -> OperationResult:
        """
        Persist a new result.

        Any id or created value on the item is ignored; the store assigns
        a fresh UUID and the current time while holding the write lock.

        Args:
            item: Result with application, success and output populated

        Returns:
            The stored record with id and created populated

        Raises:
            InvalidArgumentError: If application is empty
            StorageError: If the write fails
        """
        operation = "create"
        if not item.application:
            raise InvalidArgumentError(operation, "application", "must not be empty")

        output = item.output or ""
        if len(output) > self._max_output_length:
            self._logger.warning(
                f"Output of '{item.application}' truncated from {len(output)} "
                f"to {self._max_output_length} characters"
            )
            output = output[: self._max_output_length]

        with self._transaction(operation, "IMMEDIATE") as conn:
            record = replace(
                item,
                id=str(uuid.uuid4()),
                created=as_utc(self._clock()),
                output=output,
            )
            conn.execute(
                f"INSERT INTO {TABLE_NAME} ({_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
                (
                    record.id,
                    record.application,
                    1 if record.success else 0,
                    record.output,
                    serialize_timestamp(record.created),
                ),
            )

        self._logger.debug(f"Stored result {record.id} for '{record.application}'")
        return record

    # =========================================================================
    # Read path
    # =========================================================================

    def get_by_id(self, result_id: str) -> OperationResult:
        """
        Get a single result by id.

        Raises:
            InvalidArgumentError: If result_id is empty
            NotFoundError: If no result has this id
            StorageError: If the read fails
        """
        operation = "get_by_id"
        if not result_id:
            raise InvalidArgumentError(operation, "id", "must not be empty")

        with self._transaction(operation) as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM {TABLE_NAME} WHERE id = ?", (result_id,)
            ).fetchone()

        if row is None:
            raise NotFoundError(operation, result_id)
        return _row_to_result(row)

    def get_all(self) -> List[OperationResult]:
        """
        Get every result, newest first.

        Unpaginated; meant for small stores only.
        """
        with self._transaction("get_all") as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM {TABLE_NAME} {_ORDER_BY}"
            ).fetchall()
        return [_row_to_result(row) for row in rows]

    def get_paged_items(
        self,
        page_size: int,
        skip: int,
        from_: Optional[datetime] = None,
        until: Optional[datetime] = None,
        application: Optional[str] = "",
    ) -> PagedResults:
        """
        Get one page of results matching optional filters, newest first.

        The bounds are exact, inclusive timestamps. Widening a calendar
        date to a whole day is the caller's job.

        Args:
            page_size: Maximum number of items to return (0 is allowed)
            skip: Number of matching results to skip
            from_: Inclusive lower bound on created
            until: Inclusive upper bound on created
            application: Exact application name ("" = any)

        Returns:
            PagedResults whose total_count counts every matching result,
            regardless of page_size and skip

        Raises:
            InvalidArgumentError: If page_size or skip is negative
            StorageError: If the read fails
        """
        operation = "get_paged_items"
        if page_size < 0:
            raise InvalidArgumentError(operation, "page_size", f"must be >= 0, got {page_size}")
        if skip < 0:
            raise InvalidArgumentError(operation, "skip", f"must be >= 0, got {skip}")

        where, params = ResultFilter.build(from_, until, application).where_clause()

        with self._transaction(operation) as conn:
            total_count = conn.execute(
                f"SELECT COUNT(*) FROM {TABLE_NAME} {where}", params
            ).fetchone()[0]

            rows: List[sqlite3.Row] = []
            if page_size > 0 and skip < total_count:
                rows = conn.execute(
                    f"SELECT {_COLUMNS} FROM {TABLE_NAME} {where} {_ORDER_BY} LIMIT ? OFFSET ?",
                    params + (page_size, skip),
                ).fetchall()

        return PagedResults(
            total_count=total_count,
            items=[_row_to_result(row) for row in rows],
        )

    def get_avail_apps(self) -> List[str]:
        """Distinct application names across all results, sorted ascending."""
        with self._transaction("get_avail_apps") as conn:
            rows = conn.execute(
                f"SELECT DISTINCT application FROM {TABLE_NAME} ORDER BY application ASC"
            ).fetchall()
        return [row["application"] for row in rows]
