"""Allocation of sequential feature identifiers per typed prefix."""

import logging
import re
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, Union

from genometo.core.exceptions import IdAllocationError


logger = logging.getLogger(__name__)


class IdAllocator(ABC):
    """Hands out blocks of integers, monotonically increasing per prefix."""

    @abstractmethod
    def allocate_id_range(self, typed_prefix: str, count: int, minimum: int = 1) -> int:
        """
        Reserve ``count`` consecutive numbers for ``typed_prefix``.

        Args:
            typed_prefix: e.g. ``"83333.1.CDS"``
            count: Size of the block to reserve
            minimum: Lowest number the block may start at

        Returns:
            The first number of the reserved block
        """


def _check_count(typed_prefix: str, count: int) -> None:
    if count < 1:
        raise IdAllocationError(typed_prefix, f"Cannot allocate {count} ids for \"{typed_prefix}\"")


def highest_existing_number(typed_prefix: str, ids: Iterable[str]) -> int:
    """
    Find the largest ``n`` among ids of the form ``<typed_prefix>.<n>``.

    Returns:
        The largest number found, or 0 when no id uses the prefix
    """
    pattern = re.compile(re.escape(typed_prefix) + r'\.(\d+)$')
    highest = 0
    for feature_id in ids:
        match = pattern.match(feature_id)
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


class GenomeIdAllocator(IdAllocator):
    """
    In-process allocator bound to a single genome.

    Every request starts numbering after the highest id currently used by
    the genome's features, so allocated ids never collide with features
    loaded from a document or added with an explicit id.
    """

    def __init__(self, genome) -> None:
        self.genome = genome
        self._next: Dict[str, int] = {}

    def allocate_id_range(self, typed_prefix: str, count: int, minimum: int = 1) -> int:
        _check_count(typed_prefix, count)
        existing = (feature.id for feature in self.genome.features)
        start = max(
            self._next.get(typed_prefix, 1),
            highest_existing_number(typed_prefix, existing) + 1,
            minimum
        )
        self._next[typed_prefix] = start + count
        logger.debug(f"Allocated {count} id(s) for '{typed_prefix}' starting from {start}")
        return start


class SQLiteIdAllocator(IdAllocator):
    """
    Persistent allocator backed by an SQLite database.

    Each allocation runs in its own ``BEGIN IMMEDIATE`` transaction, which
    takes the database write lock before reading the counter, so separate
    processes sharing the file never receive overlapping ranges.
    A ``minimum`` above the stored counter moves the counter forward.
    """

    def __init__(self, database: Union[str, Path], timeout: float = 30.0) -> None:
        self.database = Path(database)
        self.timeout = timeout
        conn = self._connect()
        try:
            conn.execute(
                "CREATE TABLE IF NOT EXISTS id_counters "
                "(prefix TEXT PRIMARY KEY, next_id INTEGER NOT NULL)"
            )
        finally:
            conn.close()

    def _connect(self) -> sqlite3.Connection:
        # autocommit mode; transactions are opened explicitly
        return sqlite3.connect(str(self.database), timeout=self.timeout, isolation_level=None)

    def allocate_id_range(self, typed_prefix: str, count: int, minimum: int = 1) -> int:
        _check_count(typed_prefix, count)
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            raise IdAllocationError(typed_prefix, f"Cannot open id database {self.database}: {e}")

        try:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT next_id FROM id_counters WHERE prefix = ?", (typed_prefix,)
            ).fetchone()
            start = max(row[0] if row else 1, minimum)
            conn.execute(
                "INSERT OR REPLACE INTO id_counters (prefix, next_id) VALUES (?, ?)",
                (typed_prefix, start + count)
            )
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise IdAllocationError(typed_prefix, f"Id allocation failed for \"{typed_prefix}\": {e}")
        finally:
            conn.close()

        logger.debug(f"Allocated {count} id(s) for '{typed_prefix}' starting from {start}")
        return start
