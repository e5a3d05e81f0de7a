# src/tecra/runtime/store.py
from __future__ import annotations

import json
import logging
import os
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator

from tecra.runtime.structured_logging import log_event

Json = Dict[str, Any]

log = logging.getLogger("tecra.store")

_SCHEMA = """
CREATE TABLE IF NOT EXISTS ledger_state (
  id INTEGER PRIMARY KEY CHECK (id = 1),
  address TEXT NOT NULL,
  total_supply TEXT NOT NULL,
  deprecated INTEGER NOT NULL,
  state_json TEXT NOT NULL,
  updated_ts_ms INTEGER NOT NULL
);
"""


def _canon_json(obj: Any) -> str:
    """Canonical JSON encoding; unknown types fail instead of being coerced."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


class SqliteDB:
    """SQLite file holding the single ledger snapshot row.

    Writers wait on the file lock for up to TECRA_SQLITE_BUSY_TIMEOUT_MS.
    """

    def __init__(self, *, path: str) -> None:
        self.path = str(path)
        try:
            self.busy_timeout_ms = int(os.environ.get("TECRA_SQLITE_BUSY_TIMEOUT_MS") or 30_000)
        except ValueError:
            self.busy_timeout_ms = 30_000

    def init_schema(self) -> None:
        with self.write_tx() as con:
            con.execute(_SCHEMA)

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        # autocommit mode: transactions are opened explicitly in write_tx
        con = sqlite3.connect(self.path, timeout=self.busy_timeout_ms / 1000.0, isolation_level=None)
        con.row_factory = sqlite3.Row
        try:
            con.execute("PRAGMA journal_mode=WAL;")
            yield con
        finally:
            con.close()

    @contextmanager
    def write_tx(self) -> Iterator[sqlite3.Connection]:
        with self.connection() as con:
            con.execute("BEGIN IMMEDIATE;")
            try:
                yield con
                con.execute("COMMIT;")
            except Exception:
                con.execute("ROLLBACK;")
                raise


class SqliteLedgerStore:
    """Ledger snapshot store persisted in SQLite.

      - read(): load latest ledger snapshot
      - write(st): overwrite the snapshot atomically

    The authoritative snapshot is a single row.
    """

    def __init__(self, *, db: SqliteDB) -> None:
        self._db = db
        self._db.init_schema()

    @classmethod
    def open(cls, path: str) -> "SqliteLedgerStore":
        return cls(db=SqliteDB(path=path))

    def exists(self) -> bool:
        with self._db.connection() as con:
            return con.execute("SELECT 1 FROM ledger_state WHERE id=1;").fetchone() is not None

    def read(self) -> Json:
        with self._db.connection() as con:
            row = con.execute("SELECT state_json FROM ledger_state WHERE id=1;").fetchone()
            if row is None:
                raise FileNotFoundError("sqlite ledger_state is missing")
            st = json.loads(str(row["state_json"]))
            if not isinstance(st, dict):
                raise ValueError("ledger_state is not a JSON object")
            return st

    def write(self, st: Json) -> None:
        if not isinstance(st, dict):
            raise ValueError("ledger write expects dict")
        payload = _canon_json(st)
        now = int(time.time() * 1000)
        with self._db.write_tx() as con:
            con.execute(
                """
                INSERT INTO ledger_state(id, address, total_supply, deprecated, state_json, updated_ts_ms)
                VALUES(1, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                  address=excluded.address,
                  total_supply=excluded.total_supply,
                  deprecated=excluded.deprecated,
                  state_json=excluded.state_json,
                  updated_ts_ms=excluded.updated_ts_ms;
                """,
                (
                    str(st.get("address") or ""),
                    str(int(st.get("total_supply") or 0)),
                    1 if st.get("deprecated") else 0,
                    payload,
                    now,
                ),
            )
        log_event(log, "snapshot_written", level=logging.DEBUG, path=self._db.path, bytes=len(payload))


__all__ = ["SqliteDB", "SqliteLedgerStore"]
