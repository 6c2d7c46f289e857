"""Append-only, hash-chained event journal backed by SQLite.

The chain writes every committed event here; indexers and the CLI read it
back.  Reverted transactions never reach the journal.

Design:
- Append-only: only `append()` writes; no update, no delete.
- Hash-chained per contract: each entry includes SHA-256 of the previous
  entry emitted by the same contract.
- WAL journal mode for concurrent readers.
- entry_hash UNIQUE constraint for tamper detection.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from mintmarket.core.hasher import canonical_json_bytes, compute_entry_hash, sha256_hex
from mintmarket.models.journal import JournalEntry


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_JOURNAL = """
CREATE TABLE IF NOT EXISTS event_journal (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    entry_id            TEXT NOT NULL UNIQUE,
    contract_address    TEXT NOT NULL,
    event_name          TEXT NOT NULL,
    block_number        INTEGER NOT NULL,
    tx_hash             TEXT NOT NULL,
    log_index           INTEGER NOT NULL DEFAULT 0,
    args_json           TEXT NOT NULL DEFAULT '{}',
    timestamp_utc       TEXT NOT NULL,
    previous_entry_hash TEXT NOT NULL DEFAULT '',
    entry_hash          TEXT NOT NULL UNIQUE
);
"""

_CREATE_IDX_CONTRACT = """
CREATE INDEX IF NOT EXISTS idx_contract ON event_journal(contract_address, id);
"""

_CREATE_IDX_CONTRACT_EVENT = """
CREATE INDEX IF NOT EXISTS idx_contract_event
    ON event_journal(contract_address, event_name, id);
"""


class JournalIntegrityError(RuntimeError):
    """Raised when the hash chain is broken."""


class EventJournal:
    """Append-only, hash-chained journal of committed contract events.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(_CREATE_JOURNAL)
            conn.execute(_CREATE_IDX_CONTRACT)
            conn.execute(_CREATE_IDX_CONTRACT_EVENT)
            conn.commit()

    # ------------------------------------------------------------------
    # Core: append-only write
    # ------------------------------------------------------------------

    def append(self, entry: JournalEntry) -> JournalEntry:
        """Append an entry, computing its hash chain link.

        Returns the entry with `previous_entry_hash` and `entry_hash` set.
        """
        return self.append_all([entry])[0]

    def append_all(self, entries: list[JournalEntry]) -> list[JournalEntry]:
        """Append several entries in one SQLite transaction.

        Either every entry is written or none is; a failure rolls the
        database back and propagates.
        """
        sealed_entries: list[JournalEntry] = []
        conn = self._connect()
        try:
            with conn:
                heads: dict[str, str] = {}
                for entry in entries:
                    address = entry.contract_address
                    if address not in heads:
                        heads[address] = self._get_latest_hash(conn, address)
                    sealed = self._seal(entry, heads[address])
                    self._insert(conn, sealed)
                    heads[address] = sealed.entry_hash
                    sealed_entries.append(sealed)
        finally:
            conn.close()
        return sealed_entries

    @staticmethod
    def _seal(entry: JournalEntry, previous_hash: str) -> JournalEntry:
        entry_dict = entry.model_dump(mode="json")
        entry_dict["previous_entry_hash"] = previous_hash
        entry_dict["entry_hash"] = ""
        return entry.model_copy(
            update={
                "previous_entry_hash": previous_hash,
                "entry_hash": compute_entry_hash(entry_dict),
            }
        )

    @staticmethod
    def _insert(conn: sqlite3.Connection, entry: JournalEntry) -> None:
        conn.execute(
            """
            INSERT INTO event_journal
                (entry_id, contract_address, event_name, block_number, tx_hash,
                 log_index, args_json, timestamp_utc, previous_entry_hash,
                 entry_hash)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.entry_id,
                entry.contract_address,
                entry.event_name,
                entry.block_number,
                entry.tx_hash,
                entry.log_index,
                json.dumps(entry.args, sort_keys=True),
                entry.timestamp_utc.isoformat(),
                entry.previous_entry_hash,
                entry.entry_hash,
            ),
        )

    @staticmethod
    def _get_latest_hash(conn: sqlite3.Connection, contract_address: str) -> str:
        row = conn.execute(
            "SELECT entry_hash FROM event_journal WHERE contract_address = ? "
            "ORDER BY id DESC LIMIT 1",
            (contract_address,),
        ).fetchone()
        return row[0] if row else ""

    # ------------------------------------------------------------------
    # Query methods (read-only)
    # ------------------------------------------------------------------

    def get_entries(
        self, contract_address: str, event_name: str | None = None
    ) -> list[JournalEntry]:
        """Return a contract's entries in commit order, optionally by event name."""
        query = "SELECT * FROM event_journal WHERE contract_address = ?"
        params: tuple[Any, ...] = (contract_address.lower(),)
        if event_name is not None:
            query += " AND event_name = ?"
            params += (event_name,)
        query += " ORDER BY id ASC"
        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def get_contract_addresses(self) -> list[str]:
        """Return every contract address with at least one entry."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT contract_address FROM event_journal "
                "GROUP BY contract_address ORDER BY MIN(id) ASC"
            ).fetchall()
        return [row[0] for row in rows]

    # ------------------------------------------------------------------
    # Chain verification
    # ------------------------------------------------------------------

    def verify_chain(self, contract_address: str) -> bool:
        """Verify the hash chain for one contract.

        Returns True if the chain is valid, raises JournalIntegrityError otherwise.
        """
        prev_hash = ""
        for entry in self.get_entries(contract_address):
            if entry.previous_entry_hash != prev_hash:
                raise JournalIntegrityError(
                    f"Chain broken at entry {entry.entry_id}: "
                    f"expected previous_hash={prev_hash!r}, "
                    f"got {entry.previous_entry_hash!r}"
                )

            expected_hash = compute_entry_hash(entry.model_dump(mode="json"))
            if entry.entry_hash != expected_hash:
                raise JournalIntegrityError(
                    f"Tampered entry {entry.entry_id}: "
                    f"expected hash={expected_hash!r}, "
                    f"got {entry.entry_hash!r}"
                )

            prev_hash = entry.entry_hash

        return True

    # ------------------------------------------------------------------
    # External anchoring
    # ------------------------------------------------------------------

    def export_anchor(self, contract_address: str) -> dict[str, Any]:
        """Export a digest of the current chain for storage outside the journal.

        Comparing a previously exported anchor against the live chain
        detects retroactive rewrites and truncation.
        """
        entries = self.get_entries(contract_address)
        payload: dict[str, Any] = {
            "contract_address": contract_address.lower(),
            "entry_count": len(entries),
            "root_hash": entries[-1].entry_hash if entries else "",
            "first_entry_hash": entries[0].entry_hash if entries else "",
            "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        }
        payload["anchor_hash"] = (
            sha256_hex(canonical_json_bytes(payload)) if entries else ""
        )
        return payload

    def verify_against_anchor(
        self, contract_address: str, anchor: dict[str, Any]
    ) -> bool:
        """Verify the live chain against an anchor from ``export_anchor()``.

        Returns ``True`` on match; raises ``JournalIntegrityError`` otherwise.
        """
        entries = self.get_entries(contract_address)

        expected_count = anchor.get("entry_count", 0)
        if len(entries) < expected_count:
            raise JournalIntegrityError(
                f"Chain for {contract_address} has {len(entries)} entries but "
                f"anchor expects at least {expected_count}."
            )
        if expected_count == 0:
            return True

        anchor_first = anchor.get("first_entry_hash", "")
        if entries[0].entry_hash != anchor_first:
            raise JournalIntegrityError(
                f"First entry hash mismatch: chain has {entries[0].entry_hash!r}, "
                f"anchor has {anchor_first!r}."
            )

        anchor_root = anchor.get("root_hash", "")
        if entries[expected_count - 1].entry_hash != anchor_root:
            raise JournalIntegrityError(
                f"Root hash mismatch at entry {expected_count}: chain has "
                f"{entries[expected_count - 1].entry_hash!r}, anchor has "
                f"{anchor_root!r}."
            )

        self.verify_chain(contract_address)
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_entry(row: tuple) -> JournalEntry:
        (
            _id,
            entry_id,
            contract_address,
            event_name,
            block_number,
            tx_hash,
            log_index,
            args_json,
            timestamp_utc,
            previous_entry_hash,
            entry_hash,
        ) = row
        return JournalEntry(
            entry_id=entry_id,
            contract_address=contract_address,
            event_name=event_name,
            block_number=block_number,
            tx_hash=tx_hash,
            log_index=log_index,
            args=json.loads(args_json),
            timestamp_utc=timestamp_utc,
            previous_entry_hash=previous_entry_hash,
            entry_hash=entry_hash,
        )
