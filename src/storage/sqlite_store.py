# src/storage/sqlite_store.py - v1
"""SQLite-based weave store (STORE_BACKEND=sqlite).

Uses stdlib sqlite3. Records are stored as JSON documents next to the
indexed columns the lookups need.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from plexweave.core.models import unordered_pair
from plexweave.storage.base_weave_store import BaseWeaveStore, DuplicateWeaveError
from plexweave.storage.models import DiscoveryRun, Weave, WeaveType

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS runs (
    id TEXT PRIMARY KEY,
    plexus_id TEXT NOT NULL,
    started_at TEXT NOT NULL,
    data TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_runs_plexus ON runs(plexus_id, started_at);

CREATE TABLE IF NOT EXISTS weaves (
    id TEXT PRIMARY KEY,
    plexus_id TEXT NOT NULL,
    pair_low TEXT NOT NULL,
    pair_high TEXT NOT NULL,
    type TEXT NOT NULL,
    score REAL NOT NULL,
    dismissed INTEGER NOT NULL DEFAULT 0,
    data TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_weaves_pair ON weaves(plexus_id, pair_low, pair_high, type);
"""

_UNIQUE_INDEX = """
CREATE UNIQUE INDEX IF NOT EXISTS ux_weaves_live_pair
    ON weaves(plexus_id, pair_low, pair_high, type) WHERE dismissed = 0;
"""


class SqliteWeaveStore(BaseWeaveStore):
    """SQLite-backed weave store.

    With ``enforce_unique`` a partial unique index guarantees at most one
    live weave per unordered pair, type and plexus even across concurrent
    runs; the insert that loses raises DuplicateWeaveError.
    """

    def __init__(self, db_path: Path | str, enforce_unique: bool = False) -> None:
        self._db_path = Path(db_path).expanduser() if str(db_path) != ":memory:" else None
        if self._db_path is not None:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path or ":memory:"))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)
        if enforce_unique:
            self._conn.executescript(_UNIQUE_INDEX)

    # --- Runs ---

    async def create_run(self, run: DiscoveryRun) -> None:
        self._conn.execute(
            "INSERT INTO runs (id, plexus_id, started_at, data) VALUES (?, ?, ?, ?)",
            (run.id, run.plexus_id, run.started_at.isoformat(), run.model_dump_json()),
        )
        self._conn.commit()

    async def save_run(self, run: DiscoveryRun) -> None:
        self._conn.execute(
            "UPDATE runs SET data = ? WHERE id = ?", (run.model_dump_json(), run.id),
        )
        self._conn.commit()

    async def get_run(self, run_id: str) -> DiscoveryRun | None:
        row = self._conn.execute("SELECT data FROM runs WHERE id = ?", (run_id,)).fetchone()
        return DiscoveryRun.model_validate_json(row[0]) if row else None

    async def list_runs(
        self, plexus_id: str | None = None, limit: int = 20,
    ) -> list[DiscoveryRun]:
        if plexus_id is None:
            cursor = self._conn.execute(
                "SELECT data FROM runs ORDER BY started_at DESC LIMIT ?", (limit,),
            )
        else:
            cursor = self._conn.execute(
                "SELECT data FROM runs WHERE plexus_id = ? ORDER BY started_at DESC LIMIT ?",
                (plexus_id, limit),
            )
        return [DiscoveryRun.model_validate_json(row[0]) for row in cursor.fetchall()]

    # --- Weaves ---

    async def find_existing_weave(
        self,
        plexus_id: str,
        source_repo_id: str,
        target_repo_id: str,
        weave_type: WeaveType,
    ) -> Weave | None:
        low, high = unordered_pair(source_repo_id, target_repo_id)
        row = self._conn.execute(
            """SELECT data FROM weaves
               WHERE plexus_id = ? AND pair_low = ? AND pair_high = ? AND type = ?
                 AND dismissed = 0
               LIMIT 1""",
            (plexus_id, low, high, weave_type),
        ).fetchone()
        return Weave.model_validate_json(row[0]) if row else None

    async def create_weave(self, weave: Weave) -> Weave:
        low, high = weave.pair_key
        try:
            self._conn.execute(
                """INSERT INTO weaves
                   (id, plexus_id, pair_low, pair_high, type, score, dismissed, data)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    weave.id,
                    weave.plexus_id,
                    low,
                    high,
                    weave.type,
                    weave.score,
                    int(weave.dismissed),
                    weave.model_dump_json(),
                ),
            )
        except sqlite3.IntegrityError as exc:
            self._conn.rollback()
            raise DuplicateWeaveError(
                f"{weave.type} weave already exists for {low} <-> {high} in {weave.plexus_id}"
            ) from exc
        self._conn.commit()
        return weave

    async def list_weaves(
        self,
        plexus_id: str,
        weave_type: WeaveType | None = None,
        include_dismissed: bool = False,
    ) -> list[Weave]:
        where, params = self._weave_filter(plexus_id, weave_type, include_dismissed)
        cursor = self._conn.execute(
            f"SELECT data FROM weaves WHERE {where} ORDER BY score DESC, id",  # noqa: S608
            params,
        )
        return [Weave.model_validate_json(row[0]) for row in cursor.fetchall()]

    async def dismiss_weave(self, weave_id: str) -> bool:
        row = self._conn.execute("SELECT data FROM weaves WHERE id = ?", (weave_id,)).fetchone()
        if row is None:
            return False
        weave = Weave.model_validate_json(row[0]).model_copy(update={"dismissed": True})
        self._conn.execute(
            "UPDATE weaves SET dismissed = 1, data = ? WHERE id = ?",
            (weave.model_dump_json(), weave_id),
        )
        self._conn.commit()
        return True

    async def count_weaves(
        self,
        plexus_id: str,
        weave_type: WeaveType | None = None,
        include_dismissed: bool = False,
    ) -> int:
        where, params = self._weave_filter(plexus_id, weave_type, include_dismissed)
        row = self._conn.execute(
            f"SELECT COUNT(*) FROM weaves WHERE {where}", params,  # noqa: S608
        ).fetchone()
        return int(row[0])

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    @staticmethod
    def _weave_filter(
        plexus_id: str, weave_type: WeaveType | None, include_dismissed: bool,
    ) -> tuple[str, tuple]:
        clauses = ["plexus_id = ?"]
        params: list[object] = [plexus_id]
        if weave_type is not None:
            clauses.append("type = ?")
            params.append(weave_type)
        if not include_dismissed:
            clauses.append("dismissed = 0")
        return " AND ".join(clauses), tuple(params)
