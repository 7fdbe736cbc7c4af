# src/storage/json_store.py - v1
"""JSON file-based weave store (STORE_BACKEND=json).

One file per record under ``<root>/runs`` and ``<root>/weaves``. Suited to
small plexuses and inspection by hand; lookups scan the weave files.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from plexweave.storage.base_weave_store import BaseWeaveStore
from plexweave.storage.models import DiscoveryRun, Weave, WeaveType

logger = logging.getLogger(__name__)


class JsonWeaveStore(BaseWeaveStore):
    """File-based weave store using JSON files."""

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).expanduser()
        self._runs_dir = self._root / "runs"
        self._weaves_dir = self._root / "weaves"
        self._runs_dir.mkdir(parents=True, exist_ok=True)
        self._weaves_dir.mkdir(parents=True, exist_ok=True)

    # --- Runs ---

    async def create_run(self, run: DiscoveryRun) -> None:
        self._run_path(run.id).write_text(run.model_dump_json(indent=2), encoding="utf-8")

    async def save_run(self, run: DiscoveryRun) -> None:
        self._run_path(run.id).write_text(run.model_dump_json(indent=2), encoding="utf-8")

    async def get_run(self, run_id: str) -> DiscoveryRun | None:
        path = self._run_path(run_id)
        if not path.exists():
            return None
        return DiscoveryRun.model_validate_json(path.read_text(encoding="utf-8"))

    async def list_runs(
        self, plexus_id: str | None = None, limit: int = 20,
    ) -> list[DiscoveryRun]:
        runs = [
            run for run in self._load_all(self._runs_dir, DiscoveryRun)
            if plexus_id is None or run.plexus_id == plexus_id
        ]
        runs.sort(key=lambda r: r.started_at, reverse=True)
        return runs[:limit]

    # --- Weaves ---

    async def find_existing_weave(
        self,
        plexus_id: str,
        source_repo_id: str,
        target_repo_id: str,
        weave_type: WeaveType,
    ) -> Weave | None:
        wanted = {source_repo_id, target_repo_id}
        for weave in await self.list_weaves(plexus_id, weave_type):
            if {weave.source_repo_id, weave.target_repo_id} == wanted:
                return weave
        return None

    async def create_weave(self, weave: Weave) -> Weave:
        self._weave_path(weave.id).write_text(weave.model_dump_json(indent=2), encoding="utf-8")
        return weave

    async def list_weaves(
        self,
        plexus_id: str,
        weave_type: WeaveType | None = None,
        include_dismissed: bool = False,
    ) -> list[Weave]:
        weaves = [
            w for w in self._load_all(self._weaves_dir, Weave)
            if w.plexus_id == plexus_id
            and (weave_type is None or w.type == weave_type)
            and (include_dismissed or not w.dismissed)
        ]
        weaves.sort(key=lambda w: (-w.score, w.id))
        return weaves

    async def dismiss_weave(self, weave_id: str) -> bool:
        path = self._weave_path(weave_id)
        if not path.exists():
            return False
        weave = Weave.model_validate_json(path.read_text(encoding="utf-8"))
        weave.dismissed = True
        path.write_text(weave.model_dump_json(indent=2), encoding="utf-8")
        return True

    async def count_weaves(
        self,
        plexus_id: str,
        weave_type: WeaveType | None = None,
        include_dismissed: bool = False,
    ) -> int:
        return len(await self.list_weaves(plexus_id, weave_type, include_dismissed))

    # --- Helpers ---

    def _run_path(self, run_id: str) -> Path:
        return self._runs_dir / f"{_safe(run_id)}.json"

    def _weave_path(self, weave_id: str) -> Path:
        return self._weaves_dir / f"{_safe(weave_id)}.json"

    @staticmethod
    def _load_all(directory: Path, model: type) -> list:
        records = []
        for path in sorted(directory.glob("*.json")):
            try:
                records.append(model.model_validate_json(path.read_text(encoding="utf-8")))
            except (OSError, ValidationError) as e:
                logger.warning("Skipping unreadable record %s: %s", path.name, e)
        return records


def _safe(key: str) -> str:
    return key.replace("/", "_").replace("\\", "_")
