"""
Snapshot persistence for the player.

A whitelisted subset of the player is written to a key-value store after
notable events. On load the stored fields are shallow-merged over a freshly
constructed player, so fields added by newer builds keep their defaults.
"""

import copy
import json
import logging
import os
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Dict, List, Optional, Protocol

from arena_sim.entities.player import PlayerState

logger = logging.getLogger(__name__)

SAVE_KEY = "player"
PERSISTED_FIELDS = ("max_health", "resources", "upgrades", "high_score", "best_wave")


class KeyValueStore(Protocol):
    """Anything that can get/put a record by key."""

    def get(self, key: str) -> Optional[Dict[str, Any]]: ...

    def put(self, key: str, record: Dict[str, Any]) -> None: ...


class MemoryStore:
    """In-process store; records are copied in and out."""

    def __init__(self):
        self.records: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        record = self.records.get(key)
        return copy.deepcopy(record) if record is not None else None

    def put(self, key: str, record: Dict[str, Any]) -> None:
        self.records[key] = copy.deepcopy(record)


class JsonFileStore:
    """One JSON file per key inside a save directory."""

    def __init__(self, save_dir: str = "saves"):
        self.save_dir = save_dir
        os.makedirs(self.save_dir, exist_ok=True)

    def _path(self, key: str) -> str:
        return os.path.join(self.save_dir, f"{key}.json")

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def put(self, key: str, record: Dict[str, Any]) -> None:
        # Write then rename so a crash mid-write never leaves a torn save
        path = self._path(key)
        tmp_path = path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(record, f, indent=2)
        os.replace(tmp_path, path)


class PersistenceGateway:
    """Best-effort, fire-and-forget saving of the player snapshot."""

    def __init__(self, store: KeyValueStore, key: str = SAVE_KEY):
        self.store = store
        self.key = key
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="save")
        self._pending: List[Future] = []

    def snapshot(self, player: PlayerState) -> Dict[str, Any]:
        """The persisted subset of the player, as plain data."""
        return player.model_dump(include=set(PERSISTED_FIELDS))

    def save(self, player: PlayerState) -> Future:
        """Queue a write of the player snapshot; failures are logged, not raised."""
        record = {"player": self.snapshot(player), "timestamp": time.time()}
        future = self._executor.submit(self.store.put, self.key, record)
        future.add_done_callback(self._on_saved)
        self._pending = [f for f in self._pending if not f.done()]
        self._pending.append(future)
        return future

    def _on_saved(self, future: Future):
        error = future.exception()
        if error is not None:
            logger.error("Failed to save player snapshot: %s", error)

    def load(self, defaults: Optional[PlayerState] = None) -> Optional[PlayerState]:
        """Read the saved snapshot and merge it over a fresh player.

        Returns None when there is no save or it cannot be read.
        """
        try:
            record = self.store.get(self.key)
        except Exception as e:
            logger.error("Failed to read player snapshot: %s", e)
            return None

        if not isinstance(record, dict) or not isinstance(record.get("player"), dict):
            if record is not None:
                logger.warning("Ignoring malformed player snapshot")
            return None

        base = defaults if defaults is not None else PlayerState()
        merged = base.model_dump()
        for field, value in record["player"].items():
            if field in PERSISTED_FIELDS:
                merged[field] = value

        try:
            return PlayerState.model_validate(merged)
        except ValueError as e:
            logger.error("Discarding unreadable player snapshot: %s", e)
            return None

    def flush(self, timeout: Optional[float] = None):
        """Block until every queued write has finished."""
        wait(self._pending, timeout=timeout)
        self._pending = [f for f in self._pending if not f.done()]

    def close(self):
        self._executor.shutdown(wait=True)
