from __future__ import annotations

import asyncio
import json
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, List, Optional, Set, Union

from gradetrackr.config.settings import settings
from gradetrackr.core.models import Course, Semester, StoredState, new_id
from gradetrackr.services.appwrite_bridge import AppwriteBridgeError, AppwriteDataBridge
from gradetrackr.services.bridge import BridgeError, DataBridge, FileDataBridge
from gradetrackr.services.storage import KeyValueStore, SqliteKeyValueStore

logger = logging.getLogger(__name__)

LOCAL_STORAGE_LABEL = "local storage"
LEGACY_SEMESTER_NAME = "Sem 1"

PendingWrite = Union["asyncio.Future[bool]", "Future[bool]"]


class SemesterStore:
    """Semesters plus the active-semester id, kept in three tiers.

    The in-memory cache wins once populated. The local key-value store is
    read synchronously before the bridge has answered and is written on
    every save as a backup. The bridge (when configured) is the eventual
    source of truth; writes to it are detached and never raise.
    """

    def __init__(
        self,
        local: KeyValueStore,
        bridge: Optional[DataBridge] = None,
        namespace: str = "grade-tracker",
    ) -> None:
        self.local = local
        self.bridge = bridge
        self.namespace = namespace
        self.last_save_error: Optional[BaseException] = None

        self._cache: Optional[StoredState] = None
        self._lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._pending: Set[PendingWrite] = set()

    @classmethod
    def from_settings(cls) -> "SemesterStore":
        local = SqliteKeyValueStore(settings.local_db_path)
        bridge: Optional[DataBridge] = None
        try:
            if settings.backend == "file":
                bridge = FileDataBridge(settings.data_dir)
            elif settings.backend == "appwrite":
                bridge = AppwriteDataBridge.from_settings()
        except (AppwriteBridgeError, BridgeError) as exc:
            logger.warning("External store disabled, using local storage only: %s", exc)
        return cls(local, bridge, namespace=settings.namespace)

    @property
    def semesters_key(self) -> str:
        return f"{self.namespace}:semesters:v1"

    @property
    def active_semester_key(self) -> str:
        return f"{self.namespace}:active-semester:v1"

    @property
    def legacy_courses_key(self) -> str:
        return f"{self.namespace}:v1"

    @property
    def api_key_key(self) -> str:
        return f"{self.namespace}:groq-api-key"

    # local tier

    def _read_json(self, key: str) -> Any:
        raw = self.local.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.debug("Ignoring corrupt value under %s", key)
            return None

    def _read_local_semesters(self) -> List[Semester]:
        if self.local.get(self.semesters_key) is not None:
            data = self._read_json(self.semesters_key)
            try:
                return [Semester.from_dict(s) for s in data] if isinstance(data, list) else []
            except (AttributeError, TypeError, ValueError, ArithmeticError):
                return []

        legacy = self._read_json(self.legacy_courses_key)
        if not isinstance(legacy, list) or not legacy:
            return []
        try:
            courses = [Course.from_dict(c) for c in legacy]
        except (AttributeError, TypeError, ValueError, ArithmeticError):
            return []
        return [Semester(id=new_id(), name=LEGACY_SEMESTER_NAME, courses=courses)]

    def load_semesters(self) -> List[Semester]:
        with self._lock:
            if self._cache is not None:
                return list(self._cache.semesters)
        return self._read_local_semesters()

    def save_semesters(self, semesters: List[Semester]) -> Optional[PendingWrite]:
        semesters = list(semesters)
        with self._lock:
            if self._cache is None:
                self._cache = StoredState()
            self._cache.semesters = semesters
            payload = self._serialize(self._cache)

        self.local.set(self.semesters_key, json.dumps([s.to_dict() for s in semesters]))
        return self._save_detached(payload)

    def get_active_semester_id(self) -> Optional[str]:
        with self._lock:
            if self._cache is not None:
                return self._cache.active_semester_id
        return self.local.get(self.active_semester_key)

    def set_active_semester_id(self, semester_id: str) -> Optional[PendingWrite]:
        with self._lock:
            if self._cache is None:
                self._cache = StoredState()
            self._cache.active_semester_id = semester_id
            payload = self._serialize(self._cache)

        self.local.set(self.active_semester_key, semester_id)
        return self._save_detached(payload)

    def get_api_key(self) -> Optional[str]:
        return self.local.get(self.api_key_key)

    def set_api_key(self, api_key: str) -> None:
        self.local.set(self.api_key_key, api_key)

    # external tier

    @staticmethod
    def _serialize(state: StoredState) -> str:
        return json.dumps(state.to_dict(), indent=2)

    async def _load_remote(self) -> StoredState:
        if self.bridge is None:
            return StoredState()
        try:
            data = json.loads(await self.bridge.load_data())
            if not isinstance(data, dict):
                return StoredState()
            return StoredState.from_dict(data)
        except Exception as exc:
            logger.warning("External store not available, using local data: %s", exc)
            return StoredState()

    async def _write_remote(self, payload: str) -> bool:
        if self.bridge is None:
            return False
        try:
            await self.bridge.save_data(payload)
        except Exception as exc:
            self.last_save_error = exc
            logger.warning("Failed to save data to external store: %s", exc)
            return False
        return True

    def _save_detached(self, payload: str) -> Optional[PendingWrite]:
        if self.bridge is None:
            return None

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        pending: PendingWrite
        if loop is not None:
            pending = loop.create_task(self._write_remote(payload))
        else:
            with self._lock:
                if self._executor is None:
                    # one worker keeps writes from a thread-only caller in order
                    self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="gradetrackr-save")
                executor = self._executor
            pending = executor.submit(lambda: asyncio.run(self._write_remote(payload)))

        self._pending.add(pending)
        pending.add_done_callback(self._pending.discard)
        return pending

    async def initialize_store(self) -> StoredState:
        state = await self._load_remote()

        if not state.semesters:
            local_semesters = self._read_local_semesters()
            if local_semesters:
                state = StoredState(
                    semesters=local_semesters,
                    active_semester_id=self.local.get(self.active_semester_key),
                )
                with self._lock:
                    self._cache = state
                if self.bridge is not None:
                    logger.info("Migrating %d local semester(s) to the external store", len(local_semesters))
                    await self._write_remote(self._serialize(state))
                return state

        with self._lock:
            self._cache = state
        return state

    async def get_data_location(self) -> str:
        if self.bridge is None:
            return LOCAL_STORAGE_LABEL
        try:
            return await self.bridge.get_data_location()
        except Exception as exc:
            logger.debug("Data location unavailable: %s", exc)
            return LOCAL_STORAGE_LABEL

    async def flush(self) -> bool:
        """Wait for every outstanding external write; False if any failed."""
        ok = True
        for pending in list(self._pending):
            if isinstance(pending, asyncio.Future):
                result = await pending
            else:
                result = await asyncio.wrap_future(pending)
            ok = ok and bool(result)
        return ok

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
        close_local = getattr(self.local, "close", None)
        if close_local is not None:
            close_local()
