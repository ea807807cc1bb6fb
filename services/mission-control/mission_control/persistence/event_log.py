import asyncio
import json
import logging
from typing import Any, List, Optional

from ..config import DEFAULT_EVENT_LOG_MAX
from ..schemas.actions import ActionLifecycleEvent
from .storage import InMemoryStorage, KeyValueStorage
from .validator import validate_against_schema

logger = logging.getLogger(__name__)

STORAGE_KEY = "northstar_mc_action_events_v1"


class LocalEventLog:
    """Append-only action event log held under a single storage key.

    Records are only ever appended. Once the log exceeds ``max_events`` the
    oldest records rotate out. A corrupt payload reads as an empty log and
    records that fail schema validation are skipped on read.
    """

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        storage_key: str = STORAGE_KEY,
        max_events: int = DEFAULT_EVENT_LOG_MAX,
    ) -> None:
        self._storage = storage if storage is not None else InMemoryStorage()
        self._storage_key = storage_key
        self._max_events = max_events
        self._lock = asyncio.Lock()

    def _load_raw(self) -> List[Any]:
        raw = self._storage.get_item(self._storage_key)
        if not raw:
            return []
        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.warning("Discarding corrupt Mission Control event log")
            return []
        return parsed if isinstance(parsed, list) else []

    def _save_records(self, records: List[Any]) -> None:
        self._storage.set_item(self._storage_key, json.dumps(records[-self._max_events:]))

    async def append(self, event: ActionLifecycleEvent) -> None:
        async with self._lock:
            records = self._load_raw()
            records.append(event.model_dump())
            self._save_records(records)

    async def read(self) -> List[ActionLifecycleEvent]:
        async with self._lock:
            records = self._load_raw()
        events: List[ActionLifecycleEvent] = []
        for record in records:
            validation = validate_against_schema("action_event", record)
            if not validation["valid"]:
                logger.debug("Skipping invalid Mission Control event: %s", "; ".join(validation["errors"]))
                continue
            events.append(ActionLifecycleEvent(**record))
        return events
