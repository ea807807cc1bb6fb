import json
import logging
from typing import Optional, Protocol

from ..config import CapabilityFlags
from ..schemas.actions import ActionLifecycleEvent, ActionState
from ..telemetry.aggregator import TelemetryAggregator
from .event_log import LocalEventLog
from .storage import InMemoryStorage, KeyValueStorage
from .validator import validate_against_schema

logger = logging.getLogger(__name__)

ACTION_STATE_KEY = "northstar_mc_action_state_v1"


class EventSink(Protocol):
    async def emit(self, event: ActionLifecycleEvent) -> None: ...


class NullEventSink:
    async def emit(self, event: ActionLifecycleEvent) -> None:
        return None


class MissionControlPersistence:
    """Single seam for recording action lifecycle events and action state.

    Inert unless ``MC_PERSISTENCE_ENABLED``. Storage failures are logged and
    absorbed here; nothing this class does may change what the caller sees.
    """

    def __init__(
        self,
        capabilities: CapabilityFlags,
        event_log: Optional[LocalEventLog] = None,
        telemetry: Optional[TelemetryAggregator] = None,
        storage: Optional[KeyValueStorage] = None,
    ) -> None:
        self.capabilities = capabilities
        self.storage = storage if storage is not None else InMemoryStorage()
        self.event_log = event_log if event_log is not None else LocalEventLog(self.storage)
        self.telemetry = telemetry

    async def emit(self, event: ActionLifecycleEvent) -> None:
        if not self.capabilities.MC_PERSISTENCE_ENABLED:
            return

        try:
            await self.event_log.append(event)
        except Exception as error:  # pylint: disable=broad-except
            logger.warning("Failed to persist Mission Control action event: %s", error)

        if self.capabilities.MC_TELEMETRY_ENABLED and self.telemetry is not None:
            try:
                self.telemetry.record(event)
            except Exception as error:  # pylint: disable=broad-except
                logger.debug("Telemetry aggregation failed: %s", error)

    async def persist_action_state(self, state: ActionState) -> None:
        if not self.capabilities.MC_PERSISTENCE_ENABLED:
            return
        try:
            self.storage.set_item(ACTION_STATE_KEY, state.model_dump_json())
        except Exception as error:  # pylint: disable=broad-except
            logger.warning("Failed to persist Mission Control action state: %s", error)

    async def fetch_action_state(self) -> Optional[ActionState]:
        if not self.capabilities.MC_PERSISTENCE_ENABLED:
            return None
        try:
            raw = self.storage.get_item(ACTION_STATE_KEY)
            if not raw:
                return None
            data = json.loads(raw)
        except Exception as error:  # pylint: disable=broad-except
            logger.warning("Failed to read Mission Control action state: %s", error)
            return None
        validation = validate_against_schema("action_state", data)
        if not validation["valid"]:
            logger.warning("Ignoring invalid Mission Control action state: %s", "; ".join(validation["errors"]))
            return None
        return ActionState(**data)
