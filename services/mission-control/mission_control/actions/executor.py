import inspect
import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional

from ..config import Settings
from ..persistence.sink import EventSink
from ..schemas.actions import ActionDefinition, ActionLifecycleEvent, Outcome
from .catalog import ACTION_CATALOG
from .handlers import ActionHandler

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def now_ms() -> int:
    return int(time.time() * 1000)


class ActionExecutor:
    """Runs Mission Control actions by id and reports their lifecycle.

    ``invoked`` is emitted before the handler runs and ``completed`` after
    it settles. Emission is best effort: sink errors are discarded, and a
    handler error is re-raised unchanged once ``completed`` was attempted.
    """

    def __init__(
        self,
        settings: Settings,
        handlers: Mapping[str, ActionHandler],
        sink: EventSink,
        catalog: Mapping[str, ActionDefinition] = ACTION_CATALOG,
        clock: Clock = now_ms,
    ) -> None:
        self.settings = settings
        self.handlers = handlers
        self.sink = sink
        self.catalog = catalog
        self.clock = clock

    def _dev_warning(self, message: str, *args: Any) -> None:
        if not self.settings.is_production:
            logger.warning(message, *args)

    async def _safe_emit(self, event: ActionLifecycleEvent) -> None:
        try:
            await self.sink.emit(event)
        except Exception as error:  # pylint: disable=broad-except
            logger.debug("Discarded %s event for %s: %s", event.type, event.actionId, error)

    def _event(self, kind: str, action_id: str, meta: Dict[str, Any], outcome: Optional[Outcome] = None) -> ActionLifecycleEvent:
        return ActionLifecycleEvent(type=kind, actionId=action_id, ts=self.clock(), outcome=outcome, meta=meta)

    async def execute(self, action_id: str, context: Optional[Mapping[str, Any]] = None) -> Any:
        action_context: Dict[str, Any] = dict(context) if isinstance(context, Mapping) else {}

        action = self.catalog.get(action_id) if isinstance(action_id, str) else None
        if action is None:
            self._dev_warning("Unknown Mission Control action: %s", action_id)
            return None

        handler = self.handlers.get(action_id)
        if handler is None:
            # Catalogued but not implemented yet.
            self._dev_warning("No handler registered for Mission Control action: %s", action_id)
            return None

        meta = {"source": action_context.get("source", "mission-control")}
        await self._safe_emit(self._event("invoked", action_id, meta))

        try:
            result = handler(action_context)
            if inspect.isawaitable(result):
                result = await result
        except Exception:
            await self._safe_emit(self._event("completed", action_id, meta, outcome="error"))
            raise

        await self._safe_emit(self._event("completed", action_id, meta, outcome="success"))
        return result
