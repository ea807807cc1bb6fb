import logging
from typing import Any, Dict, Optional

from ..persistence.sink import MissionControlPersistence
from ..schemas.actions import ActionLifecycleEvent, ActionState, LifecycleType
from .catalog import get_next_action_id, resolve_action_id
from .executor import Clock, now_ms

logger = logging.getLogger(__name__)

PRIMARY_ACTION_META = {"source": "mission-control", "surface": "primary-action"}


class ActionLifecycle:
    """User agency over the primary action: defer, dismiss, restore."""

    def __init__(self, persistence: MissionControlPersistence, clock: Clock = now_ms) -> None:
        self.persistence = persistence
        self.clock = clock

    async def _emit(self, kind: LifecycleType, action_id: str, ts: int) -> None:
        try:
            await self.persistence.emit(ActionLifecycleEvent(type=kind, actionId=action_id, ts=ts, meta=dict(PRIMARY_ACTION_META)))
        except Exception as error:  # pylint: disable=broad-except
            logger.debug("Discarded %s event for %s: %s", kind, action_id, error)

    async def defer_action(self, action_id: str) -> ActionState:
        ts = self.clock()
        await self._emit("deferred", action_id, ts)
        state = ActionState(actionId=action_id, lifecycle="deferred", lastUpdatedAt=ts, userAgency={"deferred": True})
        await self.persistence.persist_action_state(state)
        return state

    async def dismiss_action(self, action_id: str) -> str:
        ts = self.clock()
        await self._emit("dismissed", action_id, ts)
        next_action_id = get_next_action_id(action_id)
        await self.persistence.persist_action_state(ActionState(actionId=next_action_id, lifecycle="shown", lastUpdatedAt=ts))
        return next_action_id

    async def resolve_active_action(self, default_action_id: Optional[str] = None) -> str:
        state = await self.persistence.fetch_action_state()
        if state is None:
            return resolve_action_id(default_action_id)

        if state.lifecycle == "dismissed":
            next_action_id = get_next_action_id(state.actionId)
            await self.persistence.persist_action_state(
                ActionState(actionId=next_action_id, lifecycle="shown", lastUpdatedAt=self.clock())
            )
            return next_action_id

        return resolve_action_id(state.actionId)

    async def record_state(self, payload: Dict[str, Any]) -> ActionState:
        state = ActionState(
            actionId=payload["actionId"],
            lifecycle=payload["lifecycle"],
            lastUpdatedAt=payload.get("lastUpdatedAt") or self.clock(),
            userAgency=payload.get("userAgency") or {},
            priorityContext=payload.get("priorityContext") or {},
        )
        await self.persistence.persist_action_state(state)
        return state
