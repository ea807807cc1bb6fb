from typing import Any, Awaitable, Callable, Dict, Mapping, Union

from ..ai.invocation import DEFAULT_DRAFT, invoke_ai
from ..config import CapabilityFlags
from ..schemas.actions import AiInvocationRequest

ActionContext = Dict[str, Any]
ActionResult = Dict[str, Any]
ActionHandler = Callable[[ActionContext], Union[ActionResult, Awaitable[ActionResult]]]


def _open_overlay(overlay: str, context: ActionContext) -> ActionResult:
    return {"effect": "open_overlay", "overlay": overlay, "source": context.get("source", "mission_control")}


def build_action_handlers(capabilities: CapabilityFlags) -> Mapping[str, ActionHandler]:
    """Local placeholder handlers, keyed by action id.

    CONNECT_WEARABLE is catalogued but deliberately has no handler.
    """

    async def ask_ai_coach(context: ActionContext) -> ActionResult:
        request = AiInvocationRequest(
            draft=context.get("draft") or DEFAULT_DRAFT,
            aiContext={"mode": "northstar_intro", "source": "mission_control"},
        )
        result = invoke_ai(request, capabilities)
        return {"effect": "open_ai_chat", "ai": result.model_dump()}

    def log_habit(context: ActionContext) -> ActionResult:
        return _open_overlay("habit_logger", context)

    def start_sleep_protocol(context: ActionContext) -> ActionResult:
        return _open_overlay("sleep_protocol", context)

    def review_priorities(context: ActionContext) -> ActionResult:
        return {"effect": "scroll_into_view", "target": "pillar_overview", "highlight": context.get("pillar")}

    return {
        "ASK_AI_COACH": ask_ai_coach,
        "LOG_HABIT": log_habit,
        "START_SLEEP_PROTOCOL": start_sleep_protocol,
        "REVIEW_PRIORITIES": review_priorities,
    }
