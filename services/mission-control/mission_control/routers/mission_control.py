import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError

from ..actions.catalog import ACTION_CATALOG, ACTION_ORDER
from ..engine.compose import compose_mission_control_modules
from ..engine.registry import MISSION_CONTROL_MODULES, sorted_registry
from ..runtime import MissionControlRuntime
from ..schemas.actions import LIFECYCLE_STATES, ActionLifecycleEvent

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/mission-control", tags=["mission-control"])


def get_runtime(request: Request) -> MissionControlRuntime:
    return request.app.state.mission_control


def _serialize(value: Any) -> Any:
    if hasattr(value, "model_dump"):
        return value.model_dump(exclude_none=True)
    if isinstance(value, list):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize(val) for key, val in value.items()}
    return value


def _require_action_id(body: Dict[str, Any]) -> str:
    action_id = body.get("actionId")
    if not isinstance(action_id, str) or not action_id.strip():
        raise HTTPException(status_code=400, detail="actionId is required")
    return action_id


def _compose(body: Dict[str, Any], runtime: MissionControlRuntime):
    return compose_mission_control_modules(
        body.get("userState"),
        body.get("timeContext") or {},
        body.get("preferences") or runtime.preferences.load(),
        check_types=not runtime.settings.is_production,
    )


@router.post("/compose")
async def compose(body: Dict[str, Any], runtime: MissionControlRuntime = Depends(get_runtime)) -> Dict[str, Any]:
    return {"modules": _serialize(_compose(body, runtime))}


@router.post("/render")
async def render(body: Dict[str, Any], runtime: MissionControlRuntime = Depends(get_runtime)) -> Dict[str, Any]:
    modules = _compose(body, runtime)
    cards = runtime.renderer.render(modules, body.get("userState"))
    return {"modules": _serialize(modules), "cards": _serialize(cards)}


@router.get("/registry")
async def registry() -> List[Dict[str, Any]]:
    return _serialize(sorted_registry(MISSION_CONTROL_MODULES))


@router.get("/actions")
async def actions() -> Dict[str, Any]:
    return {"actions": _serialize(list(ACTION_CATALOG.values())), "order": list(ACTION_ORDER)}


@router.post("/actions/{action_id}/execute")
async def execute_action(action_id: str, body: Dict[str, Any], runtime: MissionControlRuntime = Depends(get_runtime)) -> Dict[str, Any]:
    if action_id not in ACTION_CATALOG:
        raise HTTPException(status_code=404, detail="Unknown action")
    context = body.get("context") or {}
    if not isinstance(context, dict):
        raise HTTPException(status_code=400, detail="context must be an object")
    try:
        result = await runtime.executor.execute(action_id, context)
    except Exception as error:  # pylint: disable=broad-except
        logger.exception("Mission Control action %s failed", action_id)
        raise HTTPException(status_code=500, detail="Action failed") from error
    return {"actionId": action_id, "implemented": action_id in runtime.executor.handlers, "result": _serialize(result)}


@router.post("/action/event")
async def action_event(body: Dict[str, Any], runtime: MissionControlRuntime = Depends(get_runtime)) -> Dict[str, Any]:
    action_id = _require_action_id(body)
    lifecycle = body.get("lifecycle")
    if lifecycle not in LIFECYCLE_STATES:
        raise HTTPException(status_code=400, detail="Invalid action event payload")
    try:
        event = ActionLifecycleEvent(
            type=lifecycle,
            actionId=action_id,
            ts=body.get("timestamp") or runtime.lifecycle.clock(),
            outcome=body.get("outcome"),
            meta=body.get("meta") or {},
            priorityContext=body.get("priorityContext") or {},
        )
    except ValidationError as error:
        raise HTTPException(status_code=400, detail="Invalid action event payload") from error
    await runtime.persistence.emit(event)
    return {"ok": True, "persisted": runtime.settings.capabilities.MC_PERSISTENCE_ENABLED}


@router.put("/action/state")
async def put_action_state(body: Dict[str, Any], runtime: MissionControlRuntime = Depends(get_runtime)) -> Dict[str, Any]:
    _require_action_id(body)
    if body.get("lifecycle") not in LIFECYCLE_STATES:
        raise HTTPException(status_code=400, detail="Invalid action state payload")
    try:
        state = await runtime.lifecycle.record_state(body)
    except ValidationError as error:
        raise HTTPException(status_code=400, detail="Invalid action state payload") from error
    return {"ok": True, "state": _serialize(state), "stored": runtime.settings.capabilities.MC_PERSISTENCE_ENABLED}


@router.get("/action/state")
async def get_action_state(runtime: MissionControlRuntime = Depends(get_runtime)) -> Dict[str, Any]:
    state = await runtime.persistence.fetch_action_state()
    return {"ok": True, "state": _serialize(state) if state else None}


@router.post("/action/defer")
async def defer_action(body: Dict[str, Any], runtime: MissionControlRuntime = Depends(get_runtime)) -> Dict[str, Any]:
    state = await runtime.lifecycle.defer_action(_require_action_id(body))
    return {"ok": True, "state": _serialize(state)}


@router.post("/action/dismiss")
async def dismiss_action(body: Dict[str, Any], runtime: MissionControlRuntime = Depends(get_runtime)) -> Dict[str, Any]:
    next_action_id = await runtime.lifecycle.dismiss_action(_require_action_id(body))
    return {"ok": True, "nextActionId": next_action_id}


@router.get("/action/active")
async def active_action(runtime: MissionControlRuntime = Depends(get_runtime)) -> Dict[str, Any]:
    action_id = await runtime.lifecycle.resolve_active_action()
    definition = ACTION_CATALOG.get(action_id)
    return {"actionId": action_id, "label": definition.label if definition else None}


@router.get("/telemetry")
async def telemetry(runtime: MissionControlRuntime = Depends(get_runtime)) -> Dict[str, Any]:
    return {"enabled": runtime.settings.capabilities.MC_TELEMETRY_ENABLED, "actions": runtime.telemetry.snapshot()}
