import logging
import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mission_control.actions.catalog import ACTION_CATALOG
from mission_control.actions.executor import ActionExecutor
from mission_control.actions.handlers import build_action_handlers
from mission_control.config import CapabilityFlags, Settings
from mission_control.persistence.sink import MissionControlPersistence, NullEventSink
from mission_control.schemas.actions import ActionDefinition


class RecordingSink:
    def __init__(self, calls=None):
        self.events = []
        self.calls = calls if calls is not None else []

    async def emit(self, event):
        self.calls.append(f"emit:{event.type}")
        self.events.append(event)


class FailingSink:
    def __init__(self):
        self.attempts = []

    async def emit(self, event):
        self.attempts.append(event)
        raise RuntimeError("storage offline")


def _catalog(*ids):
    return {action_id: ActionDefinition(id=action_id, label=action_id, description="test") for action_id in ids}


def _executor(handlers, sink, catalog=None, production=False):
    settings = Settings(environment="production" if production else "development")
    ticks = iter(range(1000, 100000, 10))
    return ActionExecutor(settings, handlers, sink, catalog=catalog or _catalog(*handlers.keys()), clock=lambda: next(ticks))


@pytest.mark.asyncio
async def test_unknown_action_resolves_to_none(caplog):
    sink = RecordingSink()
    executor = _executor({}, sink)
    with caplog.at_level(logging.WARNING):
        result = await executor.execute("NONEXISTENT_ID")
    assert result is None
    assert sink.events == []
    assert "Unknown Mission Control action: NONEXISTENT_ID" in caplog.text


@pytest.mark.asyncio
async def test_unknown_action_is_silent_in_production(caplog):
    executor = _executor({}, RecordingSink(), production=True)
    with caplog.at_level(logging.DEBUG):
        assert await executor.execute("NONEXISTENT_ID") is None
    assert "Unknown Mission Control action" not in caplog.text


@pytest.mark.asyncio
async def test_catalogued_action_without_handler_is_a_noop():
    sink = RecordingSink()
    executor = _executor({}, sink, catalog=_catalog("CONNECT_WEARABLE"))
    assert await executor.execute("CONNECT_WEARABLE") is None
    assert sink.events == []


@pytest.mark.asyncio
async def test_successful_action_emits_invoked_then_completed():
    calls = []
    sink = RecordingSink(calls)

    async def handler(context):
        calls.append("handler")
        return {"done": context["value"]}

    executor = _executor({"LOG_HABIT": handler}, sink)
    result = await executor.execute("LOG_HABIT", {"value": 3})

    assert result == {"done": 3}
    assert calls == ["emit:invoked", "handler", "emit:completed"]
    invoked, completed = sink.events
    assert invoked.actionId == completed.actionId == "LOG_HABIT"
    assert invoked.outcome is None
    assert completed.outcome == "success"
    assert invoked.ts < completed.ts


@pytest.mark.asyncio
async def test_sync_handlers_are_supported():
    executor = _executor({"LOG_HABIT": lambda context: "sync"}, RecordingSink())
    assert await executor.execute("LOG_HABIT") == "sync"


@pytest.mark.asyncio
async def test_handler_runs_exactly_once():
    calls = []
    executor = _executor({"LOG_HABIT": lambda context: calls.append(context) or "ok"}, RecordingSink())
    await executor.execute("LOG_HABIT", {"a": 1})
    assert calls == [{"a": 1}]


@pytest.mark.asyncio
async def test_handler_error_propagates_after_completed_event():
    sink = RecordingSink()
    boom = ValueError("boom")

    def handler(context):
        raise boom

    executor = _executor({"LOG_HABIT": handler}, sink)
    with pytest.raises(ValueError) as excinfo:
        await executor.execute("LOG_HABIT")

    assert excinfo.value is boom
    assert [event.type for event in sink.events] == ["invoked", "completed"]
    assert sink.events[-1].outcome == "error"


@pytest.mark.asyncio
async def test_sink_failures_never_reach_the_caller():
    sink = FailingSink()
    executor = _executor({"LOG_HABIT": lambda context: "ok"}, sink)
    assert await executor.execute("LOG_HABIT") == "ok"
    assert [event.type for event in sink.attempts] == ["invoked", "completed"]


@pytest.mark.asyncio
async def test_sink_failure_does_not_mask_handler_error():
    sink = FailingSink()

    async def handler(context):
        raise KeyError("original")

    executor = _executor({"LOG_HABIT": handler}, sink)
    with pytest.raises(KeyError, match="original"):
        await executor.execute("LOG_HABIT")
    assert sink.attempts[-1].outcome == "error"


@pytest.mark.asyncio
async def test_disabled_persistence_records_nothing():
    persistence = MissionControlPersistence(CapabilityFlags(MC_PERSISTENCE_ENABLED=False))
    executor = _executor({"LOG_HABIT": lambda context: "ok"}, persistence)
    assert await executor.execute("LOG_HABIT") == "ok"
    assert await persistence.event_log.read() == []


@pytest.mark.asyncio
async def test_enabled_persistence_records_lifecycle():
    persistence = MissionControlPersistence(CapabilityFlags(MC_PERSISTENCE_ENABLED=True))
    executor = _executor({"LOG_HABIT": lambda context: "ok"}, persistence)
    await executor.execute("LOG_HABIT")
    events = await persistence.event_log.read()
    assert [(event.type, event.outcome) for event in events] == [("invoked", None), ("completed", "success")]


@pytest.mark.asyncio
async def test_default_handlers_with_ai_disabled():
    handlers = build_action_handlers(CapabilityFlags())
    executor = ActionExecutor(Settings(), handlers, NullEventSink())
    result = await executor.execute("ASK_AI_COACH")
    assert result["effect"] == "open_ai_chat"
    assert result["ai"]["status"] == "disabled"
    assert result["ai"]["reply"] is None


@pytest.mark.asyncio
async def test_default_handlers_cover_rotation_actions():
    handlers = build_action_handlers(CapabilityFlags(AI_INVOCATION_ENABLED=True))
    executor = ActionExecutor(Settings(), handlers, NullEventSink())
    assert (await executor.execute("ASK_AI_COACH"))["ai"]["status"] == "ok"
    assert (await executor.execute("LOG_HABIT"))["overlay"] == "habit_logger"
    assert (await executor.execute("START_SLEEP_PROTOCOL"))["overlay"] == "sleep_protocol"
    assert (await executor.execute("REVIEW_PRIORITIES", {"pillar": "sleep"}))["highlight"] == "sleep"
    assert await executor.execute("CONNECT_WEARABLE") is None
    assert "CONNECT_WEARABLE" in ACTION_CATALOG


@pytest.mark.asyncio
async def test_non_mapping_context_is_treated_as_empty():
    seen = []
    sink = RecordingSink()
    executor = _executor({"LOG_HABIT": lambda context: seen.append(context) or "ok"}, sink)
    assert await executor.execute("LOG_HABIT", "not-a-mapping") == "ok"
    assert seen == [{}]
    assert sink.events[0].meta == {"source": "mission-control"}
