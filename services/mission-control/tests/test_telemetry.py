import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from mission_control.schemas.actions import ActionLifecycleEvent
from mission_control.telemetry.aggregator import TelemetryAggregator


def _event(kind, ts, outcome=None, action_id="LOG_HABIT"):
    return ActionLifecycleEvent(type=kind, actionId=action_id, ts=ts, outcome=outcome)


def test_counts_and_average_duration():
    telemetry = TelemetryAggregator()
    telemetry.record(_event("invoked", 100))
    telemetry.record(_event("completed", 300, "success"))
    telemetry.record(_event("invoked", 1000))
    telemetry.record(_event("completed", 1400, "error"))

    counters = telemetry.get("LOG_HABIT")
    assert counters["invokedCount"] == 2
    assert counters["completedCount"] == 2
    assert counters["errorCount"] == 1
    assert counters["avgDurationMs"] == 300
    assert counters["lastTs"] == 1400


def test_other_lifecycle_events_only_touch_last_ts():
    telemetry = TelemetryAggregator()
    telemetry.record(_event("dismissed", 50))
    counters = telemetry.get("LOG_HABIT")
    assert counters["invokedCount"] == 0
    assert counters["lastTs"] == 50


def test_snapshot_is_a_copy_and_reset_clears():
    telemetry = TelemetryAggregator()
    telemetry.record(_event("invoked", 1, action_id="ASK_AI_COACH"))
    snapshot = telemetry.snapshot()
    snapshot["ASK_AI_COACH"]["invokedCount"] = 99
    assert telemetry.get("ASK_AI_COACH")["invokedCount"] == 1
    telemetry.reset()
    assert telemetry.snapshot() == {}
