from copy import deepcopy
from typing import Any, Dict

from ..schemas.actions import ActionLifecycleEvent


def _empty_counters() -> Dict[str, Any]:
    return {
        "invokedCount": 0,
        "completedCount": 0,
        "errorCount": 0,
        "avgDurationMs": 0.0,
        "lastTs": None,
    }


class TelemetryAggregator:
    """In-memory per-action counters derived from lifecycle events.

    Read-only observability: nothing here feeds back into composition.
    """

    def __init__(self) -> None:
        self._counters: Dict[str, Dict[str, Any]] = {}
        self._last_invoked_at: Dict[str, int] = {}
        self._timed_completions: Dict[str, int] = {}

    def record(self, event: ActionLifecycleEvent) -> None:
        counters = self._counters.setdefault(event.actionId, _empty_counters())
        counters["lastTs"] = event.ts

        if event.type == "invoked":
            counters["invokedCount"] += 1
            self._last_invoked_at[event.actionId] = event.ts
            return

        if event.type != "completed":
            return

        counters["completedCount"] += 1
        if event.outcome == "error":
            counters["errorCount"] += 1

        started_at = self._last_invoked_at.pop(event.actionId, None)
        if started_at is None:
            return
        duration = max(0, event.ts - started_at)
        timed = self._timed_completions.get(event.actionId, 0) + 1
        self._timed_completions[event.actionId] = timed
        counters["avgDurationMs"] += (duration - counters["avgDurationMs"]) / timed

    def get(self, action_id: str) -> Dict[str, Any]:
        return deepcopy(self._counters.get(action_id, _empty_counters()))

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        return deepcopy(self._counters)

    def reset(self) -> None:
        self._counters.clear()
        self._last_invoked_at.clear()
        self._timed_completions.clear()
