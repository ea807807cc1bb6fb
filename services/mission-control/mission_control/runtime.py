from dataclasses import dataclass
from typing import Optional

from .actions.executor import ActionExecutor
from .actions.handlers import build_action_handlers
from .actions.lifecycle import ActionLifecycle
from .config import Settings, load_settings
from .engine.renderer import ModuleRenderer
from .persistence.event_log import LocalEventLog
from .persistence.preferences import PreferenceStore
from .persistence.sink import MissionControlPersistence
from .persistence.storage import InMemoryStorage, KeyValueStorage
from .telemetry.aggregator import TelemetryAggregator


@dataclass
class MissionControlRuntime:
    settings: Settings
    persistence: MissionControlPersistence
    telemetry: TelemetryAggregator
    executor: ActionExecutor
    lifecycle: ActionLifecycle
    preferences: PreferenceStore
    renderer: ModuleRenderer


def build_runtime(settings: Optional[Settings] = None, storage: Optional[KeyValueStorage] = None) -> MissionControlRuntime:
    """Wire every Mission Control collaborator around one set of flags."""
    resolved = settings or load_settings()
    store = storage if storage is not None else InMemoryStorage()
    telemetry = TelemetryAggregator()
    persistence = MissionControlPersistence(
        resolved.capabilities,
        event_log=LocalEventLog(store, max_events=resolved.event_log_max),
        telemetry=telemetry,
        storage=store,
    )
    executor = ActionExecutor(resolved, build_action_handlers(resolved.capabilities), persistence)
    return MissionControlRuntime(
        settings=resolved,
        persistence=persistence,
        telemetry=telemetry,
        executor=executor,
        lifecycle=ActionLifecycle(persistence),
        preferences=PreferenceStore(resolved.capabilities, store),
        renderer=ModuleRenderer(),
    )
