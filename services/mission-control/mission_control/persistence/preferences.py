import json
import logging
from typing import Any, Dict, Mapping, Optional

from ..config import CapabilityFlags
from ..schemas.actions import PersistenceResult
from .storage import InMemoryStorage, KeyValueStorage

logger = logging.getLogger(__name__)

PREFERENCES_KEY = "northstar_mc_preferences_v1"
DISABLED_MESSAGE = "Personalisation persistence is disabled."


class PreferenceStore:
    """Dashboard preferences (collapsed modules, order hints).

    Gated by ``MC_PERSONALISATION_PERSISTENCE_ENABLED``; a disabled store
    reports ``status="disabled"`` so callers can tell it apart from a save.
    """

    def __init__(self, capabilities: CapabilityFlags, storage: Optional[KeyValueStorage] = None) -> None:
        self.capabilities = capabilities
        self.storage = storage if storage is not None else InMemoryStorage()

    @property
    def enabled(self) -> bool:
        return self.capabilities.MC_PERSONALISATION_PERSISTENCE_ENABLED

    def save(self, preferences: Mapping[str, Any]) -> PersistenceResult:
        if not self.enabled:
            return PersistenceResult(status="disabled", message=DISABLED_MESSAGE)
        try:
            self.storage.set_item(PREFERENCES_KEY, json.dumps(dict(preferences)))
        except (TypeError, ValueError) as error:
            logger.warning("Failed to persist Mission Control preferences: %s", error)
            return PersistenceResult(status="failed", message=str(error))
        return PersistenceResult(status="stored")

    def load(self) -> Dict[str, Any]:
        if not self.enabled:
            return {}
        raw = self.storage.get_item(PREFERENCES_KEY)
        if not raw:
            return {}
        try:
            parsed = json.loads(raw)
        except ValueError:
            logger.warning("Discarding corrupt Mission Control preferences")
            return {}
        return parsed if isinstance(parsed, dict) else {}
