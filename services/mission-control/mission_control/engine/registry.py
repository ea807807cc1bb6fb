import logging
from types import MappingProxyType
from typing import Iterable, List, Mapping

from ..schemas.modules import RegistryEntry

logger = logging.getLogger(__name__)

# `order` is a hint for future personalised ordering; composition does not read it.
MISSION_CONTROL_MODULES: Mapping[str, RegistryEntry] = MappingProxyType(
    {
        "PRIORITY_ACTION": RegistryEntry(id="priority_action", type="PRIORITY_ACTION", order=10, defaultVisible=True),
        "EMPTY_STATE_GUIDANCE": RegistryEntry(id="empty_state_guidance", type="EMPTY_STATE_GUIDANCE", order=15, defaultVisible=False),
        "NARRATIVE_INSIGHT": RegistryEntry(id="narrative_insight", type="NARRATIVE_INSIGHT", order=20, defaultVisible=True),
        "OVERALL_SCORE": RegistryEntry(id="overall_score", type="OVERALL_SCORE", order=30, defaultVisible=True),
        "PILLAR_OVERVIEW": RegistryEntry(id="pillar_overview", type="PILLAR_OVERVIEW", order=40, defaultVisible=True),
        "MOMENTUM": RegistryEntry(id="momentum", type="MOMENTUM", order=50, defaultVisible=False),
        "SUPPORT": RegistryEntry(id="support", type="SUPPORT", order=60, defaultVisible=False),
        "AI_ENTRY": RegistryEntry(id="ai_entry", type="AI_ENTRY", order=100, defaultVisible=True),
    }
)


def find_duplicate_types(entries: Iterable[RegistryEntry]) -> List[str]:
    seen = set()
    duplicates: List[str] = []
    for entry in entries:
        if entry.type in seen and entry.type not in duplicates:
            duplicates.append(entry.type)
        seen.add(entry.type)
    return duplicates


def check_registry(registry: Mapping[str, RegistryEntry] = MISSION_CONTROL_MODULES) -> List[str]:
    """Warn about registry entries that share a type.

    The renderer dispatches on type alone, so duplicates are a configuration
    bug. They are reported, never raised.
    """
    duplicates = find_duplicate_types(registry.values())
    for module_type in duplicates:
        logger.warning("Duplicate Mission Control module type: %s", module_type)
    return duplicates


def sorted_registry(registry: Mapping[str, RegistryEntry] = MISSION_CONTROL_MODULES) -> List[RegistryEntry]:
    return sorted(registry.values(), key=lambda entry: entry.order)
