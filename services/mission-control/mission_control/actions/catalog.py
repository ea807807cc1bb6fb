from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import yaml

from ..schemas.actions import ActionDefinition

CATALOG_PATH = Path(__file__).with_name("catalog.yaml")

ACTION_ORDER: List[str] = [
    "ASK_AI_COACH",
    "LOG_HABIT",
    "START_SLEEP_PROTOCOL",
    "REVIEW_PRIORITIES",
]


def _parse_catalog(content: str) -> Dict[str, ActionDefinition]:
    parsed = yaml.safe_load(content) or []
    if not isinstance(parsed, list):
        raise ValueError("Action catalog must be a list of actions")
    catalog: Dict[str, ActionDefinition] = {}
    for item in parsed:
        definition = ActionDefinition(**item)
        if definition.id in catalog:
            raise ValueError(f"Duplicate action id in catalog: {definition.id}")
        catalog[definition.id] = definition
    return catalog


def load_action_catalog(path: Optional[Path] = None) -> Mapping[str, ActionDefinition]:
    source = path or CATALOG_PATH
    with source.open("r", encoding="utf-8") as f:
        return MappingProxyType(_parse_catalog(f.read()))


ACTION_CATALOG: Mapping[str, ActionDefinition] = load_action_catalog()


def get_action(action_id: Any, catalog: Mapping[str, ActionDefinition] = ACTION_CATALOG) -> Optional[ActionDefinition]:
    if not isinstance(action_id, str):
        return None
    return catalog.get(action_id)


def resolve_action_id(action_id: Any) -> str:
    return action_id if action_id in ACTION_ORDER else ACTION_ORDER[0]


def get_next_action_id(action_id: Any) -> str:
    index = ACTION_ORDER.index(resolve_action_id(action_id))
    return ACTION_ORDER[(index + 1) % len(ACTION_ORDER)]
