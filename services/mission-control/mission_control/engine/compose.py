from typing import Any, List, Mapping, Optional

from ..schemas.modules import ModuleDescriptor, RegistryEntry
from ..schemas.user_state import NormalizedUserState
from .normalize import UserStateLike, normalize_user_state
from .registry import MISSION_CONTROL_MODULES, check_registry

PRIORITY_PILLAR_ORDER = [
    "sleep",
    "nutrition",
    "mental",
    "exercise",
    "physical",
    "finances",
    "social",
    "purpose",
]
PRIORITY_THRESHOLD = 60

AUTH_REASON = "auth"
EMPTY_STATE_REASON = "No data yet, show onboarding guidance"
DEFAULT_PRIORITY_REASON = "Single highest-impact action for today"
NARRATIVE_REASON = "Contextual insight to reduce cognitive load"


def get_priority_pillar(user: NormalizedUserState) -> Optional[str]:
    # First pillar in fixed order under threshold wins, not the lowest score.
    for key in PRIORITY_PILLAR_ORDER:
        pillar = user.pillars.get(key)
        if pillar is not None and pillar.score is not None and pillar.score < PRIORITY_THRESHOLD:
            return key
    return None


def _raw_field(raw: Any, name: str) -> Any:
    return raw.get(name) if isinstance(raw, Mapping) else None


def _is_explicit_false(value: Any) -> bool:
    return value is False


def _is_zero(value: Any) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float)) and value == 0


def _module(registry: Mapping[str, RegistryEntry], key: str, **hints: Any) -> ModuleDescriptor:
    entry = registry[key]
    return ModuleDescriptor(id=entry.id, type=entry.type, **hints)


def compose_mission_control_modules(
    raw_user_state: UserStateLike,
    time_context: Optional[Mapping[str, Any]] = None,
    preferences: Optional[Mapping[str, Any]] = None,
    *,
    registry: Mapping[str, RegistryEntry] = MISSION_CONTROL_MODULES,
    check_types: bool = False,
) -> List[ModuleDescriptor]:
    """Decide which dashboard modules to surface and in which order.

    A fixed rule ladder, not a ranking: one headline module first, then the
    supporting modules, with AI_ENTRY always last. Pure and total; identical
    inputs give equal output.

    ``time_context`` and ``preferences`` are accepted for personalised
    ordering and are not consulted yet.
    """
    if check_types:
        check_registry(registry)

    user = normalize_user_state(raw_user_state)
    modules: List[ModuleDescriptor] = []

    # These two read the raw payload: only an explicit False / 0 counts, a
    # missing field does not. Normalising first would change who sees the
    # empty-state guidance.
    unauthenticated = _is_explicit_false(_raw_field(raw_user_state, "isAuthenticated"))
    has_no_data = _is_zero(_raw_field(raw_user_state, "lifeScore"))
    priority_pillar = get_priority_pillar(user)

    # Single dominant priority (Hick's law): exactly one headline module.
    if unauthenticated:
        modules.append(_module(registry, "PRIORITY_ACTION", reason=AUTH_REASON))
    elif has_no_data:
        modules.append(_module(registry, "EMPTY_STATE_GUIDANCE", reason=EMPTY_STATE_REASON))
    elif priority_pillar:
        modules.append(_module(registry, "PRIORITY_ACTION", pillar=priority_pillar))
    else:
        modules.append(_module(registry, "PRIORITY_ACTION", reason=DEFAULT_PRIORITY_REASON))

    if not unauthenticated and not has_no_data and user.hasAnyData and not user.todayCompleted:
        modules.append(_module(registry, "NARRATIVE_INSIGHT", reason=NARRATIVE_REASON))

    # Supporting, never dominant.
    modules.append(_module(registry, "OVERALL_SCORE", emphasis="secondary"))

    modules.append(_module(registry, "PILLAR_OVERVIEW", userConfigurable=True, collapsed=True))

    if user.momentum.checkIns > 0:
        modules.append(_module(registry, "MOMENTUM"))

    # Safety override: not subject to the single-priority rule.
    if user.distressSignals:
        modules.append(_module(registry, "SUPPORT"))

    modules.append(_module(registry, "AI_ENTRY"))
    return modules
