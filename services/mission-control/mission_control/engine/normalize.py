import math
from typing import Any, Dict, Mapping, Optional

from ..schemas.user_state import Momentum, NormalizedUserState, PillarScore

UserStateLike = Any


def _number(value: Any) -> Optional[float]:
    # bool is an int subclass; a flag is never a score.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        as_float = float(value)
    except OverflowError:
        return None
    return as_float if math.isfinite(as_float) else None


def _flag(value: Any) -> bool:
    return value is True


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _normalize_pillars(raw: Any) -> Dict[str, PillarScore]:
    pillars: Dict[str, PillarScore] = {}
    for key, entry in _mapping(raw).items():
        if not isinstance(key, str):
            continue
        pillars[key] = PillarScore(score=_number(_mapping(entry).get("score")))
    return pillars


def _normalize_momentum(raw: Any) -> Momentum:
    momentum = _mapping(raw)
    return Momentum(
        checkIns=_number(momentum.get("checkIns")) or 0,
        streaks=_number(momentum.get("streaks")) or 0,
    )


def normalize_user_state(raw: UserStateLike) -> NormalizedUserState:
    """Project an untrusted user-state payload onto a total, typed record.

    Accepts anything (``None``, a partial dict, junk) and never raises. Nested
    objects are defaulted field by field, so ``{"momentum": {"checkIns": 5}}``
    keeps its check-ins and only ``streaks`` falls back to 0.
    """
    state = _mapping(raw)
    return NormalizedUserState(
        isAuthenticated=_flag(state.get("isAuthenticated")),
        hasAnyData=_flag(state.get("hasAnyData")),
        lifeScore=_number(state.get("lifeScore")) or 0,
        pillars=_normalize_pillars(state.get("pillars")),
        momentum=_normalize_momentum(state.get("momentum")),
        distressSignals=_flag(state.get("distressSignals")),
        lastActionAt=_number(state.get("lastActionAt")),
        todayCompleted=_flag(state.get("todayCompleted")),
    )
