import logging
import math
import re
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..schemas.modules import ModuleDescriptor, RenderedCard
from ..schemas.user_state import NormalizedUserState
from .normalize import UserStateLike, normalize_user_state
from .registry import MISSION_CONTROL_MODULES

logger = logging.getLogger(__name__)

PresentationHandler = Callable[[ModuleDescriptor, NormalizedUserState], RenderedCard]

COPY_BY_PILLAR: Dict[str, str] = {
    "sleep": "Wind down earlier tonight",
    "nutrition": "Do a simple nutrition check-in",
    "mental": "Take a short mental reset",
    "exercise": "Do light movement now",
}
DEFAULT_ACTION_COPY = "Do this now"
AUTH_ACTION_COPY = "Sign in to continue"
FALLBACK_INSIGHT = "Energy is stable, but one system needs attention today."
MAX_INSIGHT_LENGTH = 140

FIRST_SENTENCE = re.compile(r"^(.+?[.!?])(?:\s|$)")


def clamp_score(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    return max(0, min(100, round(value)))


def first_sentence(text: Any) -> str:
    if not isinstance(text, str):
        return ""
    cleaned = re.sub(r"\s+", " ", text).strip()
    if not cleaned:
        return ""
    match = FIRST_SENTENCE.match(cleaned)
    sentence = (match.group(1) if match else cleaned).strip()
    if len(sentence) > MAX_INSIGHT_LENGTH:
        return f"{sentence[:MAX_INSIGHT_LENGTH - 3].strip()}…"
    return sentence


def _priority_action(module: ModuleDescriptor, user: NormalizedUserState) -> RenderedCard:
    if module.reason == "auth":
        title = AUTH_ACTION_COPY
    elif module.pillar:
        title = COPY_BY_PILLAR.get(module.pillar, DEFAULT_ACTION_COPY)
    else:
        title = DEFAULT_ACTION_COPY
    return RenderedCard(moduleId=module.id, type=module.type, title=title, body=module.reason, data={"pillar": module.pillar})


def _empty_state(module: ModuleDescriptor, user: NormalizedUserState) -> RenderedCard:
    return RenderedCard(
        moduleId=module.id,
        type=module.type,
        title="Let's get your first check-in done",
        body="Log one habit or finish onboarding to unlock your dashboard.",
    )


def _narrative_insight(module: ModuleDescriptor, user: NormalizedUserState) -> RenderedCard:
    insight = first_sentence(module.reason) or FALLBACK_INSIGHT
    return RenderedCard(moduleId=module.id, type=module.type, title="Insight", body=insight)


def _overall_score(module: ModuleDescriptor, user: NormalizedUserState) -> RenderedCard:
    return RenderedCard(
        moduleId=module.id,
        type=module.type,
        title="Life score",
        emphasis=module.emphasis or "secondary",
        data={"lifeScore": clamp_score(user.lifeScore)},
    )


def _pillar_overview(module: ModuleDescriptor, user: NormalizedUserState) -> RenderedCard:
    scores = {key: clamp_score(pillar.score) for key, pillar in user.pillars.items() if pillar.score is not None}
    return RenderedCard(
        moduleId=module.id,
        type=module.type,
        title="Pillars",
        collapsed=bool(module.collapsed),
        data={"scores": scores, "userConfigurable": bool(module.userConfigurable)},
    )


def _momentum(module: ModuleDescriptor, user: NormalizedUserState) -> RenderedCard:
    return RenderedCard(
        moduleId=module.id,
        type=module.type,
        title="Momentum",
        data={"checkIns": user.momentum.checkIns, "streaks": user.momentum.streaks},
    )


def _support(module: ModuleDescriptor, user: NormalizedUserState) -> RenderedCard:
    return RenderedCard(
        moduleId=module.id,
        type=module.type,
        title="Support is available",
        body="If things feel heavy right now, reach out to someone you trust or a local support line.",
    )


def _ai_entry(module: ModuleDescriptor, user: NormalizedUserState) -> RenderedCard:
    return RenderedCard(moduleId=module.id, type=module.type, title="Ask NorthStar", data={"actionId": "ASK_AI_COACH"})


DEFAULT_HANDLERS: Dict[str, PresentationHandler] = {
    "PRIORITY_ACTION": _priority_action,
    "EMPTY_STATE_GUIDANCE": _empty_state,
    "NARRATIVE_INSIGHT": _narrative_insight,
    "OVERALL_SCORE": _overall_score,
    "PILLAR_OVERVIEW": _pillar_overview,
    "MOMENTUM": _momentum,
    "SUPPORT": _support,
    "AI_ENTRY": _ai_entry,
}


class ModuleRenderer:
    """Dispatches composed modules to one presentation handler per type."""

    def __init__(self, handlers: Optional[Mapping[str, PresentationHandler]] = None) -> None:
        self._handlers: Dict[str, PresentationHandler] = dict(DEFAULT_HANDLERS if handlers is None else handlers)

    def render(self, modules: List[ModuleDescriptor], user_state: UserStateLike = None) -> List[RenderedCard]:
        user = normalize_user_state(user_state)
        if not modules:
            empty = MISSION_CONTROL_MODULES["EMPTY_STATE_GUIDANCE"]
            return [_empty_state(ModuleDescriptor(id=empty.id, type=empty.type), user)]

        cards: List[RenderedCard] = []
        for module in modules:
            handler = self._handlers.get(module.type)
            if handler is None:
                logger.warning("No presentation handler for module type %s", module.type)
                continue
            cards.append(handler(module, user))
        return cards
