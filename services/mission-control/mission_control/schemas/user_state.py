from typing import Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict

PillarKey = Literal[
    "sleep",
    "nutrition",
    "mental",
    "exercise",
    "physical",
    "finances",
    "social",
    "purpose",
]


class PillarScore(BaseModel):
    model_config = ConfigDict(frozen=True)

    score: Optional[float] = None


class Momentum(BaseModel):
    model_config = ConfigDict(frozen=True)

    checkIns: float = 0
    streaks: float = 0


class NormalizedUserState(BaseModel):
    model_config = ConfigDict(frozen=True)

    isAuthenticated: bool = False
    hasAnyData: bool = False
    lifeScore: float = 0
    pillars: Dict[str, PillarScore] = {}
    momentum: Momentum = Momentum()
    distressSignals: bool = False
    lastActionAt: Optional[float] = None
    todayCompleted: bool = False
