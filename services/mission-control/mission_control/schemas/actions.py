from typing import Any, Dict, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict, Field

LifecycleType = Literal["invoked", "completed", "shown", "acted", "deferred", "dismissed"]
Outcome = Literal["success", "error"]

LIFECYCLE_STATES = set(get_args(LifecycleType))


class ActionDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    description: str


class ActionLifecycleEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: LifecycleType
    actionId: str = Field(min_length=1)
    ts: int = Field(ge=0)
    outcome: Optional[Outcome] = None
    meta: Dict[str, Any] = {}
    priorityContext: Dict[str, Any] = {}


class ActionState(BaseModel):
    actionId: str = Field(min_length=1)
    lifecycle: LifecycleType
    lastUpdatedAt: int = Field(ge=0)
    userAgency: Dict[str, Any] = {}
    priorityContext: Dict[str, Any] = {}


class PersistenceResult(BaseModel):
    status: Literal["stored", "disabled", "failed"]
    message: Optional[str] = None


class AiInvocationRequest(BaseModel):
    draft: str
    aiContext: Dict[str, Any] = {}


class AiInvocationResult(BaseModel):
    status: Literal["ok", "disabled"]
    message: str
    reply: Optional[str] = None
    aiContext: Dict[str, Any] = {}
