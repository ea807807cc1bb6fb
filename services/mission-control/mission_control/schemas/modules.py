from typing import Any, Dict, List, Literal, Optional, get_args

from pydantic import BaseModel, ConfigDict

ModuleType = Literal[
    "PRIORITY_ACTION",
    "EMPTY_STATE_GUIDANCE",
    "NARRATIVE_INSIGHT",
    "OVERALL_SCORE",
    "PILLAR_OVERVIEW",
    "MOMENTUM",
    "SUPPORT",
    "AI_ENTRY",
]

MODULE_TYPES: List[str] = list(get_args(ModuleType))

Emphasis = Literal["primary", "secondary"]


class RegistryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: ModuleType
    order: int
    defaultVisible: bool = True


class ModuleDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    type: ModuleType
    reason: Optional[str] = None
    pillar: Optional[str] = None
    emphasis: Optional[Emphasis] = None
    collapsed: Optional[bool] = None
    userConfigurable: Optional[bool] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class RenderedCard(BaseModel):
    moduleId: str
    type: ModuleType
    title: str
    body: Optional[str] = None
    emphasis: Emphasis = "primary"
    collapsed: bool = False
    data: Dict[str, Any] = {}
