import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict

Environment = Literal["development", "production"]

TRUTHY = {"1", "true", "yes", "on"}
DEFAULT_EVENT_LOG_MAX = 500


class CapabilityFlags(BaseModel):
    """Static gates for the AI, persistence and personalisation seams.

    Loaded once at process start and passed explicitly to every gated code
    path. All gates are off unless the environment switches them on.
    """

    model_config = ConfigDict(frozen=True)

    AI_INVOCATION_ENABLED: bool = False
    MC_PERSISTENCE_ENABLED: bool = False
    MC_PERSONALISATION_PERSISTENCE_ENABLED: bool = False
    MC_TELEMETRY_ENABLED: bool = False


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    environment: Environment = "development"
    log_level: str = "INFO"
    event_log_max: int = DEFAULT_EVENT_LOG_MAX
    capabilities: CapabilityFlags = CapabilityFlags()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def _flag(env: Mapping[str, str], name: str) -> bool:
    return (env.get(name) or "").strip().lower() in TRUTHY


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def load_capabilities(env: Optional[Mapping[str, str]] = None) -> CapabilityFlags:
    source = os.environ if env is None else env
    return CapabilityFlags(**{name: _flag(source, name) for name in CapabilityFlags.model_fields})


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    source = os.environ if env is None else env
    environment = (source.get("NORTHSTAR_ENV") or "development").strip().lower()
    return Settings(
        environment="production" if environment == "production" else "development",
        log_level=(source.get("NORTHSTAR_LOG_LEVEL") or "INFO").upper(),
        event_log_max=_int(source, "MC_EVENT_LOG_MAX", DEFAULT_EVENT_LOG_MAX),
        capabilities=load_capabilities(source),
    )
