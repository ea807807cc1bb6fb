import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .config import Settings, load_settings
from .engine.registry import check_registry
from .routers.mission_control import router as mission_control_router
from .runtime import build_runtime

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(name)-30s | %(levelname)-7s | %(message)s",
        datefmt="%H:%M:%S",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.mission_control.settings
    logger.info("Mission Control starting up (environment=%s)", settings.environment)
    logger.info("Capabilities: %s", settings.capabilities.model_dump())
    if not settings.is_production:
        check_registry()
    yield
    logger.info("Mission Control shutting down")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    resolved = settings or load_settings()
    configure_logging(resolved)

    app = FastAPI(title="NorthStar Mission Control", version="0.1.0", lifespan=lifespan)
    app.state.mission_control = build_runtime(resolved)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(mission_control_router)
    return app


app = create_app()
