from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .core.config import Settings, load_settings
from .core.log import configure_logging
from .api.routes import router as api_router
import chargectl.api.routes as routes_module
from .services.charge_loop import ChargeLoop
from .services.factory import build_loop


logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    charge_loop: Optional[ChargeLoop] = None,
    log_to_file: bool = True,
) -> FastAPI:
    state: dict = {"settings": settings, "loop": charge_loop}

    def get_loop() -> ChargeLoop:
        assert state["loop"] is not None
        return state["loop"]

    def get_settings() -> Settings:
        assert state["settings"] is not None
        return state["settings"]

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Missing HOMEASSISTANT_* raises here and aborts startup
        if state["settings"] is None:
            state["settings"] = load_settings()
        cfg: Settings = state["settings"]

        configure_logging(cfg.log_file if log_to_file else None, cfg.log_level)
        logger.info("Starting %s (source=%s actuator=%s)", cfg.app_name, cfg.telemetry_source, cfg.actuator_mode)

        if state["loop"] is None:
            state["loop"] = build_loop(cfg)
        await state["loop"].start()

        try:
            yield
        finally:
            await state["loop"].stop()
            logger.info("Shutdown complete")

    app = FastAPI(title="Charge Controller", lifespan=lifespan)

    # Make the dependency functions in routes resolve to the real ones
    app.dependency_overrides[routes_module.get_loop] = get_loop
    app.dependency_overrides[routes_module.get_settings] = get_settings

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()
