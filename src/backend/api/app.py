from __future__ import annotations

from fastapi import FastAPI

from common.ruleset_engine.config import get_engine_config
from common.ruleset_engine.log_config import configure_logging

from api.rulesets import router as rulesets_router


def create_app() -> FastAPI:
    config = get_engine_config()
    configure_logging(config.log_level)

    app = FastAPI(title="Ruleset Engine", version="0.1.0")
    app.include_router(rulesets_router)
    return app
