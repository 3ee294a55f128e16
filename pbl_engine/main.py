"""FastAPI 入口，挂载分组/进度与统计路由。"""

import logging

from fastapi import FastAPI

from pbl_engine.api import router as api_router
from pbl_engine.config import get_settings


def create_app() -> FastAPI:
    """应用工厂，便于测试与拓展路由。"""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    app = FastAPI(title="PBL Progress Engine", version="0.1.0")
    app.include_router(api_router)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
