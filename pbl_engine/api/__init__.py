"""API 路由包入口。"""

from fastapi import APIRouter

from pbl_engine.api import analytics, teams

router = APIRouter(prefix="/api")

# 注册子路由
router.include_router(teams.router)
router.include_router(analytics.router)
