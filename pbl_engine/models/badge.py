"""徽章目录 - 静态定义，运行期不会新增或修改。"""

from typing import Dict, Tuple

from pydantic import BaseModel


class Badge(BaseModel):
    """Static catalog entry for an achievement marker."""

    id: str
    name: str
    icon: str
    description: str
    color: str

    model_config = {"frozen": True}


FIRST_STEP = "first-step"
MOMENTUM = "momentum"
PHASE_MASTER = "phase-master"
HALFWAY = "halfway"
CHAMPION = "champion"

BADGES: Tuple[Badge, ...] = (
    Badge(
        id=FIRST_STEP,
        name="First Step",
        icon="🚀",
        description="Complete your first task",
        color="bg-blue-100 text-blue-600",
    ),
    Badge(
        id=MOMENTUM,
        name="Momentum",
        icon="🔥",
        description="Complete 3 tasks",
        color="bg-orange-100 text-orange-600",
    ),
    Badge(
        id=PHASE_MASTER,
        name="Phase Master",
        icon="✨",
        description="Complete a project phase",
        color="bg-purple-100 text-purple-600",
    ),
    Badge(
        id=HALFWAY,
        name="Halfway There",
        icon="⛰️",
        description="Reach 50% project completion",
        color="bg-teal-100 text-teal-600",
    ),
    Badge(
        id=CHAMPION,
        name="Champion",
        icon="🏆",
        description="Complete the entire project",
        color="bg-yellow-100 text-yellow-600",
    ),
)

BADGES_BY_ID: Dict[str, Badge] = {badge.id: badge for badge in BADGES}
