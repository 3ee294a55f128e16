"""项目模板与分配。

同一主题的模板分配给多个小组时逐组深拷贝，保证任何两个小组
都不会共享同一个阶段或任务对象。
"""

from __future__ import annotations

import logging
from typing import Sequence

from pbl_engine.models import Phase, PhaseStatus, Project, ProjectStatus, Resource, Task, Team

logger = logging.getLogger(__name__)

# (阶段标题, 阶段说明, 任务标题列表)
DEFAULT_PHASES = (
    (
        "Entry Event & Driving Question",
        "Kickoff the project with an engaging event and form the central question.",
        (
            "Analyze the project scenario",
            "Brainstorm initial questions",
            "Define the Driving Question",
        ),
    ),
    (
        "Inquiry & Innovation",
        "Conduct research and explore existing solutions.",
        (
            "Assign research roles",
            "Gather data and resources",
            "Identify constraints and criteria",
        ),
    ),
    (
        "Creation & Prototyping",
        "Build the solution or prototype.",
        ("Design the solution", "Develop the prototype", "Test and iterate"),
    ),
    (
        "Presentation & Reflection",
        "Present findings and reflect on the learning process.",
        ("Prepare the presentation", "Deliver final pitch", "Complete reflection journal"),
    ),
)

DEFAULT_RESOURCES = (
    Resource(title="Project Guide", uri="https://example.com/guide"),
    Resource(title="Research Template", uri="https://example.com/template"),
)


def build_project_template(topic: str) -> Project:
    """生成四阶段项目模板，第一阶段为 active，其余 locked。"""

    topic = topic.strip()
    if not topic:
        raise ValueError("Project topic must not be blank")

    phases = tuple(
        Phase(
            id=f"phase-{phase_index}",
            title=title,
            description=description,
            status=PhaseStatus.ACTIVE if phase_index == 0 else PhaseStatus.LOCKED,
            tasks=tuple(
                Task(id=f"task-{phase_index}-{task_index}", title=task_title)
                for task_index, task_title in enumerate(task_titles)
            ),
        )
        for phase_index, (title, description, task_titles) in enumerate(DEFAULT_PHASES)
    )
    return Project(
        topic=topic,
        driving_question=f"How can we solve challenges related to {topic}?",
        description=(
            f"A comprehensive project-based learning experience exploring {topic}. "
            "Teams will research, design, and present innovative solutions."
        ),
        phases=phases,
        resources=DEFAULT_RESOURCES,
    )


def assign_project(teams: Sequence[Team], project: Project) -> list[Team]:
    """整体替换每个小组的项目，并将项目状态置为 active。"""

    assigned = [
        team.model_copy(
            update={
                "project": project.model_copy(deep=True),
                "project_status": ProjectStatus.ACTIVE,
            }
        )
        for team in teams
    ]
    logger.info("project_assigned topic=%s teams=%s", project.topic, len(assigned))
    return assigned
