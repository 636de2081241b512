"""Selection logic behind the stop-categorization dialog.

Stopping a timer requires a project and a task. The choices come from two
source lists each (owned + member-of projects, created + assigned tasks) that
may overlap, so they are merged by identity before being offered.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol, TypeVar

from worklog.api.client import ProjectDirectory
from worklog.api.models import Project, StopRequest, Task
from worklog.utils.logging import get_logger

logger = get_logger("worklog.categorization")


class _HasId(Protocol):
    id: int


T = TypeVar("T", bound=_HasId)


def merge_unique(*sources: Iterable[T]) -> list[T]:
    """Concatenate ``sources`` keeping the first item seen for each id."""
    seen: set[int] = set()
    merged: list[T] = []
    for source in sources:
        for item in source:
            if item.id not in seen:
                seen.add(item.id)
                merged.append(item)
    return merged


def selectable_projects(projects: Iterable[Project]) -> list[Project]:
    """Projects that still accept time (not Completed/Done)."""
    return [p for p in projects if not p.is_closed]


def selectable_tasks(tasks: Iterable[Task], project_id: int | None) -> list[Task]:
    """Open tasks of ``project_id``; nothing until a project is chosen.

    Done tasks are excluded so tracked time never reopens a finished task.
    """
    if project_id is None:
        return []
    return [t for t in tasks if t.project_id == project_id and not t.is_done]


@dataclass
class CategorizationChoices:
    """Merged, deduplicated source lists for one dialog session."""

    projects: list[Project] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)

    @property
    def open_projects(self) -> list[Project]:
        return selectable_projects(self.projects)

    def tasks_for(self, project_id: int | None) -> list[Task]:
        return selectable_tasks(self.tasks, project_id)


async def load_choices(directory: ProjectDirectory) -> CategorizationChoices:
    """Fetch all four source lists concurrently and merge them."""
    # Every fetch settles before a failure is raised; none is left orphaned.
    results = await asyncio.gather(
        directory.owned_projects(),
        directory.member_projects(),
        directory.created_tasks(),
        directory.assigned_tasks(),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result
    owned, member, created, assigned = results
    choices = CategorizationChoices(
        projects=merge_unique(owned, member),
        tasks=merge_unique(created, assigned),
    )
    logger.debug(
        "categorization.loaded",
        projects=len(choices.projects),
        tasks=len(choices.tasks),
    )
    return choices


class CategorizationForm:
    """State of the stop dialog: selections, note and confirm gating."""

    def __init__(self, choices: CategorizationChoices | None = None):
        self.choices = choices or CategorizationChoices()
        self.project_id: int | None = None
        self.task_id: int | None = None
        self.note: str = ""

    @property
    def project_options(self) -> list[Project]:
        return self.choices.open_projects

    @property
    def task_options(self) -> list[Task]:
        return self.choices.tasks_for(self.project_id)

    def select_project(self, project_id: int | None) -> None:
        self.project_id = project_id
        # A task from another project can no longer be submitted.
        if self.task_id not in {t.id for t in self.task_options}:
            self.task_id = None

    def select_task(self, task_id: int | None) -> None:
        if task_id is not None and task_id not in {t.id for t in self.task_options}:
            raise ValueError(f"Task {task_id} is not selectable for project {self.project_id}")
        self.task_id = task_id

    @property
    def can_confirm(self) -> bool:
        return self.project_id is not None and self.task_id is not None

    def to_request(self) -> StopRequest:
        return StopRequest(
            project_id=self.project_id,
            task_id=self.task_id,
            description=self.note,
        )

    def reset(self) -> None:
        self.project_id = None
        self.task_id = None
        self.note = ""
