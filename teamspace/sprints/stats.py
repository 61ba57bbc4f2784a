import math
from dataclasses import dataclass
from datetime import datetime

from teamspace.auth.tokens import as_utc, now_utc
from teamspace.models.enums import TaskStatus
from teamspace.models.sprint import Sprint
from teamspace.models.task import Task

_DAY_SECONDS = 24 * 60 * 60

@dataclass(frozen=True)
class SprintStats:
    total_story_points: int
    completed_story_points: int
    remaining_story_points: int
    total_tasks: int
    completed_tasks: int
    in_progress_tasks: int
    todo_tasks: int
    total_days: int
    days_elapsed: int
    days_remaining: int
    velocity: float

def _days_between(start: datetime, end: datetime) -> int:
    return math.ceil((as_utc(end) - as_utc(start)).total_seconds() / _DAY_SECONDS)

# burndown numbers; velocity is completed points per elapsed day
def compute_sprint_stats(sprint: Sprint, tasks: list[Task], now: datetime | None = None) -> SprintStats:
    now = now or now_utc()

    done = [t for t in tasks if t.status == TaskStatus.done]
    total_points = sum(t.story_points or 0 for t in tasks)
    completed_points = sum(t.story_points or 0 for t in done)

    total_days = _days_between(sprint.start_date, sprint.end_date)
    days_elapsed = _days_between(sprint.start_date, now)

    return SprintStats(
        total_story_points=total_points,
        completed_story_points=completed_points,
        remaining_story_points=total_points - completed_points,
        total_tasks=len(tasks),
        completed_tasks=len(done),
        in_progress_tasks=sum(1 for t in tasks if t.status == TaskStatus.in_progress),
        todo_tasks=sum(1 for t in tasks if t.status == TaskStatus.todo),
        total_days=total_days,
        days_elapsed=days_elapsed,
        days_remaining=max(0, total_days - days_elapsed),
        velocity=completed_points / days_elapsed if days_elapsed > 0 else 0.0,
    )
