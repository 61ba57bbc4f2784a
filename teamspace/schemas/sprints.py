import uuid
from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from teamspace.models.enums import SprintStatus
from teamspace.schemas.tasks import TaskOut

class SprintCreateIn(BaseModel):
    project_id: uuid.UUID
    name: str = Field(min_length=1, max_length=200)
    goal: str | None = None
    start_date: datetime
    end_date: datetime

    @model_validator(mode="after")
    def _dates_ordered(self) -> "SprintCreateIn":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

class SprintUpdateIn(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    goal: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None

class SprintOut(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    name: str
    goal: str | None
    start_date: datetime
    end_date: datetime
    status: SprintStatus
    created_by: uuid.UUID

class SprintDetailOut(BaseModel):
    sprint: SprintOut
    tasks: list[TaskOut]

class SprintStatsOut(BaseModel):
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
