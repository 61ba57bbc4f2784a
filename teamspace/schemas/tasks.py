import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from teamspace.models.enums import TaskPriority, TaskStatus, TaskType

class TaskCreateIn(BaseModel):
    project_id: uuid.UUID
    title: str = Field(min_length=1, max_length=300)
    description: str | None = None
    status: TaskStatus = TaskStatus.todo
    priority: TaskPriority = TaskPriority.medium
    type: TaskType = TaskType.task
    assignee_id: uuid.UUID | None = None
    sprint_id: uuid.UUID | None = None
    epic_id: uuid.UUID | None = None
    due_date: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    story_points: int | None = Field(default=None, ge=0)
    estimated_hours: float | None = Field(default=None, ge=0)

class TaskUpdateIn(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    type: TaskType | None = None
    assignee_id: uuid.UUID | None = None
    sprint_id: uuid.UUID | None = None
    epic_id: uuid.UUID | None = None
    due_date: datetime | None = None
    tags: list[str] | None = None
    story_points: int | None = Field(default=None, ge=0)
    estimated_hours: float | None = Field(default=None, ge=0)
    actual_hours: float | None = Field(default=None, ge=0)

class TaskOut(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    title: str
    description: str | None
    status: TaskStatus
    priority: TaskPriority
    type: TaskType
    assignee_id: uuid.UUID | None
    reporter_id: uuid.UUID | None
    sprint_id: uuid.UUID | None
    epic_id: uuid.UUID | None
    due_date: datetime | None
    tags: list[str]
    story_points: int | None
    estimated_hours: float | None
    actual_hours: float | None
    created_at: datetime
