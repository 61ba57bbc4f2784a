import uuid
from datetime import datetime

from pydantic import BaseModel, Field

class ProjectCreateIn(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    org_id: uuid.UUID | None = None
    member_ids: list[uuid.UUID] | None = None
    auto_delete_at: datetime | None = None

class ProjectUpdateIn(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    member_ids: list[uuid.UUID] | None = None
    owner_id: uuid.UUID | None = None
    # an explicit null moves the project out of its organization
    org_id: uuid.UUID | None = None

class ProjectOut(BaseModel):
    id: uuid.UUID
    org_id: uuid.UUID | None
    owner_id: uuid.UUID
    name: str
    description: str | None
    member_ids: list[uuid.UUID]
    deleted_at: datetime | None = None
