import uuid
from datetime import datetime

from pydantic import BaseModel, Field

class CommentCreateIn(BaseModel):
    content: str = Field(min_length=1)
    parent_id: uuid.UUID | None = None

class CommentUpdateIn(BaseModel):
    content: str = Field(min_length=1)

class CommentOut(BaseModel):
    id: uuid.UUID
    task_id: uuid.UUID
    author_id: uuid.UUID
    parent_id: uuid.UUID | None
    content: str
    created_at: datetime
