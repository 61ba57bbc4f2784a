import uuid

from pydantic import BaseModel, Field

from teamspace.models.enums import DocType

class DocumentCreateIn(BaseModel):
    title: str = Field(min_length=1, max_length=300)
    content: str = ""
    project_id: uuid.UUID | None = None
    collaborator_ids: list[uuid.UUID] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    is_public: bool = False
    doc_type: DocType = DocType.note
    summary: str = ""

class DocumentUpdateIn(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=300)
    content: str | None = None
    collaborator_ids: list[uuid.UUID] | None = None
    tags: list[str] | None = None
    is_public: bool | None = None
    doc_type: DocType | None = None
    summary: str | None = None

class DocumentOut(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID | None
    owner_id: uuid.UUID
    title: str
    content: str
    summary: str
    tags: list[str]
    is_public: bool
    doc_type: DocType
    collaborator_ids: list[uuid.UUID]
