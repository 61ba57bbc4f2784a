import uuid

from pydantic import BaseModel

from teamspace.models.enums import GlobalRole
from teamspace.schemas.common import GlobalRoleIn

class UserOut(BaseModel):
    id: uuid.UUID
    email: str
    name: str | None
    role: GlobalRole

class UserUpdateIn(BaseModel):
    name: str | None = None

class UserRoleIn(BaseModel):
    role: GlobalRoleIn
