import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from teamspace.models.enums import InvitationStatus, Role
from teamspace.schemas.common import RoleIn

class OrgSettings(BaseModel):
    allow_member_invite: bool = False
    require_approval: bool = False

class OrgCreateIn(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = None
    allow_member_invite: bool = False
    require_approval: bool = False

class OrgUpdateIn(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    description: str | None = None
    settings: dict[str, bool] | None = None

class OrgOut(BaseModel):
    id: uuid.UUID
    name: str
    description: str | None
    created_by: uuid.UUID
    settings: OrgSettings

class InviteIn(BaseModel):
    email: EmailStr
    role: RoleIn = Role.member

class InviteOut(BaseModel):
    id: uuid.UUID
    email: str
    role: Role
    status: InvitationStatus
    expires_at: datetime
    message: str
    invite_link: str | None = None

class InvitationOut(BaseModel):
    id: uuid.UUID
    org_id: uuid.UUID
    email: str
    role: Role
    status: InvitationStatus
    invited_by: uuid.UUID
    expires_at: datetime

class InvitationDetailsOut(BaseModel):
    organization_name: str
    organization_description: str | None
    role: Role
    email: str
    expires_at: datetime

class AcceptOut(BaseModel):
    message: str
    organization: OrgOut

class MemberOut(BaseModel):
    user_id: uuid.UUID
    org_id: uuid.UUID
    email: str | None = None
    role: Role
    joined_at: datetime | None = None

class MemberRoleIn(BaseModel):
    role: RoleIn
