from pydantic import BaseModel, EmailStr

from teamspace.schemas.orgs import OrgCreateIn

class RequestLinkIn(BaseModel):
    email: EmailStr
    name: str | None = None
    # honoured only when the email registers a new account
    organization: OrgCreateIn | None = None

class RequestLinkOut(BaseModel):
    sent: bool = True
    token: str | None = None
    link: str | None = None

class RedeemIn(BaseModel):
    token: str

class AccessTokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
