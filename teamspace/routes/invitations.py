from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from teamspace.auth.deps import get_principal
from teamspace.auth.principal import Principal
from teamspace.config import settings
from teamspace.db import get_db
from teamspace.orgs import invitations
from teamspace.ratelimit import rate_limit
from teamspace.routes.orgs import org_out
from teamspace.schemas.orgs import AcceptOut, InvitationDetailsOut

router = APIRouter(prefix="/invitations", tags=["invitations"])

# public: the token is the only credential
@router.get("/{token}", response_model=InvitationDetailsOut)
def get_invitation(
    token: str,
    db: Session = Depends(get_db),
    _: None = Depends(
        rate_limit(
            "invitations:lookup",
            limit_per_window=settings.rate_limit_invite_lookup_per_min,
            window_seconds=60,
        )
    ),
) -> InvitationDetailsOut:
    d = invitations.get_invitation_details(db, token)
    return InvitationDetailsOut(
        organization_name=d.organization_name,
        organization_description=d.organization_description,
        role=d.role,
        email=d.email,
        expires_at=d.expires_at,
    )

@router.post("/{token}/accept", response_model=AcceptOut)
def accept_invitation(
    token: str,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> AcceptOut:
    org = invitations.accept_invitation(db, token, principal)
    return AcceptOut(message="successfully joined organization", organization=org_out(org))
