import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from teamspace.auth.deps import get_principal
from teamspace.auth.principal import Principal
from teamspace.db import get_db
from teamspace.models.invitation import Invitation
from teamspace.models.membership import Membership
from teamspace.models.org import Org
from teamspace.orgs import invitations, members, organizations
from teamspace.rbac.deps import OrgContext, get_org_context, require_perm
from teamspace.schemas.orgs import (
    InvitationOut,
    InviteIn,
    InviteOut,
    MemberOut,
    MemberRoleIn,
    OrgCreateIn,
    OrgOut,
    OrgSettings,
    OrgUpdateIn,
)

router = APIRouter(prefix="/orgs", tags=["orgs"])

def org_out(org: Org) -> OrgOut:
    return OrgOut(
        id=org.id,
        name=org.name,
        description=org.description,
        created_by=org.created_by,
        settings=OrgSettings(
            allow_member_invite=org.allow_member_invite,
            require_approval=org.require_approval,
        ),
    )

def invitation_out(inv: Invitation) -> InvitationOut:
    return InvitationOut(
        id=inv.id,
        org_id=inv.org_id,
        email=inv.email,
        role=inv.role,
        status=inv.status,
        invited_by=inv.invited_by,
        expires_at=inv.expires_at,
    )

def member_out(m: Membership, email: str | None = None) -> MemberOut:
    return MemberOut(user_id=m.user_id, org_id=m.org_id, email=email, role=m.role, joined_at=m.joined_at)

@router.post("", response_model=OrgOut)
def create_org(
    payload: OrgCreateIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> OrgOut:
    org = organizations.create_org(
        db,
        principal,
        name=payload.name,
        description=payload.description,
        allow_member_invite=payload.allow_member_invite,
        require_approval=payload.require_approval,
    )
    return org_out(org)

@router.get("", response_model=list[OrgOut])
def list_orgs(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> list[OrgOut]:
    return [org_out(o) for o in organizations.list_orgs_for(db, principal)]

@router.get("/{org_id}", response_model=OrgOut)
def get_org(ctx: OrgContext = Depends(get_org_context)) -> OrgOut:
    return org_out(ctx.org)

@router.patch("/{org_id}", response_model=OrgOut)
def update_org(
    payload: OrgUpdateIn,
    ctx: OrgContext = Depends(require_perm("org:update")),
    db: Session = Depends(get_db),
) -> OrgOut:
    org = organizations.update_org(
        db,
        ctx.org,
        name=payload.name,
        description=payload.description,
        settings=payload.settings,
        description_set="description" in payload.model_fields_set,
    )
    return org_out(org)

@router.delete("/{org_id}")
def delete_org(
    ctx: OrgContext = Depends(require_perm("org:delete")),
    db: Session = Depends(get_db),
) -> dict:
    organizations.delete_org(db, ctx.org)
    return {"deleted": True}

@router.get("/{org_id}/members", response_model=list[MemberOut])
def list_members(
    org_id: uuid.UUID,
    ctx: OrgContext = Depends(get_org_context),
    db: Session = Depends(get_db),
) -> list[MemberOut]:
    return [member_out(m, u.email) for m, u in organizations.list_members(db, org_id)]

@router.post("/{org_id}/invites", response_model=InviteOut)
def invite_user(
    org_id: uuid.UUID,
    payload: InviteIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> InviteOut:
    result = invitations.create_invitation(db, org_id, principal, payload.email, payload.role)
    inv = result.invitation
    return InviteOut(
        id=inv.id,
        email=inv.email,
        role=inv.role,
        status=inv.status,
        expires_at=inv.expires_at,
        message="invitation sent" if result.email_sent else "invitation created (email not configured)",
        invite_link=result.invite_link,
    )

@router.get("/{org_id}/invitations", response_model=list[InvitationOut])
def list_invitations(
    org_id: uuid.UUID,
    ctx: OrgContext = Depends(require_perm("org:invitations:list")),
    db: Session = Depends(get_db),
) -> list[InvitationOut]:
    return [invitation_out(i) for i in invitations.list_invitations(db, org_id)]

@router.delete("/{org_id}/invitations/{invitation_id}")
def cancel_invitation(
    org_id: uuid.UUID,
    invitation_id: uuid.UUID,
    ctx: OrgContext = Depends(require_perm("org:invitations:cancel")),
    db: Session = Depends(get_db),
) -> dict:
    invitations.cancel_invitation(db, org_id, invitation_id, ctx.principal)
    return {"deleted": True}

@router.delete("/{org_id}/members/{user_id}")
def remove_member(
    org_id: uuid.UUID,
    user_id: uuid.UUID,
    ctx: OrgContext = Depends(require_perm("org:members:remove")),
    db: Session = Depends(get_db),
) -> dict:
    members.remove_member(db, org_id, ctx.principal, user_id)
    return {"removed": True}

@router.patch("/{org_id}/members/{user_id}/role", response_model=MemberOut)
def update_member_role(
    org_id: uuid.UUID,
    user_id: uuid.UUID,
    payload: MemberRoleIn,
    ctx: OrgContext = Depends(require_perm("org:members:role")),
    db: Session = Depends(get_db),
) -> MemberOut:
    m = members.update_member_role(db, org_id, ctx.principal, user_id, payload.role)
    return member_out(m)
