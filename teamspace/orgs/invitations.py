"""Organization invitation lifecycle.

PENDING -> ACCEPTED when the invitee accepts, PENDING -> EXPIRED when any read
or accept happens after `expires_at`. There is no sweeper: a stale row keeps
saying PENDING until someone touches it.
"""
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teamspace.auth.principal import Principal
from teamspace.auth.tokens import as_utc, invitation_expiry, invite_link, new_invitation_token, now_utc
from teamspace.errors import (
    AlreadyInvited,
    AlreadyMember,
    AlreadyUsedOrExpired,
    InvalidRole,
    InvitationExpired,
    NotAuthorized,
    NotFound,
    WrongEmail,
)
from teamspace.models.enums import INVITABLE_ROLES, InvitationStatus, Role
from teamspace.models.invitation import Invitation
from teamspace.models.membership import Membership
from teamspace.models.org import Org
from teamspace.models.user import User
from teamspace.notify.email import send_invitation_email
from teamspace.rbac.perms import has_perm
from teamspace.rbac.resolver import require_org_action, resolve_org_role

logger = logging.getLogger(__name__)

InvitationSender = Callable[..., bool]

@dataclass(frozen=True)
class InvitationResult:
    invitation: Invitation
    # only set when the email was not delivered; the client shows it for manual sharing
    invite_link: str | None
    email_sent: bool

@dataclass(frozen=True)
class InvitationDetails:
    organization_name: str
    organization_description: str | None
    role: Role
    email: str
    expires_at: datetime

def can_invite(org: Org, role: Role | None) -> bool:
    if has_perm(role, "org:invite"):
        return True
    return role == Role.member and org.allow_member_invite

def is_expired(invitation: Invitation, now: datetime | None = None) -> bool:
    return (now or now_utc()) > as_utc(invitation.expires_at)

def _expire(db: Session, invitation: Invitation) -> None:
    invitation.status = InvitationStatus.expired
    db.add(invitation)
    db.commit()
    logger.info("invitation %s expired", invitation.id)

def _is_member_email(db: Session, org_id: uuid.UUID, email: str) -> bool:
    q = (
        select(Membership.user_id)
        .join(User, User.id == Membership.user_id)
        .where(Membership.org_id == org_id, func.lower(User.email) == email)
    )
    return db.scalar(q) is not None

def _pending_for(db: Session, org_id: uuid.UUID, email: str) -> Invitation | None:
    return db.scalar(
        select(Invitation).where(
            Invitation.org_id == org_id,
            Invitation.email == email,
            Invitation.status == InvitationStatus.pending,
        )
    )

def create_invitation(
    db: Session,
    org_id: uuid.UUID,
    inviter: Principal,
    email: str,
    role: Role,
    send: InvitationSender = send_invitation_email,
) -> InvitationResult:
    org = db.get(Org, org_id)
    if org is None:
        raise NotFound("organization not found")

    inviter_role = resolve_org_role(db, inviter.user_id, org_id)
    if inviter_role is None:
        raise NotAuthorized("not a member of this organization")
    if not can_invite(org, inviter_role):
        raise NotAuthorized("not authorized to invite members")

    if role not in INVITABLE_ROLES:
        raise InvalidRole("invitations can grant admin or member only")

    email = email.strip().lower()
    if _is_member_email(db, org_id, email):
        raise AlreadyMember()

    pending = _pending_for(db, org_id, email)
    if pending is not None:
        if not is_expired(pending):
            raise AlreadyInvited()
        _expire(db, pending)

    invitation = Invitation(
        org_id=org_id,
        email=email,
        role=role,
        invited_by=inviter.user_id,
        token=new_invitation_token(),
        status=InvitationStatus.pending,
        expires_at=invitation_expiry(),
    )
    db.add(invitation)
    try:
        db.commit()
    except IntegrityError:
        # lost a race against another invite for the same email
        db.rollback()
        raise AlreadyInvited()
    db.refresh(invitation)
    logger.info("invitation %s issued for org %s by %s", invitation.id, org_id, inviter.user_id)

    link = invite_link(invitation.token)
    inviter_user = db.get(User, inviter.user_id)
    sent = send(
        to=email,
        organization_name=org.name,
        inviter_name=(inviter_user.name if inviter_user and inviter_user.name else "A team member"),
        invite_link=link,
        role=role.value,
    )
    if not sent:
        logger.warning("invitation %s not emailed, returning link to caller", invitation.id)

    return InvitationResult(invitation=invitation, invite_link=None if sent else link, email_sent=sent)

def _pending_by_token(db: Session, token: str) -> Invitation:
    invitation = db.scalar(select(Invitation).where(Invitation.token == token))
    if invitation is None:
        raise NotFound("invitation not found")
    if invitation.status != InvitationStatus.pending:
        raise AlreadyUsedOrExpired()
    if is_expired(invitation):
        _expire(db, invitation)
        raise InvitationExpired()
    return invitation

def get_invitation_details(db: Session, token: str) -> InvitationDetails:
    invitation = _pending_by_token(db, token)
    org = db.get(Org, invitation.org_id)
    if org is None:
        raise NotFound("invitation not found")

    return InvitationDetails(
        organization_name=org.name,
        organization_description=org.description,
        role=Role(invitation.role),
        email=invitation.email,
        expires_at=as_utc(invitation.expires_at),
    )

def accept_invitation(db: Session, token: str, principal: Principal) -> Org:
    invitation = _pending_by_token(db, token)

    if principal.email.lower() != invitation.email:
        raise WrongEmail()

    if db.get(Membership, {"user_id": principal.user_id, "org_id": invitation.org_id}) is not None:
        raise AlreadyMember("already a member of this organization")

    # membership + status flip commit together or not at all
    db.add(Membership(user_id=principal.user_id, org_id=invitation.org_id, role=invitation.role))
    invitation.status = InvitationStatus.accepted
    db.add(invitation)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AlreadyMember("already a member of this organization")

    logger.info("invitation %s accepted by %s", invitation.id, principal.user_id)
    return db.get(Org, invitation.org_id)

def list_invitations(db: Session, org_id: uuid.UUID) -> list[Invitation]:
    rows = list(
        db.scalars(
            select(Invitation).where(Invitation.org_id == org_id).order_by(Invitation.created_at.desc())
        ).all()
    )
    now = now_utc()
    stale = [r for r in rows if r.status == InvitationStatus.pending and is_expired(r, now)]
    if stale:
        for r in stale:
            r.status = InvitationStatus.expired
            db.add(r)
        db.commit()
    return rows

def cancel_invitation(
    db: Session, org_id: uuid.UUID, invitation_id: uuid.UUID, principal: Principal
) -> None:
    require_org_action(db, principal, org_id, "org:invitations:cancel")

    invitation = db.get(Invitation, invitation_id)
    if invitation is None or invitation.org_id != org_id:
        raise NotFound("invitation not found")

    db.delete(invitation)
    db.commit()
    logger.info("invitation %s cancelled by %s", invitation_id, principal.user_id)
