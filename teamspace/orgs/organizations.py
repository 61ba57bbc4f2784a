import logging
import uuid

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from teamspace.auth.principal import Principal
from teamspace.auth.tokens import now_utc
from teamspace.errors import NotAuthorized
from teamspace.models.enums import Role
from teamspace.models.invitation import Invitation
from teamspace.models.membership import Membership
from teamspace.models.org import Org
from teamspace.models.project import Project
from teamspace.models.user import User

logger = logging.getLogger(__name__)

def add_org(
    db: Session,
    owner_id: uuid.UUID,
    name: str,
    description: str | None = None,
    allow_member_invite: bool = False,
    require_approval: bool = False,
) -> Org:
    """Stage an org and its OWNER membership. The caller commits."""
    org = Org(
        name=name.strip(),
        description=description,
        created_by=owner_id,
        allow_member_invite=allow_member_invite,
        require_approval=require_approval,
    )
    db.add(org)
    db.flush()

    # the only place an owner is minted without an invitation
    db.add(Membership(user_id=owner_id, org_id=org.id, role=Role.owner))
    return org

def create_org(
    db: Session,
    principal: Principal,
    name: str,
    description: str | None = None,
    allow_member_invite: bool = False,
    require_approval: bool = False,
) -> Org:
    if not principal.can_create_unscoped:
        raise NotAuthorized("only owners can create organizations")

    org = add_org(
        db,
        principal.user_id,
        name,
        description=description,
        allow_member_invite=allow_member_invite,
        require_approval=require_approval,
    )
    db.commit()
    db.refresh(org)

    logger.info("org %s created by %s", org.id, principal.user_id)
    return org

def list_orgs_for(db: Session, principal: Principal) -> list[Org]:
    q = (
        select(Org)
        .join(Membership, Membership.org_id == Org.id)
        .where(Membership.user_id == principal.user_id)
        .order_by(Org.created_at.desc())
    )
    return list(db.scalars(q).all())

def list_members(db: Session, org_id: uuid.UUID) -> list[tuple[Membership, User]]:
    q = (
        select(Membership, User)
        .join(User, User.id == Membership.user_id)
        .where(Membership.org_id == org_id)
        .order_by(Membership.joined_at)
    )
    return [(m, u) for m, u in db.execute(q).all()]

def update_org(
    db: Session,
    org: Org,
    name: str | None = None,
    description: str | None = None,
    settings: dict[str, bool] | None = None,
    description_set: bool = False,
) -> Org:
    if name:
        org.name = name.strip()
    if description_set:
        org.description = description
    if settings:
        if "allow_member_invite" in settings:
            org.allow_member_invite = bool(settings["allow_member_invite"])
        if "require_approval" in settings:
            org.require_approval = bool(settings["require_approval"])

    db.add(org)
    db.commit()
    db.refresh(org)
    return org

def delete_org(db: Session, org: Org) -> None:
    now = now_utc()

    # projects outlive the org only as soft-deleted rows
    db.execute(
        update(Project)
        .where(Project.org_id == org.id, Project.deleted_at.is_(None))
        .values(deleted_at=now)
    )
    db.execute(update(Project).where(Project.org_id == org.id).values(org_id=None))
    db.execute(delete(Invitation).where(Invitation.org_id == org.id))
    db.execute(delete(Membership).where(Membership.org_id == org.id))
    db.delete(org)
    db.commit()

    logger.info("org %s deleted", org.id)
