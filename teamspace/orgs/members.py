import logging
import uuid

from sqlalchemy.orm import Session

from teamspace.auth.principal import Principal
from teamspace.errors import InvalidRole, NotAuthorized, NotFound, OwnerProtected
from teamspace.models.enums import INVITABLE_ROLES, Role
from teamspace.models.membership import Membership
from teamspace.rbac.perms import MEMBER_REMOVERS
from teamspace.rbac.resolver import resolve_org_role

logger = logging.getLogger(__name__)

def remove_member(db: Session, org_id: uuid.UUID, principal: Principal, user_id: uuid.UUID) -> None:
    requester_role = resolve_org_role(db, principal.user_id, org_id)
    if requester_role not in MEMBER_REMOVERS:
        raise NotAuthorized()

    target = db.get(Membership, {"user_id": user_id, "org_id": org_id})
    if target is None:
        raise NotFound("member not found")
    if target.role == Role.owner:
        raise OwnerProtected("cannot remove organization owner")

    db.delete(target)
    db.commit()
    logger.info("member %s removed from org %s by %s", user_id, org_id, principal.user_id)

def update_member_role(
    db: Session, org_id: uuid.UUID, principal: Principal, user_id: uuid.UUID, role: Role
) -> Membership:
    if role not in INVITABLE_ROLES:
        raise InvalidRole()

    if resolve_org_role(db, principal.user_id, org_id) != Role.owner:
        raise NotAuthorized("only owner can change member roles")

    target = db.get(Membership, {"user_id": user_id, "org_id": org_id})
    if target is None:
        raise NotFound("member not found")
    if target.role == Role.owner:
        raise OwnerProtected("cannot change owner role")

    target.role = role
    db.add(target)
    db.commit()
    db.refresh(target)
    logger.info("member %s in org %s is now %s", user_id, org_id, role.value)
    return target
