import logging
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from teamspace.auth.deps import get_principal
from teamspace.auth.principal import Principal
from teamspace.db import get_db
from teamspace.errors import NotAuthorized, NotFound
from teamspace.models.user import User
from teamspace.schemas.users import UserOut, UserRoleIn, UserUpdateIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

def user_out(u: User) -> UserOut:
    return UserOut(id=u.id, email=u.email, name=u.name, role=u.role)

def _me(db: Session, principal: Principal) -> User:
    user = db.get(User, principal.user_id)
    if user is None:
        raise NotFound("user not found")
    return user

# team directory, used to pick assignees, collaborators and project members by id
@router.get("", response_model=list[UserOut])
def list_users(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> list[UserOut]:
    q = select(User).order_by(User.email)
    return [user_out(u) for u in db.scalars(q).all()]

@router.get("/me", response_model=UserOut)
def get_me(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> UserOut:
    return user_out(_me(db, principal))

@router.patch("/me", response_model=UserOut)
def update_me(
    payload: UserUpdateIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> UserOut:
    user = _me(db, principal)
    if "name" in payload.model_fields_set:
        user.name = payload.name
    db.add(user)
    db.commit()
    db.refresh(user)
    return user_out(user)

# global roles change here and only here
@router.patch("/{user_id}/role", response_model=UserOut)
def set_global_role(
    user_id: uuid.UUID,
    payload: UserRoleIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> UserOut:
    if not principal.is_admin:
        raise NotAuthorized("only admins can change user roles")

    user = db.get(User, user_id)
    if user is None:
        raise NotFound("user not found")

    user.role = payload.role
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("global role of %s set to %s by %s", user_id, payload.role.value, principal.user_id)
    return user_out(user)
