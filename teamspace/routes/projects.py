import logging
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from teamspace.auth.deps import get_principal
from teamspace.auth.principal import Principal
from teamspace.auth.tokens import now_utc
from teamspace.db import get_db
from teamspace.models.project import Project
from teamspace.rbac.resolver import (
    AccessMode,
    authorize_project_create,
    require_project,
    visible_projects,
)
from teamspace.refs import load_users, require_user
from teamspace.schemas.projects import ProjectCreateIn, ProjectOut, ProjectUpdateIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])

def project_out(p: Project) -> ProjectOut:
    return ProjectOut(
        id=p.id,
        org_id=p.org_id,
        owner_id=p.owner_id,
        name=p.name,
        description=p.description,
        member_ids=sorted(p.member_ids, key=str),
        deleted_at=p.deleted_at,
    )

@router.post("", response_model=ProjectOut)
def create_project(
    payload: ProjectCreateIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> ProjectOut:
    authorize_project_create(db, principal, payload.org_id)

    member_ids = payload.member_ids if payload.member_ids is not None else [principal.user_id]
    p = Project(
        org_id=payload.org_id,
        owner_id=principal.user_id,
        name=payload.name,
        description=payload.description,
        auto_delete_at=payload.auto_delete_at,
    )
    p.members = load_users(db, member_ids)
    db.add(p)
    db.commit()
    db.refresh(p)
    return project_out(p)

@router.get("", response_model=list[ProjectOut])
def list_projects(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> list[ProjectOut]:
    q = visible_projects(principal).order_by(Project.created_at.desc())
    return [project_out(p) for p in db.scalars(q).all()]

@router.get("/{project_id}", response_model=ProjectOut)
def get_project(
    project_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> ProjectOut:
    return project_out(require_project(db, principal, project_id, AccessMode.view))

@router.patch("/{project_id}", response_model=ProjectOut)
def update_project(
    project_id: uuid.UUID,
    payload: ProjectUpdateIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> ProjectOut:
    p = require_project(db, principal, project_id, AccessMode.edit)

    # checked before anything changes; moving the project needs the right to create it there
    moving = "org_id" in payload.model_fields_set and payload.org_id != p.org_id
    if moving:
        authorize_project_create(db, principal, payload.org_id)
    new_owner = None
    if payload.owner_id is not None and payload.owner_id != p.owner_id:
        new_owner = require_user(db, payload.owner_id)
    members = load_users(db, payload.member_ids) if payload.member_ids is not None else None

    if moving:
        logger.info("project %s moved from org %s to %s by %s", p.id, p.org_id, payload.org_id, principal.user_id)
        p.org_id = payload.org_id
    if new_owner is not None:
        logger.info("project %s ownership transferred to %s by %s", p.id, new_owner.id, principal.user_id)
        p.owner_id = new_owner.id

    if payload.name is not None:
        p.name = payload.name
    if "description" in payload.model_fields_set:
        p.description = payload.description
    if members is not None:
        p.members = members

    db.add(p)
    db.commit()
    db.refresh(p)
    return project_out(p)

@router.delete("/{project_id}")
def delete_project(
    project_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> dict:
    p = require_project(db, principal, project_id, AccessMode.edit)

    # soft delete; every resolver treats the row as missing from here on
    p.deleted_at = now_utc()
    db.add(p)
    db.commit()
    logger.info("project %s soft-deleted by %s", project_id, principal.user_id)
    return {"deleted": True}
