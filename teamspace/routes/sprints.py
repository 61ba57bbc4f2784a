import dataclasses
import logging
import uuid

from fastapi import APIRouter, Depends
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from teamspace.auth.deps import get_principal
from teamspace.auth.principal import Principal
from teamspace.auth.tokens import as_utc, now_utc
from teamspace.db import get_db
from teamspace.errors import Conflict, NotAuthorized, NotFound
from teamspace.models.enums import SprintStatus
from teamspace.models.project import Deleted, Project
from teamspace.models.sprint import Sprint
from teamspace.models.task import Task
from teamspace.rbac.resolver import AccessMode, can_write_tasks, require_project
from teamspace.routes.tasks import task_out
from teamspace.schemas.sprints import (
    SprintCreateIn,
    SprintDetailOut,
    SprintOut,
    SprintStatsOut,
    SprintUpdateIn,
)
from teamspace.sprints.stats import compute_sprint_stats

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sprints"])

def sprint_out(s: Sprint) -> SprintOut:
    return SprintOut(
        id=s.id,
        project_id=s.project_id,
        name=s.name,
        goal=s.goal,
        start_date=s.start_date,
        end_date=s.end_date,
        status=s.status,
        created_by=s.created_by,
    )

def _writable_project(db: Session, principal: Principal, project_id: uuid.UUID) -> Project:
    # sprints follow the task write rule of their project
    project = db.get(Project, project_id)
    if project is None or isinstance(project.lifecycle, Deleted):
        raise NotFound("project not found")
    if not can_write_tasks(db, principal, project):
        raise NotAuthorized("only owners or admins can manage sprints")
    return project

def _require_sprint(db: Session, principal: Principal, sprint_id: uuid.UUID, mode: AccessMode) -> Sprint:
    sprint = db.get(Sprint, sprint_id)
    if sprint is None:
        raise NotFound("sprint not found")
    if mode == AccessMode.view:
        require_project(db, principal, sprint.project_id, AccessMode.view)
    else:
        _writable_project(db, principal, sprint.project_id)
    return sprint

def _sprint_tasks(db: Session, sprint_id: uuid.UUID) -> list[Task]:
    return list(db.scalars(select(Task).where(Task.sprint_id == sprint_id)).all())

@router.get("/projects/{project_id}/sprints", response_model=list[SprintOut])
def list_sprints(
    project_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> list[SprintOut]:
    require_project(db, principal, project_id, AccessMode.view)

    q = select(Sprint).where(Sprint.project_id == project_id).order_by(Sprint.start_date.desc())
    return [sprint_out(s) for s in db.scalars(q).all()]

@router.post("/sprints", response_model=SprintOut)
def create_sprint(
    payload: SprintCreateIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> SprintOut:
    project = _writable_project(db, principal, payload.project_id)

    s = Sprint(
        project_id=project.id,
        name=payload.name,
        goal=payload.goal,
        start_date=payload.start_date,
        end_date=payload.end_date,
        created_by=principal.user_id,
    )
    db.add(s)
    db.commit()
    db.refresh(s)
    return sprint_out(s)

@router.get("/sprints/{sprint_id}", response_model=SprintDetailOut)
def get_sprint(
    sprint_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> SprintDetailOut:
    s = _require_sprint(db, principal, sprint_id, AccessMode.view)
    return SprintDetailOut(sprint=sprint_out(s), tasks=[task_out(t) for t in _sprint_tasks(db, s.id)])

@router.patch("/sprints/{sprint_id}", response_model=SprintOut)
def update_sprint(
    sprint_id: uuid.UUID,
    payload: SprintUpdateIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> SprintOut:
    s = _require_sprint(db, principal, sprint_id, AccessMode.edit)

    if payload.name is not None:
        s.name = payload.name
    if "goal" in payload.model_fields_set:
        s.goal = payload.goal
    if payload.start_date is not None:
        s.start_date = payload.start_date
    if payload.end_date is not None:
        s.end_date = payload.end_date
    if as_utc(s.end_date) < as_utc(s.start_date):
        raise Conflict("end_date must not be before start_date")

    db.add(s)
    db.commit()
    db.refresh(s)
    return sprint_out(s)

@router.post("/sprints/{sprint_id}/start", response_model=SprintOut)
def start_sprint(
    sprint_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> SprintOut:
    s = _require_sprint(db, principal, sprint_id, AccessMode.edit)
    if s.status != SprintStatus.planning:
        raise Conflict(f"sprint is already {s.status.value}")

    now = now_utc()
    s.status = SprintStatus.active
    # a sprint started early begins now
    if as_utc(s.start_date) > now:
        s.start_date = now

    db.add(s)
    db.commit()
    db.refresh(s)
    return sprint_out(s)

@router.post("/sprints/{sprint_id}/complete", response_model=SprintOut)
def complete_sprint(
    sprint_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> SprintOut:
    s = _require_sprint(db, principal, sprint_id, AccessMode.edit)
    if s.status == SprintStatus.completed:
        raise Conflict("sprint is already completed")

    s.status = SprintStatus.completed
    s.end_date = now_utc()

    db.add(s)
    db.commit()
    db.refresh(s)
    return sprint_out(s)

@router.get("/sprints/{sprint_id}/stats", response_model=SprintStatsOut)
def sprint_stats(
    sprint_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> SprintStatsOut:
    s = _require_sprint(db, principal, sprint_id, AccessMode.view)
    stats = compute_sprint_stats(s, _sprint_tasks(db, s.id))
    return SprintStatsOut(**dataclasses.asdict(stats))

@router.delete("/sprints/{sprint_id}")
def delete_sprint(
    sprint_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> dict:
    s = _require_sprint(db, principal, sprint_id, AccessMode.edit)

    # one transaction: tasks never point at a sprint that is gone
    try:
        db.execute(update(Task).where(Task.sprint_id == s.id).values(sprint_id=None))
        db.delete(s)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("sprint %s deleted by %s", sprint_id, principal.user_id)
    return {"deleted": True}
