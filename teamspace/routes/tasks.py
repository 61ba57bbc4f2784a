import uuid

from fastapi import APIRouter, Depends
from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from teamspace.auth.deps import get_principal
from teamspace.auth.principal import Principal
from teamspace.db import get_db
from teamspace.errors import InvalidReference
from teamspace.models.comment import Comment
from teamspace.models.sprint import Sprint
from teamspace.models.task import Task
from teamspace.rbac.resolver import AccessMode, authorize_task_create, require_project, require_task
from teamspace.refs import require_user
from teamspace.schemas.tasks import TaskCreateIn, TaskOut, TaskUpdateIn

router = APIRouter(tags=["tasks"])

def task_out(t: Task) -> TaskOut:
    return TaskOut(
        id=t.id,
        project_id=t.project_id,
        title=t.title,
        description=t.description,
        status=t.status,
        priority=t.priority,
        type=t.type,
        assignee_id=t.assignee_id,
        reporter_id=t.reporter_id,
        sprint_id=t.sprint_id,
        epic_id=t.epic_id,
        due_date=t.due_date,
        tags=list(t.tags or []),
        story_points=t.story_points,
        estimated_hours=t.estimated_hours,
        actual_hours=t.actual_hours,
        created_at=t.created_at,
    )

# sprint and epic must live in the same project as the task
def _check_sprint(db: Session, project_id: uuid.UUID, sprint_id: uuid.UUID | None) -> None:
    if sprint_id is None:
        return
    sprint = db.get(Sprint, sprint_id)
    if sprint is None or sprint.project_id != project_id:
        raise InvalidReference(f"unknown sprint id: {sprint_id}")

def _check_epic(
    db: Session, project_id: uuid.UUID, epic_id: uuid.UUID | None, task_id: uuid.UUID | None = None
) -> None:
    if epic_id is None:
        return
    epic = db.get(Task, epic_id)
    if epic is None or epic.project_id != project_id or epic.id == task_id:
        raise InvalidReference(f"unknown epic id: {epic_id}")

@router.post("/tasks", response_model=TaskOut)
def create_task(
    payload: TaskCreateIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> TaskOut:
    project = authorize_task_create(db, principal, payload.project_id)

    assignee_id = payload.assignee_id or principal.user_id
    require_user(db, assignee_id)
    _check_sprint(db, project.id, payload.sprint_id)
    _check_epic(db, project.id, payload.epic_id)

    t = Task(
        project_id=project.id,
        title=payload.title,
        description=payload.description,
        status=payload.status,
        priority=payload.priority,
        type=payload.type,
        assignee_id=assignee_id,
        reporter_id=principal.user_id,
        sprint_id=payload.sprint_id,
        epic_id=payload.epic_id,
        due_date=payload.due_date,
        tags=payload.tags,
        story_points=payload.story_points,
        estimated_hours=payload.estimated_hours,
    )
    db.add(t)
    db.commit()
    db.refresh(t)
    return task_out(t)

@router.get("/projects/{project_id}/tasks", response_model=list[TaskOut])
def list_tasks(
    project_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> list[TaskOut]:
    require_project(db, principal, project_id, AccessMode.view)

    q = select(Task).where(Task.project_id == project_id).order_by(Task.created_at.desc())
    return [task_out(t) for t in db.scalars(q).all()]

@router.get("/tasks/{task_id}", response_model=TaskOut)
def get_task(
    task_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> TaskOut:
    return task_out(require_task(db, principal, task_id, AccessMode.view))

@router.patch("/tasks/{task_id}", response_model=TaskOut)
def update_task(
    task_id: uuid.UUID,
    payload: TaskUpdateIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> TaskOut:
    t = require_task(db, principal, task_id, AccessMode.edit)
    fields = payload.model_fields_set

    if payload.title is not None:
        t.title = payload.title
    if payload.status is not None:
        t.status = payload.status
    if payload.priority is not None:
        t.priority = payload.priority
    if payload.type is not None:
        t.type = payload.type
    if payload.tags is not None:
        t.tags = payload.tags

    # nullable fields: an explicit null clears them
    if "assignee_id" in fields:
        if payload.assignee_id is not None:
            require_user(db, payload.assignee_id)
        t.assignee_id = payload.assignee_id
    if "sprint_id" in fields:
        _check_sprint(db, t.project_id, payload.sprint_id)
        t.sprint_id = payload.sprint_id
    if "epic_id" in fields:
        _check_epic(db, t.project_id, payload.epic_id, task_id=t.id)
        t.epic_id = payload.epic_id
    for name in ("description", "due_date", "story_points", "estimated_hours", "actual_hours"):
        if name in fields:
            setattr(t, name, getattr(payload, name))

    db.add(t)
    db.commit()
    db.refresh(t)
    return task_out(t)

@router.delete("/tasks/{task_id}")
def delete_task(
    task_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> dict:
    t = require_task(db, principal, task_id, AccessMode.edit)

    # detach child stories and drop the thread before the row goes
    db.execute(update(Task).where(Task.epic_id == t.id).values(epic_id=None))
    db.execute(delete(Comment).where(Comment.task_id == t.id))
    db.delete(t)
    db.commit()
    return {"deleted": True}
