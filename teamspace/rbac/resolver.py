"""Resolve what a principal may do with a project, task, document or org.

Every check walks the same chain: direct ownership, then the project's explicit
member list, then the organization membership row. Soft-deleted projects are
indistinguishable from missing ones, except that global admins keep view access.
"""
import uuid
from enum import Enum

from sqlalchemy import Select, or_, select
from sqlalchemy.orm import Session

from teamspace.auth.principal import Principal
from teamspace.errors import NotAuthorized, NotFound
from teamspace.models.document import Document
from teamspace.models.enums import Role
from teamspace.models.membership import Membership
from teamspace.models.org import Org
from teamspace.models.project import Deleted, Project
from teamspace.models.task import Task
from teamspace.models.user import User
from teamspace.rbac.perms import has_perm

class ProjectAccess(str, Enum):
    not_found = "not_found"
    forbidden = "forbidden"
    view = "view"
    owner = "owner"

class AccessMode(str, Enum):
    view = "view"
    edit = "edit"

_VISIBLE = {ProjectAccess.view, ProjectAccess.owner}

# organizations

def resolve_org_role(db: Session, user_id: uuid.UUID, org_id: uuid.UUID) -> Role | None:
    membership = db.get(Membership, {"user_id": user_id, "org_id": org_id})
    if membership is None:
        return None
    return Role(membership.role)

def require_org_action(
    db: Session, principal: Principal, org_id: uuid.UUID, action: str
) -> tuple[Org, Membership]:
    org = db.get(Org, org_id)
    if org is None:
        raise NotFound("organization not found")

    membership = db.get(Membership, {"user_id": principal.user_id, "org_id": org_id})
    if membership is None:
        raise NotAuthorized("not a member of this organization")

    if not has_perm(Role(membership.role), action):
        raise NotAuthorized("insufficient organization role")
    return org, membership

# projects

def _org_role_for(db: Session, principal: Principal, project: Project) -> Role | None:
    if project.org_id is None:
        return None
    return resolve_org_role(db, principal.user_id, project.org_id)

def project_access_for(db: Session, principal: Principal, project: Project) -> ProjectAccess:
    if isinstance(project.lifecycle, Deleted):
        return ProjectAccess.view if principal.is_admin else ProjectAccess.not_found

    if project.owner_id == principal.user_id:
        return ProjectAccess.owner

    org_role = _org_role_for(db, principal, project)
    if has_perm(org_role, "projects:update"):
        return ProjectAccess.owner

    if principal.user_id in project.member_ids or org_role is not None:
        return ProjectAccess.view

    if principal.is_admin:
        return ProjectAccess.view
    return ProjectAccess.forbidden

def resolve_project_access(db: Session, principal: Principal, project_id: uuid.UUID) -> ProjectAccess:
    project = db.get(Project, project_id)
    if project is None:
        return ProjectAccess.not_found
    return project_access_for(db, principal, project)

def require_project(
    db: Session, principal: Principal, project_id: uuid.UUID, mode: AccessMode = AccessMode.view
) -> Project:
    project = db.get(Project, project_id)
    if project is None:
        raise NotFound("project not found")

    if mode == AccessMode.edit and isinstance(project.lifecycle, Deleted):
        raise NotFound("project not found")

    access = project_access_for(db, principal, project)
    if access == ProjectAccess.not_found:
        raise NotFound("project not found")

    if mode == AccessMode.view:
        if access not in _VISIBLE:
            raise NotAuthorized("not authorized to view this project")
        return project

    if access != ProjectAccess.owner:
        raise NotAuthorized("only project owner or organization owner can perform this action")
    return project

def authorize_project_create(db: Session, principal: Principal, org_id: uuid.UUID | None) -> Org | None:
    if org_id is None:
        if not principal.can_create_unscoped:
            raise NotAuthorized("only owners can create projects")
        return None

    org = db.get(Org, org_id)
    if org is None:
        raise NotFound("organization not found")

    role = resolve_org_role(db, principal.user_id, org_id)
    if role is None:
        raise NotAuthorized("you must be a member of the organization")
    if not has_perm(role, "projects:create"):
        raise NotAuthorized("only organization owners can create projects")
    return org

def _live_project(db: Session, project_id: uuid.UUID | None) -> Project | None:
    if project_id is None:
        return None
    project = db.get(Project, project_id)
    if project is None or isinstance(project.lifecycle, Deleted):
        return None
    return project

def visible_projects(principal: Principal) -> Select:
    org_ids = select(Membership.org_id).where(Membership.user_id == principal.user_id)
    return select(Project).where(
        Project.deleted_at.is_(None),
        or_(
            Project.owner_id == principal.user_id,
            Project.members.any(User.id == principal.user_id),
            Project.org_id.in_(org_ids),
        ),
    )

# tasks

def can_write_tasks(db: Session, principal: Principal, project: Project) -> bool:
    if isinstance(project.lifecycle, Deleted):
        return False
    if project.owner_id == principal.user_id:
        return True
    return has_perm(_org_role_for(db, principal, project), "tasks:update")

def authorize_task_create(db: Session, principal: Principal, project_id: uuid.UUID) -> Project:
    project = _live_project(db, project_id)
    if project is None:
        raise NotFound("project not found")

    if project.owner_id == principal.user_id:
        return project
    if has_perm(_org_role_for(db, principal, project), "tasks:create"):
        return project
    raise NotAuthorized("only owners or admins can create tasks")

def _task_and_project(db: Session, task_id: uuid.UUID) -> tuple[Task, Project]:
    task = db.get(Task, task_id)
    if task is None:
        raise NotFound("task not found")
    project = db.get(Project, task.project_id)
    if project is None:
        raise NotFound("project not found")
    return task, project

def resolve_task_access(
    db: Session, principal: Principal, task_id: uuid.UUID, mode: AccessMode
) -> bool:
    _, project = _task_and_project(db, task_id)

    if mode == AccessMode.view:
        access = project_access_for(db, principal, project)
        if access == ProjectAccess.not_found:
            raise NotFound("project not found")
        return access in _VISIBLE

    if isinstance(project.lifecycle, Deleted):
        raise NotFound("project not found")
    return can_write_tasks(db, principal, project)

def require_task(db: Session, principal: Principal, task_id: uuid.UUID, mode: AccessMode) -> Task:
    if not resolve_task_access(db, principal, task_id, mode):
        if mode == AccessMode.view:
            raise NotAuthorized("not authorized to access this task")
        raise NotAuthorized("only owners or admins can edit/delete tasks")
    return db.get(Task, task_id)

def require_live_task(db: Session, principal: Principal, task_id: uuid.UUID) -> Task:
    """View access to a task whose project is still active, for writes beside the task."""
    task, project = _task_and_project(db, task_id)
    if isinstance(project.lifecycle, Deleted):
        raise NotFound("project not found")
    if project_access_for(db, principal, project) not in _VISIBLE:
        raise NotAuthorized("not authorized to access this task")
    return task

# documents

def document_access_for(
    db: Session, principal: Principal, document: Document, mode: AccessMode
) -> bool:
    uid = principal.user_id

    if mode == AccessMode.view:
        if principal.is_admin or document.is_public:
            return True
        if document.owner_id == uid or uid in document.collaborator_ids:
            return True
        project = _live_project(db, document.project_id)
        return project is not None and project_access_for(db, principal, project) in _VISIBLE

    if document.owner_id == uid:
        return True
    project = _live_project(db, document.project_id)
    if project is None:
        return False
    return has_perm(_org_role_for(db, principal, project), "documents:update")

def resolve_document_access(
    db: Session, principal: Principal, document_id: uuid.UUID, mode: AccessMode
) -> bool:
    document = db.get(Document, document_id)
    if document is None:
        raise NotFound("document not found")
    return document_access_for(db, principal, document, mode)

def require_document(
    db: Session, principal: Principal, document_id: uuid.UUID, mode: AccessMode
) -> Document:
    if not resolve_document_access(db, principal, document_id, mode):
        if mode == AccessMode.view:
            raise NotAuthorized("not authorized to view this document")
        raise NotAuthorized("only document owner can modify this document")
    return db.get(Document, document_id)

def authorize_document_create(
    db: Session, principal: Principal, project_id: uuid.UUID | None
) -> Project | None:
    if project_id is None:
        if not principal.can_create_unscoped:
            raise NotAuthorized("only owners or admins can create documents")
        return None

    project = _live_project(db, project_id)
    if project is None:
        raise NotFound("project not found")

    if project.owner_id == principal.user_id:
        return project
    if has_perm(_org_role_for(db, principal, project), "documents:create"):
        return project
    raise NotAuthorized("only owners can create documents")

def visible_documents(principal: Principal) -> Select:
    project_ids = visible_projects(principal).with_only_columns(Project.id)
    return select(Document).where(
        or_(
            Document.owner_id == principal.user_id,
            Document.collaborators.any(User.id == principal.user_id),
            Document.is_public.is_(True),
            Document.project_id.in_(project_ids),
        )
    )
