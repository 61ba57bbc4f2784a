import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from teamspace.db import SessionLocal
from teamspace.jobs.project_cleanup import calculate_auto_delete_at
from teamspace.models.document import Document
from teamspace.models.enums import DocType, GlobalRole, Role, TaskPriority
from teamspace.models.membership import Membership
from teamspace.models.org import Org
from teamspace.models.project import Project
from teamspace.models.task import Task
from teamspace.models.user import User

@dataclass
class SeedResult:
    owner_email: str
    admin_email: str
    member_email: str
    org_id: uuid.UUID
    project_id: uuid.UUID
    task_id: uuid.UUID
    document_id: uuid.UUID

def get_or_create_user(db: Session, email: str, name: str | None, role: GlobalRole) -> User:
    email = email.lower().strip()
    u = db.scalar(select(User).where(User.email == email))
    if u is None:
        u = User(email=email, name=name, role=role)
        db.add(u)
        db.flush()
    elif u.role != role:
        u.role = role
        db.flush()
    return u

def get_or_create_membership(db: Session, user_id: uuid.UUID, org_id: uuid.UUID, role: Role) -> Membership:
    m = db.get(Membership, {"user_id": user_id, "org_id": org_id})
    if m is None:
        m = Membership(user_id=user_id, org_id=org_id, role=role)
        db.add(m)
        db.flush()
    elif m.role != role:
        m.role = role
        db.flush()
    return m

def get_or_create_org(db: Session, name: str, created_by: uuid.UUID) -> Org:
    o = db.scalar(select(Org).where(Org.name == name))
    if o is None:
        o = Org(name=name, description="seeded organization", created_by=created_by)
        db.add(o)
        db.flush()
    return o

def get_or_create_project(db: Session, org_id: uuid.UUID, owner: User, members: list[User], name: str) -> Project:
    p = db.scalar(
        select(Project).where(Project.org_id == org_id, Project.name == name, Project.deleted_at.is_(None))
    )
    if p is None:
        p = Project(org_id=org_id, owner_id=owner.id, name=name, auto_delete_at=calculate_auto_delete_at())
        db.add(p)
    p.members = [owner, *members]
    db.flush()
    return p

def get_or_create_task(db: Session, project_id: uuid.UUID, title: str, reporter_id: uuid.UUID, assignee_id: uuid.UUID) -> Task:
    t = db.scalar(select(Task).where(Task.project_id == project_id, Task.title == title))
    if t is None:
        t = Task(
            project_id=project_id,
            title=title,
            priority=TaskPriority.high,
            reporter_id=reporter_id,
            assignee_id=assignee_id,
            story_points=3,
            tags=["seed"],
        )
        db.add(t)
        db.flush()
    elif t.assignee_id != assignee_id:
        # keep it stable if you re-run seed
        t.assignee_id = assignee_id
        db.flush()
    return t

def get_or_create_document(db: Session, project_id: uuid.UUID, owner_id: uuid.UUID, title: str) -> Document:
    d = db.scalar(select(Document).where(Document.project_id == project_id, Document.title == title))
    if d is None:
        d = Document(
            project_id=project_id,
            owner_id=owner_id,
            title=title,
            content="kickoff notes",
            doc_type=DocType.meeting,
        )
        db.add(d)
        db.flush()
    return d

def seed() -> SeedResult:
    db = SessionLocal()
    try:
        owner = get_or_create_user(db, "owner@example.com", "owner", GlobalRole.owner)
        admin = get_or_create_user(db, "admin@example.com", "admin", GlobalRole.admin)
        member = get_or_create_user(db, "member@example.com", "member", GlobalRole.member)

        org = get_or_create_org(db, "seeded org", created_by=owner.id)

        get_or_create_membership(db, owner.id, org.id, Role.owner)
        get_or_create_membership(db, admin.id, org.id, Role.admin)
        get_or_create_membership(db, member.id, org.id, Role.member)

        project = get_or_create_project(db, org.id, owner, [member], "seeded project")
        task = get_or_create_task(db, project.id, "seeded task", reporter_id=owner.id, assignee_id=member.id)
        document = get_or_create_document(db, project.id, owner.id, "seeded kickoff")

        db.commit()

        return SeedResult(
            owner_email=owner.email,
            admin_email=admin.email,
            member_email=member.email,
            org_id=org.id,
            project_id=project.id,
            task_id=task.id,
            document_id=document.id,
        )
    finally:
        db.close()

if __name__ == "__main__":
    r = seed()
    print("seed complete")
    print(f"org_id={r.org_id}")
    print(f"project_id={r.project_id}")
    print(f"task_id={r.task_id}")
    print(f"document_id={r.document_id}")
    print("users:")
    print(f"  owner:  {r.owner_email}")
    print(f"  admin:  {r.admin_email}")
    print(f"  member: {r.member_email}")
