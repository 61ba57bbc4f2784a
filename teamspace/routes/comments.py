import uuid

from fastapi import APIRouter, Depends
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from teamspace.auth.deps import get_principal
from teamspace.auth.principal import Principal
from teamspace.db import get_db
from teamspace.errors import InvalidReference, NotAuthorized, NotFound
from teamspace.models.comment import Comment
from teamspace.rbac.resolver import AccessMode, require_live_task, require_task
from teamspace.schemas.comments import CommentCreateIn, CommentOut, CommentUpdateIn

router = APIRouter(tags=["comments"])

def comment_out(c: Comment) -> CommentOut:
    return CommentOut(
        id=c.id,
        task_id=c.task_id,
        author_id=c.author_id,
        parent_id=c.parent_id,
        content=c.content,
        created_at=c.created_at,
    )

# only the author may change or remove a comment, and only while its project is live
def _own_comment(db: Session, principal: Principal, comment_id: uuid.UUID) -> Comment:
    c = db.get(Comment, comment_id)
    if c is None:
        raise NotFound("comment not found")
    require_live_task(db, principal, c.task_id)
    if c.author_id != principal.user_id:
        raise NotAuthorized("only the author can modify this comment")
    return c

@router.get("/tasks/{task_id}/comments", response_model=list[CommentOut])
def list_comments(
    task_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> list[CommentOut]:
    require_task(db, principal, task_id, AccessMode.view)

    q = select(Comment).where(Comment.task_id == task_id).order_by(Comment.created_at.asc())
    return [comment_out(c) for c in db.scalars(q).all()]

@router.post("/tasks/{task_id}/comments", response_model=CommentOut)
def create_comment(
    task_id: uuid.UUID,
    payload: CommentCreateIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> CommentOut:
    require_live_task(db, principal, task_id)

    if payload.parent_id is not None:
        parent = db.get(Comment, payload.parent_id)
        if parent is None or parent.task_id != task_id:
            raise InvalidReference(f"unknown parent comment id: {payload.parent_id}")

    c = Comment(
        task_id=task_id,
        author_id=principal.user_id,
        parent_id=payload.parent_id,
        content=payload.content,
    )
    db.add(c)
    db.commit()
    db.refresh(c)
    return comment_out(c)

@router.patch("/comments/{comment_id}", response_model=CommentOut)
def update_comment(
    comment_id: uuid.UUID,
    payload: CommentUpdateIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> CommentOut:
    c = _own_comment(db, principal, comment_id)
    c.content = payload.content
    db.add(c)
    db.commit()
    db.refresh(c)
    return comment_out(c)

@router.delete("/comments/{comment_id}")
def delete_comment(
    comment_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> dict:
    c = _own_comment(db, principal, comment_id)

    # replies survive as top-level comments
    db.execute(update(Comment).where(Comment.parent_id == c.id).values(parent_id=None))
    db.delete(c)
    db.commit()
    return {"deleted": True}
