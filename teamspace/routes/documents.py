import uuid

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from teamspace.auth.deps import get_principal
from teamspace.auth.principal import Principal
from teamspace.db import get_db
from teamspace.models.document import Document
from teamspace.rbac.resolver import (
    AccessMode,
    authorize_document_create,
    require_document,
    visible_documents,
)
from teamspace.refs import load_users
from teamspace.schemas.documents import DocumentCreateIn, DocumentOut, DocumentUpdateIn

router = APIRouter(prefix="/documents", tags=["documents"])

def document_out(d: Document) -> DocumentOut:
    return DocumentOut(
        id=d.id,
        project_id=d.project_id,
        owner_id=d.owner_id,
        title=d.title,
        content=d.content,
        summary=d.summary,
        tags=list(d.tags or []),
        is_public=d.is_public,
        doc_type=d.doc_type,
        collaborator_ids=sorted(d.collaborator_ids, key=str),
    )

@router.post("", response_model=DocumentOut)
def create_document(
    payload: DocumentCreateIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> DocumentOut:
    authorize_document_create(db, principal, payload.project_id)

    d = Document(
        project_id=payload.project_id,
        owner_id=principal.user_id,
        title=payload.title,
        content=payload.content,
        summary=payload.summary,
        tags=payload.tags,
        is_public=payload.is_public,
        doc_type=payload.doc_type,
    )
    d.collaborators = load_users(db, payload.collaborator_ids)
    db.add(d)
    db.commit()
    db.refresh(d)
    return document_out(d)

@router.get("", response_model=list[DocumentOut])
def list_documents(
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> list[DocumentOut]:
    # global admins see every document
    q = select(Document) if principal.is_admin else visible_documents(principal)
    rows = db.scalars(q.order_by(Document.updated_at.desc())).all()
    return [document_out(d) for d in rows]

@router.get("/{document_id}", response_model=DocumentOut)
def get_document(
    document_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> DocumentOut:
    return document_out(require_document(db, principal, document_id, AccessMode.view))

@router.patch("/{document_id}", response_model=DocumentOut)
def update_document(
    document_id: uuid.UUID,
    payload: DocumentUpdateIn,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> DocumentOut:
    d = require_document(db, principal, document_id, AccessMode.edit)

    if payload.title is not None:
        d.title = payload.title
    if payload.content is not None:
        d.content = payload.content
    if payload.summary is not None:
        d.summary = payload.summary
    if payload.tags is not None:
        d.tags = payload.tags
    if payload.is_public is not None:
        d.is_public = payload.is_public
    if payload.doc_type is not None:
        d.doc_type = payload.doc_type
    if payload.collaborator_ids is not None:
        d.collaborators = load_users(db, payload.collaborator_ids)

    db.add(d)
    db.commit()
    db.refresh(d)
    return document_out(d)

@router.delete("/{document_id}")
def delete_document(
    document_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> dict:
    d = require_document(db, principal, document_id, AccessMode.edit)
    d.collaborators = []
    db.delete(d)
    db.commit()
    return {"deleted": True}
