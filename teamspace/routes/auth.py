from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from teamspace.auth.tokens import (
    as_utc,
    hash_magic_token,
    issue_access_token,
    magic_link_expiry,
    new_magic_token,
    now_utc,
)
from teamspace.config import settings
from teamspace.db import get_db
from teamspace.models.auth_magic_link import AuthMagicLink
from teamspace.models.enums import GlobalRole
from teamspace.models.user import User
from teamspace.orgs.organizations import add_org
from teamspace.schemas.auth import AccessTokenOut, RedeemIn, RequestLinkIn, RequestLinkOut
from teamspace.ratelimit import rate_limit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/request-link", response_model=RequestLinkOut)
def request_link(
    payload: RequestLinkIn,
    db: Session = Depends(get_db),
    _: None = Depends(
        rate_limit(
            "auth:request_link",
            limit_per_window=settings.rate_limit_auth_request_link_per_min,
            window_seconds=60,
        )
    ),
) -> RequestLinkOut:
    email = payload.email.lower().strip()

    # first link for an email registers the account
    user = db.scalar(select(User).where(User.email == email))
    if user is None:
        user = User(email=email, name=payload.name)
        db.add(user)
        db.flush()
        logger.info("registered user %s", user.id)

        if payload.organization is not None:
            # registering with an org makes the user its owner, globally too
            user.role = GlobalRole.owner
            org = add_org(
                db,
                user.id,
                payload.organization.name,
                description=payload.organization.description,
                allow_member_invite=payload.organization.allow_member_invite,
                require_approval=payload.organization.require_approval,
            )
            logger.info("org %s created at registration of %s", org.id, user.id)

    token = new_magic_token()
    token_hash = hash_magic_token(token)

    db.add(
        AuthMagicLink(
            token_hash=token_hash,
            user_id=user.id,
            expires_at=magic_link_expiry(),
            used_at=None,
        )
    )
    db.commit()

    if settings.app_env == "prod":
        return RequestLinkOut(token=None, link=f"{settings.base_url}/auth/redeem?token={token}")

    return RequestLinkOut(sent=True, token=token, link=None)

@router.post("/redeem", response_model=AccessTokenOut)
def redeem(
    payload: RedeemIn,
    db: Session = Depends(get_db),
    _: None = Depends(
        rate_limit(
            "auth:redeem",
            limit_per_window=settings.rate_limit_auth_redeem_per_min,
            window_seconds=60,
        )
    ),
) -> AccessTokenOut:
    token = payload.token.strip()
    now = now_utc()

    # atomic single-use + expiry gate
    stmt = (
        update(AuthMagicLink)
        .where(AuthMagicLink.token_hash == hash_magic_token(token))
        .where(AuthMagicLink.used_at.is_(None))
        .where(AuthMagicLink.expires_at > now)
        .values(used_at=now)
        .returning(AuthMagicLink.user_id)
    )

    user_id = db.scalar(stmt)
    if user_id is None:
        db.rollback()
        row = db.get(AuthMagicLink, hash_magic_token(token))
        if row is None:
            raise HTTPException(status_code=400, detail="invalid token")
        if row.used_at is not None:
            raise HTTPException(status_code=400, detail="token already used")
        if as_utc(row.expires_at) <= now:
            raise HTTPException(status_code=400, detail="token expired")
        raise HTTPException(status_code=400, detail="invalid token")

    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=400, detail="invalid token")

    db.commit()
    return AccessTokenOut(access_token=issue_access_token(str(user.id)))
