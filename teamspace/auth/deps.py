import uuid

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from teamspace.auth.principal import Principal
from teamspace.auth.tokens import decode_access_token
from teamspace.db import get_db
from teamspace.errors import Unauthenticated
from teamspace.models.user import User

bearer = HTTPBearer(auto_error=False)

def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> Principal:
    if creds is None or creds.scheme.lower() != "bearer":
        raise Unauthenticated("missing bearer token")

    try:
        payload = decode_access_token(creds.credentials)
        user_id = uuid.UUID(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError):
        raise Unauthenticated("invalid token")

    user = db.get(User, user_id)
    if user is None:
        raise Unauthenticated("user not found")

    return Principal.from_user(user)
