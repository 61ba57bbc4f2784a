import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from teamspace.errors import InvalidReference
from teamspace.models.user import User

# resolve foreign keys from write payloads; unknown ids are client errors
def load_users(db: Session, user_ids: list[uuid.UUID]) -> list[User]:
    wanted = list(dict.fromkeys(user_ids))
    if not wanted:
        return []
    users = list(db.scalars(select(User).where(User.id.in_(wanted))).all())
    missing = set(wanted) - {u.id for u in users}
    if missing:
        raise InvalidReference(f"unknown user id(s): {', '.join(sorted(str(m) for m in missing))}")
    return users

def require_user(db: Session, user_id: uuid.UUID) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise InvalidReference(f"unknown user id: {user_id}")
    return user
