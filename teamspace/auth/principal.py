import uuid
from dataclasses import dataclass

from teamspace.models.enums import GlobalRole
from teamspace.models.user import User

@dataclass(frozen=True)
class Principal:
    """The authenticated caller, resolved once per request."""

    user_id: uuid.UUID
    email: str
    role: GlobalRole

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(user_id=user.id, email=user.email.lower(), role=GlobalRole(user.role))

    @property
    def is_admin(self) -> bool:
        return self.role == GlobalRole.admin

    @property
    def can_create_unscoped(self) -> bool:
        # organization-less projects and documents
        return self.role in {GlobalRole.owner, GlobalRole.admin}
