from teamspace.models.base import Base
from teamspace.models.auth_magic_link import AuthMagicLink
from teamspace.models.comment import Comment
from teamspace.models.document import Document
from teamspace.models.invitation import Invitation
from teamspace.models.membership import Membership
from teamspace.models.org import Org
from teamspace.models.project import Project
from teamspace.models.sprint import Sprint
from teamspace.models.task import Task
from teamspace.models.user import User

__all__ = [
    "Base",
    "User",
    "Org",
    "Membership",
    "Invitation",
    "Project",
    "Sprint",
    "Task",
    "Document",
    "Comment",
    "AuthMagicLink",
]
