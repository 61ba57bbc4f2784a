from enum import Enum

# organization-scoped role; the one role vocabulary every resolver uses
class Role(str, Enum):
    owner = "owner"
    admin = "admin"
    member = "member"

# user-level capability flag, distinct from organization roles
class GlobalRole(str, Enum):
    admin = "admin"
    owner = "owner"
    member = "member"

class InvitationStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    expired = "expired"

class TaskStatus(str, Enum):
    todo = "To Do"
    in_progress = "In Progress"
    done = "Done"

class TaskPriority(str, Enum):
    low = "Low"
    medium = "Medium"
    high = "High"
    urgent = "Urgent"

class TaskType(str, Enum):
    story = "Story"
    bug = "Bug"
    task = "Task"
    epic = "Epic"

class SprintStatus(str, Enum):
    planning = "planning"
    active = "active"
    completed = "completed"

class DocType(str, Enum):
    note = "note"
    meeting = "meeting"
    decision = "decision"
    retro = "retro"
    spec = "spec"
    research = "research"
    custom = "custom"

INVITABLE_ROLES = frozenset({Role.admin, Role.member})

def enum_values(enum_cls: type[Enum]) -> list[str]:
    return [m.value for m in enum_cls]
