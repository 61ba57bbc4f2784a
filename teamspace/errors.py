"""Typed failures raised by the authorization core.

Nothing here knows about HTTP. `teamspace.main` maps each `ErrorKind` to a
status code in a single exception handler.
"""
from enum import Enum

class ErrorKind(str, Enum):
    not_found = "not_found"
    forbidden = "forbidden"
    unauthenticated = "unauthenticated"
    conflict = "conflict"
    expired = "expired"
    invalid_reference = "invalid_reference"

class AppError(Exception):
    kind: ErrorKind = ErrorKind.conflict
    code: str = "error"
    default_message: str = "request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

class NotFound(AppError):
    kind = ErrorKind.not_found
    code = "not_found"
    default_message = "not found"

class Forbidden(AppError):
    kind = ErrorKind.forbidden
    code = "forbidden"
    default_message = "forbidden"

class Unauthenticated(AppError):
    kind = ErrorKind.unauthenticated
    code = "unauthenticated"
    default_message = "authentication required"

class Conflict(AppError):
    kind = ErrorKind.conflict
    code = "conflict"
    default_message = "conflict"

class Expired(AppError):
    kind = ErrorKind.expired
    code = "expired"
    default_message = "expired"

class InvalidReference(AppError):
    kind = ErrorKind.invalid_reference
    code = "invalid_reference"
    default_message = "invalid reference"

# concrete failures with stable codes

class NotAuthorized(Forbidden):
    code = "not_authorized"
    default_message = "not authorized"

class WrongEmail(Forbidden):
    code = "wrong_email"
    default_message = "This invitation was sent to a different email address"

class AlreadyMember(Conflict):
    code = "already_member"
    default_message = "user is already a member"

class AlreadyInvited(Conflict):
    code = "already_invited"
    default_message = "invitation already sent to this email"

class AlreadyUsedOrExpired(Conflict):
    code = "invitation_used_or_expired"
    default_message = "invitation already used or expired"

class OwnerProtected(Conflict):
    code = "owner_protected"
    default_message = "organization owner cannot be changed or removed"

class InvitationExpired(Expired):
    code = "invitation_expired"
    default_message = "invitation has expired"

class InvalidRole(InvalidReference):
    code = "invalid_role"
    default_message = "invalid role"
