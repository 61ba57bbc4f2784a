from teamspace.models.enums import Role

# organization role needed for each action, on top of direct ownership where the
# resource has an owner. org admins may write tasks but not projects or documents.
PERMS: dict[str, set[Role]] = {
    "org:view": {Role.owner, Role.admin, Role.member},
    "org:update": {Role.owner},
    "org:delete": {Role.owner},
    "org:invite": {Role.owner, Role.admin},
    "org:invitations:list": {Role.owner, Role.admin},
    "org:invitations:cancel": {Role.owner},
    "org:members:remove": {Role.owner},
    "org:members:role": {Role.owner},

    "projects:create": {Role.owner},
    "projects:update": {Role.owner},

    "tasks:create": {Role.owner, Role.admin},
    "tasks:update": {Role.owner, Role.admin},

    "documents:create": {Role.owner},
    "documents:update": {Role.owner},
}

# re-checked inside member removal, independent of the route gate
MEMBER_REMOVERS: set[Role] = {Role.owner, Role.admin}

def allowed_roles(action: str) -> set[Role]:
    allowed = PERMS.get(action)
    if allowed is None:
        raise RuntimeError(f"unknown permission action: {action}")
    return allowed

def has_perm(role: Role | None, action: str) -> bool:
    return role is not None and role in allowed_roles(action)
