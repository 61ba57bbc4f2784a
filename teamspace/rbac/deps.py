import uuid

from fastapi import Depends
from sqlalchemy.orm import Session

from teamspace.auth.deps import get_principal
from teamspace.auth.principal import Principal
from teamspace.db import get_db
from teamspace.models.membership import Membership
from teamspace.models.org import Org
from teamspace.rbac.perms import allowed_roles
from teamspace.rbac.resolver import require_org_action

class OrgContext:
    def __init__(self, org: Org, membership: Membership, principal: Principal):
        self.org = org
        self.membership = membership
        self.principal = principal

def get_org_context(
    org_id: uuid.UUID,
    principal: Principal = Depends(get_principal),
    db: Session = Depends(get_db),
) -> OrgContext:
    org, membership = require_org_action(db, principal, org_id, "org:view")
    return OrgContext(org=org, membership=membership, principal=principal)

def require_perm(action: str):
    # fail at import time on typos
    allowed_roles(action)

    def _checker(
        org_id: uuid.UUID,
        principal: Principal = Depends(get_principal),
        db: Session = Depends(get_db),
    ) -> OrgContext:
        org, membership = require_org_action(db, principal, org_id, action)
        return OrgContext(org=org, membership=membership, principal=principal)

    return _checker
