from typing import Annotated, Any

from pydantic import BeforeValidator

from teamspace.models.enums import GlobalRole, Role

# incoming role strings are normalized here and nowhere else
def _normalize_role(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value

RoleIn = Annotated[Role, BeforeValidator(_normalize_role)]
GlobalRoleIn = Annotated[GlobalRole, BeforeValidator(_normalize_role)]
