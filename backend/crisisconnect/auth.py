"""
Caller identity.

Authentication happens upstream (API gateway / auth middleware). The gateway
forwards the authenticated user as ``X-User-Id`` and ``X-User-Role`` headers,
which the core trusts unconditionally.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Header, HTTPException

from crisisconnect.errors import AuthorizationError
from crisisconnect.models.enums import Role


@dataclass(frozen=True)
class Caller:
    """Authenticated caller as supplied by the auth middleware."""

    id: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def require_role(self, *roles: Role, action: str = "perform this action") -> None:
        """Raise AuthorizationError unless the caller holds one of ``roles``."""
        if self.role not in roles:
            allowed = " or ".join(f"{role.value}s" for role in roles)
            raise AuthorizationError(f"Only {allowed} can {action}")

    def owns(self, owner_id: str | None) -> bool:
        return owner_id is not None and owner_id == self.id


async def get_caller(
    x_user_id: Annotated[str | None, Header()] = None,
    x_user_role: Annotated[str | None, Header()] = None,
) -> Caller:
    """Dependency returning the caller forwarded by the auth middleware."""
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        role = Role(x_user_role.lower())
    except ValueError:
        raise HTTPException(status_code=401, detail="Unknown role") from None
    return Caller(id=x_user_id, role=role)
