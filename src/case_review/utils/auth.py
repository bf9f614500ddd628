"""
Caller identity for API endpoints

There is no authentication: the acting role and, for clients, the account
id are labels the caller supplies in request headers.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException

from case_review.config.role_permissions import get_available_roles, parse_role, team_label_for
from case_review.models.enums import Role

logger = logging.getLogger(__name__)

@dataclass
class AuthContext:
    """Acting identity of one request"""
    role: Role
    client_id: Optional[str] = None

    @property
    def team_label(self) -> str:
        return team_label_for(self.role)

async def get_auth_context(
    x_role: Optional[str] = Header(None),
    x_client_id: Optional[str] = Header(None),
) -> AuthContext:
    """
    FastAPI dependency reading the caller's role and client id

    Raises:
        HTTPException: 401 if the role header is missing or names no known role
    """
    if not x_role:
        logger.error("AUTH: request missing X-Role header - returning 401")
        raise HTTPException(status_code=401, detail="Missing X-Role header")

    role = parse_role(x_role)
    if role is None:
        allowed = ", ".join(r.value for r in get_available_roles())
        logger.error(f"AUTH: unknown role '{x_role}' - returning 401")
        raise HTTPException(status_code=401, detail=f"Unknown role '{x_role}'. Expected one of: {allowed}")

    client_id = x_client_id.strip() if x_client_id and x_client_id.strip() else None
    return AuthContext(role=role, client_id=client_id)
