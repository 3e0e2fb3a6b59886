"""
Bearer token authentication for the mock commerce API.

Tokens are not verified: the bearer token is taken as the user id.
The token configured as MOCK_COMMERCE_ADMIN_TOKEN (default "admin")
grants the admin role.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException

logger = logging.getLogger(__name__)


@dataclass
class Caller:
    """Authenticated caller"""
    user_id: str
    is_admin: bool = False


def admin_token() -> str:
    return os.getenv("MOCK_COMMERCE_ADMIN_TOKEN", "admin")


def _parse_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def require_user(authorization: Optional[str] = Header(None)) -> Caller:
    """Dependency that requires a bearer token"""
    token = _parse_bearer(authorization)
    if token is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return Caller(user_id=token, is_admin=token == admin_token())


async def require_admin(authorization: Optional[str] = Header(None)) -> Caller:
    """Dependency that requires the admin token"""
    caller = await require_user(authorization)
    if not caller.is_admin:
        logger.warning(f"Admin endpoint refused for user {caller.user_id}")
        raise HTTPException(status_code=403, detail="Admin access required")
    return caller
