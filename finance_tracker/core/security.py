"""
Bearer token verification.

Sign-up, login and sessions belong to the hosting platform. The API only checks
the platform-issued JWT and reads the owner id from its ``sub`` claim.
"""
import logging
from typing import Any, Dict, Optional

import jwt
from fastapi import Header, HTTPException, status

from finance_tracker.core.config import settings

logger = logging.getLogger(__name__)


def decode_access_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
    except jwt.PyJWTError as e:
        logger.warning(f"Rejected access token: {e}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def get_current_user_id(authorization: Optional[str] = Header(None)) -> str:
    """Extract user_id from JWT token"""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token required")

    token = authorization.replace("Bearer ", "")
    payload = decode_access_token(token)
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return user_id
