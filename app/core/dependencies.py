"""
Request identity.

Access tokens are issued by the external identity provider; here they are
only verified. The token proves *who* the caller is. Role and home center
are looked up in the database on every request.
"""
import logging
from typing import Any, Dict, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import AUTH_JWT_SECRET, AUTH_JWT_ALGORITHM, AUTH_JWT_AUDIENCE
from app.core.database import get_session
from app.core.exceptions import AuthenticationError, AuthorizationError, ConfigurationError
from app.admin.crud.profiles import load_viewer_context
from app.admin.services.scoping import ViewerContext

logger = logging.getLogger(__name__)

security = HTTPBearer(
    scheme_name="Access Token",
    description="Bearer token issued by the identity provider",
    auto_error=False,
)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify signature and expiry of an access token.

    Raises:
        AuthenticationError: expired, malformed or wrongly signed token
    """
    if not AUTH_JWT_SECRET:
        raise ConfigurationError("AUTH_JWT_SECRET", "Token verification is not configured")

    options = {"require": ["sub", "exp"], "verify_aud": bool(AUTH_JWT_AUDIENCE)}
    try:
        return jwt.decode(
            token,
            AUTH_JWT_SECRET,
            algorithms=[AUTH_JWT_ALGORITHM],
            audience=AUTH_JWT_AUDIENCE or None,
            options=options,
        )
    except jwt.ExpiredSignatureError:
        logger.warning("Access token has expired")
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid access token: {type(e).__name__}")
        raise AuthenticationError("Invalid token")


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    if credentials is None or not credentials.credentials.strip():
        raise AuthenticationError("Authentication data is required")

    payload = decode_access_token(credentials.credentials)
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Token has no subject")
    return str(user_id)


async def get_current_viewer(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_session),
) -> ViewerContext:
    """Viewer with role and home center freshly read from the database"""
    return await load_viewer_context(db, user_id)


async def require_admin(
    viewer: ViewerContext = Depends(get_current_viewer),
) -> ViewerContext:
    if not viewer.is_admin:
        raise AuthorizationError()
    return viewer
