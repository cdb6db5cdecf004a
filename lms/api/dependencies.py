from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request, status

from lms.core.config import SETTINGS
from lms.models.principal import Principal
from lms.repos.store import Store, get_store
from lms.services.token_service import tokens

logger = logging.getLogger(__name__)

StoreDep = Annotated[Store, Depends(get_store)]


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"message": message},
    )


async def require_user(request: Request, store: StoreDep) -> Principal:
    """Resolve the session cookie to a Principal, or 401.

    The token only proves who the caller is; name and role are re-read
    from the user store so a deleted account's cookie stops working.
    """
    raw_token = request.cookies.get(SETTINGS.session_cookie_name)
    if not raw_token:
        raise _unauthorized("Not authenticated")

    try:
        claims = tokens.decode_session_token(raw_token)
        user_id = UUID(claims["sub"])
    except jwt.ExpiredSignatureError:
        logger.info("Expired session rejected")
        raise _unauthorized("Session expired") from None
    except (jwt.InvalidTokenError, ValueError) as e:
        logger.warning("Invalid session rejected: %s", e)
        raise _unauthorized("Invalid session") from None

    user = await store.users.get_by_id(user_id)
    if user is None:
        logger.warning("Session for unknown user=%s rejected", user_id)
        raise _unauthorized("Invalid session")

    return Principal(user_id=user.id, email=user.email, name=user.name, role=user.role)


CurrentUser = Annotated[Principal, Depends(require_user)]


def require_role(role: str):
    """Dependency factory: demand a specific role.

    Usage: Depends(require_role("admin"))
    Returns the Principal if the role matches, else 403.
    """

    def _guard(principal: CurrentUser) -> Principal:
        if not principal.has_role(role):
            logger.warning(
                "Access denied: user=%s role=%s required=%s",
                principal.user_id,
                principal.role,
                role,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"message": f"{role.capitalize()} access required"},
            )
        return principal

    return _guard


AdminUser = Annotated[Principal, Depends(require_role("admin"))]
StudentUser = Annotated[Principal, Depends(require_role("student"))]
