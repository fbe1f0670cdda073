"""
Authentication dependencies for FastAPI route protection.

Sessions are issued by the external auth provider; this module only verifies
the signed token and resolves it to a local user row. The token is read from
the ``access_token`` cookie first, then from an ``Authorization: Bearer``
header.
"""

from typing import Annotated

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from surtidores.core.database import get_db
from surtidores.core.logging import set_user_context
from surtidores.core.security import verify_access_token
from surtidores.models.user import Users

bearer_scheme = HTTPBearer(auto_error=False)


def _extract_token(
    access_token: str | None, credentials: HTTPAuthorizationCredentials | None
) -> str | None:
    if access_token:
        return access_token
    if credentials is not None:
        return credentials.credentials
    return None


async def get_current_user_id(
    access_token: Annotated[str | None, Cookie()] = None,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
) -> int:
    """
    Extract and verify the session token.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired
    """
    token = _extract_token(access_token, credentials)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = verify_access_token(token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user_id


async def get_current_user(
    user_id: Annotated[int, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Users:
    """
    Load current user from database using verified token.

    Raises:
        HTTPException: 401 if user not found or inactive
    """
    result = await db.execute(select(Users).where(Users.user_id == user_id))  # type: ignore[arg-type]
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    if not user.active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User account is inactive",
        )

    set_user_context(user.user_id)
    return user


async def get_optional_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    access_token: Annotated[str | None, Cookie()] = None,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
) -> Users | None:
    """
    Get current user if authenticated, otherwise return None.

    Used by read endpoints whose response carries viewer-specific flags.
    A bad or expired token degrades to anonymous instead of failing.
    """
    token = _extract_token(access_token, credentials)
    if not token:
        return None

    user_id = verify_access_token(token)
    if user_id is None:
        return None

    result = await db.execute(select(Users).where(Users.user_id == user_id))  # type: ignore[arg-type]
    user = result.scalar_one_or_none()
    if user is None or not user.active:
        return None

    set_user_context(user.user_id)
    return user


async def require_admin(
    current_user: Annotated[Users, Depends(get_current_user)],
) -> Users:
    """
    Require current user to be an admin.

    Raises:
        HTTPException: 403 if user is not an admin
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user


CurrentUser = Annotated[Users, Depends(get_current_user)]
OptionalCurrentUser = Annotated[Users | None, Depends(get_optional_current_user)]
AdminUser = Annotated[Users, Depends(require_admin)]
