from dataclasses import dataclass, field
from typing import Annotated, FrozenSet
import uuid
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tradeon.database import get_db
from tradeon.core.security import verify_access_token
from tradeon.models.customer import UserRole, AppRole


logger = logging.getLogger(__name__)

# HTTP Bearer security scheme
security = HTTPBearer()


@dataclass(frozen=True)
class AuthUser:
    """Signed-in user: id from the token, roles from user_roles."""
    id: uuid.UUID
    roles: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return AppRole.ADMIN.value in self.roles


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthUser:
    """
    Dependency to get the current authenticated user.
    Validates the JWT token and loads the user's roles.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    user_id = verify_access_token(credentials.credentials)

    if user_id is None:
        logger.warning("Token verification failed - invalid or expired token")
        raise credentials_exception

    try:
        user_uuid = uuid.UUID(user_id)
    except ValueError:
        logger.warning(f"Invalid user_id in token: {user_id}")
        raise credentials_exception

    result = await db.execute(select(UserRole.role).where(UserRole.user_id == user_uuid))
    roles = frozenset(result.scalars().all())

    return AuthUser(id=user_uuid, roles=roles)


async def require_admin(
    user: Annotated[AuthUser, Depends(get_current_user)],
) -> AuthUser:
    """
    Dependency requiring the admin role.

    Usage:
        @router.get("/", dependencies=[Depends(require_admin)])
        async def admin_only():
            ...
    """
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return user


def ensure_owner_or_admin(user: AuthUser, owner_id: uuid.UUID) -> None:
    """Raise 403 unless the user owns the record or is an admin."""
    if user.id != owner_id and not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to access this resource"
        )


# Type aliases for cleaner endpoint signatures
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
AdminUser = Annotated[AuthUser, Depends(require_admin)]
DB = Annotated[AsyncSession, Depends(get_db)]
