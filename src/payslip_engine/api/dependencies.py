"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from payslip_engine.config import Settings, get_settings
from payslip_engine.database import init_db
from payslip_engine.models import Role
from payslip_engine.services.access_guard import Actor

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency.

    Routes commit explicitly; anything left uncommitted is rolled back on close.
    """
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        finally:
            await session.close()


SettingsDep = Annotated[Settings, Depends(get_settings)]


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str, settings: Settings) -> dict[str, Any]:
    """Verify a bearer token against the configured secret."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require_sub": True},
        )
    except JWTError as exc:
        raise _unauthorized("Token is invalid") from exc


async def get_current_actor(
    settings: SettingsDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> Actor:
    """Resolve the acting employee from the ``sub`` and ``role`` claims."""
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Authorization header is required")

    payload = decode_token(credentials.credentials, settings)
    try:
        actor_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise _unauthorized("Token subject is invalid") from None

    role = Role.parse(payload.get("role"))
    if role is None:
        raise _unauthorized("Token role is invalid")
    return Actor(actor_id=actor_id, role=role)


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
CurrentActor = Annotated[Actor, Depends(get_current_actor)]
