"""FastAPI dependencies."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.security import decode_access_token
from app.db.session import get_db
from app.models.volunteer import Volunteer
from app.services.notification_service import Notifier, build_notifier

security = HTTPBearer(auto_error=False)


def get_current_volunteer(
    db: Annotated[Session, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Volunteer:
    """Require an authenticated volunteer. Raises 401 if not authenticated."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_access_token(credentials.credentials)
    if not payload or not str(payload.get("sub", "")).isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    # sub is the volunteer id for our tokens
    volunteer = db.get(Volunteer, int(payload["sub"]))
    if not volunteer:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Volunteer not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return volunteer


@lru_cache
def get_notifier() -> Notifier:
    """Process-wide notifier chosen by settings; override in tests."""
    return build_notifier()


def close_notifier() -> None:
    """Close the cached notifier, if one was built, so its HTTP client is released."""
    if get_notifier.cache_info().currsize:
        get_notifier().close()
        get_notifier.cache_clear()
