from datetime import datetime
from typing import Any

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from .config import settings
from .extensions import db
from .models import User
from .security import decode_access_token


def get_db() -> Any:
    """Dependency to provide a database session."""
    try:
        yield db.session
    finally:
        db.remove_session()


def get_now() -> datetime:
    """Wall-clock time used by every checkpoint computation (naive, local)."""
    return datetime.now()


def get_current_user(request: Request, session: Session = Depends(get_db)) -> User | None:
    """Retrieves the current user from the JWT token in the auth cookie."""
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token:
        return None

    payload = decode_access_token(token)
    if not payload:
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None

    user = session.get(User, int(user_id))
    if not user or not user.is_active:
        return None
    return user


def require_user(current_user: User | None = Depends(get_current_user)) -> User:
    """Dependency that ensures a user is authenticated."""
    if current_user is None:
        raise HTTPException(status_code=401, detail="Not logged in")
    return current_user


def require_admin(user: User = Depends(require_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin only")
    return user
