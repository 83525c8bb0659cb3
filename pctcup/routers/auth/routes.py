import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from pctcup.config import settings
from pctcup.dependencies import get_db, require_user
from pctcup.extensions import db
from pctcup.models import User
from pctcup.schemas.auth import LoginForm, MeResponse
from pctcup.schemas.common import SaveResult
from pctcup.security import create_access_token

log = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


@router.post("/auth/login", response_model=SaveResult, response_model_exclude_none=True)
def login_action(form: LoginForm, response: Response, session: Session = Depends(get_db)):
    """Checks credentials and issues the JWT session cookie."""
    user = session.scalars(db.select(User).where(User.username == form.username.strip())).first()
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    verified, new_hash = user.check_password(form.password)
    if not verified:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if new_hash:
        user.password_hash = new_hash
        session.commit()

    token = create_access_token(data={"sub": str(user.id)})
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        httponly=True,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite=settings.SESSION_COOKIE_SAMESITE.lower(),
        secure=settings.SESSION_COOKIE_SECURE,
    )
    log.info("User %s logged in", user.username)
    return SaveResult()


@router.post("/auth/logout", response_model=SaveResult, response_model_exclude_none=True)
def logout(response: Response, current_user: User = Depends(require_user)):
    """Logs out the user by clearing the JWT cookie."""
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    return SaveResult()


@router.get("/me", response_model=MeResponse)
def me(current_user: User = Depends(require_user)):
    return MeResponse.model_validate(current_user)
