from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from pctcup.dependencies import get_db, get_now, require_user
from pctcup.models import User
from pctcup.schemas.dashboard import DashboardMeResponse, DashboardTeamResponse
from pctcup.services import views
from pctcup.services.checkpoints import resolve_checkpoint

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/me", response_model=DashboardMeResponse)
def dashboard_me(
    checkpoint: Optional[str] = None,
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Progress of the caller against a checkpoint (explicit or next)."""
    cp = resolve_checkpoint(session, checkpoint, now)
    if cp is None:
        raise HTTPException(status_code=404, detail="No upcoming checkpoint found")
    return views.dashboard_me(session, current_user, cp, now)


@router.get("/team", response_model=DashboardTeamResponse)
def dashboard_team(
    checkpoint: Optional[str] = None,
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Per-member totals and status for the caller's team."""
    cp = resolve_checkpoint(session, checkpoint, now)
    if cp is None:
        raise HTTPException(status_code=404, detail="Checkpoint not found")
    return views.dashboard_team(session, current_user, cp, now)
