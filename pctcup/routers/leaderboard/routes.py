from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from pctcup.dependencies import get_db, get_now, require_user
from pctcup.models import User
from pctcup.schemas.leaderboard import LeaderboardResponse, MyTeamResponse, TeamLeaderboardResponse
from pctcup.services import views
from pctcup.services.checkpoints import get_checkpoint, get_next_checkpoint, require_checkpoint_number

router = APIRouter(prefix="/leaderboard", tags=["leaderboard"])


@router.get("", response_model=LeaderboardResponse)
def individual_leaderboard(
    checkpoint: Optional[str] = None,
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
):
    try:
        number = require_checkpoint_number(checkpoint, default=1)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    cp = get_checkpoint(session, number)
    if cp is None:
        raise HTTPException(status_code=404, detail="Checkpoint not found")
    return views.leaderboard_individuals(session, cp)


@router.get("/teams", response_model=TeamLeaderboardResponse)
def team_leaderboard(
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    cp = get_next_checkpoint(session, now)
    if cp is None:
        raise HTTPException(status_code=404, detail="No checkpoints found")
    return views.leaderboard_teams(session, cp)


@router.get("/my-team", response_model=MyTeamResponse)
def my_team(
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """What each teammate still owes for the next checkpoint."""
    cp = get_next_checkpoint(session, now)
    if cp is None:
        raise HTTPException(status_code=404, detail="No checkpoints found")
    return views.my_team(session, current_user, cp)
