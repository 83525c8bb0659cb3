from datetime import datetime, timedelta

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload

from pctcup.config import settings
from pctcup.dependencies import get_db, get_now, require_user
from pctcup.extensions import db
from pctcup.models import Event, User
from pctcup.schemas.schedule import ScheduleEvent

router = APIRouter(tags=["schedule"])


@router.get("/schedule", response_model=list[ScheduleEvent])
def schedule(
    current_user: User = Depends(require_user),
    session: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Upcoming events plus the last few days, oldest first."""
    since = now - timedelta(days=settings.SCHEDULE_LOOKBACK_DAYS)
    events = session.scalars(
        db.select(Event)
        .options(joinedload(Event.category))
        .where(Event.starts_at >= since)
        .order_by(Event.starts_at.asc())
    ).all()
    return [
        ScheduleEvent(
            id=e.id,
            title=e.title,
            starts_at=e.starts_at,
            category_key=e.category.key,
            category_name=e.category.name,
            color=e.category.color,
            mandatory=e.mandatory,
            service_hours=e.service_hours,
        )
        for e in events
    ]
