from __future__ import annotations

from collections import Counter
from datetime import datetime
from enum import Enum

from sqlalchemy.orm import Session

from pctcup.extensions import db
from pctcup.models import Event


class GapStatus(str, Enum):
    AT_RISK = "AT_RISK"
    OFF_TRACK = "OFF_TRACK"


def remaining_opportunities(session: Session, boundary: datetime, now: datetime) -> dict[int, int]:
    """category_id -> number of events still to happen in (now, boundary].

    Once the boundary is behind us there is nothing left to attend, so the
    mapping is empty.
    """
    if now > boundary:
        return {}

    category_ids = session.scalars(
        db.select(Event.category_id).where(Event.starts_at > now, Event.starts_at <= boundary)
    )
    return dict(Counter(category_ids))


def classify_gap(remaining_needed: int, remaining_opportunities: int) -> GapStatus:
    if remaining_needed > remaining_opportunities:
        return GapStatus.OFF_TRACK
    return GapStatus.AT_RISK
