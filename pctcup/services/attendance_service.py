from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy.orm import Session

from pctcup.extensions import db
from pctcup.models import Attendance, Event, User

log = logging.getLogger(__name__)


def present_user_ids(session: Session, event: Event) -> list[int]:
    return list(
        session.scalars(
            db.select(Attendance.user_id)
            .where(Attendance.event_id == event.id, Attendance.present.is_(True))
            .order_by(Attendance.user_id.asc())
        )
    )


def replace_event_attendance(session: Session, event: Event, user_ids: Iterable[int]) -> int:
    """Replace the attendance set of `event` with exactly `user_ids`.

    Delete and insert happen in one transaction, so the event is never seen
    without attendance. Duplicate ids collapse; unknown ids raise ValueError
    before anything is written. Returns the number of rows stored.
    """
    wanted = sorted(set(user_ids))
    if wanted:
        known = set(session.scalars(db.select(User.id).where(User.id.in_(wanted))))
        unknown = [uid for uid in wanted if uid not in known]
        if unknown:
            raise ValueError(f"Unknown user id(s): {', '.join(map(str, unknown))}")

    try:
        session.execute(db.delete(Attendance).where(Attendance.event_id == event.id))
        session.add_all(Attendance(event_id=event.id, user_id=uid, present=True) for uid in wanted)
        session.commit()
    except Exception:
        session.rollback()
        log.exception("Attendance save failed for event %s", event.id)
        raise

    log.info("Attendance for event %s replaced: %d present", event.id, len(wanted))
    return len(wanted)
