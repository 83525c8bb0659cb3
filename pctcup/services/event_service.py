from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from pctcup.extensions import db
from pctcup.models import Category, CategoryKey, Event


def parse_starts_at(raw: str) -> datetime:
    """ISO-8601 timestamp as naive local time. Raises ValueError when unparseable."""
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    value = datetime.fromisoformat(text)
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


def normalise_service_hours(category_key: CategoryKey, raw) -> Optional[int]:
    """Whole hours (at least 1) for SERVICE events, None for everything else."""
    if CategoryKey(category_key) != CategoryKey.SERVICE:
        return None
    if raw is None or str(raw).strip() == "":
        return 1
    try:
        hours = int(str(raw).strip())
    except ValueError:
        raise ValueError(f"Invalid service hours: {raw!r}")
    return max(1, hours)


def category_by_key(session: Session, key: CategoryKey) -> Optional[Category]:
    return session.scalars(db.select(Category).where(Category.key == CategoryKey(key))).first()


def apply_event_fields(
    session: Session,
    event: Event,
    *,
    title: str,
    starts_at: str,
    category_key: CategoryKey,
    service_hours=None,
) -> Event:
    """Validate and copy the editable fields onto `event`. Raises ValueError on bad input."""
    category = category_by_key(session, category_key)
    if category is None:
        raise ValueError("Invalid categoryKey")

    try:
        starts = parse_starts_at(starts_at)
    except ValueError:
        raise ValueError("Invalid startsAt")

    event.title = title.strip()
    event.starts_at = starts
    event.category = category
    event.category_id = category.id
    event.mandatory = category.key == CategoryKey.INTERNAL
    event.service_hours = normalise_service_hours(category.key, service_hours)
    return event
