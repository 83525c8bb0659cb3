"""Checkpoint resolution.

The "current" checkpoint is never stored: it is derived per request from the
wall clock and the checkpoint table.
"""
from __future__ import annotations

import logging
from datetime import datetime, time
from enum import Enum
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from pctcup.extensions import db
from pctcup.models import Checkpoint

log = logging.getLogger(__name__)


class CheckpointPhase(str, Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    PASSED = "PASSED"


def end_of_day(value: datetime) -> datetime:
    """Widen a timestamp to the last instant of its calendar day."""
    return datetime.combine(value.date(), time.max)


def checkpoint_boundary(checkpoint: Checkpoint) -> datetime:
    return end_of_day(checkpoint.end_date)


def has_passed(checkpoint: Checkpoint, now: datetime) -> bool:
    # only once the end date's day is over
    return now > checkpoint_boundary(checkpoint)


def checkpoint_phase(checkpoint: Checkpoint, now: datetime) -> CheckpointPhase:
    if has_passed(checkpoint, now):
        return CheckpointPhase.PASSED
    if checkpoint.start_date is not None and now < checkpoint.start_date:
        return CheckpointPhase.PENDING
    return CheckpointPhase.ACTIVE


def next_checkpoint(checkpoints: Iterable[Checkpoint], now: datetime) -> Optional[Checkpoint]:
    """Earliest checkpoint still open at `now`, else the last one, else None.

    A checkpoint stays current for the whole of its last day: the comparison
    is against end-of-day, not the stored `end_date` instant.
    """
    checkpoints = list(checkpoints)
    if not checkpoints:
        return None

    upcoming = [cp for cp in checkpoints if checkpoint_boundary(cp) >= now]
    if upcoming:
        return min(upcoming, key=lambda cp: (cp.end_date, cp.number))

    # every checkpoint has passed
    return max(checkpoints, key=lambda cp: cp.number)


def parse_checkpoint_number(raw) -> Optional[int]:
    """Positive integer from a query value, or None for anything else."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw > 0 else None
    text = str(raw).strip()
    # ASCII only: int() rejects superscripts and accepts other scripts' digits
    if not (text.isascii() and text.isdecimal()):
        return None
    number = int(text)
    return number if number > 0 else None


def require_checkpoint_number(raw, default: int = 1) -> int:
    """Checkpoint number for endpoints that pin one. Raises ValueError on junk."""
    if raw is None or str(raw).strip() == "":
        return default
    number = parse_checkpoint_number(raw)
    if number is None:
        raise ValueError(f"Invalid checkpoint number: {raw!r}")
    return number


def list_checkpoints(session: Session) -> list[Checkpoint]:
    return list(session.scalars(db.select(Checkpoint).order_by(Checkpoint.number.asc())))


def get_checkpoint(session: Session, number: int) -> Optional[Checkpoint]:
    return session.scalars(db.select(Checkpoint).where(Checkpoint.number == number)).first()


def get_next_checkpoint(session: Session, now: datetime) -> Optional[Checkpoint]:
    return next_checkpoint(list_checkpoints(session), now)


def resolve_checkpoint(session: Session, raw, now: datetime) -> Optional[Checkpoint]:
    """Explicit number -> direct lookup; missing or non-numeric -> next checkpoint."""
    number = parse_checkpoint_number(raw)
    if number is not None:
        return get_checkpoint(session, number)
    if raw not in (None, ""):
        log.debug("Ignoring non-numeric checkpoint %r, using next checkpoint", raw)
    return get_next_checkpoint(session, now)
