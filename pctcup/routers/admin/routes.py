from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session, joinedload

from pctcup.config import settings
from pctcup.dependencies import get_db, get_now, require_admin
from pctcup.extensions import db
from pctcup.models import Category, Checkpoint, Event, Requirement, Role, Team, User
from pctcup.schemas.admin import (
    AlertsResponse,
    AttendanceIn,
    AttendanceOut,
    BroCreate,
    CategoryOut,
    CheckpointIn,
    CheckpointOut,
    CheckpointUpdate,
    EventIn,
    EventOut,
    RequirementOut,
    RequirementsOut,
    RequirementsUpdateIn,
    RosterEntry,
)
from pctcup.schemas.common import SaveResult
from pctcup.services import views
from pctcup.services.attendance_service import present_user_ids, replace_event_attendance
from pctcup.services.checkpoints import (
    checkpoint_phase,
    get_checkpoint,
    list_checkpoints,
    require_checkpoint_number,
)
from pctcup.services.event_service import apply_event_fields
from pctcup.services.requirements import load_categories

log = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _event_or_404(session: Session, event_id: int) -> Event:
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _checkpoint_or_404(session: Session, number: int) -> Checkpoint:
    cp = get_checkpoint(session, number)
    if cp is None:
        raise HTTPException(status_code=404, detail="Checkpoint not found")
    return cp


def _checkpoint_out(cp: Checkpoint, now: datetime) -> CheckpointOut:
    return CheckpointOut(
        id=cp.id,
        number=cp.number,
        label=cp.label,
        start_date=cp.start_date,
        end_date=cp.end_date,
        phase=checkpoint_phase(cp, now).value,
    )


# ---------- roster ----------

@router.get("/roster", response_model=list[RosterEntry])
def roster(current_user: User = Depends(require_admin), session: Session = Depends(get_db)):
    return [
        RosterEntry(id=u.id, username=u.username, name=u.full_name, team_id=u.team_id)
        for u in views.active_users(session)
    ]


@router.post("/users", response_model=RosterEntry, status_code=201)
def create_bro(
    form: BroCreate,
    current_user: User = Depends(require_admin),
    session: Session = Depends(get_db),
):
    username = form.username.strip()
    existing = session.scalars(db.select(User).where(User.username == username)).first()
    if existing:
        raise HTTPException(status_code=400, detail=f'Username "{username}" already exists')
    if form.team_id is not None and session.get(Team, form.team_id) is None:
        raise HTTPException(status_code=400, detail=f"Team {form.team_id} does not exist")

    user = User(
        username=username,
        first_name=form.first_name.strip(),
        last_name=form.last_name.strip(),
        role=Role.BRO,
        class_type=form.class_type,
        team_id=form.team_id,
    )
    user.set_password(form.password or settings.DEFAULT_BRO_PASSWORD)
    session.add(user)
    session.commit()
    log.info("Bro %s created (team=%s, class=%s)", user.username, user.team_id, user.class_type.value)
    return RosterEntry(id=user.id, username=user.username, name=user.full_name, team_id=user.team_id)


@router.post("/users/{user_id}/remove", response_model=SaveResult, response_model_exclude_none=True)
def soft_remove_user(
    user_id: int,
    current_user: User = Depends(require_admin),
    session: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Detach from the team and mark deleted; attendance history stays."""
    user = session.get(User, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.deleted_at is None:
        user.team_id = None
        user.deleted_at = now
        session.commit()
        log.info("User %s soft-removed", user.username)
    return SaveResult()


# ---------- events ----------

@router.get("/events", response_model=list[EventOut])
def list_events(current_user: User = Depends(require_admin), session: Session = Depends(get_db)):
    return session.scalars(
        db.select(Event).options(joinedload(Event.category)).order_by(Event.starts_at.asc())
    ).all()


@router.post("/events", response_model=EventOut)
def create_event(
    form: EventIn,
    current_user: User = Depends(require_admin),
    session: Session = Depends(get_db),
):
    event = Event()
    try:
        apply_event_fields(
            session,
            event,
            title=form.title,
            starts_at=form.starts_at,
            category_key=form.category_key,
            service_hours=form.service_hours,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    session.add(event)
    session.commit()
    log.info("Event %s created: %s", event.id, event.title)
    return event


@router.put("/events/{event_id}", response_model=EventOut)
def update_event(
    event_id: int,
    form: EventIn,
    current_user: User = Depends(require_admin),
    session: Session = Depends(get_db),
):
    event = _event_or_404(session, event_id)
    try:
        apply_event_fields(
            session,
            event,
            title=form.title,
            starts_at=form.starts_at,
            category_key=form.category_key,
            service_hours=form.service_hours,
        )
    except ValueError as e:
        session.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    session.commit()
    log.info("Event %s updated", event.id)
    return event


@router.delete("/events/{event_id}", response_model=SaveResult, response_model_exclude_none=True)
def delete_event(
    event_id: int,
    current_user: User = Depends(require_admin),
    session: Session = Depends(get_db),
):
    event = _event_or_404(session, event_id)
    session.delete(event)  # attendance goes with it
    session.commit()
    log.info("Event %s deleted", event_id)
    return SaveResult()


@router.get("/events/{event_id}/attendance", response_model=AttendanceOut)
def load_attendance(
    event_id: int,
    current_user: User = Depends(require_admin),
    session: Session = Depends(get_db),
):
    event = _event_or_404(session, event_id)
    return AttendanceOut(event_id=event.id, present_user_ids=present_user_ids(session, event))


@router.post("/events/{event_id}/attendance", response_model=SaveResult)
def save_attendance(
    event_id: int,
    form: AttendanceIn,
    current_user: User = Depends(require_admin),
    session: Session = Depends(get_db),
):
    event = _event_or_404(session, event_id)
    try:
        count = replace_event_attendance(session, event, form.present_user_ids)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return SaveResult(count=count)


# ---------- alerts ----------

@router.get("/alerts", response_model=AlertsResponse)
def alerts(
    checkpoint: Optional[str] = None,
    current_user: User = Depends(require_admin),
    session: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    """Every unmet category of every bro, tagged AT_RISK or OFF_TRACK."""
    try:
        number = require_checkpoint_number(checkpoint, default=1)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    cp = _checkpoint_or_404(session, number)
    return views.alerts(session, cp, now)


# ---------- checkpoints ----------

@router.get("/checkpoints", response_model=list[CheckpointOut])
def checkpoints_index(
    current_user: User = Depends(require_admin),
    session: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    return [_checkpoint_out(cp, now) for cp in list_checkpoints(session)]


@router.post("/checkpoints", response_model=CheckpointOut, status_code=201)
def create_checkpoint(
    form: CheckpointIn,
    current_user: User = Depends(require_admin),
    session: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    if get_checkpoint(session, form.number) is not None:
        raise HTTPException(status_code=400, detail=f"Checkpoint {form.number} already exists")
    cp = Checkpoint(
        number=form.number,
        label=(form.label or "").strip() or f"Checkpoint {form.number}",
        start_date=form.start_date,
        end_date=form.end_date,
    )
    session.add(cp)
    session.commit()
    log.info("Checkpoint %s created (ends %s)", cp.number, cp.end_date)
    return _checkpoint_out(cp, now)


@router.put("/checkpoints/{number}", response_model=CheckpointOut)
def update_checkpoint(
    number: int,
    form: CheckpointUpdate,
    current_user: User = Depends(require_admin),
    session: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    cp = _checkpoint_or_404(session, number)
    if form.label is not None and form.label.strip():
        cp.label = form.label.strip()
    if form.start_date is not None:
        cp.start_date = form.start_date
    if form.end_date is not None:
        cp.end_date = form.end_date
    session.commit()
    log.info("Checkpoint %s updated", cp.number)
    return _checkpoint_out(cp, now)


@router.delete("/checkpoints/{number}", response_model=SaveResult, response_model_exclude_none=True)
def delete_checkpoint(
    number: int,
    current_user: User = Depends(require_admin),
    session: Session = Depends(get_db),
):
    cp = _checkpoint_or_404(session, number)
    session.delete(cp)  # requirements cascade
    session.commit()
    log.info("Checkpoint %s deleted", number)
    return SaveResult()


# ---------- requirements ----------

@router.get("/requirements", response_model=RequirementsOut)
def requirements_index(
    current_user: User = Depends(require_admin),
    session: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    return RequirementsOut(
        categories=[CategoryOut.model_validate(c) for c in load_categories(session)],
        checkpoints=[_checkpoint_out(cp, now) for cp in list_checkpoints(session)],
        requirements=[
            RequirementOut.model_validate(r)
            for r in session.scalars(db.select(Requirement).order_by(Requirement.id.asc()))
        ],
    )


@router.put("/requirements", response_model=SaveResult)
def update_requirements(
    form: RequirementsUpdateIn,
    current_user: User = Depends(require_admin),
    session: Session = Depends(get_db),
):
    category_ids = set(session.scalars(db.select(Category.id)))
    checkpoint_ids = set(session.scalars(db.select(Checkpoint.id)))
    for u in form.updates:
        if u.category_id not in category_ids:
            raise HTTPException(status_code=400, detail=f"Unknown category {u.category_id}")
        if u.checkpoint_id not in checkpoint_ids:
            raise HTTPException(status_code=400, detail=f"Unknown checkpoint {u.checkpoint_id}")

    try:
        for u in form.updates:
            row = session.scalars(
                db.select(Requirement).where(
                    Requirement.class_type == u.class_type,
                    Requirement.category_id == u.category_id,
                    Requirement.checkpoint_id == u.checkpoint_id,
                )
            ).first()
            if row is None:
                session.add(
                    Requirement(
                        class_type=u.class_type,
                        category_id=u.category_id,
                        checkpoint_id=u.checkpoint_id,
                        required=u.required,
                    )
                )
                session.flush()
            else:
                row.required = u.required
        session.commit()
    except Exception:
        session.rollback()
        log.exception("Requirement update failed")
        raise

    log.info("Requirements updated: %d cell(s)", len(form.updates))
    return SaveResult(count=len(form.updates))
