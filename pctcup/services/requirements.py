"""Requirement aggregation.

Attendance is summed per (user, category) up to a checkpoint boundary and
compared with the class-type thresholds for that checkpoint. Multi-user
callers go through `completed_by_category_for_users`, which reads every
relevant attendance row in one query and groups in memory.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Mapping, NamedTuple

from sqlalchemy.orm import Session

from pctcup.extensions import db
from pctcup.models import (
    Attendance,
    Category,
    CategoryUnit,
    Checkpoint,
    ClassType,
    Event,
    Requirement,
)


class RequirementKey(NamedTuple):
    class_type: ClassType
    category_id: int
    checkpoint_id: int


@dataclass
class CategoryTally:
    count: int = 0
    service_hours: int = 0


@dataclass(frozen=True)
class CategoryProgress:
    category: Category
    completed: int
    required: int

    @property
    def remaining_needed(self) -> int:
        return max(self.required - self.completed, 0)

    @property
    def met(self) -> bool:
        return self.remaining_needed == 0

    @property
    def ratio(self) -> float:
        """Share of the requirement done, capped at 1. Nothing required counts as done."""
        if self.required <= 0:
            return 1.0
        return min(self.completed / self.required, 1.0)


TalliesByCategory = Mapping[int, CategoryTally]


def load_categories(session: Session) -> list[Category]:
    return list(session.scalars(db.select(Category).order_by(Category.id.asc())))


def requirement_map(session: Session, checkpoint_id: int) -> dict[RequirementKey, int]:
    rows = session.scalars(db.select(Requirement).where(Requirement.checkpoint_id == checkpoint_id))
    return {
        RequirementKey(ClassType(r.class_type), r.category_id, r.checkpoint_id): r.required
        for r in rows
    }


def required_for(
    requirements: Mapping[RequirementKey, int],
    class_type: ClassType,
    category_id: int,
    checkpoint_id: int,
) -> int:
    return requirements.get(RequirementKey(ClassType(class_type), category_id, checkpoint_id), 0)


def completed_by_category_for_users(
    session: Session,
    user_ids: Iterable[int],
    boundary: datetime,
) -> dict[int, dict[int, CategoryTally]]:
    """user_id -> category_id -> tally of present attendance with starts_at <= boundary."""
    user_ids = list(user_ids)
    if not user_ids:
        return {}

    rows = session.execute(
        db.select(Attendance.user_id, Event.category_id, Event.service_hours)
        .join(Event, Attendance.event_id == Event.id)
        .where(
            Attendance.user_id.in_(user_ids),
            Attendance.present.is_(True),
            Event.starts_at <= boundary,
        )
    ).all()

    by_user: dict[int, dict[int, CategoryTally]] = defaultdict(lambda: defaultdict(CategoryTally))
    for user_id, category_id, service_hours in rows:
        tally = by_user[user_id][category_id]
        tally.count += 1
        tally.service_hours += service_hours or 0

    return {user_id: dict(tallies) for user_id, tallies in by_user.items()}


def completed_by_category_for_user(session: Session, user_id: int, boundary: datetime) -> dict[int, CategoryTally]:
    return completed_by_category_for_users(session, [user_id], boundary).get(user_id, {})


def completed_amount(category: Category, tally: CategoryTally | None) -> int:
    if tally is None:
        return 0
    if category.unit == CategoryUnit.SERVICE_HOURS:
        return tally.service_hours
    return tally.count


def evaluate_category(category: Category, tally: CategoryTally | None, required: int) -> CategoryProgress:
    return CategoryProgress(category=category, completed=completed_amount(category, tally), required=required)


def evaluate_user(
    categories: Iterable[Category],
    requirements: Mapping[RequirementKey, int],
    checkpoint: Checkpoint,
    class_type: ClassType,
    tallies: TalliesByCategory | None,
) -> list[CategoryProgress]:
    tallies = tallies or {}
    return [
        evaluate_category(c, tallies.get(c.id), required_for(requirements, class_type, c.id, checkpoint.id))
        for c in categories
    ]


def user_meets_checkpoint(
    categories: Iterable[Category],
    requirements: Mapping[RequirementKey, int],
    checkpoint: Checkpoint,
    class_type: ClassType,
    tallies: TalliesByCategory | None,
) -> bool:
    return all(p.met for p in evaluate_user(categories, requirements, checkpoint, class_type, tallies))
