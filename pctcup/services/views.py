"""Response assembly for the dashboard, alert and leaderboard screens.

Every function here is a read-only composition of the checkpoint resolver,
the requirement aggregator and the opportunity counter. Multi-user views
always use the batched aggregation.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from pctcup.extensions import db
from pctcup.models import Checkpoint, Role, Team, User
from pctcup.schemas.admin import AlertRow, AlertsCheckpoint, AlertsResponse
from pctcup.schemas.common import CheckpointRef
from pctcup.schemas.dashboard import (
    CategoryProgressOut,
    DashboardMeResponse,
    DashboardTeamResponse,
    DashboardUser,
    MemberStatus,
    TeamCategoryStatus,
    TeamCheckpointRef,
    TeamMemberProgress,
)
from pctcup.schemas.leaderboard import (
    LeaderboardResponse,
    LeaderboardRow,
    MissingCategory,
    MyTeamMember,
    MyTeamResponse,
    TeamLeaderboardResponse,
    TeamStanding,
)
from pctcup.services.checkpoints import checkpoint_boundary, has_passed
from pctcup.services.opportunities import classify_gap, remaining_opportunities
from pctcup.services.requirements import (
    CategoryProgress,
    completed_by_category_for_user,
    completed_by_category_for_users,
    evaluate_user,
    load_categories,
    requirement_map,
)


def _checkpoint_ref(cp: Checkpoint) -> CheckpointRef:
    return CheckpointRef(number=cp.number, label=cp.label, end_date=cp.end_date)


def active_users(session: Session, *, team_id: Optional[int] = None, bros_only: bool = True) -> list[User]:
    query = db.select(User).where(User.deleted_at.is_(None))
    if bros_only:
        query = query.where(User.role == Role.BRO)
    if team_id is not None:
        query = query.where(User.team_id == team_id)
    return list(session.scalars(query.order_by(User.last_name.asc(), User.first_name.asc())))


def _progress_by_user(session: Session, users: list[User], cp: Checkpoint) -> dict[int, list[CategoryProgress]]:
    categories = load_categories(session)
    requirements = requirement_map(session, cp.id)
    tallies = completed_by_category_for_users(session, [u.id for u in users], checkpoint_boundary(cp))
    return {
        u.id: evaluate_user(categories, requirements, cp, u.class_type, tallies.get(u.id))
        for u in users
    }


def dashboard_me(session: Session, user: User, cp: Checkpoint, now: datetime) -> DashboardMeResponse:
    boundary = checkpoint_boundary(cp)
    categories = load_categories(session)
    requirements = requirement_map(session, cp.id)
    tallies = completed_by_category_for_user(session, user.id, boundary)
    opportunities = remaining_opportunities(session, boundary, now)

    rows = [
        CategoryProgressOut(
            category_key=p.category.key,
            category_name=p.category.name,
            color=p.category.color,
            completed=p.completed,
            required=p.required,
            remaining_needed=p.remaining_needed,
            remaining_opportunities=opportunities.get(p.category.id, 0),
            met=p.met,
        )
        for p in evaluate_user(categories, requirements, cp, user.class_type, tallies)
    ]
    return DashboardMeResponse(
        user=DashboardUser(first_name=user.first_name, last_name=user.last_name, team_id=user.team_id),
        checkpoint=_checkpoint_ref(cp),
        categories=rows,
    )


def member_status(progress: CategoryProgress, passed: bool) -> MemberStatus:
    if progress.met:
        return MemberStatus.MET if passed else MemberStatus.COMPLETE
    return MemberStatus.OFF_TRACK if passed else MemberStatus.IN_PROGRESS


def dashboard_team(session: Session, user: User, cp: Checkpoint, now: datetime) -> DashboardTeamResponse:
    passed = has_passed(cp, now)
    teammates = [] if user.team_id is None else active_users(session, team_id=user.team_id, bros_only=False)
    progress = _progress_by_user(session, teammates, cp)

    members = [
        TeamMemberProgress(
            username=tm.username,
            name=tm.full_name,
            per_category=[
                TeamCategoryStatus(
                    category_key=p.category.key,
                    completed=p.completed,
                    required=p.required,
                    status=member_status(p, passed),
                )
                for p in progress[tm.id]
            ],
        )
        for tm in teammates
    ]
    return DashboardTeamResponse(
        checkpoint=TeamCheckpointRef(number=cp.number, label=cp.label, end_date=cp.end_date, passed=passed),
        team_id=user.team_id,
        members=members,
    )


def alerts(session: Session, cp: Checkpoint, now: datetime) -> AlertsResponse:
    bros = active_users(session)
    progress = _progress_by_user(session, bros, cp)
    opportunities = remaining_opportunities(session, checkpoint_boundary(cp), now)

    rows = []
    for bro in bros:
        for p in progress[bro.id]:
            if p.met:
                continue
            left = opportunities.get(p.category.id, 0)
            rows.append(
                AlertRow(
                    username=bro.username,
                    name=bro.full_name,
                    team_id=bro.team_id,
                    category_key=p.category.key,
                    remaining_needed=p.remaining_needed,
                    remaining_opportunities=left,
                    status=classify_gap(p.remaining_needed, left).value,
                )
            )
    return AlertsResponse(checkpoint=AlertsCheckpoint(number=cp.number, label=cp.label), alerts=rows)


def leaderboard_individuals(session: Session, cp: Checkpoint) -> LeaderboardResponse:
    bros = active_users(session)
    progress = _progress_by_user(session, bros, cp)

    scored = []
    for bro in bros:
        score = sum(p.ratio for p in progress[bro.id])
        on_track = sum(1 for p in progress[bro.id] if p.ratio >= 1)
        scored.append((round(score, 3), on_track, bro))

    scored.sort(key=lambda r: (-r[0], -r[1], r[2].full_name.lower(), r[2].full_name))
    rows = [
        LeaderboardRow(
            rank=i,
            username=bro.username,
            name=bro.full_name,
            team_id=bro.team_id,
            score=score,
            on_track=on_track,
        )
        for i, (score, on_track, bro) in enumerate(scored, start=1)
    ]
    return LeaderboardResponse(checkpoint=_checkpoint_ref(cp), leaderboard=rows)


def leaderboard_teams(session: Session, cp: Checkpoint) -> TeamLeaderboardResponse:
    teams = list(session.scalars(db.select(Team).order_by(Team.id.asc())))
    bros = [b for b in active_users(session) if b.team_id is not None]
    progress = _progress_by_user(session, bros, cp)

    by_team: dict[int, list[User]] = defaultdict(list)
    for bro in bros:
        by_team[bro.team_id].append(bro)

    standings = []
    for team in teams:
        members = by_team.get(team.id, [])
        met_count = sum(1 for m in members if all(p.met for p in progress[m.id]))
        team_size = len(members)
        standings.append(
            TeamStanding(
                team_id=team.id,
                team_name=team.name,
                met_count=met_count,
                team_size=team_size,
                pct=round(met_count / team_size, 3) if team_size else 0.0,
            )
        )

    standings.sort(key=lambda t: (-t.met_count, -t.pct, t.team_id))
    return TeamLeaderboardResponse(checkpoint=_checkpoint_ref(cp), teams=standings)


def my_team(session: Session, user: User, cp: Checkpoint) -> MyTeamResponse:
    if user.team_id is None:
        return MyTeamResponse(checkpoint=_checkpoint_ref(cp), team_id=None, members=[])

    teammates = active_users(session, team_id=user.team_id)
    progress = _progress_by_user(session, teammates, cp)

    members = []
    for tm in teammates:
        missing = [
            MissingCategory(
                category_key=p.category.key,
                category_name=p.category.name,
                remaining_needed=p.remaining_needed,
                unit=p.category.unit_label,
            )
            for p in progress[tm.id]
            if not p.met
        ]
        members.append(MyTeamMember(username=tm.username, name=tm.full_name, met_all=not missing, missing=missing))

    return MyTeamResponse(checkpoint=_checkpoint_ref(cp), team_id=user.team_id, members=members)
