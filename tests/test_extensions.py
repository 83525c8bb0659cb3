from datetime import datetime

from sqlalchemy import inspect

from pctcup.extensions import db
from pctcup.models import Attendance, Team, User


def test_relationships_map_to_their_targets():
    assert inspect(Team).relationships["members"].mapper.class_ is User
    assert inspect(Team).relationships["members"].secondary is None
    assert inspect(User).relationships["team"].mapper.class_ is Team


def test_select_and_delete_build_statements_through_db(session, make, cup):
    red = make.team("Red")
    bro = make.user("alex", team=red)
    event = make.event(cup.chapter, datetime(2026, 2, 1))
    make.attend(event, bro)

    assert session.scalars(db.select(Team.id)).all() == [red.id]
    assert [m.username for m in red.members] == ["alex"]

    session.execute(db.delete(Attendance).where(Attendance.event_id == event.id))
    session.commit()
    assert session.scalars(db.select(Attendance)).all() == []
