from datetime import datetime

import pytest
from httpx import AsyncClient

from conftest import auth_headers
from pctcup.models import ClassType


@pytest.mark.asyncio
async def test_individual_leaderboard_scores_and_ranks(client: AsyncClient, make, cup):
    # non-grad needs 1 chapter + 3 service hours at checkpoint 1
    ace = make.user("ace", "Ace", "Zed")
    half = make.user("half", "Hal", "Fuller")
    zero = make.user("zero", "Zoe", "Ng")
    also_zero = make.user("also", "Amy", "Ng")
    admin = make.admin()

    chapter = make.event(cup.chapter, datetime(2026, 1, 25))
    service = make.event(cup.service, datetime(2026, 1, 28), service_hours=3)
    make.attend(chapter, ace, half)
    make.attend(service, ace)

    response = await client.get("/leaderboard", headers=auth_headers(zero))
    assert response.status_code == 200
    data = response.json()
    assert data["checkpoint"]["number"] == 1

    rows = data["leaderboard"]
    assert [r["username"] for r in rows] == ["ace", "half", "also", "zero"]
    assert [r["rank"] for r in rows] == [1, 2, 3, 4]
    assert admin.username not in [r["username"] for r in rows]
    assert rows[0]["score"] == 2.0 and rows[0]["onTrack"] == 2
    assert rows[1]["score"] == 1.0 and rows[1]["onTrack"] == 1
    assert rows[2]["score"] == 0.0 and rows[2]["onTrack"] == 0


@pytest.mark.asyncio
async def test_zero_requirement_counts_as_on_track(client: AsyncClient, make, cup):
    senior = make.user("sam", "Sam", "Senior", class_type=ClassType.SENIOR)

    rows = (await client.get("/leaderboard", headers=auth_headers(senior))).json()["leaderboard"]
    # chapter requirement is 0 for seniors, service is 1 hour
    assert rows == [{"rank": 1, "username": "sam", "name": "Sam Senior", "teamId": None, "score": 1.0, "onTrack": 1}]


@pytest.mark.asyncio
async def test_partial_service_hours_give_fractional_score(client: AsyncClient, make, cup):
    bro = make.user("alex")
    make.attend(make.event(cup.service, datetime(2026, 1, 28), service_hours=2), bro)

    row = (await client.get("/leaderboard", headers=auth_headers(bro))).json()["leaderboard"][0]
    assert row["score"] == 0.667
    assert row["onTrack"] == 0


@pytest.mark.asyncio
async def test_leaderboard_checkpoint_must_be_numeric(client: AsyncClient, make, cup):
    bro = make.user("alex")
    assert (await client.get("/leaderboard", params={"checkpoint": "x"}, headers=auth_headers(bro))).status_code == 400
    assert (await client.get("/leaderboard", params={"checkpoint": 7}, headers=auth_headers(bro))).status_code == 404


@pytest.mark.asyncio
async def test_team_leaderboard(client: AsyncClient, make, cup):
    red, blue, empty = make.team("Red"), make.team("Blue"), make.team("Empty")
    a = make.user("a", team=red)
    b = make.user("b", team=red)
    make.user("c", team=red)
    d = make.user("d", team=blue)

    chapter = make.event(cup.chapter, datetime(2026, 1, 25))
    service = make.event(cup.service, datetime(2026, 1, 28), service_hours=3)
    make.attend(chapter, a, b, d)
    make.attend(service, a, b)

    response = await client.get("/leaderboard/teams", headers=auth_headers(a))
    assert response.status_code == 200
    data = response.json()
    assert data["checkpoint"]["number"] == 1
    assert data["teams"] == [
        {"teamId": red.id, "teamName": "Red", "metCount": 2, "teamSize": 3, "pct": 0.667},
        {"teamId": blue.id, "teamName": "Blue", "metCount": 0, "teamSize": 1, "pct": 0.0},
        {"teamId": empty.id, "teamName": "Empty", "metCount": 0, "teamSize": 0, "pct": 0.0},
    ]


@pytest.mark.asyncio
async def test_team_leaderboard_without_checkpoints(client: AsyncClient, make):
    bro = make.user("alex")
    assert (await client.get("/leaderboard/teams", headers=auth_headers(bro))).status_code == 404


@pytest.mark.asyncio
async def test_my_team_lists_what_is_missing(client: AsyncClient, make, cup):
    team = make.team("Red")
    done = make.user("done", "Dana", "Able", team=team)
    short = make.user("short", "Sid", "Baker", team=team)
    make.admin()

    make.attend(make.event(cup.chapter, datetime(2026, 1, 25)), done, short)
    make.attend(make.event(cup.service, datetime(2026, 1, 28), service_hours=3), done)
    make.attend(make.event(cup.service, datetime(2026, 1, 29), service_hours=1), short)

    data = (await client.get("/leaderboard/my-team", headers=auth_headers(short))).json()
    assert data["teamId"] == team.id
    assert data["members"] == [
        {"username": "done", "name": "Dana Able", "metAll": True, "missing": []},
        {
            "username": "short",
            "name": "Sid Baker",
            "metAll": False,
            "missing": [
                {
                    "categoryKey": "SERVICE",
                    "categoryName": "Community Service Hours",
                    "remainingNeeded": 2,
                    "unit": "hrs",
                }
            ],
        },
    ]


@pytest.mark.asyncio
async def test_my_team_without_team(client: AsyncClient, make, cup):
    bro = make.user("alex")
    data = (await client.get("/leaderboard/my-team", headers=auth_headers(bro))).json()
    assert data["teamId"] is None
    assert data["members"] == []
