from typing import List, Optional

from pctcup.models import CategoryKey
from .common import CamelModel, CheckpointRef


class LeaderboardRow(CamelModel):
    rank: int
    username: str
    name: str
    team_id: Optional[int] = None
    score: float
    on_track: int


class LeaderboardResponse(CamelModel):
    checkpoint: CheckpointRef
    leaderboard: List[LeaderboardRow]


class TeamStanding(CamelModel):
    team_id: int
    team_name: str
    met_count: int
    team_size: int
    pct: float


class TeamLeaderboardResponse(CamelModel):
    checkpoint: CheckpointRef
    teams: List[TeamStanding]


class MissingCategory(CamelModel):
    category_key: CategoryKey
    category_name: str
    remaining_needed: int
    unit: str


class MyTeamMember(CamelModel):
    username: str
    name: str
    met_all: bool
    missing: List[MissingCategory]


class MyTeamResponse(CamelModel):
    checkpoint: CheckpointRef
    team_id: Optional[int] = None
    members: List[MyTeamMember]
