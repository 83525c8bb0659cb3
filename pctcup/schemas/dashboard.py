from enum import Enum
from typing import List, Optional

from pctcup.models import CategoryKey
from .common import CamelModel, CheckpointRef


class MemberStatus(str, Enum):
    MET = "MET"
    COMPLETE = "COMPLETE"
    IN_PROGRESS = "IN_PROGRESS"
    OFF_TRACK = "OFF_TRACK"


class DashboardUser(CamelModel):
    first_name: str
    last_name: str
    team_id: Optional[int] = None


class CategoryProgressOut(CamelModel):
    category_key: CategoryKey
    category_name: str
    color: Optional[str] = None
    completed: int
    required: int
    remaining_needed: int
    remaining_opportunities: int
    met: bool


class DashboardMeResponse(CamelModel):
    user: DashboardUser
    checkpoint: CheckpointRef
    categories: List[CategoryProgressOut]


class TeamCheckpointRef(CheckpointRef):
    passed: bool


class TeamCategoryStatus(CamelModel):
    category_key: CategoryKey
    completed: int
    required: int
    status: MemberStatus


class TeamMemberProgress(CamelModel):
    username: str
    name: str
    per_category: List[TeamCategoryStatus]


class DashboardTeamResponse(CamelModel):
    checkpoint: TeamCheckpointRef
    team_id: Optional[int] = None
    members: List[TeamMemberProgress]
