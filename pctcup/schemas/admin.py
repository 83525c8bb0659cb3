from datetime import datetime
from typing import List, Optional, Union

from pydantic import Field

from pctcup.models import CategoryKey, CategoryUnit, ClassType
from .common import CamelModel, LocalDateTime


class AlertRow(CamelModel):
    username: str
    name: str
    team_id: Optional[int] = None
    category_key: CategoryKey
    remaining_needed: int
    remaining_opportunities: int
    status: str


class AlertsCheckpoint(CamelModel):
    number: int
    label: str


class AlertsResponse(CamelModel):
    checkpoint: AlertsCheckpoint
    alerts: List[AlertRow]


class RosterEntry(CamelModel):
    id: int
    username: str
    name: str
    team_id: Optional[int] = None


class BroCreate(CamelModel):
    username: str = Field(min_length=1)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    class_type: ClassType = ClassType.NON_GRAD
    team_id: Optional[int] = None
    password: Optional[str] = None


class CategoryOut(CamelModel):
    id: int
    key: CategoryKey
    name: str
    color: Optional[str] = None
    unit: CategoryUnit


class EventIn(CamelModel):
    title: str = Field(min_length=1)
    starts_at: str = Field(min_length=1)
    category_key: CategoryKey
    service_hours: Optional[Union[int, str]] = None


class EventOut(CamelModel):
    id: int
    title: str
    starts_at: datetime
    category_id: int
    mandatory: bool
    service_hours: Optional[int] = None
    category: CategoryOut


class AttendanceIn(CamelModel):
    present_user_ids: List[int]


class AttendanceOut(CamelModel):
    event_id: int
    present_user_ids: List[int]


class CheckpointIn(CamelModel):
    number: int = Field(gt=0)
    label: Optional[str] = None
    start_date: Optional[LocalDateTime] = None
    end_date: LocalDateTime


class CheckpointUpdate(CamelModel):
    label: Optional[str] = None
    start_date: Optional[LocalDateTime] = None
    end_date: Optional[LocalDateTime] = None


class CheckpointOut(CamelModel):
    id: int
    number: int
    label: str
    start_date: Optional[datetime] = None
    end_date: datetime
    phase: str


class RequirementOut(CamelModel):
    id: int
    class_type: ClassType
    category_id: int
    checkpoint_id: int
    required: int


class RequirementsOut(CamelModel):
    categories: List[CategoryOut]
    checkpoints: List[CheckpointOut]
    requirements: List[RequirementOut]


class RequirementUpdate(CamelModel):
    class_type: ClassType
    category_id: int
    checkpoint_id: int
    required: int = Field(ge=0)


class RequirementsUpdateIn(CamelModel):
    updates: List[RequirementUpdate]
