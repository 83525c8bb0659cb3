from datetime import datetime
from typing import Optional

from pctcup.models import CategoryKey
from .common import CamelModel


class ScheduleEvent(CamelModel):
    id: int
    title: str
    starts_at: datetime
    category_key: CategoryKey
    category_name: str
    color: Optional[str] = None
    mandatory: bool
    service_hours: Optional[int] = None
