# Re-export models so external code can keep using: from pctcup.models import User, Event, ...
from .user import User, Team, Role, ClassType
from .category import Category, CategoryKey, CategoryUnit, default_unit_for
from .checkpoint import Checkpoint, Requirement
from .event import Event, Attendance

__all__ = [
    # people
    "User", "Team", "Role", "ClassType",
    # reference data
    "Category", "CategoryKey", "CategoryUnit", "default_unit_for",
    "Checkpoint", "Requirement",
    # events & attendance
    "Event", "Attendance",
]
