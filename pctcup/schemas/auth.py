from typing import Optional

from pydantic import BaseModel, Field

from pctcup.models import ClassType, Role
from .common import CamelModel


class LoginForm(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class MeResponse(CamelModel):
    id: int
    username: str
    first_name: str
    last_name: str
    role: Role
    class_type: ClassType
    team_id: Optional[int] = None
