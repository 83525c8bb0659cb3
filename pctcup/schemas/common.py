from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def to_naive_local(value: datetime) -> datetime:
    """Store and compare everything as naive local time."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


LocalDateTime = Annotated[datetime, AfterValidator(to_naive_local)]


class CamelModel(BaseModel):
    """Snake-case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class CheckpointRef(CamelModel):
    number: int
    label: str
    end_date: Optional[datetime] = None


class SaveResult(CamelModel):
    ok: bool = True
    count: Optional[int] = None
