from enum import Enum

from pctcup.extensions import db


class CategoryKey(str, Enum):
    CHAPTER = "CHAPTER"
    RUSH = "RUSH"
    INTERNAL = "INTERNAL"
    CORPORATE = "CORPORATE"
    PLEDGE = "PLEDGE"
    SERVICE = "SERVICE"
    CASUAL = "CASUAL"
    SOCIAL = "SOCIAL"


class CategoryUnit(str, Enum):
    EVENT_COUNT = "EVENT_COUNT"
    SERVICE_HOURS = "SERVICE_HOURS"


def default_unit_for(key: CategoryKey | str) -> CategoryUnit:
    if CategoryKey(key) == CategoryKey.SERVICE:
        return CategoryUnit.SERVICE_HOURS
    return CategoryUnit.EVENT_COUNT


class Category(db.Model):
    __tablename__ = "categories"
    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.Enum(CategoryKey, name="category_key"), unique=True, nullable=False)
    name = db.Column(db.String(100), nullable=False)
    color = db.Column(db.String(16), nullable=True)
    unit = db.Column(db.Enum(CategoryUnit, name="category_unit"), nullable=False)

    events = db.relationship("Event", back_populates="category")

    def __init__(self, **kwargs):
        if kwargs.get("unit") is None and kwargs.get("key") is not None:
            kwargs["unit"] = default_unit_for(kwargs["key"])
        super().__init__(**kwargs)

    @property
    def unit_label(self) -> str:
        return "hrs" if self.unit == CategoryUnit.SERVICE_HOURS else "events"

    def __repr__(self):
        return f"<Category id={self.id} {self.key} unit={self.unit}>"
