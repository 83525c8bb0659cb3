from datetime import datetime
from enum import Enum

from pctcup.extensions import db
from pctcup.security import hash_password, verify_and_update_password


class Role(str, Enum):
    BRO = "BRO"
    ADMIN = "ADMIN"


class ClassType(str, Enum):
    NON_GRAD = "NON_GRAD"
    SENIOR = "SENIOR"


class Team(db.Model):
    __tablename__ = "teams"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), unique=True, nullable=False)

    members = db.relationship("User", back_populates="team")

    def __repr__(self):
        return f"<Team id={self.id} {self.name}>"


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.Enum(Role, name="user_role"), nullable=False, default=Role.BRO)
    class_type = db.Column(db.Enum(ClassType, name="class_type"), nullable=False, default=ClassType.NON_GRAD)
    team_id = db.Column(db.Integer, db.ForeignKey("teams.id"), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    deleted_at = db.Column(db.DateTime, nullable=True)  # soft delete

    team = db.relationship("Team", back_populates="members")
    attendances = db.relationship("Attendance", back_populates="user")

    def set_password(self, password: str):
        self.password_hash = hash_password(password)

    def check_password(self, password: str) -> tuple[bool, str | None]:
        return verify_and_update_password(password, self.password_hash)

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def __repr__(self):
        return f"<User id={self.id} {self.username} role={self.role}>"
