from pctcup.extensions import db
from .user import ClassType


class Checkpoint(db.Model):
    __tablename__ = "checkpoints"
    id = db.Column(db.Integer, primary_key=True)
    number = db.Column(db.Integer, unique=True, nullable=False)  # 1..n, ordered
    label = db.Column(db.String(64), nullable=False)
    start_date = db.Column(db.DateTime, nullable=True)
    end_date = db.Column(db.DateTime, nullable=False)

    requirements = db.relationship("Requirement", back_populates="checkpoint", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Checkpoint number={self.number} end={self.end_date:%Y-%m-%d}>"


class Requirement(db.Model):
    __tablename__ = "requirements"
    id = db.Column(db.Integer, primary_key=True)
    class_type = db.Column(db.Enum(ClassType, name="class_type"), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False)
    checkpoint_id = db.Column(db.Integer, db.ForeignKey("checkpoints.id"), nullable=False)
    required = db.Column(db.Integer, nullable=False, default=0)

    category = db.relationship("Category")
    checkpoint = db.relationship("Checkpoint", back_populates="requirements")

    __table_args__ = (
        db.UniqueConstraint("checkpoint_id", "category_id", "class_type", name="uq_requirement_triple"),
        db.CheckConstraint("required >= 0", name="ck_requirement_non_negative"),
    )
