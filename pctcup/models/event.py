from pctcup.extensions import db


class Event(db.Model):
    __tablename__ = "events"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    starts_at = db.Column(db.DateTime, nullable=False, index=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False)
    mandatory = db.Column(db.Boolean, nullable=False, default=False)
    service_hours = db.Column(db.Integer, nullable=True)  # SERVICE events only

    category = db.relationship("Category", back_populates="events")
    attendance = db.relationship("Attendance", back_populates="event", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Event id={self.id} {self.title!r} starts_at={self.starts_at}>"


class Attendance(db.Model):
    __tablename__ = "attendance"

    id = db.Column(db.Integer, primary_key=True)
    event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    present = db.Column(db.Boolean, nullable=False, default=True)

    event = db.relationship("Event", back_populates="attendance")
    user = db.relationship("User", back_populates="attendances")

    __table_args__ = (
        db.UniqueConstraint("event_id", "user_id", name="uq_attendance_unique"),
        db.Index("ix_attendance_event", "event_id"),
        db.Index("ix_attendance_user", "user_id"),
    )

    def __repr__(self):
        return f"<Attendance event_id={self.event_id} user_id={self.user_id} present={self.present}>"
