"""Activity log model — purely additive feed for the dashboard."""

from datetime import datetime, timezone

from trackboard.models import db


class Activity(db.Model):
    __tablename__ = "activities"

    id = db.Column(db.Integer, primary_key=True)
    type = db.Column(db.String(50), nullable=False, default="")
    title = db.Column(db.String(300), nullable=False, default="")
    user = db.Column(db.String(200), nullable=False, default="")  # display name, not a FK
    status = db.Column(db.String(50), nullable=False, default="")
    timestamp = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    def to_dict(self):
        return {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "user": self.user,
            "status": self.status,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }

    def __repr__(self):
        return f"<Activity {self.id}: {self.type}>"
