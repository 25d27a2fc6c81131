"""
TrackBoard
Work item domain models.

Models:
    - WorkItem: trackable unit of work (task / bug / feature) owned by a project
    - WorkItemComment: append-only discussion entry owned by a work item
"""

import uuid
from datetime import datetime, timezone

from trackboard.models import db

# ── Shared constants ─────────────────────────────────────────────────────

# Board column order. Any status may follow any other; there is no
# transition graph.
WORK_ITEM_STATUSES = ("Backlog", "To Do", "In Progress", "Done", "Cancelled")

DEFAULT_STATUS = "To Do"

CLOSED_STATUSES = frozenset({"Done", "Cancelled"})


class WorkItem(db.Model):
    """
    Work item on a project board.

    ``project_id`` and ``created_by_id`` are set once at creation.
    ``assigned_to_id`` is optional and may be cleared.
    """

    __tablename__ = "work_items"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    project_id = db.Column(
        db.String(36),
        db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = db.Column(db.String(300), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    status = db.Column(
        db.String(30),
        nullable=False,
        default=DEFAULT_STATUS,
        comment="Backlog | To Do | In Progress | Done | Cancelled",
    )
    assigned_to_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_by_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    project = db.relationship("Project", back_populates="work_items")
    assigned_to = db.relationship("User", foreign_keys=[assigned_to_id])
    created_by = db.relationship("User", foreign_keys=[created_by_id])
    comments = db.relationship(
        "WorkItemComment",
        back_populates="work_item",
        order_by="WorkItemComment.id",
        cascade="all, delete-orphan",
    )

    def to_dict(self, include_comments=True):
        result = {
            "id": self.id,
            "projectId": self.project_id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "assignedTo": self.assigned_to.to_ref() if self.assigned_to else None,
            "createdBy": self.created_by.to_ref() if self.created_by else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_comments:
            result["comments"] = [c.to_dict() for c in self.comments]
        return result

    def __repr__(self):
        return f"<WorkItem {self.id}: {self.title[:40]}>"


class WorkItemComment(db.Model):
    """Comment embedded in a work item. Never edited, never reordered."""

    __tablename__ = "work_item_comments"

    id = db.Column(db.Integer, primary_key=True)
    work_item_id = db.Column(
        db.String(36),
        db.ForeignKey("work_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    text = db.Column(db.Text, nullable=False)
    author_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    work_item = db.relationship("WorkItem", back_populates="comments")
    author = db.relationship("User", foreign_keys=[author_id])

    def to_dict(self):
        return {
            "id": self.id,
            "text": self.text,
            "author": self.author.to_ref() if self.author else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
