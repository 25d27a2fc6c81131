"""Project domain model and its membership list."""

import uuid
from datetime import datetime, timezone

from trackboard.models import db


class Project(db.Model):
    """Authorization boundary for every work item that references it."""

    __tablename__ = "projects"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    created_by_id = db.Column(
        db.String(36),
        db.ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    created_by = db.relationship("User", foreign_keys=[created_by_id])
    memberships = db.relationship(
        "ProjectMember",
        back_populates="project",
        order_by="ProjectMember.id",
        cascade="all, delete-orphan",
    )
    work_items = db.relationship(
        "WorkItem",
        back_populates="project",
        lazy="dynamic",
        cascade="all, delete-orphan",
    )

    @property
    def members(self):
        return [m.user for m in self.memberships if m.user is not None]

    @property
    def member_ids(self) -> set[str]:
        return {m.user_id for m in self.memberships}

    def is_member(self, user_id: str) -> bool:
        return user_id in self.member_ids

    def to_dict(self) -> dict:
        """Serialize with creator and members expanded to user references."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "createdBy": self.created_by.to_ref() if self.created_by else None,
            "members": [u.to_ref() for u in self.members],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<Project {self.id}: {self.name}>"


class ProjectMember(db.Model):
    """User ↔ Project assignment; ``id`` order is join order."""

    __tablename__ = "project_members"

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(
        db.String(36), db.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    user_id = db.Column(
        db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    joined_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        db.UniqueConstraint("project_id", "user_id", name="uq_project_member"),
        db.Index("ix_project_members_project", "project_id"),
        db.Index("ix_project_members_user", "user_id"),
    )

    project = db.relationship("Project", back_populates="memberships")
    user = db.relationship("User", back_populates="project_memberships")
