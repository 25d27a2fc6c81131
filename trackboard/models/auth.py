"""
Auth Models — user accounts and their role tag.

A user whose ``password_hash`` is NULL has been invited but has not yet
activated the account through the set-password flow.
"""

import uuid
from datetime import datetime, timezone

from trackboard.models import db


# ═══════════════════════════════════════════════════════════════
# Roles
# ═══════════════════════════════════════════════════════════════
ROLE_ADMIN = "admin"
ROLE_PROJECT_MANAGER = "project-manager"
ROLE_USER = "user"

ROLES = (ROLE_ADMIN, ROLE_PROJECT_MANAGER, ROLE_USER)


# ═══════════════════════════════════════════════════════════════
# USERS
# ═══════════════════════════════════════════════════════════════
class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    username = db.Column(db.String(100), unique=True, nullable=False)
    email = db.Column(db.String(200), unique=True, nullable=False)
    password_hash = db.Column(db.String(256))  # NULL for invited-pending users
    role = db.Column(db.String(30), nullable=False, default=ROLE_USER)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.Index("ix_users_email", "email"),
    )

    # Relationships
    project_memberships = db.relationship(
        "ProjectMember", back_populates="user", lazy="dynamic",
        cascade="all",
    )

    @property
    def is_activated(self):
        """True once a password has been set."""
        return self.password_hash is not None

    @property
    def status(self):
        return "active" if self.is_activated else "invited"

    def to_ref(self):
        """Compact reference used wherever another entity points at a user."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
        }

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "status": self.status,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<User {self.id}: {self.username}>"
