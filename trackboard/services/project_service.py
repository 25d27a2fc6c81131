"""Project service — project creation, listing and membership management.

Transaction policy: every public function commits its own unit of work.
There is no locking between the membership check and the write; a
concurrent removal between the two is resolved last-write-wins.
"""

import logging

from sqlalchemy import or_, select

from trackboard.core.caller import Caller
from trackboard.core.exceptions import NotFoundError, ValidationError
from trackboard.models import db
from trackboard.models.project import Project, ProjectMember
from trackboard.services import activity_service
from trackboard.services.permission_service import (
    check_manage_members,
    check_member_removal,
)
from trackboard.services.user_service import get_user_by_email
from trackboard.utils.validation import as_text

logger = logging.getLogger(__name__)


def get_project_or_404(project_id: str) -> Project:
    project = db.session.get(Project, project_id)
    if not project:
        raise NotFoundError("Project", project_id)
    return project


def list_my_projects(caller: Caller) -> list[Project]:
    """Projects the caller created or belongs to, newest first."""
    member_of = select(ProjectMember.project_id).where(ProjectMember.user_id == caller.id)
    return (
        Project.query
        .filter(or_(Project.created_by_id == caller.id, Project.id.in_(member_of)))
        .order_by(Project.created_at.desc())
        .all()
    )


def create_project(name: str, description: str | None, caller: Caller) -> Project:
    """Create a project owned by the caller, who becomes its first member."""
    name = as_text(name, "name")
    if not name:
        raise ValidationError("Project name is required", details={"name": "required"})

    project = Project(
        name=name,
        description=as_text(description, "description"),
        created_by_id=caller.id,
    )
    project.memberships.append(ProjectMember(user_id=caller.id))
    db.session.add(project)
    db.session.flush()

    activity_service.record(
        "project_created", project.name, caller.username, "created", commit=False,
    )
    db.session.commit()
    logger.info("Created project '%s' (ID: %s) by %s", project.name, project.id, caller.id)
    return project


def add_member(project_id: str, email: str, caller: Caller) -> Project:
    project = get_project_or_404(project_id)
    check_manage_members(caller, project)

    email = as_text(email, "email")
    if not email:
        raise ValidationError("Email is required", details={"email": "required"})
    user = get_user_by_email(email)
    if not user:
        raise NotFoundError("User")

    if project.is_member(user.id):
        raise ValidationError("User is already a member of this project")

    project.memberships.append(ProjectMember(user_id=user.id))
    db.session.commit()
    logger.info("Added member %s to project %s", user.id, project.id)
    return project


def remove_member(project_id: str, member_id: str, caller: Caller) -> Project:
    """Remove a member. Removing a non-member is a no-op."""
    project = get_project_or_404(project_id)
    check_manage_members(caller, project)
    check_member_removal(project, member_id)

    membership = next((m for m in project.memberships if m.user_id == member_id), None)
    if membership is not None:
        project.memberships.remove(membership)
        db.session.commit()
        logger.info("Removed member %s from project %s", member_id, project.id)
    return project
