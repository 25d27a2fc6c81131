"""
Permission Service — the single authorization policy.

Every route that touches a project or its work items asks one of these
predicates; nothing checks roles or membership inline.

    authorize(required_roles, role)        role gate (admin-only routes, ...)
    can_access_project(caller, project)    admin OR creator OR member
    can_manage_members(caller, project)    admin OR creator
    check_member_removal(project, uid)     creator can never be removed

The ``check_*`` variants raise ``PermissionDenied`` / ``ValidationError``;
the ``can_*`` variants return a bool.
"""

import logging
from collections.abc import Iterable

from trackboard.core.caller import Caller
from trackboard.core.exceptions import PermissionDenied, ValidationError
from trackboard.models.project import Project

logger = logging.getLogger(__name__)


def authorize(required_roles: Iterable[str], caller_role: str | None) -> None:
    """Deny unless ``caller_role`` is one of ``required_roles``."""
    if caller_role not in set(required_roles):
        raise PermissionDenied("Forbidden")


def can_access_project(caller: Caller, project: Project) -> bool:
    """Admin, project creator, or project member."""
    if caller.is_admin:
        return True
    if project.created_by_id == caller.id:
        return True
    return project.is_member(caller.id)


def check_project_access(caller: Caller, project: Project, message: str | None = None) -> None:
    if not can_access_project(caller, project):
        logger.warning(
            "User %s denied access to project %s — not a member",
            caller.id, project.id,
        )
        raise PermissionDenied(message or "Forbidden: You are not a member of this project.")


def can_manage_members(caller: Caller, project: Project) -> bool:
    """Only the creator or an admin may change a membership list."""
    return caller.is_admin or project.created_by_id == caller.id


def check_manage_members(caller: Caller, project: Project) -> None:
    if not can_manage_members(caller, project):
        logger.warning(
            "User %s denied member management on project %s",
            caller.id, project.id,
        )
        raise PermissionDenied("Forbidden: Only the project creator or an admin can manage members.")


def check_member_removal(project: Project, member_id: str) -> None:
    """The creator is unremovable, whoever asks."""
    if member_id == project.created_by_id:
        raise ValidationError("The project creator cannot be removed from the project.")
