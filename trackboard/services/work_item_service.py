"""Work item service layer — business logic behind work_item_bp.py.

Operations:
- List work items of a project
- Create a work item (membership required)
- Partial update (title / description / status / assignedTo)
- Append a comment
- Delete a work item

Authorization for every operation is resolved against the owning project
through ``permission_service.check_project_access``.

Partial update semantics:
    key absent            → field untouched
    key present           → field set to the supplied value
    "assignedTo": null    → assignment cleared

Status: any of WORK_ITEM_STATUSES may follow any other. There is no
workflow guard.
"""

import logging

from trackboard.core.caller import Caller
from trackboard.core.exceptions import NotFoundError, ValidationError
from trackboard.models import db
from trackboard.models.work_item import (
    DEFAULT_STATUS,
    WORK_ITEM_STATUSES,
    WorkItem,
    WorkItemComment,
)
from trackboard.services import activity_service
from trackboard.services.permission_service import check_project_access
from trackboard.services.project_service import get_project_or_404
from trackboard.services.user_service import get_user_by_id
from trackboard.utils.validation import as_text

logger = logging.getLogger(__name__)


# ── helpers ──────────────────────────────────────────────────────────────────

def _validate_status(status):
    if status not in WORK_ITEM_STATUSES:
        raise ValidationError(
            f"status must be one of: {', '.join(WORK_ITEM_STATUSES)}",
            details={"status": "invalid"},
        )
    return status


def _validate_title(title):
    title = title.strip() if isinstance(title, str) else ""
    if not title:
        raise ValidationError("Work item title is required", details={"title": "required"})
    return title


def _resolve_assignee(assignee_id):
    """Return a user id, or None for an explicit null / empty value."""
    if assignee_id is None or assignee_id == "":
        return None
    if isinstance(assignee_id, dict):
        assignee_id = assignee_id.get("id")
    user = get_user_by_id(str(assignee_id))
    if not user:
        raise NotFoundError("User", assignee_id)
    return user.id


def get_work_item_or_404(project_id, work_item_id):
    """Fetch a work item that belongs to the given project."""
    item = db.session.get(WorkItem, work_item_id)
    if not item or item.project_id != project_id:
        raise NotFoundError("Work item", work_item_id)
    return item


def _load_authorized(project_id, work_item_id, caller, message=None):
    item = get_work_item_or_404(project_id, work_item_id)
    check_project_access(caller, item.project, message)
    return item


# ═════════════════════════════════════════════════════════════════════════════
# Queries
# ═════════════════════════════════════════════════════════════════════════════

def list_for_project(project_id: str, caller: Caller) -> list[WorkItem]:
    project = get_project_or_404(project_id)
    check_project_access(caller, project)
    return (
        WorkItem.query
        .filter_by(project_id=project.id)
        .order_by(WorkItem.created_at, WorkItem.id)
        .all()
    )


# ═════════════════════════════════════════════════════════════════════════════
# Mutations
# ═════════════════════════════════════════════════════════════════════════════

def create_work_item(project_id: str, data: dict, caller: Caller) -> WorkItem:
    """Create a work item in a project the caller may access.

    Args:
        project_id: Owning project.
        data: ``title`` (required), ``description``, ``status``, ``assignedTo``.
        caller: Authenticated caller; becomes ``createdBy``.
    """
    project = get_project_or_404(project_id)
    check_project_access(
        caller, project, "Forbidden: Only project members can add work items."
    )

    title = _validate_title(data.get("title"))
    status = _validate_status(data.get("status") or DEFAULT_STATUS)

    item = WorkItem(
        project=project,
        title=title,
        description=as_text(data.get("description"), "description"),
        status=status,
        assigned_to_id=_resolve_assignee(data.get("assignedTo")),
        created_by_id=caller.id,
    )
    db.session.add(item)
    db.session.flush()

    activity_service.record(
        "work_item_created", item.title, caller.username, item.status, commit=False,
    )
    db.session.commit()
    logger.info("Created work item %s in project %s by %s", item.id, project.id, caller.id)
    return item


def update_work_item(project_id: str, work_item_id: str, data: dict, caller: Caller) -> WorkItem:
    """Apply only the supplied fields; see the module docstring."""
    item = _load_authorized(
        project_id, work_item_id, caller,
        "Forbidden: You do not have permission to update this item.",
    )

    changes = {}
    if "title" in data:
        changes["title"] = _validate_title(data["title"])
    if "description" in data:
        changes["description"] = as_text(data["description"], "description")
    if "status" in data:
        changes["status"] = _validate_status(data["status"])
    if "assignedTo" in data:
        changes["assigned_to_id"] = _resolve_assignee(data["assignedTo"])

    old_status = item.status
    for field, value in changes.items():
        setattr(item, field, value)

    if item.status != old_status:
        activity_service.record(
            "status_changed", item.title, caller.username, item.status, commit=False,
        )
        logger.info("Work item %s status %s → %s", item.id, old_status, item.status)

    db.session.commit()
    return item


def add_comment(project_id: str, work_item_id: str, content: str, caller: Caller) -> WorkItem:
    """Append a comment authored by the caller."""
    item = _load_authorized(project_id, work_item_id, caller)

    text = content.strip() if isinstance(content, str) else ""
    if not text:
        raise ValidationError("Comment content is required", details={"content": "required"})

    item.comments.append(WorkItemComment(text=text, author_id=caller.id))
    activity_service.record(
        "comment_added", item.title, caller.username, item.status, commit=False,
    )
    db.session.commit()
    logger.info("Comment added to work item %s by %s", item.id, caller.id)
    return item


def delete_work_item(project_id: str, work_item_id: str, caller: Caller) -> None:
    item = _load_authorized(
        project_id, work_item_id, caller,
        "Forbidden: You do not have permission to delete this item.",
    )
    db.session.delete(item)
    db.session.commit()
    logger.info("Deleted work item %s from project %s by %s", work_item_id, project_id, caller.id)
