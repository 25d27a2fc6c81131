"""
Dashboard Metrics Service

Aggregates the metric cards shown on the dashboard, scoped to the
projects the caller created or belongs to:
  - Project count
  - Distinct team members across those projects
  - Work items per status (every status present, zero-filled)
  - Open work items (not Done / Cancelled)
  - Latest activity events
"""

import logging

from sqlalchemy import func

from trackboard.core.caller import Caller
from trackboard.models import db
from trackboard.models.project import ProjectMember
from trackboard.models.work_item import CLOSED_STATUSES, WORK_ITEM_STATUSES, WorkItem
from trackboard.services import activity_service
from trackboard.services.project_service import list_my_projects

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 10


def get_status_breakdown(project_ids):
    """Work item counts per status for the given projects."""
    counts = {status: 0 for status in WORK_ITEM_STATUSES}
    if not project_ids:
        return counts
    rows = (
        db.session.query(WorkItem.status, func.count(WorkItem.id))
        .filter(WorkItem.project_id.in_(project_ids))
        .group_by(WorkItem.status)
        .all()
    )
    for status, count in rows:
        counts[status] = count
    return counts


def get_team_size(project_ids):
    if not project_ids:
        return 0
    return (
        db.session.query(func.count(func.distinct(ProjectMember.user_id)))
        .filter(ProjectMember.project_id.in_(project_ids))
        .scalar()
    ) or 0


def get_metrics(caller: Caller) -> dict:
    project_ids = [p.id for p in list_my_projects(caller)]
    by_status = get_status_breakdown(project_ids)
    recent = activity_service.list_activities(limit=RECENT_ACTIVITY_LIMIT)

    return {
        "totalProjects": len(project_ids),
        "teamMembers": get_team_size(project_ids),
        "workItemsByStatus": by_status,
        "openWorkItems": sum(
            count for status, count in by_status.items() if status not in CLOSED_STATUSES
        ),
        "recentActivity": [a.to_dict() for a in recent],
    }
