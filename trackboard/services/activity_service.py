"""Activity service — append and list dashboard events."""

import logging

from trackboard.models import db
from trackboard.models.activity import Activity
from trackboard.utils.validation import as_text

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 200


def record(type: str, title: str, user: str, status: str = "", commit: bool = True) -> Activity:
    """Append an activity event. The timestamp is assigned here, server-side.

    Services that record an event as a side effect of their own write pass
    ``commit=False`` and commit both together.
    """
    activity = Activity(
        type=as_text(type, "type"),
        title=as_text(title, "title"),
        user=as_text(user, "user"),
        status=as_text(status, "status"),
    )
    db.session.add(activity)
    if commit:
        db.session.commit()
    else:
        db.session.flush()
    logger.debug("Activity recorded type=%s title=%s", activity.type, activity.title)
    return activity


def list_activities(limit: int | None = None) -> list[Activity]:
    """Most recent first. Insertion order breaks timestamp ties."""
    query = Activity.query.order_by(Activity.timestamp.desc(), Activity.id.desc())
    return query.limit(limit or DEFAULT_LIST_LIMIT).all()
