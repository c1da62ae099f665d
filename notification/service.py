from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from core.database import utcnow
from core.logging import get_logger
from .models import Notification, NotificationAudience, NotificationStatus, NotificationType
from .realtime import queue_for_fanout

logger = get_logger(__name__)


def announce(
    db: Session,
    *,
    org_id: int,
    title: str,
    body: str,
    sender_id: Optional[int] = None,
    action_url: Optional[str] = None,
    metadata: Optional[dict] = None,
    audience: NotificationAudience = NotificationAudience.ORGANIZATION,
    notification_type: NotificationType = NotificationType.ANNOUNCEMENT,
    target_user_id: Optional[int] = None,
    target_roles: Optional[List[str]] = None,
) -> Notification:
    """
    Write a sent announcement inside the caller's transaction.

    Realtime delivery happens only after that transaction commits.
    """
    notification = Notification(
        org_id=org_id,
        sender_id=sender_id,
        target_user_id=target_user_id,
        title=title,
        body=body,
        type=notification_type,
        audience=audience,
        target_roles=list(target_roles or []),
        status=NotificationStatus.SENT,
        action_url=action_url,
        meta=metadata or {},
        sent_at=utcnow(),
    )
    db.add(notification)
    db.flush()
    queue_for_fanout(db, notification)
    return notification


def list_for_user(db: Session, user, limit: int = 50) -> List[Notification]:
    stmt = (
        select(Notification)
        .where(
            Notification.org_id == user.org_id,
            Notification.status == NotificationStatus.SENT,
            or_(
                Notification.audience != NotificationAudience.INDIVIDUAL,
                Notification.target_user_id == user.id,
            ),
        )
        .order_by(Notification.sent_at.desc(), Notification.id.desc())
    )
    role = getattr(user.role, "value", user.role)
    rows = []
    for n in db.scalars(stmt):
        if n.audience == NotificationAudience.ROLE and role not in (n.target_roles or []):
            continue
        rows.append(n)
        if len(rows) >= limit:
            break
    return rows
