"""
Realtime fan-out of notifications, decoupled from the writing transaction.

`queue_for_fanout` only records the notification on the session. The payload is
built just before commit. Recipients are looked up on a separate session once
the commit has succeeded, then handed to the publisher. A rollback drops
everything that was queued. Lookup and publisher failures are logged and never
reach the caller or undo the write.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Tuple

from sqlalchemy import event, select
from sqlalchemy.orm import Session

from core.logging import get_logger
from user.models import User, UserStatus
from .models import Notification, NotificationAudience

logger = get_logger(__name__)

_QUEUED = "notifications_queued"
_READY = "notifications_ready"


class RealtimePublisher(Protocol):
    def publish(self, recipient_ids: List[int], payload: dict) -> None: ...


class LoggingPublisher:
    """Default publisher when no realtime channel is wired in."""

    def publish(self, recipient_ids: List[int], payload: dict) -> None:
        logger.debug(
            "Notification published",
            notification_id=payload["notification"]["id"],
            recipients=len(recipient_ids),
        )


_publisher: RealtimePublisher = LoggingPublisher()


def set_publisher(publisher: Optional[RealtimePublisher]) -> None:
    global _publisher
    _publisher = publisher if publisher is not None else LoggingPublisher()


def queue_for_fanout(db: Session, notification: Notification) -> None:
    db.info.setdefault(_QUEUED, []).append(notification)


def serialize(notification: Notification) -> dict:
    return {
        "id": notification.id,
        "org_id": notification.org_id,
        "title": notification.title,
        "body": notification.body,
        "type": notification.type.value,
        "audience": notification.audience.value,
        "action_url": notification.action_url,
        "metadata": notification.meta or {},
        "sent_at": notification.sent_at.isoformat() if notification.sent_at else None,
    }


@dataclass(frozen=True)
class Audience:
    """Who a notification reaches, detached from the ORM row."""

    org_id: int
    kind: NotificationAudience
    target_user_id: Optional[int] = None
    target_roles: Tuple[str, ...] = ()

    @classmethod
    def of(cls, notification: Notification) -> "Audience":
        return cls(
            org_id=notification.org_id,
            kind=notification.audience,
            target_user_id=notification.target_user_id,
            target_roles=tuple(notification.target_roles or ()),
        )


def recipients_for(db: Session, audience: Audience) -> List[int]:
    if audience.kind == NotificationAudience.INDIVIDUAL:
        return [audience.target_user_id] if audience.target_user_id else []

    stmt = select(User.id).where(
        User.org_id == audience.org_id,
        User.status != UserStatus.TERMINATED,
    )
    if audience.kind == NotificationAudience.ROLE and audience.target_roles:
        stmt = stmt.where(User.role.in_(audience.target_roles))
    return list(db.scalars(stmt.order_by(User.id)))


def _publish_all(db: Session, ready: Iterable[tuple]) -> None:
    for audience, payload in ready:
        notification_id = payload["notification"]["id"]
        try:
            recipient_ids = recipients_for(db, audience)
        except Exception:
            logger.exception("Realtime recipient lookup failed", notification_id=notification_id)
            continue
        try:
            _publisher.publish(recipient_ids, payload)
        except Exception:
            logger.exception("Realtime fan-out failed", notification_id=notification_id)


@event.listens_for(Session, "before_commit")
def _resolve_queued(session: Session) -> None:
    queued = session.info.pop(_QUEUED, None)
    if not queued:
        return
    session.flush()
    ready = session.info.setdefault(_READY, [])
    for notification in queued:
        payload = {"event": "notification.created", "notification": serialize(notification)}
        ready.append((Audience.of(notification), payload))


@event.listens_for(Session, "after_commit")
def _publish_committed(session: Session) -> None:
    ready = session.info.pop(_READY, None)
    if not ready:
        return
    # the committed session cannot emit SQL here
    with Session(bind=session.get_bind()) as lookup:
        _publish_all(lookup, ready)


@event.listens_for(Session, "after_rollback")
def _discard_on_rollback(session: Session) -> None:
    session.info.pop(_QUEUED, None)
    session.info.pop(_READY, None)
