from __future__ import annotations
from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base, TimestampMixin


class NotificationType(str, PyEnum):
    ANNOUNCEMENT = "ANNOUNCEMENT"
    LEAVE = "LEAVE"
    ATTENDANCE = "ATTENDANCE"
    REPORT = "REPORT"
    INVOICE = "INVOICE"


class NotificationStatus(str, PyEnum):
    DRAFT = "DRAFT"
    SCHEDULED = "SCHEDULED"
    SENT = "SENT"
    CANCELLED = "CANCELLED"


class NotificationAudience(str, PyEnum):
    ORGANIZATION = "ORGANIZATION"
    ROLE = "ROLE"
    INDIVIDUAL = "INDIVIDUAL"


class Notification(TimestampMixin, Base):
    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(primary_key=True)
    org_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), index=True, nullable=False)
    sender_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    target_user_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[NotificationType] = mapped_column(
        Enum(NotificationType, name="notification_type", native_enum=False, length=32),
        nullable=False,
        default=NotificationType.ANNOUNCEMENT,
    )
    audience: Mapped[NotificationAudience] = mapped_column(
        Enum(NotificationAudience, name="notification_audience", native_enum=False, length=32),
        nullable=False,
        default=NotificationAudience.ORGANIZATION,
    )
    target_roles: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[NotificationStatus] = mapped_column(
        Enum(NotificationStatus, name="notification_status", native_enum=False, length=32),
        nullable=False,
        default=NotificationStatus.DRAFT,
    )
    action_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    meta: Mapped[Optional[dict]] = mapped_column("metadata", JSON, nullable=True)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class NotificationReceipt(Base):
    __tablename__ = "notification_receipts"
    __table_args__ = (
        UniqueConstraint("notification_id", "user_id", name="uq_notification_receipts_notification_user"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    notification_id: Mapped[int] = mapped_column(ForeignKey("notifications.id"), index=True, nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
