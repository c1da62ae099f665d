import datetime as dt
from typing import Optional

from sqlalchemy import JSON, Date, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base, TimestampMixin

WEEKDAYS = ("MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY")

DEFAULT_POLICY = {
    "onsite_start_time": "09:00",
    "onsite_end_time": "18:00",
    "remote_start_time": "08:00",
    "remote_end_time": "17:00",
    "working_days": ["MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY"],
    "weekend_days": ["SATURDAY", "SUNDAY"],
}


class WorkPolicy(TimestampMixin, Base):
    __tablename__ = "work_policies"

    id: Mapped[int] = mapped_column(primary_key=True)
    org_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), unique=True, nullable=False)
    onsite_start_time: Mapped[str] = mapped_column(String(5), nullable=False, default=DEFAULT_POLICY["onsite_start_time"])
    onsite_end_time: Mapped[str] = mapped_column(String(5), nullable=False, default=DEFAULT_POLICY["onsite_end_time"])
    remote_start_time: Mapped[str] = mapped_column(String(5), nullable=False, default=DEFAULT_POLICY["remote_start_time"])
    remote_end_time: Mapped[str] = mapped_column(String(5), nullable=False, default=DEFAULT_POLICY["remote_end_time"])
    working_days: Mapped[list] = mapped_column(JSON, nullable=False, default=lambda: list(DEFAULT_POLICY["working_days"]))
    weekend_days: Mapped[list] = mapped_column(JSON, nullable=False, default=lambda: list(DEFAULT_POLICY["weekend_days"]))


class Holiday(TimestampMixin, Base):
    __tablename__ = "holidays"
    __table_args__ = (UniqueConstraint("org_id", "date", name="uq_holidays_org_date"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    org_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
