from datetime import date
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from core.database import Base, TimestampMixin


class DailyReport(TimestampMixin, Base):
    __tablename__ = "daily_reports"

    id: Mapped[int] = mapped_column(primary_key=True)
    org_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), index=True, nullable=False)
    employee_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    report_date: Mapped[date] = mapped_column(Date, nullable=False)


class DailyReportEntry(Base):
    __tablename__ = "daily_report_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    report_id: Mapped[int] = mapped_column(ForeignKey("daily_reports.id"), index=True, nullable=False)
    task_name: Mapped[str] = mapped_column(String(255), nullable=False)
    hours: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0"))


class MonthlyReport(TimestampMixin, Base):
    __tablename__ = "monthly_reports"

    id: Mapped[int] = mapped_column(primary_key=True)
    org_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), index=True, nullable=False)
    employee_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    report_month: Mapped[date] = mapped_column(Date, nullable=False)


class MonthlyReportEntry(Base):
    __tablename__ = "monthly_report_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    report_id: Mapped[int] = mapped_column(ForeignKey("monthly_reports.id"), index=True, nullable=False)
    task_name: Mapped[str] = mapped_column(String(255), nullable=False)
    story_points: Mapped[int] = mapped_column(nullable=False, default=0)
