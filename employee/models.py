from __future__ import annotations
from datetime import date
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import Date, Enum, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base, TimestampMixin
from user.models import UserStatus


class EmploymentType(str, PyEnum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    INTERN = "INTERN"


class EmploymentDetail(TimestampMixin, Base):
    __tablename__ = "employment_details"
    __table_args__ = (
        UniqueConstraint("org_id", "employee_code", name="uq_employment_details_org_employee_code"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), unique=True, nullable=False)
    org_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), index=True, nullable=False)

    employee_code: Mapped[str] = mapped_column(String(64), nullable=False)
    designation: Mapped[str] = mapped_column(String(255), nullable=False)
    employment_type: Mapped[EmploymentType] = mapped_column(
        Enum(EmploymentType, name="employment_type", native_enum=False, length=16),
        nullable=False,
        default=EmploymentType.FULL_TIME,
    )
    status: Mapped[UserStatus] = mapped_column(
        Enum(UserStatus, name="employment_status", native_enum=False, length=32),
        nullable=False,
        default=UserStatus.INACTIVE,
    )
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    department_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("departments.id", ondelete="SET NULL"), nullable=True, index=True
    )
    team_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("teams.id", ondelete="SET NULL"), nullable=True, index=True
    )
    reporting_manager_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    current_project_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("projects.id", ondelete="SET NULL"), nullable=True
    )
    primary_location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    current_project_note: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    # leave balances, days
    annual_leave_balance: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    sick_leave_balance: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    casual_leave_balance: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    parental_leave_balance: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0"))

    # compensation
    gross_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    income_tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))

    # relationships
    user = relationship("User", back_populates="employment", foreign_keys=[user_id])
    department = relationship("Department")
    team = relationship("Team")
