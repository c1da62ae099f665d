"""initial hr schema: tenants, identities, tokens and dependents

Revision ID: 3c1d2f6a9b10
Revises:
Create Date: 2026-10-18 09:12:44.102311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1d2f6a9b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", sa.Integer(), autoincrement=False, primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("domain", sa.String(255), nullable=True, unique=True),
        sa.Column("timezone", sa.String(64), nullable=True),
        sa.Column("locale", sa.String(32), nullable=True),
        sa.Column("logo_url", sa.String(512), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("role", sa.String(32), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("invited_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("invited_by_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("archived_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_org_id", "users", ["org_id"])
    op.create_index("ix_users_invited_by_id", "users", ["invited_by_id"])

    op.create_table(
        "employee_profiles",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("preferred_name", sa.String(100), nullable=True),
        sa.Column("work_model", sa.String(16), nullable=False),
        sa.Column("current_address", sa.String(512), nullable=True),
        sa.Column("permanent_address", sa.String(512), nullable=True),
        sa.Column("work_email", sa.String(255), nullable=True),
        sa.Column("work_phone", sa.String(32), nullable=True),
        sa.Column("profile_photo_url", sa.String(512), nullable=True),
    )
    op.create_table(
        "emergency_contacts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("relationship", sa.String(100), nullable=False),
        sa.Column("phone", sa.String(32), nullable=False),
    )
    op.create_table(
        "employee_bank_accounts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("account_holder", sa.String(200), nullable=False),
        sa.Column("bank_name", sa.String(200), nullable=False),
        sa.Column("account_number", sa.String(64), nullable=False),
        sa.Column("branch", sa.String(200), nullable=True),
    )
    op.create_index("ix_employee_bank_accounts_user_id", "employee_bank_accounts", ["user_id"])

    op.create_table(
        "projects",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("code", sa.String(32), nullable=True),
        sa.Column("client_name", sa.String(255), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_projects_org_id", "projects", ["org_id"])

    op.create_table(
        "departments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("code", sa.String(32), nullable=True),
        sa.Column("description", sa.String(1024), nullable=True),
        sa.Column("head_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("org_id", "name", name="uq_departments_org_name"),
    )
    op.create_index("ix_departments_org_id", "departments", ["org_id"])

    op.create_table(
        "teams",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("department_id", sa.Integer(), sa.ForeignKey("departments.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(1024), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("org_id", "name", name="uq_teams_org_name"),
    )
    op.create_index("ix_teams_org_id", "teams", ["org_id"])
    op.create_index("ix_teams_department_id", "teams", ["department_id"])

    op.create_table(
        "team_leads",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.UniqueConstraint("team_id", "user_id", name="uq_team_leads_team_user"),
    )
    op.create_index("ix_team_leads_team_id", "team_leads", ["team_id"])
    op.create_index("ix_team_leads_user_id", "team_leads", ["user_id"])

    op.create_table(
        "team_managers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id"), nullable=False, unique=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
    )
    op.create_index("ix_team_managers_user_id", "team_managers", ["user_id"])

    op.create_table(
        "employment_details",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False, unique=True),
        sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("employee_code", sa.String(64), nullable=False),
        sa.Column("designation", sa.String(255), nullable=False),
        sa.Column("employment_type", sa.String(16), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("department_id", sa.Integer(), sa.ForeignKey("departments.id", ondelete="SET NULL"), nullable=True),
        sa.Column("team_id", sa.Integer(), sa.ForeignKey("teams.id", ondelete="SET NULL"), nullable=True),
        sa.Column("reporting_manager_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("current_project_id", sa.Integer(), sa.ForeignKey("projects.id", ondelete="SET NULL"), nullable=True),
        sa.Column("primary_location", sa.String(255), nullable=True),
        sa.Column("current_project_note", sa.String(512), nullable=True),
        sa.Column("annual_leave_balance", sa.Numeric(5, 2), nullable=False),
        sa.Column("sick_leave_balance", sa.Numeric(5, 2), nullable=False),
        sa.Column("casual_leave_balance", sa.Numeric(5, 2), nullable=False),
        sa.Column("parental_leave_balance", sa.Numeric(5, 2), nullable=False),
        sa.Column("gross_salary", sa.Numeric(12, 2), nullable=False),
        sa.Column("income_tax", sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("org_id", "employee_code", name="uq_employment_details_org_employee_code"),
    )
    op.create_index("ix_employment_details_org_id", "employment_details", ["org_id"])
    op.create_index("ix_employment_details_department_id", "employment_details", ["department_id"])
    op.create_index("ix_employment_details_team_id", "employment_details", ["team_id"])
    op.create_index("ix_employment_details_reporting_manager_id", "employment_details", ["reporting_manager_id"])

    op.create_table(
        "attendance_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("attendance_date", sa.Date(), nullable=False),
        sa.Column("check_in_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("check_out_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_attendance_records_employee_id", "attendance_records", ["employee_id"])

    op.create_table(
        "leave_requests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("reviewer_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("leave_type", sa.String(32), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("attachment_url", sa.String(512), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_leave_requests_employee_id", "leave_requests", ["employee_id"])

    for prefix, period_col, period_type in (("daily", "report_date", sa.Date()), ("monthly", "report_month", sa.Date())):
        op.create_table(
            f"{prefix}_reports",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
            sa.Column("employee_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
            sa.Column(period_col, period_type, nullable=False),
            *_timestamps(),
        )
        op.create_index(f"ix_{prefix}_reports_org_id", f"{prefix}_reports", ["org_id"])
        op.create_index(f"ix_{prefix}_reports_employee_id", f"{prefix}_reports", ["employee_id"])

    op.create_table(
        "daily_report_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("report_id", sa.Integer(), sa.ForeignKey("daily_reports.id"), nullable=False),
        sa.Column("task_name", sa.String(255), nullable=False),
        sa.Column("hours", sa.Numeric(5, 2), nullable=False),
    )
    op.create_index("ix_daily_report_entries_report_id", "daily_report_entries", ["report_id"])
    op.create_table(
        "monthly_report_entries",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("report_id", sa.Integer(), sa.ForeignKey("monthly_reports.id"), nullable=False),
        sa.Column("task_name", sa.String(255), nullable=False),
        sa.Column("story_points", sa.Integer(), nullable=False),
    )
    op.create_index("ix_monthly_report_entries_report_id", "monthly_report_entries", ["report_id"])

    op.create_table(
        "invoices",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("employee_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("reviewed_by_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_invoices_org_id", "invoices", ["org_id"])
    op.create_index("ix_invoices_employee_id", "invoices", ["employee_id"])
    op.create_table(
        "invoice_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("invoice_id", sa.Integer(), sa.ForeignKey("invoices.id"), nullable=False),
        sa.Column("description", sa.String(512), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
    )
    op.create_index("ix_invoice_items_invoice_id", "invoice_items", ["invoice_id"])

    op.create_table(
        "threads",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("created_by_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_threads_org_id", "threads", ["org_id"])
    op.create_table(
        "thread_participants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("thread_id", sa.Integer(), sa.ForeignKey("threads.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.UniqueConstraint("thread_id", "user_id", name="uq_thread_participants_thread_user"),
    )
    op.create_index("ix_thread_participants_thread_id", "thread_participants", ["thread_id"])
    op.create_index("ix_thread_participants_user_id", "thread_participants", ["user_id"])
    op.create_table(
        "chat_messages",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("thread_id", sa.Integer(), sa.ForeignKey("threads.id"), nullable=False),
        sa.Column("sender_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_chat_messages_thread_id", "chat_messages", ["thread_id"])
    op.create_index("ix_chat_messages_sender_id", "chat_messages", ["sender_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("sender_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("target_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("body", sa.Text(), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("audience", sa.String(32), nullable=False),
        sa.Column("target_roles", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("action_url", sa.String(512), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_notifications_org_id", "notifications", ["org_id"])
    op.create_index("ix_notifications_target_user_id", "notifications", ["target_user_id"])
    op.create_table(
        "notification_receipts",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("notification_id", sa.Integer(), sa.ForeignKey("notifications.id"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("notification_id", "user_id", name="uq_notification_receipts_notification_user"),
    )
    op.create_index("ix_notification_receipts_notification_id", "notification_receipts", ["notification_id"])
    op.create_index("ix_notification_receipts_user_id", "notification_receipts", ["user_id"])

    op.create_table(
        "work_policies",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False, unique=True),
        sa.Column("onsite_start_time", sa.String(5), nullable=False),
        sa.Column("onsite_end_time", sa.String(5), nullable=False),
        sa.Column("remote_start_time", sa.String(5), nullable=False),
        sa.Column("remote_end_time", sa.String(5), nullable=False),
        sa.Column("working_days", sa.JSON(), nullable=False),
        sa.Column("weekend_days", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_table(
        "holidays",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("org_id", sa.Integer(), sa.ForeignKey("organizations.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("date", sa.Date(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("org_id", "date", name="uq_holidays_org_date"),
    )
    op.create_index("ix_holidays_org_id", "holidays", ["org_id"])

    op.create_table(
        "secure_tokens",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("subject_id", sa.String(64), nullable=False),
        sa.Column("purpose", sa.String(32), nullable=False),
        sa.Column("token_hash", sa.String(64), nullable=False, unique=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_secure_tokens_subject_purpose", "secure_tokens", ["subject_id", "purpose"])


def downgrade() -> None:
    for table in (
        "secure_tokens", "holidays", "work_policies", "notification_receipts", "notifications",
        "chat_messages", "thread_participants", "threads", "invoice_items", "invoices",
        "monthly_report_entries", "daily_report_entries", "monthly_reports", "daily_reports",
        "leave_requests", "attendance_records", "employment_details", "team_managers", "team_leads",
        "teams", "departments", "projects", "employee_bank_accounts", "emergency_contacts",
        "employee_profiles", "users", "organizations",
    ):
        op.drop_table(table)
