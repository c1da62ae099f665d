import re
from datetime import date
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from authz import policy
from core.database import atomic
from core.errors import bad_request, conflict, forbidden, not_found, translate_integrity_error
from core.logging import get_logger
from notification.service import announce
from organization.models import SINGLETON_ORGANIZATION_ID
from .models import DEFAULT_POLICY, WEEKDAYS, Holiday, WorkPolicy
from .schema import HolidayCreate, WeekScheduleUpdate, WorkingHoursUpdate, WorkOverview, WorkPolicySchema, HolidaySchema

logger = get_logger(__name__)

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


# ---------- Helpers ----------

def _org_id(actor) -> int:
    if actor.org_id is not None:
        return actor.org_id
    if policy.is_super_admin(actor.role):
        return SINGLETON_ORGANIZATION_ID
    raise not_found("Organization not found.")


def _require_work_manager(actor) -> None:
    if not policy.can_manage_work(actor.role):
        raise forbidden("You don't have permission to manage work settings.")


def _validate_window(label: str, start: str, end: str) -> None:
    for value in (start, end):
        if not TIME_PATTERN.match(value or ""):
            raise bad_request(f"{label} hours must use HH:MM (24h) format.")
    if start >= end:
        raise bad_request(f"{label} start time must be before its end time.")


def _normalize_days(label: str, days: List[str]) -> List[str]:
    cleaned = {(d or "").strip().upper() for d in days}
    cleaned.discard("")
    if not cleaned:
        raise bad_request(f"Select at least one {label} day.")
    unknown = cleaned.difference(WEEKDAYS)
    if unknown:
        raise bad_request(f"Unknown weekday: {sorted(unknown)[0]}.")
    return [d for d in WEEKDAYS if d in cleaned]


def _pretty_days(days: List[str]) -> str:
    return ", ".join(d.capitalize() for d in days)


def _get_or_create_policy(db: Session, org_id: int) -> WorkPolicy:
    row = db.scalars(select(WorkPolicy).where(WorkPolicy.org_id == org_id)).first()
    if row is None:
        row = WorkPolicy(org_id=org_id)
        db.add(row)
    return row


# ---------- Reads ----------

def get_overview(db: Session, actor) -> WorkOverview:
    org_id = _org_id(actor)
    row = db.scalars(select(WorkPolicy).where(WorkPolicy.org_id == org_id)).first()
    policy_view = WorkPolicySchema.model_validate(row) if row else WorkPolicySchema(**DEFAULT_POLICY)
    holidays = db.scalars(
        select(Holiday).where(Holiday.org_id == org_id).order_by(Holiday.date.asc())
    )
    return WorkOverview(policy=policy_view, holidays=[HolidaySchema.model_validate(h) for h in holidays])


# ---------- Holidays ----------

def create_holiday(db: Session, actor, payload: HolidayCreate) -> Holiday:
    _require_work_manager(actor)
    org_id = _org_id(actor)
    title = payload.title.strip()
    if not title:
        raise bad_request("Holiday title is required.")
    description = (payload.description or "").strip() or None

    existing = select(Holiday.id).where(Holiday.org_id == org_id, Holiday.date == payload.date)
    if db.scalars(existing).first() is not None:
        raise conflict("This date is already marked as a holiday.")

    try:
        with atomic(db):
            holiday = Holiday(org_id=org_id, title=title, description=description, date=payload.date)
            db.add(holiday)
            db.flush()
            announce(
                db,
                org_id=org_id,
                sender_id=actor.id,
                title=f"New holiday scheduled: {title}",
                body=f"{title} will be observed on {_format_date(payload.date)}."
                     + (f" {description}" if description else ""),
                action_url="/holidays",
                metadata={
                    "holiday_id": holiday.id,
                    "holiday_date": payload.date.isoformat(),
                    "applies_to": "All employees",
                    "reason": description,
                },
            )
    except IntegrityError as exc:
        raise translate_integrity_error(exc)

    db.refresh(holiday)
    logger.info("Holiday created", holiday_id=holiday.id, org_id=org_id)
    return holiday


def _format_date(value: date) -> str:
    return f"{value.strftime('%A, %B')} {value.day}, {value.year}"


def delete_holiday(db: Session, actor, holiday_id: int) -> None:
    _require_work_manager(actor)
    holiday = db.get(Holiday, holiday_id)
    if holiday is None or holiday.org_id != _org_id(actor):
        raise not_found("Holiday not found.")
    db.delete(holiday)
    db.commit()
    logger.info("Holiday deleted", holiday_id=holiday_id)


# ---------- Policy ----------

def update_working_hours(db: Session, actor, payload: WorkingHoursUpdate) -> WorkPolicy:
    _require_work_manager(actor)
    _validate_window("On-site", payload.onsite_start_time, payload.onsite_end_time)
    _validate_window("Remote", payload.remote_start_time, payload.remote_end_time)
    org_id = _org_id(actor)

    with atomic(db):
        row = _get_or_create_policy(db, org_id)
        row.onsite_start_time = payload.onsite_start_time
        row.onsite_end_time = payload.onsite_end_time
        row.remote_start_time = payload.remote_start_time
        row.remote_end_time = payload.remote_end_time
        db.flush()
        announce(
            db,
            org_id=org_id,
            sender_id=actor.id,
            title="Working hours updated",
            body=(
                f"On-site {payload.onsite_start_time} - {payload.onsite_end_time} | "
                f"Remote {payload.remote_start_time} - {payload.remote_end_time}"
            ),
            action_url="/work-policy",
            metadata=payload.model_dump(),
        )

    db.refresh(row)
    logger.info("Working hours updated", org_id=org_id)
    return row


def update_week_schedule(db: Session, actor, payload: WeekScheduleUpdate) -> WorkPolicy:
    _require_work_manager(actor)
    working = _normalize_days("working", payload.working_days)
    weekend = _normalize_days("weekend", payload.weekend_days)
    overlap = set(working).intersection(weekend)
    if overlap:
        raise bad_request("A day can't be both a working day and a weekend day.")
    org_id = _org_id(actor)

    with atomic(db):
        row = _get_or_create_policy(db, org_id)
        row.working_days = working
        row.weekend_days = weekend
        db.flush()
        announce(
            db,
            org_id=org_id,
            sender_id=actor.id,
            title="Workweek cadence updated",
            body=f"Working days: {_pretty_days(working)} | Weekend: {_pretty_days(weekend)}",
            action_url="/work-policy",
            metadata={"working_days": working, "weekend_days": weekend},
        )

    db.refresh(row)
    logger.info("Week schedule updated", org_id=org_id)
    return row
