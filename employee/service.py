from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth.utils.auth_utils import placeholder_password_hash
from authz import policy
from core.database import atomic, utcnow
from core.errors import bad_request, conflict, forbidden, not_found, translate_integrity_error
from core.logging import get_logger
from department.models import Department
from notification.mailer import deliver, invitation_email
from organization import cascade
from organization.models import SINGLETON_ORGANIZATION_ID, Organization
from securetoken import service as tokens
from securetoken.links import invitation_link
from securetoken.models import TokenPurpose
from team.models import Team, TeamLead
from user.models import EmergencyContact, EmployeeProfile, User, UserStatus
from .helpers import (
    clamp_amount,
    clamp_leave_days,
    clean_optional,
    normalize_email,
    normalize_employee_code,
    parse_start_date,
    split_full_name,
)
from .models import EmploymentDetail
from .schema import (
    CompensationUpdate,
    DirectoryPatch,
    EmergencyContactOut,
    EmployeeForm,
    InviteRequest,
    InviteResult,
    LeaveBalancesUpdate,
)

logger = get_logger(__name__)

LEAVE_FIELDS = {
    "annual": "annual_leave_balance",
    "sick": "sick_leave_balance",
    "casual": "casual_leave_balance",
    "parental": "parental_leave_balance",
}

# DirectoryPatch field -> (model, attribute)
PROFILE_FIELDS = ("first_name", "last_name", "preferred_name", "work_email", "work_phone",
                  "current_address", "permanent_address", "work_model")
EMPLOYMENT_FIELDS = ("designation", "employment_type", "primary_location")


# ---------- Helpers ----------

def _actor_org_id(db: Session, actor) -> int:
    if actor.org_id is not None:
        return actor.org_id
    # platform operators act on the one organization there is
    if policy.is_super_admin(actor.role) and db.get(Organization, SINGLETON_ORGANIZATION_ID) is not None:
        return SINGLETON_ORGANIZATION_ID
    raise not_found("Organization not found.")


def get_member(db: Session, actor, employee_id: int) -> User:
    user = db.get(User, employee_id)
    if user is None or user.org_id != _actor_org_id(db, actor):
        raise not_found("Employee not found.")
    return user


def _employment(db: Session, user_id: int) -> Optional[EmploymentDetail]:
    return db.scalars(select(EmploymentDetail).where(EmploymentDetail.user_id == user_id)).first()


def _member_in_org(db: Session, org_id: int, user_id: int, label: str) -> User:
    user = db.get(User, user_id)
    if user is None or user.org_id != org_id:
        raise not_found(f"{label} not found.")
    return user


def _display_name(user) -> Optional[str]:
    profile = getattr(user, "profile", None)
    if profile is None:
        return None
    return profile.preferred_name or " ".join(p for p in (profile.first_name, profile.last_name) if p) or None


def to_form(db: Session, user: User) -> EmployeeForm:
    profile = user.profile
    employment = _employment(db, user.id)
    contact = user.emergency_contact
    department = db.get(Department, employment.department_id) if employment and employment.department_id else None

    data = {
        "id": user.id,
        "email": user.email,
        "role": user.role,
        "status": user.status,
        "phone": user.phone,
    }
    if profile is not None:
        for field in PROFILE_FIELDS:
            data[field] = getattr(profile, field)
    if employment is not None:
        data.update(
            employee_code=employment.employee_code,
            designation=employment.designation,
            employment_type=employment.employment_type,
            employment_status=employment.status,
            department_id=employment.department_id,
            department_name=department.name if department else None,
            team_id=employment.team_id,
            reporting_manager_id=employment.reporting_manager_id,
            start_date=employment.start_date,
            primary_location=employment.primary_location,
            gross_salary=employment.gross_salary,
            income_tax=employment.income_tax,
        )
        for attr in LEAVE_FIELDS.values():
            data[attr] = getattr(employment, attr)
    if contact is not None:
        data["emergency_contact"] = EmergencyContactOut(
            name=contact.name, relationship=contact.relationship_label, phone=contact.phone
        )
    return EmployeeForm(**data)


# ---------- Directory reads ----------

def list_directory(db: Session, actor) -> List[EmployeeForm]:
    org_id = _actor_org_id(db, actor)
    stmt = select(User).where(User.org_id == org_id).order_by(User.email.asc())
    return [to_form(db, u) for u in db.scalars(stmt)]


def get_form(db: Session, actor, employee_id: int) -> EmployeeForm:
    return to_form(db, get_member(db, actor, employee_id))


# ---------- Invite ----------

def _resolve_placement(db: Session, org_id: int, payload: InviteRequest):
    department = None
    team = None
    if payload.department_id is not None:
        department = db.get(Department, payload.department_id)
        if department is None or department.org_id != org_id:
            raise not_found("Department not found.")
    if payload.team_id is not None:
        team = db.get(Team, payload.team_id)
        if team is None or team.org_id != org_id:
            raise not_found("Team not found.")
        if department is not None and team.department_id != department.id:
            raise bad_request("Team does not belong to the selected department.")
        if department is None:
            department = db.get(Department, team.department_id)

    manager_id = payload.reporting_manager_id
    if manager_id is not None:
        _member_in_org(db, org_id, manager_id, "Reporting manager")
    elif team is not None:
        lead = db.scalars(select(TeamLead).where(TeamLead.team_id == team.id).order_by(TeamLead.id)).first()
        manager_id = lead.user_id if lead else None
    if manager_id is None and department is not None:
        manager_id = department.head_id
    return department, team, manager_id


def invite(db: Session, actor, payload: InviteRequest, mailer) -> InviteResult:
    if payload.role not in policy.can_delegate(actor.role):
        raise forbidden("You can't invite someone with that role.")

    org_id = _actor_org_id(db, actor)
    org = db.get(Organization, org_id)
    if org is None:
        raise not_found("Organization not found.")

    email = normalize_email(payload.email)
    employee_code = normalize_employee_code(payload.employee_code)
    if not employee_code:
        raise bad_request("Employee code is required.")
    designation = (payload.designation or "").strip()
    if not designation:
        raise bad_request("Designation is required.")
    first_name, last_name = split_full_name(payload.full_name)
    start_date = parse_start_date(payload.start_date)
    department, team, manager_id = _resolve_placement(db, org_id, payload)

    if db.scalars(select(User.id).where(User.email == email)).first() is not None:
        raise conflict("An account already exists for that email address.")
    code_taken = select(EmploymentDetail.id).where(
        EmploymentDetail.org_id == org_id, EmploymentDetail.employee_code == employee_code
    )
    if db.scalars(code_taken).first() is not None:
        raise conflict("That employee code is already in use in this organization.")

    try:
        with atomic(db):
            user = User(
                org_id=org_id,
                email=email,
                password_hash=placeholder_password_hash(),
                phone=clean_optional(payload.phone),
                role=payload.role,
                status=UserStatus.INACTIVE,
                invited_at=utcnow(),
                invited_by_id=actor.id,
            )
            db.add(user)
            db.flush()

            db.add(EmployeeProfile(
                user_id=user.id,
                first_name=first_name,
                last_name=last_name,
                preferred_name=first_name,
                work_email=email,
                work_model=payload.work_model,
            ))
            db.add(EmploymentDetail(
                user_id=user.id,
                org_id=org_id,
                employee_code=employee_code,
                designation=designation,
                employment_type=payload.employment_type,
                status=UserStatus.INACTIVE,
                start_date=start_date,
                department_id=department.id if department else None,
                team_id=team.id if team else None,
                reporting_manager_id=manager_id,
            ))
            issued = tokens.issue(db, user.id, TokenPurpose.INVITATION)
    except IntegrityError as exc:
        raise translate_integrity_error(exc)

    invite_url = invitation_link(email, issued.secret)
    email_sent = False
    if payload.send_invite:
        message = invitation_email(email, org.name, invite_url, recipient_name=first_name,
                                   inviter_name=_display_name(actor))
        email_sent = deliver(mailer, message)

    logger.info("Employee invited", user_id=user.id, org_id=org_id, role=payload.role.value, email_sent=email_sent)
    return InviteResult(identity_id=user.id, invite_url=invite_url, email_sent=email_sent)


def resend_invite(db: Session, actor, employee_id: int, mailer) -> InviteResult:
    target = get_member(db, actor, employee_id)
    permission = policy.can_edit(actor.role, target.role, is_self=target.id == actor.id)
    if not permission:
        raise forbidden(permission.reason)
    if target.status != UserStatus.INACTIVE:
        raise bad_request("This person has already joined.")

    with atomic(db):
        target.invited_at = utcnow()
        issued = tokens.issue(db, target.id, TokenPurpose.INVITATION)

    org = db.get(Organization, target.org_id)
    invite_url = invitation_link(target.email, issued.secret)
    email_sent = deliver(mailer, invitation_email(target.email, org.name, invite_url,
                                                  recipient_name=_display_name(target)))
    logger.info("Invitation re-sent", user_id=target.id, email_sent=email_sent)
    return InviteResult(identity_id=target.id, invite_url=invite_url, email_sent=email_sent)


# ---------- Directory edit ----------

def _upsert_department(db: Session, org_id: int, name: str) -> Department:
    existing = db.scalars(
        select(Department).where(Department.org_id == org_id, func.lower(Department.name) == name.lower())
    ).first()
    if existing is not None:
        return existing
    department = Department(org_id=org_id, name=name)
    db.add(department)
    db.flush()
    logger.info("Department created from directory edit", department_id=department.id, org_id=org_id)
    return department


def _apply_emergency_contact(db: Session, user: User, contact) -> None:
    current = db.scalars(select(EmergencyContact).where(EmergencyContact.user_id == user.id)).first()
    values = {}
    if contact is not None:
        values = {k: clean_optional(getattr(contact, k)) for k in ("name", "relationship", "phone")}
    present = [v for v in values.values() if v]

    if not present:
        if current is not None:
            db.delete(current)
        return
    if len(present) != 3:
        raise bad_request("Emergency contact needs a name, relationship and phone.")
    if current is None:
        current = EmergencyContact(user_id=user.id)
        db.add(current)
    current.name = values["name"]
    current.relationship_label = values["relationship"]
    current.phone = values["phone"]


def edit_directory(db: Session, actor, employee_id: int, patch: DirectoryPatch) -> EmployeeForm:
    target = get_member(db, actor, employee_id)
    fields = patch.model_fields_set
    is_self = target.id == actor.id

    permission = policy.can_edit(actor.role, target.role, is_self=is_self, fields=fields)
    if not permission:
        raise forbidden(permission.reason)
    if "role" in fields and patch.role is not None and patch.role != target.role:
        if patch.role not in policy.can_delegate(actor.role):
            raise forbidden("You can't assign that role.")

    org_id = target.org_id
    employment = _employment(db, target.id)
    if employment is None:
        raise not_found("Employment record not found.")

    start_date = parse_start_date(patch.start_date) if "start_date" in fields else None

    team = None
    if "team_id" in fields and patch.team_id is not None:
        team = db.get(Team, patch.team_id)
        if team is None or team.org_id != org_id:
            raise not_found("Team not found.")
    if "reporting_manager_id" in fields and patch.reporting_manager_id is not None:
        if patch.reporting_manager_id == target.id:
            raise bad_request("An employee can't report to themself.")
        _member_in_org(db, org_id, patch.reporting_manager_id, "Reporting manager")
    if "designation" in fields and not (patch.designation or "").strip():
        raise bad_request("Designation cannot be empty.")
    if "first_name" in fields and not (patch.first_name or "").strip():
        raise bad_request("First name cannot be empty.")

    try:
        with atomic(db):
            if "phone" in fields:
                target.phone = clean_optional(patch.phone)
            if "role" in fields and patch.role is not None:
                target.role = patch.role

            profile = target.profile
            if profile is None:
                profile = EmployeeProfile(user_id=target.id, first_name=target.email)
                db.add(profile)
            for field in PROFILE_FIELDS:
                if field not in fields:
                    continue
                value = getattr(patch, field)
                if field == "work_model":
                    if value is not None:
                        profile.work_model = value
                elif field in ("first_name", "last_name"):
                    setattr(profile, field, (value or "").strip())
                else:
                    setattr(profile, field, clean_optional(str(value)) if value is not None else None)

            for field in EMPLOYMENT_FIELDS:
                if field in fields:
                    value = getattr(patch, field)
                    if field == "employment_type":
                        if value is not None:
                            employment.employment_type = value
                    else:
                        setattr(employment, field, clean_optional(value))
            if "employment_status" in fields and patch.employment_status is not None:
                employment.status = patch.employment_status
                target.status = patch.employment_status
            if "start_date" in fields:
                employment.start_date = start_date

            if "department_name" in fields:
                name = clean_optional(patch.department_name)
                employment.department_id = _upsert_department(db, org_id, name).id if name else None
            if "team_id" in fields:
                if team is None:
                    employment.team_id = None
                else:
                    if "department_name" in fields and employment.department_id not in (None, team.department_id):
                        raise bad_request("Team does not belong to the selected department.")
                    employment.team_id = team.id
                    employment.department_id = team.department_id
            if "reporting_manager_id" in fields:
                employment.reporting_manager_id = patch.reporting_manager_id

            if "emergency_contact" in fields:
                _apply_emergency_contact(db, target, patch.emergency_contact)
    except IntegrityError as exc:
        raise translate_integrity_error(exc)

    db.refresh(target)
    logger.info("Directory entry updated", user_id=target.id, actor_id=actor.id, fields=sorted(fields))
    return to_form(db, target)


# ---------- Leave balances & compensation ----------

def _guard_sensitive_update(actor, target: User, fields) -> None:
    permission = policy.can_edit(actor.role, target.role, is_self=target.id == actor.id, fields=fields)
    if not permission:
        raise forbidden(permission.reason)


def update_leave_balances(db: Session, actor, employee_id: int, payload: LeaveBalancesUpdate) -> EmployeeForm:
    if not policy.can_manage_organization(actor.role):
        raise forbidden("Only organization owners can update leave balances.")
    target = get_member(db, actor, employee_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    _guard_sensitive_update(actor, target, {LEAVE_FIELDS[k] for k in data})

    employment = _employment(db, target.id)
    if employment is None:
        raise not_found("Employment record not found.")

    with atomic(db):
        for key, value in data.items():
            setattr(employment, LEAVE_FIELDS[key], clamp_leave_days(value))

    logger.info("Leave balances updated", user_id=target.id, actor_id=actor.id)
    return to_form(db, target)


def update_compensation(db: Session, actor, employee_id: int, payload: CompensationUpdate) -> EmployeeForm:
    if not policy.can_manage_compensation(actor.role):
        raise forbidden("You don't have permission to manage compensation.")
    target = get_member(db, actor, employee_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    _guard_sensitive_update(actor, target, set(data))

    employment = _employment(db, target.id)
    if employment is None:
        raise not_found("Employment record not found.")

    with atomic(db):
        for key, value in data.items():
            setattr(employment, key, clamp_amount(value))

    logger.info("Compensation updated", user_id=target.id, actor_id=actor.id)
    return to_form(db, target)


# ---------- Termination ----------

def terminate(db: Session, actor, employee_id: int, confirm: bool) -> None:
    target = get_member(db, actor, employee_id)
    permission = policy.can_terminate(actor.role, target.role, is_self=target.id == actor.id)
    if not permission:
        raise forbidden(permission.reason)
    if not confirm:
        raise bad_request("Termination must be confirmed.")

    with atomic(db):
        cascade.delete_identity(db, target.id)

    logger.info("Employee terminated", user_id=employee_id, actor_id=actor.id)
