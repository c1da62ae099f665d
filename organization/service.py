import re
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from auth.utils.auth_utils import placeholder_password_hash, verify_password
from authz import policy
from core.database import atomic, utcnow
from core.errors import bad_request, conflict, forbidden, not_found, translate_integrity_error, unauthorized
from core.logging import get_logger
from employee.helpers import clean_optional, normalize_email, split_full_name
from employee.models import EmploymentDetail, EmploymentType
from notification.mailer import deliver, invitation_email
from securetoken import service as tokens
from securetoken.links import invitation_link
from securetoken.models import TokenPurpose
from user.models import EmployeeProfile, User, UserRole, UserStatus
from . import cascade
from .models import SINGLETON_ORGANIZATION_ID, Organization
from .schema import (
    DEFAULT_LOCALE,
    DEFAULT_LOGO_URL,
    DEFAULT_OWNER_DESIGNATION,
    DEFAULT_TIMEZONE,
    OrganizationCreatePayload,
    OrganizationCreated,
    OrganizationUpdate,
)

logger = get_logger(__name__)

SINGLETON_VIOLATION = "Only one organization can exist at a time."


# ---------- Helpers ----------

def owner_employee_code(organization_name: str) -> str:
    prefix = re.sub(r"[^A-Z0-9]", "", organization_name.upper())[:4] or "ORG"
    return f"{prefix}-OWNER-1"


def _is_singleton_violation(exc: IntegrityError) -> bool:
    message = str(getattr(exc, "orig", exc)).lower()
    return "organizations.id" in message or "organizations_pkey" in message


def organization_count(db: Session) -> int:
    return db.scalar(select(func.count()).select_from(Organization)) or 0


def get_for_actor(db: Session, actor) -> Optional[Organization]:
    org_id = actor.org_id
    if org_id is None and policy.is_super_admin(actor.role):
        org_id = SINGLETON_ORGANIZATION_ID
    return db.get(Organization, org_id) if org_id is not None else None


def _require_manager_of(actor, org_id: int) -> None:
    if policy.is_super_admin(actor.role):
        return
    if not policy.can_manage_organization(actor.role):
        raise forbidden("Only organization owners can manage the organization.")
    if actor.org_id != org_id:
        raise forbidden("You can only manage your own organization.")


def _member(db: Session, org_id: int, user_id: int) -> Optional[User]:
    user = db.get(User, user_id)
    if user is None or user.org_id != org_id:
        return None
    return user


# ---------- Absent -> Provisioned ----------

def create_organization(db: Session, actor, payload: OrganizationCreatePayload, mailer) -> OrganizationCreated:
    if not policy.is_super_admin(actor.role):
        raise forbidden("Only Super Admins can create an organization.")

    name = payload.name.strip()
    if not name:
        raise bad_request("Organization name is required.")
    owner_email = normalize_email(payload.owner_email)
    first_name, last_name = split_full_name(payload.owner_name)
    designation = clean_optional(payload.owner_designation) or DEFAULT_OWNER_DESIGNATION

    # read-then-act; the fixed primary key below closes the race
    if organization_count(db) > 0:
        raise forbidden(SINGLETON_VIOLATION)
    if db.scalars(select(User.id).where(User.email == owner_email)).first() is not None:
        raise conflict("An account already exists for that email address.")

    domain = clean_optional(payload.domain)
    try:
        with atomic(db):
            org = Organization(
                id=SINGLETON_ORGANIZATION_ID,
                name=name,
                domain=domain.lower() if domain else None,
                timezone=clean_optional(payload.timezone) or DEFAULT_TIMEZONE,
                locale=clean_optional(payload.locale) or DEFAULT_LOCALE,
                logo_url=clean_optional(payload.logo_url) or DEFAULT_LOGO_URL,
            )
            db.add(org)
            db.flush()

            owner = User(
                org_id=org.id,
                email=owner_email,
                password_hash=placeholder_password_hash(),
                phone=clean_optional(payload.owner_phone),
                role=UserRole.ORG_OWNER,
                status=UserStatus.INACTIVE,
                invited_at=utcnow(),
                invited_by_id=actor.id,
            )
            db.add(owner)
            db.flush()

            db.add(EmployeeProfile(
                user_id=owner.id,
                first_name=first_name,
                last_name=last_name,
                preferred_name=first_name,
                work_email=owner_email,
            ))
            db.add(EmploymentDetail(
                user_id=owner.id,
                org_id=org.id,
                employee_code=owner_employee_code(name),
                designation=designation,
                employment_type=EmploymentType.FULL_TIME,
                status=UserStatus.INACTIVE,
            ))
            issued = tokens.issue(db, owner.id, TokenPurpose.INVITATION)
    except IntegrityError as exc:
        if _is_singleton_violation(exc):
            raise forbidden(SINGLETON_VIOLATION)
        raise translate_integrity_error(exc)

    invite_url = invitation_link(owner_email, issued.secret)
    invitation_sent = False
    if payload.send_invite:
        invitation_sent = deliver(mailer, invitation_email(owner_email, name, invite_url, recipient_name=first_name))

    logger.info("Organization created", organization_id=org.id, owner_id=owner.id, invitation_sent=invitation_sent)
    return OrganizationCreated(
        organization_id=org.id,
        organization_name=name,
        owner_id=owner.id,
        owner_email=owner_email,
        invite_url=invite_url,
        invitation_sent=invitation_sent,
    )


# ---------- Provisioned -> Updated ----------

def update_details(db: Session, actor, org_id: int, patch: OrganizationUpdate) -> Organization:
    _require_manager_of(actor, org_id)
    org = db.get(Organization, org_id)
    if not org:
        raise not_found("Organization not found.")

    name = patch.name.strip()
    if not name:
        raise bad_request("Organization name cannot be empty.")
    logo_url = patch.logo_url.strip()
    if not logo_url:
        raise bad_request("Organization logo is required.")
    domain = clean_optional(patch.domain)

    org.name = name
    org.logo_url = logo_url
    org.domain = domain.lower() if domain else None
    org.timezone = clean_optional(patch.timezone)
    org.locale = clean_optional(patch.locale)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise translate_integrity_error(exc)

    db.refresh(org)
    logger.info("Organization updated", organization_id=org.id, actor_id=actor.id)
    return org


# ---------- Admins ----------

def list_admins(db: Session, actor) -> List[User]:
    org = get_for_actor(db, actor)
    if org is None:
        raise not_found("Organization not found.")
    stmt = (
        select(User)
        .where(User.org_id == org.id, User.role.in_([UserRole.ORG_OWNER, UserRole.ORG_ADMIN]))
        .order_by(User.id)
    )
    return list(db.scalars(stmt))


def add_admin(db: Session, actor, org_id: int, user_id: int) -> User:
    _require_manager_of(actor, org_id)
    if UserRole.ORG_ADMIN not in policy.can_delegate(actor.role):
        raise forbidden("You can't assign the Org Admin role.")

    target = _member(db, org_id, user_id)
    if target is None:
        raise not_found("User not found in this organization.")
    if target.role in (UserRole.ORG_OWNER, UserRole.SUPER_ADMIN):
        raise forbidden("Owners and Super Admins can't be made Org Admins.")
    if target.role == UserRole.ORG_ADMIN:
        raise bad_request("That user is already an Org Admin.")

    target.role = UserRole.ORG_ADMIN
    db.commit()
    db.refresh(target)
    logger.info("Org admin added", user_id=target.id, actor_id=actor.id)
    return target


def remove_admin(db: Session, actor, org_id: int, user_id: int) -> User:
    _require_manager_of(actor, org_id)

    target = _member(db, org_id, user_id)
    if target is None or target.role != UserRole.ORG_ADMIN:
        raise not_found("Org Admin not found.")

    target.role = UserRole.HR_ADMIN
    db.commit()
    db.refresh(target)
    logger.info("Org admin removed", user_id=target.id, actor_id=actor.id)
    return target


# ---------- Provisioned -> Absent ----------

def delete_organization(db: Session, actor, org_id: int, password: str) -> None:
    if not policy.is_super_admin(actor.role):
        raise forbidden("Only Super Admins can delete an organization.")
    if not verify_password(password, getattr(actor, "password_hash", None)):
        raise unauthorized("Incorrect password. Try again.")

    org = db.get(Organization, org_id)
    if not org:
        raise not_found("Organization not found.")

    with atomic(db):
        counts = cascade.delete_organization_tree(db, org_id)

    logger.info("Organization deleted", organization_id=org_id, actor_id=actor.id, rows=sum(counts.values()))
