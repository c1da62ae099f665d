from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.orm import Session

from auth.schemas import InvitationAccept, PasswordResetConfirm
from auth.utils.auth_utils import create_access_token, decode_access_token, get_password_hash, verify_password
from core.database import atomic, get_db, utcnow
from core.errors import unauthorized
from core.logging import get_logger
from employee.models import EmploymentDetail
from notification.mailer import SmtpMailer, deliver, password_reset_email
from securetoken import service as tokens
from securetoken.links import password_reset_link
from securetoken.models import TokenPurpose
from user.models import EmployeeProfile, User, UserStatus
from user.service import get_user_by_email

logger = get_logger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

INVALID_CREDENTIALS = "Incorrect email or password."
INVALID_INVITATION = "Invalid or expired invitation link."
INVALID_RESET = "Invalid or expired password reset link."
RESET_REQUESTED = "If that e-mail belongs to an account, a reset link is on its way."


# ---------- Dependencies ----------

def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    try:
        payload = decode_access_token(token)
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError) as exc:
        logger.warning("JWT decode failed", error=str(exc))
        raise unauthorized("Could not validate credentials")

    user = db.get(User, user_id)
    if user is None:
        logger.warning("User from valid JWT not found", user_id=user_id)
        raise unauthorized("Could not validate credentials")
    return user


def get_current_active_user(user: User = Depends(get_current_user)) -> User:
    if not user.is_active:
        raise unauthorized("This account is not active.")
    return user


# ---------- Login ----------

def authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        raise unauthorized(INVALID_CREDENTIALS)
    if not user.is_active:
        raise unauthorized("This account is not active.")
    return user


def login(db: Session, email: str, password: str) -> str:
    user = authenticate(db, email, password)
    user.last_login_at = utcnow()
    db.commit()
    logger.info("User logged in", user_id=user.id)
    return create_access_token(user.id, user.role.value, user.org_id)


# ---------- Invitations ----------

def accept_invitation(db: Session, payload: InvitationAccept) -> User:
    user = get_user_by_email(db, payload.email)
    if user is None or user.status == UserStatus.TERMINATED:
        raise unauthorized(INVALID_INVITATION)

    with atomic(db):
        if not tokens.consume(db, user.id, TokenPurpose.INVITATION, payload.token):
            raise unauthorized(INVALID_INVITATION)

        user.password_hash = get_password_hash(payload.password)
        user.status = UserStatus.ACTIVE
        user.invited_at = None

        profile = user.profile
        first_name = (payload.first_name or "").strip()
        last_name = (payload.last_name or "").strip()
        if profile is None:
            profile = EmployeeProfile(user_id=user.id, first_name=first_name or user.email, work_email=user.email)
            db.add(profile)
        elif first_name:
            profile.first_name = first_name
        if last_name:
            profile.last_name = last_name
        preferred = (payload.preferred_name or "").strip()
        profile.preferred_name = preferred or profile.preferred_name or profile.first_name

        employment = db.scalars(select(EmploymentDetail).where(EmploymentDetail.user_id == user.id)).first()
        if employment is not None:
            employment.status = UserStatus.ACTIVE

    db.refresh(user)
    logger.info("Invitation accepted", user_id=user.id)
    return user


# ---------- Password reset ----------

def request_password_reset(db: Session, email: str, mailer: SmtpMailer) -> bool:
    """Issue a reset link. Returns whether an e-mail went out; callers never expose this."""
    user = get_user_by_email(db, email)
    if user is None or user.status == UserStatus.TERMINATED:
        logger.info("Password reset requested for unknown account")
        return False

    with atomic(db):
        issued = tokens.issue(db, user.id, TokenPurpose.PASSWORD_RESET)

    link = password_reset_link(user.email, issued.secret)
    return deliver(mailer, password_reset_email(user.email, link))


def reset_password(db: Session, payload: PasswordResetConfirm) -> None:
    user = get_user_by_email(db, payload.email)
    if user is None or user.status == UserStatus.TERMINATED:
        raise unauthorized(INVALID_RESET)

    with atomic(db):
        if not tokens.consume(db, user.id, TokenPurpose.PASSWORD_RESET, payload.token):
            raise unauthorized(INVALID_RESET)
        user.password_hash = get_password_hash(payload.password)

    logger.info("Password reset", user_id=user.id)
