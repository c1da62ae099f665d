"""
One-time secure tokens.

A token is a random secret handed to the caller exactly once. Only an HMAC of
the secret is stored, together with its purpose, subject and expiry. A secret
can be redeemed a single time before it expires; the redemption is a guarded
UPDATE so two concurrent attempts cannot both succeed. Spent and expired rows
are swept whenever a new token is issued.

None of these functions commit: the caller's transaction decides whether the token
row is kept.
"""
import hashlib
import hmac
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union

from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session

from core.config_loader import settings
from core.database import utcnow
from core.logging import get_logger
from .models import SecureToken, TokenPurpose

logger = get_logger(__name__)

SECRET_BYTES = 48

# one message for wrong, expired, used and unknown secrets
INVALID_TOKEN_REASON = "Invalid or expired token."

SubjectId = Union[int, str]


@dataclass(frozen=True)
class IssuedToken:
    secret: str
    expires_at: datetime


@dataclass(frozen=True)
class ConsumeResult:
    ok: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok


_FAILED = ConsumeResult(False, INVALID_TOKEN_REASON)


def default_ttl(purpose: TokenPurpose) -> timedelta:
    hours = {
        TokenPurpose.INVITATION: settings.INVITATION_TOKEN_TTL_HOURS,
        TokenPurpose.PASSWORD_RESET: settings.PASSWORD_RESET_TOKEN_TTL_HOURS,
        TokenPurpose.ATTACHMENT_UNLOCK: settings.ATTACHMENT_UNLOCK_TOKEN_TTL_HOURS,
        TokenPurpose.INVOICE_UNLOCK: settings.INVOICE_UNLOCK_TOKEN_TTL_HOURS,
    }[TokenPurpose(purpose)]
    return timedelta(hours=hours)


def hash_secret(secret: str) -> str:
    return hmac.new(settings.token_hash_key, secret.encode("utf-8"), hashlib.sha256).hexdigest()


def issue(
    db: Session,
    subject_id: SubjectId,
    purpose: TokenPurpose,
    ttl: Optional[timedelta] = None,
) -> IssuedToken:
    purpose = TokenPurpose(purpose)
    secret = secrets.token_hex(SECRET_BYTES)
    expires_at = utcnow() + (ttl if ttl is not None else default_ttl(purpose))

    purge_expired(db)
    # at most one live token per subject and purpose
    db.execute(
        delete(SecureToken)
        .where(
            SecureToken.subject_id == str(subject_id),
            SecureToken.purpose == purpose,
            SecureToken.used_at.is_(None),
        )
        .execution_options(synchronize_session=False)
    )
    db.add(SecureToken(
        subject_id=str(subject_id),
        purpose=purpose,
        token_hash=hash_secret(secret),
        expires_at=expires_at,
    ))
    db.flush()

    logger.info("Secure token issued", subject_id=str(subject_id), purpose=purpose.value)
    return IssuedToken(secret=secret, expires_at=expires_at)


def consume(
    db: Session,
    subject_id: SubjectId,
    purpose: TokenPurpose,
    provided_secret: Optional[str],
) -> ConsumeResult:
    purpose = TokenPurpose(purpose)
    if not provided_secret:
        return _FAILED

    now = utcnow()
    stmt = (
        select(SecureToken)
        .where(
            SecureToken.subject_id == str(subject_id),
            SecureToken.purpose == purpose,
            SecureToken.used_at.is_(None),
            SecureToken.expires_at > now,
        )
        .order_by(SecureToken.id.desc())
    )
    row = db.scalars(stmt).first()
    if row is None or not hmac.compare_digest(row.token_hash, hash_secret(provided_secret)):
        logger.info("Secure token rejected", subject_id=str(subject_id), purpose=purpose.value)
        return _FAILED

    result = db.execute(
        update(SecureToken)
        .where(
            SecureToken.id == row.id,
            SecureToken.used_at.is_(None),
            SecureToken.expires_at > now,
        )
        .values(used_at=now)
        .execution_options(synchronize_session=False)
    )
    db.expire(row)
    if result.rowcount != 1:
        # somebody else redeemed it between our read and write
        return _FAILED

    logger.info("Secure token consumed", subject_id=str(subject_id), purpose=purpose.value)
    return ConsumeResult(True)


def purge_expired(db: Session) -> int:
    result = db.execute(
        delete(SecureToken)
        .where(or_(SecureToken.used_at.is_not(None), SecureToken.expires_at <= utcnow()))
        .execution_options(synchronize_session=False)
    )
    return result.rowcount
