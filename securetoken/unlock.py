"""Unlock links for sensitive downloads (leave attachments and invoices)."""
from sqlalchemy import select
from sqlalchemy.orm import Session

from attendance.models import LeaveRequest
from core.database import atomic
from core.errors import not_found, unauthorized
from core.logging import get_logger
from invoice.models import Invoice, InvoiceItem
from user.models import User
from . import service
from .links import unlock_link
from .models import TokenPurpose
from .schema import UnlockedInvoice, UnlockedInvoiceItem, UnlockedResource, UnlockLinkSchema

logger = get_logger(__name__)


def _resource_org_id(db: Session, purpose: TokenPurpose, resource_id: int):
    if purpose == TokenPurpose.INVOICE_UNLOCK:
        invoice = db.get(Invoice, resource_id)
        return invoice.org_id if invoice else None
    leave = db.get(LeaveRequest, resource_id)
    if leave is None:
        return None
    owner = db.get(User, leave.employee_id)
    return owner.org_id if owner else None


def create_unlock_link(db: Session, org_id: int, purpose: TokenPurpose, resource_id: int) -> UnlockLinkSchema:
    purpose = TokenPurpose(purpose)
    if _resource_org_id(db, purpose, resource_id) != org_id:
        raise not_found("Resource not found.")
    with atomic(db):
        issued = service.issue(db, resource_id, purpose)
    logger.info("Unlock link created", purpose=purpose.value, resource_id=resource_id)
    return UnlockLinkSchema(url=unlock_link(purpose, resource_id, issued.secret), expires_at=issued.expires_at)


def _unlocked(db: Session, purpose: TokenPurpose, resource_id: int) -> UnlockedResource:
    if purpose == TokenPurpose.INVOICE_UNLOCK:
        invoice = db.get(Invoice, resource_id)
        if invoice is None:
            raise not_found("Resource not found.")
        items = db.scalars(
            select(InvoiceItem).where(InvoiceItem.invoice_id == invoice.id).order_by(InvoiceItem.id.asc())
        )
        view = UnlockedInvoice(
            id=invoice.id,
            employee_id=invoice.employee_id,
            title=invoice.title,
            status=invoice.status,
            total=invoice.total,
            items=[UnlockedInvoiceItem.model_validate(i) for i in items],
        )
        return UnlockedResource(purpose=purpose, resource_id=resource_id, invoice=view)

    leave = db.get(LeaveRequest, resource_id)
    if leave is None or not leave.attachment_url:
        raise not_found("Attachment not found.")
    return UnlockedResource(purpose=purpose, resource_id=resource_id, attachment_url=leave.attachment_url)


def redeem_unlock_link(db: Session, purpose: TokenPurpose, resource_id: int, secret: str) -> UnlockedResource:
    """Spend the secret and hand back what it unlocks."""
    purpose = TokenPurpose(purpose)
    with atomic(db):
        result = service.consume(db, resource_id, purpose, secret)
        if not result:
            raise unauthorized(result.reason)
        # a vanished resource rolls the consume back
        unlocked = _unlocked(db, purpose, resource_id)
    logger.info("Unlock link redeemed", purpose=purpose.value, resource_id=resource_id)
    return unlocked
