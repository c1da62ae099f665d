import unittest
from datetime import date
from decimal import Decimal
from urllib.parse import parse_qs, urlparse

from fastapi import HTTPException
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.database import Base
import models_bootstrap  # noqa: F401  registers every mapped table
from organization.models import Organization
from user.models import User, UserRole, UserStatus
from attendance.models import LeaveRequest
from invoice.models import Invoice, InvoiceItem
from securetoken.models import TokenPurpose

# Service under test
from securetoken import unlock


class UnlockLinkTests(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine("sqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        Session = sessionmaker(bind=self.engine, future=True)
        self.db = Session()

        self.db.add(Organization(id=1, name="Acme"))
        self.db.flush()
        self.emp = User(org_id=1, email="emp@acme.io", password_hash="x", role=UserRole.EMPLOYEE,
                        status=UserStatus.ACTIVE)
        self.db.add(self.emp)
        self.db.flush()
        self.leave = LeaveRequest(employee_id=self.emp.id, leave_type="SICK", start_date=date(2026, 1, 5),
                                  end_date=date(2026, 1, 6), attachment_url="/files/note.pdf")
        self.invoice = Invoice(org_id=1, employee_id=self.emp.id, created_by_id=self.emp.id, title="Taxi",
                               total=Decimal("12.00"))
        self.db.add_all([self.leave, self.invoice])
        self.db.flush()
        self.db.add_all([
            InvoiceItem(invoice_id=self.invoice.id, description="Airport", amount=Decimal("8.00")),
            InvoiceItem(invoice_id=self.invoice.id, description="Hotel", amount=Decimal("4.00")),
        ])
        self.db.commit()

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def _secret(self, url):
        return parse_qs(urlparse(url).query)["token"][0]

    def test_attachment_link_round(self):
        link = unlock.create_unlock_link(self.db, 1, TokenPurpose.ATTACHMENT_UNLOCK, self.leave.id)
        self.assertEqual(urlparse(link.url).path, f"/unlock/attachments/{self.leave.id}")
        secret = self._secret(link.url)

        unlocked = unlock.redeem_unlock_link(self.db, TokenPurpose.ATTACHMENT_UNLOCK, self.leave.id, secret)
        self.assertEqual(unlocked.attachment_url, "/files/note.pdf")
        self.assertIsNone(unlocked.invoice)
        with self.assertRaises(HTTPException) as ctx:
            unlock.redeem_unlock_link(self.db, TokenPurpose.ATTACHMENT_UNLOCK, self.leave.id, secret)
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(ctx.exception.detail, "Invalid or expired token.")

    def test_invoice_link_is_bound_to_its_invoice(self):
        link = unlock.create_unlock_link(self.db, 1, TokenPurpose.INVOICE_UNLOCK, self.invoice.id)
        secret = self._secret(link.url)
        with self.assertRaises(HTTPException):
            unlock.redeem_unlock_link(self.db, TokenPurpose.ATTACHMENT_UNLOCK, self.invoice.id, secret)
        unlocked = unlock.redeem_unlock_link(self.db, TokenPurpose.INVOICE_UNLOCK, self.invoice.id, secret)
        self.assertIsNone(unlocked.attachment_url)
        self.assertEqual(unlocked.invoice.title, "Taxi")
        self.assertEqual(unlocked.invoice.total, Decimal("12.00"))
        self.assertEqual([i.description for i in unlocked.invoice.items], ["Airport", "Hotel"])

    def test_missing_attachment_keeps_the_link_usable(self):
        link = unlock.create_unlock_link(self.db, 1, TokenPurpose.ATTACHMENT_UNLOCK, self.leave.id)
        secret = self._secret(link.url)
        self.leave.attachment_url = None
        self.db.commit()

        with self.assertRaises(HTTPException) as ctx:
            unlock.redeem_unlock_link(self.db, TokenPurpose.ATTACHMENT_UNLOCK, self.leave.id, secret)
        self.assertEqual(ctx.exception.status_code, 404)

        self.leave.attachment_url = "/files/replacement.pdf"
        self.db.commit()
        unlocked = unlock.redeem_unlock_link(self.db, TokenPurpose.ATTACHMENT_UNLOCK, self.leave.id, secret)
        self.assertEqual(unlocked.attachment_url, "/files/replacement.pdf")

    def test_resource_outside_the_org_is_not_found(self):
        for purpose, resource_id in ((TokenPurpose.INVOICE_UNLOCK, 999), (TokenPurpose.ATTACHMENT_UNLOCK, 999)):
            with self.subTest(purpose=purpose):
                with self.assertRaises(HTTPException) as ctx:
                    unlock.create_unlock_link(self.db, 1, purpose, resource_id)
                self.assertEqual(ctx.exception.status_code, 404)
        with self.assertRaises(HTTPException):
            unlock.create_unlock_link(self.db, 2, TokenPurpose.INVOICE_UNLOCK, self.invoice.id)


if __name__ == "__main__":
    unittest.main()
