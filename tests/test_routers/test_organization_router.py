import unittest
from types import SimpleNamespace as Obj
from unittest.mock import patch
from fastapi.testclient import TestClient

from main import app
from core.database import get_db
from core.errors import forbidden, unauthorized
from auth.services.auth_service import get_current_active_user
from notification.mailer import get_mailer
from user.models import UserRole


class OrganizationRouterTests(unittest.TestCase):
    def setUp(self):
        class FakeDB:
            def rollback(self): pass
        def _fake_db():
            yield FakeDB()

        self.user = Obj(id=1, org_id=None, role=UserRole.SUPER_ADMIN)
        app.dependency_overrides[get_db] = _fake_db
        app.dependency_overrides[get_current_active_user] = lambda: self.user
        app.dependency_overrides[get_mailer] = lambda: None

        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_current_active_user, None)
        app.dependency_overrides.pop(get_mailer, None)

    # --- GET /me ---

    @patch("organization.router.service.get_for_actor")
    def test_get_my_organization_200(self, mock_get):
        mock_get.return_value = Obj(id=1, name="Acme", domain=None, timezone="Asia/Dhaka", locale="en-US",
                                    logo_url="/logo/demo.logo.png")
        resp = self.client.get("/api/organizations/me")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["name"], "Acme")
        self.assertEqual(resp.json()["timezone"], "Asia/Dhaka")

    @patch("organization.router.service.get_for_actor")
    def test_get_my_organization_404(self, mock_get):
        mock_get.return_value = None
        resp = self.client.get("/api/organizations/me")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"detail": "Organization not found.", "code": "NOT_FOUND"})

    @patch("organization.router.service.list_admins")
    def test_list_admins(self, mock_list):
        mock_list.return_value = [Obj(id=2, email="owner@acme.io", role=UserRole.ORG_OWNER)]
        resp = self.client.get("/api/organizations/me/admins")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json(), [{"id": 2, "email": "owner@acme.io", "role": "ORG_OWNER"}])

    # --- CREATE ---

    @patch("organization.router.service.create_organization")
    def test_create_organization_201(self, mock_create):
        mock_create.return_value = {
            "organization_id": 1,
            "organization_name": "Acme",
            "owner_id": 2,
            "owner_email": "owner@acme.io",
            "invite_url": "http://localhost:3000/auth/signup?token=t&email=owner%40acme.io",
            "invitation_sent": False,
        }
        resp = self.client.post("/api/organizations", json={
            "name": "Acme", "owner_email": "owner@acme.io", "owner_name": "Olga Owner",
        })
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertEqual(resp.json()["organization_id"], 1)
        payload = mock_create.call_args[0][2]
        self.assertEqual(payload.owner_name, "Olga Owner")
        self.assertTrue(payload.send_invite)

    @patch("organization.router.service.create_organization")
    def test_create_requires_super_admin(self, mock_create):
        self.user = Obj(id=3, org_id=1, role=UserRole.ORG_OWNER)
        resp = self.client.post("/api/organizations", json={
            "name": "Acme", "owner_email": "owner@acme.io", "owner_name": "Olga",
        })
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["code"], "FORBIDDEN")
        mock_create.assert_not_called()

    @patch("organization.router.service.create_organization")
    def test_create_singleton_violation(self, mock_create):
        mock_create.side_effect = forbidden("Only one organization can exist at a time.")
        resp = self.client.post("/api/organizations", json={
            "name": "Acme", "owner_email": "owner@acme.io", "owner_name": "Olga",
        })
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["detail"], "Only one organization can exist at a time.")

    def test_create_rejects_unknown_fields(self):
        resp = self.client.post("/api/organizations", json={
            "name": "Acme", "owner_email": "owner@acme.io", "owner_name": "Olga", "plan": "gold",
        })
        self.assertEqual(resp.status_code, 422)

    # --- UPDATE ---

    @patch("organization.router.service.update_details")
    def test_patch_organization(self, mock_update):
        mock_update.return_value = Obj(id=1, name="Acme Ltd", domain=None, timezone=None, locale=None,
                                       logo_url="/l.png")
        resp = self.client.patch("/api/organizations/1", json={"name": "Acme Ltd", "logo_url": "/l.png"})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["name"], "Acme Ltd")

    def test_patch_needs_org_manager(self):
        self.user = Obj(id=4, org_id=1, role=UserRole.HR_ADMIN)
        resp = self.client.patch("/api/organizations/1", json={"name": "Acme", "logo_url": "/l.png"})
        self.assertEqual(resp.status_code, 403)

    # --- ADMINS ---

    @patch("organization.router.service.add_admin")
    def test_add_admin(self, mock_add):
        mock_add.return_value = Obj(id=7, email="hr@acme.io", role=UserRole.ORG_ADMIN)
        resp = self.client.post("/api/organizations/1/admins", json={"user_id": 7})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["role"], "ORG_ADMIN")
        self.assertEqual(mock_add.call_args[0][2:], (1, 7))

    @patch("organization.router.service.remove_admin")
    def test_remove_admin(self, mock_remove):
        mock_remove.return_value = Obj(id=7, email="hr@acme.io", role=UserRole.HR_ADMIN)
        resp = self.client.delete("/api/organizations/1/admins/7")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["role"], "HR_ADMIN")

    # --- DELETE ---

    @patch("organization.router.service.delete_organization")
    def test_delete_organization(self, mock_delete):
        resp = self.client.post("/api/organizations/1/delete", json={"password": "pw"})
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json(), {"message": "organization deleted"})
        self.assertEqual(mock_delete.call_args[0][2:], (1, "pw"))

    @patch("organization.router.service.delete_organization")
    def test_delete_wrong_password(self, mock_delete):
        mock_delete.side_effect = unauthorized("Incorrect password. Try again.")
        resp = self.client.post("/api/organizations/1/delete", json={"password": "bad"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Incorrect password. Try again.")


if __name__ == "__main__":
    unittest.main()
