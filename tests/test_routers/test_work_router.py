import unittest
from datetime import date
from types import SimpleNamespace as Obj
from unittest.mock import patch
from fastapi.testclient import TestClient

from main import app
from core.database import get_db
from core.errors import bad_request, conflict
from auth.services.auth_service import get_current_active_user
from workpolicy.models import DEFAULT_POLICY
from workpolicy.schema import WorkOverview, WorkPolicySchema
from user.models import UserRole


class WorkRouterTests(unittest.TestCase):
    def setUp(self):
        class FakeDB:
            def rollback(self): pass
        def _fake_db():
            yield FakeDB()

        self.user = Obj(id=1, org_id=1, role=UserRole.ORG_ADMIN)
        app.dependency_overrides[get_db] = _fake_db
        app.dependency_overrides[get_current_active_user] = lambda: self.user

        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_current_active_user, None)

    @patch("workpolicy.router.service.get_overview")
    def test_overview_open_to_any_member(self, mock_overview):
        self.user = Obj(id=9, org_id=1, role=UserRole.EMPLOYEE)
        mock_overview.return_value = WorkOverview(policy=WorkPolicySchema(**DEFAULT_POLICY), holidays=[])
        resp = self.client.get("/api/work/overview")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["holidays"], [])
        self.assertIn("working_days", resp.json()["policy"])

    @patch("workpolicy.router.service.create_holiday")
    def test_create_holiday_201(self, mock_create):
        mock_create.return_value = Obj(id=3, title="Victory Day", date=date(2026, 12, 16), description=None)
        resp = self.client.post("/api/work/holidays", json={"title": "Victory Day", "date": "2026-12-16"})
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertEqual(resp.json()["date"], "2026-12-16")

    @patch("workpolicy.router.service.create_holiday")
    def test_create_holiday_duplicate_date(self, mock_create):
        mock_create.side_effect = conflict("This date is already marked as a holiday.")
        resp = self.client.post("/api/work/holidays", json={"title": "Again", "date": "2026-12-16"})
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["code"], "CONFLICT")

    @patch("workpolicy.router.service.create_holiday")
    def test_create_holiday_needs_admin(self, mock_create):
        self.user = Obj(id=9, org_id=1, role=UserRole.HR_ADMIN)
        resp = self.client.post("/api/work/holidays", json={"title": "Victory Day", "date": "2026-12-16"})
        self.assertEqual(resp.status_code, 403)
        mock_create.assert_not_called()

    @patch("workpolicy.router.service.delete_holiday")
    def test_delete_holiday(self, mock_delete):
        resp = self.client.delete("/api/work/holidays/3")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json(), {"message": "holiday deleted"})
        self.assertEqual(mock_delete.call_args[0][2], 3)

    @patch("workpolicy.router.service.update_working_hours")
    def test_update_hours(self, mock_update):
        mock_update.return_value = Obj(**dict(DEFAULT_POLICY, onsite_start_time="08:00"))
        resp = self.client.put("/api/work/hours", json={
            "onsite_start_time": "08:00", "onsite_end_time": "17:00",
            "remote_start_time": "10:00", "remote_end_time": "18:00",
        })
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()["onsite_start_time"], "08:00")

    @patch("workpolicy.router.service.update_week_schedule")
    def test_update_week_overlap(self, mock_update):
        mock_update.side_effect = bad_request("A day can't be both a working day and a weekend day.")
        resp = self.client.put("/api/work/week", json={"working_days": ["MONDAY"], "weekend_days": ["MONDAY"]})
        self.assertEqual(resp.status_code, 400)


if __name__ == "__main__":
    unittest.main()
