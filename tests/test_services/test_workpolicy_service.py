import unittest
from datetime import date
from unittest.mock import patch

from fastapi import HTTPException
from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from core.database import Base, atomic
import models_bootstrap  # noqa: F401  registers every mapped table
from organization.models import Organization
from user.models import User, UserRole, UserStatus
from notification.models import Notification, NotificationAudience, NotificationStatus, NotificationType
from notification import realtime
from notification.service import announce, list_for_user
from workpolicy.models import Holiday

# Service + DTOs under test
from workpolicy import service
from workpolicy.schema import HolidayCreate, WeekScheduleUpdate, WorkingHoursUpdate


class RecordingPublisher:
    def __init__(self):
        self.calls = []

    def publish(self, recipient_ids, payload):
        self.calls.append((list(recipient_ids), payload))


class BrokenPublisher:
    def publish(self, recipient_ids, payload):
        raise ConnectionError("socket closed")


class WorkPolicyServiceTests(unittest.TestCase):
    def setUp(self):
        # Fresh in-memory DB
        self.engine = create_engine("sqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        Session = sessionmaker(bind=self.engine, future=True)
        self.db = Session()

        self.db.add(Organization(id=1, name="Acme"))
        self.db.flush()
        self.admin = User(org_id=1, email="admin@acme.io", password_hash="x", role=UserRole.ORG_ADMIN,
                          status=UserStatus.ACTIVE)
        self.employee = User(org_id=1, email="emp@acme.io", password_hash="x", role=UserRole.EMPLOYEE,
                             status=UserStatus.ACTIVE)
        self.invited = User(org_id=1, email="new@acme.io", password_hash="x", role=UserRole.EMPLOYEE,
                            status=UserStatus.INACTIVE)
        self.gone = User(org_id=1, email="gone@acme.io", password_hash="x", role=UserRole.EMPLOYEE,
                         status=UserStatus.TERMINATED)
        self.db.add_all([self.admin, self.employee, self.invited, self.gone])
        self.db.commit()

        self.publisher = RecordingPublisher()
        realtime.set_publisher(self.publisher)

    def tearDown(self):
        realtime.set_publisher(None)
        self.db.close()
        self.engine.dispose()

    def _notifications(self):
        return self.db.scalars(select(Notification).order_by(Notification.id)).all()

    # ---------- overview ----------

    def test_overview_defaults(self):
        overview = service.get_overview(self.db, self.employee)
        self.assertEqual(overview.policy.onsite_start_time, "09:00")
        self.assertEqual(overview.policy.remote_end_time, "17:00")
        self.assertEqual(overview.policy.weekend_days, ["SATURDAY", "SUNDAY"])
        self.assertEqual(overview.holidays, [])

    # ---------- holidays ----------

    def test_create_holiday_writes_an_announcement(self):
        holiday = service.create_holiday(
            self.db, self.admin, HolidayCreate(title=" Victory Day ", date=date(2026, 12, 16), description="Public")
        )
        self.assertEqual(holiday.title, "Victory Day")

        notification = self._notifications()[0]
        self.assertEqual(notification.title, "New holiday scheduled: Victory Day")
        self.assertEqual(notification.type, NotificationType.ANNOUNCEMENT)
        self.assertEqual(notification.audience, NotificationAudience.ORGANIZATION)
        self.assertEqual(notification.status, NotificationStatus.SENT)
        self.assertEqual(notification.action_url, "/holidays")
        self.assertEqual(notification.meta["holiday_id"], holiday.id)
        self.assertEqual(notification.meta["holiday_date"], "2026-12-16")
        self.assertIn("Wednesday, December 16, 2026", notification.body)

    def test_holiday_fans_out_after_commit_to_every_live_member(self):
        service.create_holiday(self.db, self.admin, HolidayCreate(title="Eid", date=date(2026, 3, 20)))

        self.assertEqual(len(self.publisher.calls), 1)
        recipients, payload = self.publisher.calls[0]
        self.assertEqual(recipients, [self.admin.id, self.employee.id, self.invited.id])
        self.assertEqual(payload["event"], "notification.created")
        self.assertEqual(payload["notification"]["title"], "New holiday scheduled: Eid")

    def test_holiday_survives_a_failed_recipient_lookup(self):
        with patch("notification.realtime.recipients_for", side_effect=OperationalError("SELECT", {}, Exception("gone"))):
            holiday = service.create_holiday(self.db, self.admin, HolidayCreate(title="Eid", date=date(2026, 3, 20)))
        self.db.expire_all()
        self.assertEqual(self.db.scalars(select(Holiday.id)).all(), [holiday.id])
        self.assertEqual(len(self._notifications()), 1)
        self.assertEqual(self.publisher.calls, [])


    def test_duplicate_holiday_date_conflicts(self):
        service.create_holiday(self.db, self.admin, HolidayCreate(title="Eid", date=date(2026, 3, 20)))
        with self.assertRaises(HTTPException) as ctx:
            service.create_holiday(self.db, self.admin, HolidayCreate(title="Again", date=date(2026, 3, 20)))
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(ctx.exception.detail, "This date is already marked as a holiday.")
        self.assertEqual(len(self._notifications()), 1)

    def test_only_work_managers_change_policy(self):
        with self.assertRaises(HTTPException) as ctx:
            service.create_holiday(self.db, self.employee, HolidayCreate(title="Nap", date=date(2026, 5, 5)))
        self.assertEqual(ctx.exception.status_code, 403)

    def test_delete_holiday(self):
        holiday = service.create_holiday(self.db, self.admin, HolidayCreate(title="Eid", date=date(2026, 3, 20)))
        service.delete_holiday(self.db, self.admin, holiday.id)
        self.assertEqual(self.db.scalar(select(func.count()).select_from(Holiday)), 0)
        with self.assertRaises(HTTPException) as ctx:
            service.delete_holiday(self.db, self.admin, holiday.id)
        self.assertEqual(ctx.exception.status_code, 404)

    # ---------- hours & week ----------

    def test_update_working_hours(self):
        row = service.update_working_hours(self.db, self.admin, WorkingHoursUpdate(
            onsite_start_time="08:30", onsite_end_time="17:30", remote_start_time="10:00", remote_end_time="19:00",
        ))
        self.assertEqual(row.onsite_start_time, "08:30")
        self.assertEqual(self._notifications()[0].title, "Working hours updated")
        self.assertEqual(service.get_overview(self.db, self.employee).policy.remote_end_time, "19:00")

    def test_working_hours_validation(self):
        for onsite_start, onsite_end in (("9:00", "17:00"), ("25:00", "26:00"), ("18:00", "09:00")):
            with self.subTest(start=onsite_start, end=onsite_end):
                with self.assertRaises(HTTPException) as ctx:
                    service.update_working_hours(self.db, self.admin, WorkingHoursUpdate(
                        onsite_start_time=onsite_start, onsite_end_time=onsite_end,
                        remote_start_time="08:00", remote_end_time="17:00",
                    ))
                self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(self._notifications(), [])

    def test_update_week_schedule(self):
        row = service.update_week_schedule(self.db, self.admin, WeekScheduleUpdate(
            working_days=["sunday", "MONDAY", "tuesday", "WEDNESDAY", "thursday"],
            weekend_days=["friday", "saturday"],
        ))
        self.assertEqual(row.working_days, ["MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "SUNDAY"])
        self.assertEqual(row.weekend_days, ["FRIDAY", "SATURDAY"])
        self.assertEqual(self._notifications()[0].title, "Workweek cadence updated")

    def test_week_schedule_validation(self):
        for working, weekend in (([], ["SUNDAY"]), (["MONDAY"], ["MONDAY"]), (["FUNDAY"], ["SUNDAY"])):
            with self.subTest(working=working, weekend=weekend):
                with self.assertRaises(HTTPException) as ctx:
                    service.update_week_schedule(self.db, self.admin,
                                                 WeekScheduleUpdate(working_days=working, weekend_days=weekend))
                self.assertEqual(ctx.exception.status_code, 400)


class RealtimeFanoutTests(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine("sqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        Session = sessionmaker(bind=self.engine, future=True)
        self.db = Session()
        self.db.add(Organization(id=1, name="Acme"))
        self.db.flush()
        self.alice = User(org_id=1, email="alice@acme.io", password_hash="x", role=UserRole.HR_ADMIN,
                          status=UserStatus.ACTIVE)
        self.bob = User(org_id=1, email="bob@acme.io", password_hash="x", role=UserRole.EMPLOYEE,
                        status=UserStatus.ACTIVE)
        self.db.add_all([self.alice, self.bob])
        self.db.commit()
        self.publisher = RecordingPublisher()
        realtime.set_publisher(self.publisher)

    def tearDown(self):
        realtime.set_publisher(None)
        self.db.close()
        self.engine.dispose()

    def test_nothing_is_published_before_commit(self):
        announce(self.db, org_id=1, title="Hello", body="World")
        self.assertEqual(self.publisher.calls, [])
        self.db.commit()
        self.assertEqual(len(self.publisher.calls), 1)

    def test_rollback_publishes_nothing(self):
        with self.assertRaises(ValueError):
            with atomic(self.db):
                announce(self.db, org_id=1, title="Hello", body="World")
                raise ValueError("abort")
        self.db.commit()
        self.assertEqual(self.publisher.calls, [])
        self.assertEqual(self.db.scalar(select(func.count()).select_from(Notification)), 0)

    def test_publisher_failure_does_not_reach_the_caller(self):
        realtime.set_publisher(BrokenPublisher())
        with atomic(self.db):
            announce(self.db, org_id=1, title="Hello", body="World")
        self.assertEqual(self.db.scalar(select(func.count()).select_from(Notification)), 1)

    def test_recipient_lookup_failure_only_skips_that_notification(self):
        with patch("notification.realtime.recipients_for", side_effect=[RuntimeError("lookup failed"), [self.alice.id]]):
            announce(self.db, org_id=1, title="First", body=".")
            announce(self.db, org_id=1, title="Second", body=".")
            self.db.commit()
        self.assertEqual(self.db.scalar(select(func.count()).select_from(Notification)), 2)
        self.assertEqual([(ids, p["notification"]["title"]) for ids, p in self.publisher.calls],
                         [([self.alice.id], "Second")])

    def test_individual_and_role_audiences(self):
        announce(self.db, org_id=1, title="Just you", body=".", audience=NotificationAudience.INDIVIDUAL,
                 target_user_id=self.bob.id)
        announce(self.db, org_id=1, title="HR only", body=".", audience=NotificationAudience.ROLE,
                 target_roles=["HR_ADMIN"])
        self.db.commit()
        recipients = {payload["notification"]["title"]: ids for ids, payload in self.publisher.calls}
        self.assertEqual(recipients, {"Just you": [self.bob.id], "HR only": [self.alice.id]})

    def test_list_for_user_filters_audience(self):
        announce(self.db, org_id=1, title="Everyone", body=".")
        announce(self.db, org_id=1, title="Just bob", body=".", audience=NotificationAudience.INDIVIDUAL,
                 target_user_id=self.bob.id)
        announce(self.db, org_id=1, title="HR only", body=".", audience=NotificationAudience.ROLE,
                 target_roles=["HR_ADMIN"])
        self.db.commit()
        self.assertEqual({n.title for n in list_for_user(self.db, self.alice)}, {"Everyone", "HR only"})
        self.assertEqual({n.title for n in list_for_user(self.db, self.bob)}, {"Everyone", "Just bob"})


if __name__ == "__main__":
    unittest.main()
