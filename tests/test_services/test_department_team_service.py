import unittest

from fastapi import HTTPException
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker

from core.database import Base
from organization.models import Organization
from user.models import User, UserRole, UserStatus
from employee.models import EmploymentDetail
from department.models import Department
from team.models import Team, TeamLead, TeamManager

# Services + DTOs under test
from department import service as departments
from department.schema import DepartmentCreate, DepartmentUpdate
from team import service as teams
from team.schema import TeamCreate, TeamMembers, TeamUpdate


class DepartmentTeamServiceTests(unittest.TestCase):
    def setUp(self):
        # Fresh in-memory DB
        self.engine = create_engine("sqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        Session = sessionmaker(bind=self.engine, future=True)
        self.db = Session()

        # ---- Seed org + people ----
        self.db.add(Organization(id=1, name="Acme"))
        self.db.flush()
        self.alice = User(org_id=1, email="alice@acme.io", password_hash="x", role=UserRole.MANAGER,
                          status=UserStatus.ACTIVE)
        self.bob = User(org_id=1, email="bob@acme.io", password_hash="x", role=UserRole.EMPLOYEE,
                        status=UserStatus.ACTIVE)
        self.outsider = User(org_id=None, email="root@platform.io", password_hash="x",
                             role=UserRole.SUPER_ADMIN, status=UserStatus.ACTIVE)
        self.db.add_all([self.alice, self.bob, self.outsider])
        self.db.flush()
        self.db.add(EmploymentDetail(user_id=self.bob.id, org_id=1, employee_code="B-1", designation="Dev"))
        self.db.commit()

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    # ---------- departments ----------

    def test_create_and_list_departments(self):
        departments.create_department(self.db, 1, DepartmentCreate(name=" Sales ", code="sl"))
        departments.create_department(self.db, 1, DepartmentCreate(name="Engineering", head_id=self.alice.id))
        names = [d.name for d in departments.list_departments(self.db, org_id=1)]
        self.assertEqual(names, ["Engineering", "Sales"])
        sales = departments.list_departments(self.db, org_id=1)[1]
        self.assertEqual(sales.code, "SL")

    def test_department_name_is_unique(self):
        departments.create_department(self.db, 1, DepartmentCreate(name="Sales"))
        with self.assertRaises(HTTPException) as ctx:
            departments.create_department(self.db, 1, DepartmentCreate(name="Sales"))
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(ctx.exception.detail, "A department with that name already exists.")

    def test_department_head_must_be_a_member(self):
        with self.assertRaises(HTTPException) as ctx:
            departments.create_department(self.db, 1, DepartmentCreate(name="Ops", head_id=self.outsider.id))
        self.assertEqual(ctx.exception.status_code, 404)

    def test_update_department(self):
        dept = departments.create_department(self.db, 1, DepartmentCreate(name="Ops"))
        updated = departments.update_department(self.db, 1, dept.id, DepartmentUpdate(description="Runs things"))
        self.assertEqual(updated.description, "Runs things")
        with self.assertRaises(HTTPException) as ctx:
            departments.update_department(self.db, 1, dept.id, DepartmentUpdate(name=" "))
        self.assertEqual(ctx.exception.status_code, 400)
        with self.assertRaises(HTTPException) as ctx:
            departments.update_department(self.db, 1, 999, DepartmentUpdate(name="X"))
        self.assertEqual(ctx.exception.status_code, 404)

    def test_delete_department_keeps_employees(self):
        dept = departments.create_department(self.db, 1, DepartmentCreate(name="Ops"))
        team = teams.create_team(self.db, 1, TeamCreate(name="Night shift", department_id=dept.id))
        teams.set_members(self.db, 1, team.id, TeamMembers(lead_ids=[self.alice.id], manager_id=self.alice.id))
        employment = self.db.scalars(select(EmploymentDetail)).one()
        employment.department_id = dept.id
        employment.team_id = team.id
        self.db.commit()

        departments.delete_department(self.db, 1, dept.id)

        self.assertEqual(self.db.scalar(select(func.count()).select_from(Department)), 0)
        self.assertEqual(self.db.scalar(select(func.count()).select_from(Team)), 0)
        self.assertEqual(self.db.scalar(select(func.count()).select_from(TeamLead)), 0)
        self.assertEqual(self.db.scalar(select(func.count()).select_from(TeamManager)), 0)
        employment = self.db.scalars(select(EmploymentDetail)).one()
        self.assertIsNone(employment.department_id)
        self.assertIsNone(employment.team_id)
        self.assertIsNotNone(self.db.get(User, self.bob.id))

    # ---------- teams ----------

    def test_team_needs_a_department_in_the_org(self):
        with self.assertRaises(HTTPException) as ctx:
            teams.create_team(self.db, 1, TeamCreate(name="Ghost", department_id=42))
        self.assertEqual(ctx.exception.status_code, 404)

    def test_team_name_is_unique(self):
        dept = departments.create_department(self.db, 1, DepartmentCreate(name="Ops"))
        teams.create_team(self.db, 1, TeamCreate(name="Core", department_id=dept.id))
        with self.assertRaises(HTTPException) as ctx:
            teams.create_team(self.db, 1, TeamCreate(name="Core", department_id=dept.id))
        self.assertEqual(ctx.exception.status_code, 409)

    def test_set_members_replaces_leads_and_manager(self):
        dept = departments.create_department(self.db, 1, DepartmentCreate(name="Ops"))
        team = teams.create_team(self.db, 1, TeamCreate(name="Core", department_id=dept.id))

        teams.set_members(self.db, 1, team.id, TeamMembers(lead_ids=[self.alice.id, self.bob.id, self.alice.id]))
        view = teams.to_schema(teams.get_team_for_org(self.db, team.id, 1))
        self.assertEqual(view.lead_ids, [self.alice.id, self.bob.id])
        self.assertIsNone(view.manager_id)

        teams.set_members(self.db, 1, team.id, TeamMembers(lead_ids=[self.bob.id], manager_id=self.alice.id))
        view = teams.to_schema(teams.get_team_for_org(self.db, team.id, 1))
        self.assertEqual(view.lead_ids, [self.bob.id])
        self.assertEqual(view.manager_id, self.alice.id)

    def test_set_members_rejects_outsiders(self):
        dept = departments.create_department(self.db, 1, DepartmentCreate(name="Ops"))
        team = teams.create_team(self.db, 1, TeamCreate(name="Core", department_id=dept.id))
        with self.assertRaises(HTTPException) as ctx:
            teams.set_members(self.db, 1, team.id, TeamMembers(lead_ids=[self.outsider.id]))
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(self.db.scalar(select(func.count()).select_from(TeamLead)), 0)

    def test_update_and_delete_team(self):
        ops = departments.create_department(self.db, 1, DepartmentCreate(name="Ops"))
        sales = departments.create_department(self.db, 1, DepartmentCreate(name="Sales"))
        team = teams.create_team(self.db, 1, TeamCreate(name="Core", department_id=ops.id))

        moved = teams.update_team(self.db, 1, team.id, TeamUpdate(department_id=sales.id))
        self.assertEqual(moved.department_id, sales.id)
        self.assertEqual([t.id for t in teams.list_teams(self.db, org_id=1, department_id=sales.id)], [team.id])

        employment = self.db.scalars(select(EmploymentDetail)).one()
        employment.team_id = team.id
        self.db.commit()

        teams.delete_team(self.db, 1, team.id)
        self.assertEqual(teams.list_teams(self.db, org_id=1), [])
        self.assertIsNone(self.db.scalars(select(EmploymentDetail)).one().team_id)
        self.assertEqual(self.db.scalar(select(func.count()).select_from(Department)), 2)


if __name__ == "__main__":
    unittest.main()
