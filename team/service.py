from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from core.database import atomic
from core.errors import bad_request, not_found, translate_integrity_error
from core.logging import get_logger
from department.models import Department
from organization import cascade
from user.models import User
from .models import Team, TeamLead, TeamManager
from .schema import TeamCreate, TeamMembers, TeamSchema, TeamUpdate

logger = get_logger(__name__)


def to_schema(team: Team) -> TeamSchema:
    return TeamSchema(
        id=team.id,
        org_id=team.org_id,
        department_id=team.department_id,
        name=team.name,
        description=team.description,
        lead_ids=[lead.user_id for lead in team.leads],
        manager_id=team.manager.user_id if team.manager else None,
    )


def list_teams(db: Session, *, org_id: int, department_id: Optional[int] = None) -> List[Team]:
    stmt = (
        select(Team)
        .options(selectinload(Team.leads), selectinload(Team.manager))
        .where(Team.org_id == org_id)
    )
    if department_id is not None:
        stmt = stmt.where(Team.department_id == department_id)
    return list(db.scalars(stmt.order_by(Team.name.asc())))


def get_team_for_org(db: Session, team_id: int, org_id: int) -> Optional[Team]:
    stmt = select(Team).where(Team.id == team_id, Team.org_id == org_id)
    return db.scalars(stmt).first()


def _check_department(db: Session, org_id: int, department_id: int) -> None:
    department = db.get(Department, department_id)
    if department is None or department.org_id != org_id:
        raise not_found("Department not found.")


def _check_members(db: Session, org_id: int, user_ids) -> None:
    ids = set(user_ids)
    if not ids:
        return
    found = set(db.scalars(select(User.id).where(User.id.in_(ids), User.org_id == org_id)))
    missing = ids - found
    if missing:
        raise not_found(f"Employee {sorted(missing)[0]} not found.")


def create_team(db: Session, org_id: int, dto: TeamCreate) -> Team:
    name = dto.name.strip()
    if not name:
        raise bad_request("Team name is required.")
    _check_department(db, org_id, dto.department_id)

    team = Team(org_id=org_id, department_id=dto.department_id, name=name, description=dto.description)
    db.add(team)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise translate_integrity_error(exc)
    db.refresh(team)
    logger.info("Team created", team_id=team.id, org_id=org_id)
    return team


def update_team(db: Session, org_id: int, team_id: int, patch: TeamUpdate) -> Team:
    team = get_team_for_org(db, team_id, org_id)
    if not team:
        raise not_found("Team not found.")

    data = patch.model_dump(exclude_unset=True)
    if "name" in data:
        data["name"] = (data["name"] or "").strip()
        if not data["name"]:
            raise bad_request("Team name cannot be empty.")
    if data.get("department_id") is not None:
        _check_department(db, org_id, data["department_id"])
    elif "department_id" in data:
        raise bad_request("A team must belong to a department.")
    for k, v in data.items():
        setattr(team, k, v)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise translate_integrity_error(exc)
    db.refresh(team)
    return team


def set_members(db: Session, org_id: int, team_id: int, payload: TeamMembers) -> Team:
    """Replaces the team's leads and manager in one transaction."""
    team = get_team_for_org(db, team_id, org_id)
    if not team:
        raise not_found("Team not found.")
    lead_ids = list(dict.fromkeys(payload.lead_ids))
    _check_members(db, org_id, lead_ids + ([payload.manager_id] if payload.manager_id else []))

    with atomic(db):
        db.execute(delete(TeamLead).where(TeamLead.team_id == team_id))
        db.execute(delete(TeamManager).where(TeamManager.team_id == team_id))
        for user_id in lead_ids:
            db.add(TeamLead(team_id=team_id, user_id=user_id))
        if payload.manager_id is not None:
            db.add(TeamManager(team_id=team_id, user_id=payload.manager_id))

    logger.info("Team members updated", team_id=team_id, leads=len(lead_ids))
    return team


def delete_team(db: Session, org_id: int, team_id: int) -> None:
    team = get_team_for_org(db, team_id, org_id)
    if not team:
        raise not_found("Team not found.")
    with atomic(db):
        cascade.purge(db, "team", team_id)
    logger.info("Team deleted", team_id=team_id, org_id=org_id)
