from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from core.database import get_db
from core.errors import not_found
from authz.deps import require_member, require_work_manager
from .schema import TeamSchema, TeamCreate, TeamUpdate, TeamMembers
from . import service

team_router = APIRouter(prefix="/teams", tags=["Teams"])

# List teams, optionally for one department
@team_router.get("", response_model=list[TeamSchema])
def list_teams(
    department_id: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
    org_id: int = Depends(require_member),
):
    return [service.to_schema(t) for t in service.list_teams(db, org_id=org_id, department_id=department_id)]

# Get team by id
@team_router.get("/{team_id}", response_model=TeamSchema)
def team_detail(team_id: int, db: Session = Depends(get_db), org_id: int = Depends(require_member)):
    obj = service.get_team_for_org(db, team_id, org_id)
    if not obj:
        raise not_found("Team not found.")
    return service.to_schema(obj)

# Create team
@team_router.post("", response_model=TeamSchema, status_code=status.HTTP_201_CREATED)
def team_post(payload: TeamCreate, db: Session = Depends(get_db), user=Depends(require_work_manager)):
    return service.to_schema(service.create_team(db, user.org_id, payload))

# Update team
@team_router.patch("/{team_id}", response_model=TeamSchema)
def team_patch(team_id: int, payload: TeamUpdate, db: Session = Depends(get_db), user=Depends(require_work_manager)):
    return service.to_schema(service.update_team(db, user.org_id, team_id, payload))

# Replace leads and manager
@team_router.put("/{team_id}/members", response_model=TeamSchema)
def team_members(team_id: int, payload: TeamMembers, db: Session = Depends(get_db), user=Depends(require_work_manager)):
    return service.to_schema(service.set_members(db, user.org_id, team_id, payload))

# Delete team
@team_router.delete("/{team_id}")
def team_delete(team_id: int, db: Session = Depends(get_db), user=Depends(require_work_manager)):
    service.delete_team(db, user.org_id, team_id)
    return {"message": "team deleted"}
