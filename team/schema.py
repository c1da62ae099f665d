from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class TeamSchema(BaseModel):
    id: int
    org_id: int
    department_id: int
    name: str
    description: Optional[str] = None
    lead_ids: List[int] = []
    manager_id: Optional[int] = None


class TeamCreate(BaseModel):
    name: str
    department_id: int
    description: Optional[str] = None
    model_config = ConfigDict(extra="forbid")


class TeamUpdate(BaseModel):
    name: Optional[str] = None
    department_id: Optional[int] = None
    description: Optional[str] = None
    model_config = ConfigDict(extra="forbid")


class TeamMembers(BaseModel):
    lead_ids: List[int] = []
    manager_id: Optional[int] = None
    model_config = ConfigDict(extra="forbid")
