from typing import Optional

from pydantic import BaseModel, ConfigDict


class DepartmentSchema(BaseModel):
    id: int
    org_id: int
    name: str
    code: Optional[str] = None
    description: Optional[str] = None
    head_id: Optional[int] = None
    model_config = ConfigDict(from_attributes=True)

# what clients send
class DepartmentCreate(BaseModel):
    name: str
    code: Optional[str] = None
    description: Optional[str] = None
    head_id: Optional[int] = None
    model_config = ConfigDict(extra="forbid")


class DepartmentUpdate(BaseModel):
    name: Optional[str] = None
    code: Optional[str] = None
    description: Optional[str] = None
    head_id: Optional[int] = None
    model_config = ConfigDict(extra="forbid")
