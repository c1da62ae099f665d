from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.database import get_db
from core.errors import not_found
from authz.deps import require_member, require_work_manager
from .schema import DepartmentSchema, DepartmentCreate, DepartmentUpdate
from . import service

department_router = APIRouter(prefix="/departments", tags=["Departments"])

# List departments
@department_router.get("", response_model=list[DepartmentSchema])
def list_departments(db: Session = Depends(get_db), org_id: int = Depends(require_member)):
    return service.list_departments(db, org_id=org_id)

# Get department by id
@department_router.get("/{department_id}", response_model=DepartmentSchema)
def department_detail(department_id: int, db: Session = Depends(get_db), org_id: int = Depends(require_member)):
    obj = service.get_department_for_org(db, department_id, org_id)
    if not obj:
        raise not_found("Department not found.")
    return obj

# Create department
@department_router.post("", response_model=DepartmentSchema, status_code=status.HTTP_201_CREATED)
def department_post(payload: DepartmentCreate, db: Session = Depends(get_db), user=Depends(require_work_manager)):
    return service.create_department(db, user.org_id, payload)

# Update department
@department_router.patch("/{department_id}", response_model=DepartmentSchema)
def department_patch(department_id: int, payload: DepartmentUpdate, db: Session = Depends(get_db), user=Depends(require_work_manager)):
    return service.update_department(db, user.org_id, department_id, payload)

# Delete department
@department_router.delete("/{department_id}")
def department_delete(department_id: int, db: Session = Depends(get_db), user=Depends(require_work_manager)):
    service.delete_department(db, user.org_id, department_id)
    return {"message": "department deleted"}
