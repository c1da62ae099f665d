from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.database import atomic
from core.errors import bad_request, not_found, translate_integrity_error
from core.logging import get_logger
from organization import cascade
from user.models import User
from .models import Department
from .schema import DepartmentCreate, DepartmentUpdate

logger = get_logger(__name__)


def list_departments(db: Session, *, org_id: int) -> List[Department]:
    stmt = select(Department).where(Department.org_id == org_id).order_by(Department.name.asc())
    return list(db.scalars(stmt))


def get_department_for_org(db: Session, department_id: int, org_id: int) -> Optional[Department]:
    stmt = select(Department).where(Department.id == department_id, Department.org_id == org_id)
    return db.scalars(stmt).first()


def _check_head(db: Session, org_id: int, head_id: Optional[int]) -> None:
    if head_id is None:
        return
    head = db.get(User, head_id)
    if head is None or head.org_id != org_id:
        raise not_found("Department head not found.")


def create_department(db: Session, org_id: int, dto: DepartmentCreate) -> Department:
    name = dto.name.strip()
    if not name:
        raise bad_request("Department name is required.")
    _check_head(db, org_id, dto.head_id)

    department = Department(
        org_id=org_id,
        name=name,
        code=(dto.code or "").strip().upper() or None,
        description=dto.description,
        head_id=dto.head_id,
    )
    db.add(department)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise translate_integrity_error(exc)
    db.refresh(department)
    logger.info("Department created", department_id=department.id, org_id=org_id)
    return department


def update_department(db: Session, org_id: int, department_id: int, patch: DepartmentUpdate) -> Department:
    department = get_department_for_org(db, department_id, org_id)
    if not department:
        raise not_found("Department not found.")

    data = patch.model_dump(exclude_unset=True)
    if "name" in data:
        data["name"] = (data["name"] or "").strip()
        if not data["name"]:
            raise bad_request("Department name cannot be empty.")
    if "head_id" in data:
        _check_head(db, org_id, data["head_id"])
    for k, v in data.items():
        setattr(department, k, v)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise translate_integrity_error(exc)
    db.refresh(department)
    return department


def delete_department(db: Session, org_id: int, department_id: int) -> None:
    """Removes the department and its teams; employees keep their records with the references cleared."""
    department = get_department_for_org(db, department_id, org_id)
    if not department:
        raise not_found("Department not found.")
    with atomic(db):
        cascade.purge(db, "department", department_id)
    logger.info("Department deleted", department_id=department_id, org_id=org_id)
