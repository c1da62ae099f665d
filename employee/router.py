from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.database import get_db
from auth.services.auth_service import get_current_active_user
from authz.deps import require_member
from notification.mailer import get_mailer
from .schema import (
    CompensationUpdate,
    DirectoryPatch,
    EmployeeForm,
    InviteRequest,
    InviteResult,
    LeaveBalancesUpdate,
    TerminationRequest,
)
from . import service

employee_router = APIRouter(prefix="/employees", tags=["Employees"])

# Directory
@employee_router.get("", response_model=list[EmployeeForm])
def list_employees(db: Session = Depends(get_db), user=Depends(get_current_active_user), _org=Depends(require_member)):
    return service.list_directory(db, user)

@employee_router.get("/{employee_id}", response_model=EmployeeForm)
def employee_detail(employee_id: int, db: Session = Depends(get_db), user=Depends(get_current_active_user)):
    return service.get_form(db, user, employee_id)

# Invite
@employee_router.post("/invite", response_model=InviteResult, status_code=status.HTTP_201_CREATED)
def employee_invite(
    payload: InviteRequest,
    db: Session = Depends(get_db),
    user=Depends(get_current_active_user),
    mailer=Depends(get_mailer),
):
    return service.invite(db, user, payload, mailer)

@employee_router.post("/{employee_id}/resend-invite", response_model=InviteResult)
def employee_resend_invite(
    employee_id: int,
    db: Session = Depends(get_db),
    user=Depends(get_current_active_user),
    mailer=Depends(get_mailer),
):
    return service.resend_invite(db, user, employee_id, mailer)

# Edit
@employee_router.patch("/{employee_id}", response_model=EmployeeForm)
def employee_patch(employee_id: int, payload: DirectoryPatch, db: Session = Depends(get_db), user=Depends(get_current_active_user)):
    return service.edit_directory(db, user, employee_id, payload)

@employee_router.put("/{employee_id}/leave-balances", response_model=EmployeeForm)
def employee_leave_balances(employee_id: int, payload: LeaveBalancesUpdate, db: Session = Depends(get_db), user=Depends(get_current_active_user)):
    return service.update_leave_balances(db, user, employee_id, payload)

@employee_router.put("/{employee_id}/compensation", response_model=EmployeeForm)
def employee_compensation(employee_id: int, payload: CompensationUpdate, db: Session = Depends(get_db), user=Depends(get_current_active_user)):
    return service.update_compensation(db, user, employee_id, payload)

# Terminate
@employee_router.post("/{employee_id}/terminate")
def employee_terminate(employee_id: int, payload: TerminationRequest, db: Session = Depends(get_db), user=Depends(get_current_active_user)):
    service.terminate(db, user, employee_id, payload.confirm)
    return {"message": "employee terminated"}
