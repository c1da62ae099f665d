from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr

from user.models import UserRole, UserStatus, WorkModel
from .models import EmploymentType


# PUBLIC payload, what clients send
class InviteRequest(BaseModel):
    email: EmailStr
    full_name: str
    role: UserRole = UserRole.EMPLOYEE
    employee_code: str
    designation: str
    phone: Optional[str] = None
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    work_model: WorkModel = WorkModel.ONSITE
    department_id: Optional[int] = None
    team_id: Optional[int] = None
    reporting_manager_id: Optional[int] = None
    start_date: Optional[str] = None
    send_invite: bool = True
    model_config = ConfigDict(extra="forbid")


class InviteResult(BaseModel):
    identity_id: int
    invite_url: str
    email_sent: bool


class EmergencyContactIn(BaseModel):
    name: Optional[str] = None
    relationship: Optional[str] = None
    phone: Optional[str] = None


class EmergencyContactOut(BaseModel):
    name: str
    relationship: str
    phone: str


class DirectoryPatch(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    preferred_name: Optional[str] = None
    phone: Optional[str] = None
    work_email: Optional[EmailStr] = None
    work_phone: Optional[str] = None
    current_address: Optional[str] = None
    permanent_address: Optional[str] = None
    work_model: Optional[WorkModel] = None
    designation: Optional[str] = None
    employment_type: Optional[EmploymentType] = None
    employment_status: Optional[UserStatus] = None
    department_name: Optional[str] = None
    team_id: Optional[int] = None
    reporting_manager_id: Optional[int] = None
    start_date: Optional[str] = None
    primary_location: Optional[str] = None
    role: Optional[UserRole] = None
    # null removes the contact, omitted leaves it alone
    emergency_contact: Optional[EmergencyContactIn] = None
    model_config = ConfigDict(extra="forbid")


class LeaveBalancesUpdate(BaseModel):
    annual: Optional[float] = None
    sick: Optional[float] = None
    casual: Optional[float] = None
    parental: Optional[float] = None
    model_config = ConfigDict(extra="forbid")


class CompensationUpdate(BaseModel):
    gross_salary: Optional[float] = None
    income_tax: Optional[float] = None
    model_config = ConfigDict(extra="forbid")


class TerminationRequest(BaseModel):
    confirm: bool = False


class EmployeeForm(BaseModel):
    id: int
    email: str
    role: UserRole
    status: UserStatus
    phone: Optional[str] = None
    first_name: str = ""
    last_name: str = ""
    preferred_name: Optional[str] = None
    work_email: Optional[str] = None
    work_phone: Optional[str] = None
    current_address: Optional[str] = None
    permanent_address: Optional[str] = None
    work_model: Optional[WorkModel] = None
    employee_code: Optional[str] = None
    designation: Optional[str] = None
    employment_type: Optional[EmploymentType] = None
    employment_status: Optional[UserStatus] = None
    department_id: Optional[int] = None
    department_name: Optional[str] = None
    team_id: Optional[int] = None
    reporting_manager_id: Optional[int] = None
    start_date: Optional[date] = None
    primary_location: Optional[str] = None
    annual_leave_balance: Optional[Decimal] = None
    sick_leave_balance: Optional[Decimal] = None
    casual_leave_balance: Optional[Decimal] = None
    parental_leave_balance: Optional[Decimal] = None
    gross_salary: Optional[Decimal] = None
    income_tax: Optional[Decimal] = None
    emergency_contact: Optional[EmergencyContactOut] = None
