from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr

from user.models import UserRole

DEFAULT_TIMEZONE = "Asia/Dhaka"
DEFAULT_LOCALE = "en-US"
DEFAULT_LOGO_URL = "/logo/demo.logo.png"
DEFAULT_OWNER_DESIGNATION = "Org Owner"


class OrganizationSchema(BaseModel):
    id: int
    name: str
    domain: Optional[str] = None
    timezone: Optional[str] = None
    locale: Optional[str] = None
    logo_url: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)

# what clients send
class OrganizationCreatePayload(BaseModel):
    name: str
    owner_email: EmailStr
    owner_name: str
    domain: Optional[str] = None
    timezone: Optional[str] = None
    locale: Optional[str] = None
    logo_url: Optional[str] = None
    owner_designation: Optional[str] = None
    owner_phone: Optional[str] = None
    send_invite: bool = True
    model_config = ConfigDict(extra="forbid")


class OrganizationCreated(BaseModel):
    organization_id: int
    organization_name: str
    owner_id: int
    owner_email: str
    invite_url: str
    invitation_sent: bool


class OrganizationUpdate(BaseModel):
    name: str
    logo_url: str
    domain: Optional[str] = None
    timezone: Optional[str] = None
    locale: Optional[str] = None
    model_config = ConfigDict(extra="forbid")


class OrganizationDelete(BaseModel):
    password: str


class AdminChange(BaseModel):
    user_id: int


class AdminSchema(BaseModel):
    id: int
    email: str
    role: UserRole
    model_config = ConfigDict(from_attributes=True)
