from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, ConfigDict

from user.models import UserRole, UserStatus


class UserSchema(BaseModel):
    id: int
    org_id: Optional[int] = None
    email: EmailStr
    role: UserRole
    status: UserStatus
    last_login_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)
