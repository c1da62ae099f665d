from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from employee.helpers import normalize_email
from user.models import User


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.scalars(select(User).where(User.email == normalize_email(email))).first()
