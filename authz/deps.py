from fastapi import Depends

from auth.services.auth_service import get_current_active_user
from core.errors import forbidden
from user.models import User
from . import policy


def require_member(user: User = Depends(get_current_active_user)) -> int:
    if user.org_id is None:
        raise forbidden("Organization membership required")
    return user.org_id


def require_org_manager(user: User = Depends(get_current_active_user)) -> User:
    if not policy.can_manage_organization(user.role):
        raise forbidden("Organization manager role required")
    return user


def require_compensation_manager(user: User = Depends(get_current_active_user)) -> User:
    if not policy.can_manage_compensation(user.role):
        raise forbidden("Manager role required")
    return user


def require_work_manager(user: User = Depends(get_current_active_user)) -> User:
    if not policy.can_manage_work(user.role):
        raise forbidden("Organization admin role required")
    return user


def require_super_admin(user: User = Depends(get_current_active_user)) -> User:
    if not policy.is_super_admin(user.role):
        raise forbidden("Super Admin role required")
    return user
