"""
Role policy: the role hierarchy and every permission rule derived from it.

Pure functions over roles, no database access. Roles form one total order;
delegation, edit, termination and the management thresholds are all read off
that order plus a few explicit exceptions (self-edit, self-termination, and the
top role being untouchable).
"""
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from user.models import UserRole

ROLE_RANK = {
    UserRole.SUPER_ADMIN: 6,
    UserRole.ORG_OWNER: 5,
    UserRole.ORG_ADMIN: 4,
    UserRole.HR_ADMIN: 3,
    UserRole.MANAGER: 2,
    UserRole.EMPLOYEE: 1,
}

# the only fields a person may change on their own record
SELF_EDITABLE_FIELDS = frozenset({
    "first_name",
    "last_name",
    "preferred_name",
    "phone",
    "work_phone",
    "current_address",
    "permanent_address",
    "work_model",
    "emergency_contact",
})

SELF_EDIT_DENIED = "You can only change your personal details on your own record."

RoleLike = Union[UserRole, str, None]


@dataclass(frozen=True)
class PermissionResult:
    allowed: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOWED = PermissionResult(True)


def as_role(value: RoleLike) -> Optional[UserRole]:
    if isinstance(value, UserRole):
        return value
    try:
        return UserRole(value)
    except ValueError:
        return None


def rank(role: RoleLike) -> int:
    """Position in the hierarchy; 0 for anything that is not a known role."""
    parsed = as_role(role)
    return ROLE_RANK[parsed] if parsed is not None else 0


def can_delegate(actor_role: RoleLike) -> frozenset:
    """Roles the actor may assign to someone else. Unknown roles delegate nothing."""
    actor_rank = rank(actor_role)
    if actor_rank >= ROLE_RANK[UserRole.ORG_ADMIN]:
        return frozenset(
            r for r, r_rank in ROLE_RANK.items()
            if r is not UserRole.SUPER_ADMIN and r_rank < actor_rank
        )
    # HR admins and managers can only bring in plain employees
    if actor_rank > ROLE_RANK[UserRole.EMPLOYEE]:
        return frozenset({UserRole.EMPLOYEE})
    return frozenset()


def can_edit(
    actor_role: RoleLike,
    target_role: RoleLike,
    *,
    is_self: bool = False,
    fields: Iterable[str] = (),
) -> PermissionResult:
    if is_self:
        if set(fields) - SELF_EDITABLE_FIELDS:
            return PermissionResult(False, SELF_EDIT_DENIED)
        return ALLOWED

    if rank(actor_role) <= ROLE_RANK[UserRole.EMPLOYEE]:
        return PermissionResult(False, "You don't have permission to edit other employees.")
    if rank(actor_role) <= rank(target_role):
        return PermissionResult(False, "You can't edit a senior position holder.")
    return ALLOWED


def can_terminate(actor_role: RoleLike, target_role: RoleLike, *, is_self: bool) -> PermissionResult:
    if is_self:
        return PermissionResult(False, "You can't terminate your own account.")
    if as_role(target_role) is UserRole.SUPER_ADMIN:
        return PermissionResult(False, "Super Admin accounts can't be terminated.")
    if rank(actor_role) <= ROLE_RANK[UserRole.EMPLOYEE]:
        return PermissionResult(False, "You don't have permission to terminate employees.")
    if rank(actor_role) <= rank(target_role):
        return PermissionResult(False, "You can't terminate a senior position holder.")
    return ALLOWED


def can_manage_organization(role: RoleLike) -> bool:
    return rank(role) >= ROLE_RANK[UserRole.ORG_OWNER]


def can_manage_compensation(role: RoleLike) -> bool:
    return rank(role) >= ROLE_RANK[UserRole.MANAGER]


def can_manage_work(role: RoleLike) -> bool:
    return rank(role) >= ROLE_RANK[UserRole.ORG_ADMIN]


def is_super_admin(role: RoleLike) -> bool:
    return as_role(role) is UserRole.SUPER_ADMIN
