"""
Cascading deletion driven by an explicit graph of entity kinds.

Every table that references an identity, an organization or one of their
dependents is declared here once, with two kinds of edges:

* ``parents``: hard references. A row is deleted when the row it points at is.
* ``nullify``: soft references. The column is set to NULL instead.

Secure tokens point at their subject by id rather than by foreign key; those
links are declared through ``subjects``.

The deletion order is the reverse topological order of the graph (a kind is
always emptied before anything it references), so adding a new dependent kind
only needs a new entry in ``KINDS``. ``purge`` never commits: wrap it in the
caller's transaction so a failure anywhere leaves every row in place.
"""
from dataclasses import dataclass
from functools import lru_cache
from graphlib import TopologicalSorter
from typing import Dict, List, Optional, Tuple

from sqlalchemy import String, and_, cast, delete, or_, select, update
from sqlalchemy.orm import Session

from attendance.models import AttendanceRecord, LeaveRequest
from core.logging import get_logger
from department.models import Department
from employee.models import EmploymentDetail
from invoice.models import Invoice, InvoiceItem
from messaging.models import ChatMessage, Thread, ThreadParticipant
from notification.models import Notification, NotificationReceipt
from project.models import Project
from report.models import DailyReport, DailyReportEntry, MonthlyReport, MonthlyReportEntry
from securetoken.models import SecureToken, TokenPurpose
from team.models import Team, TeamLead, TeamManager
from user.models import EmergencyContact, EmployeeBankAccount, EmployeeProfile, User
from workpolicy.models import Holiday, WorkPolicy
from .models import Organization

logger = get_logger(__name__)


@dataclass(frozen=True)
class EntityKind:
    name: str
    model: type
    parents: Tuple[Tuple[str, str], ...] = ()
    nullify: Tuple[Tuple[str, str], ...] = ()
    subjects: Tuple[Tuple[TokenPurpose, str], ...] = ()

    @property
    def depends_on(self) -> frozenset:
        targets = {k for _, k in self.parents} | {k for _, k in self.nullify} | {k for _, k in self.subjects}
        targets.discard(self.name)
        return frozenset(targets)


ORG = "organization"
IDENTITY = "identity"

# declared in the order an organization is torn down; the sort keeps it where the graph allows
KINDS: Tuple[EntityKind, ...] = (
    EntityKind("chat_message", ChatMessage, parents=(("thread_id", "thread"), ("sender_id", IDENTITY))),
    EntityKind("thread_participant", ThreadParticipant, parents=(("thread_id", "thread"), ("user_id", IDENTITY))),
    EntityKind("thread", Thread, parents=(("org_id", ORG), ("created_by_id", IDENTITY))),
    EntityKind("notification_receipt", NotificationReceipt,
               parents=(("notification_id", "notification"), ("user_id", IDENTITY))),
    EntityKind("notification", Notification,
               parents=(("org_id", ORG), ("target_user_id", IDENTITY)),
               nullify=(("sender_id", IDENTITY),)),
    EntityKind("daily_report_entry", DailyReportEntry, parents=(("report_id", "daily_report"),)),
    EntityKind("daily_report", DailyReport, parents=(("org_id", ORG), ("employee_id", IDENTITY))),
    EntityKind("monthly_report_entry", MonthlyReportEntry, parents=(("report_id", "monthly_report"),)),
    EntityKind("monthly_report", MonthlyReport, parents=(("org_id", ORG), ("employee_id", IDENTITY))),
    EntityKind("invoice_item", InvoiceItem, parents=(("invoice_id", "invoice"),)),
    EntityKind("invoice", Invoice,
               parents=(("org_id", ORG), ("employee_id", IDENTITY), ("created_by_id", IDENTITY)),
               nullify=(("reviewed_by_id", IDENTITY),)),
    EntityKind("project", Project, parents=(("org_id", ORG),)),
    EntityKind("holiday", Holiday, parents=(("org_id", ORG),)),
    EntityKind("work_policy", WorkPolicy, parents=(("org_id", ORG),)),
    EntityKind("team_lead", TeamLead, parents=(("team_id", "team"), ("user_id", IDENTITY))),
    EntityKind("team_manager", TeamManager, parents=(("team_id", "team"), ("user_id", IDENTITY))),
    EntityKind("team", Team, parents=(("org_id", ORG), ("department_id", "department"))),
    EntityKind("department", Department, parents=(("org_id", ORG),), nullify=(("head_id", IDENTITY),)),
    EntityKind("employment_detail", EmploymentDetail,
               parents=(("org_id", ORG), ("user_id", IDENTITY)),
               nullify=(("department_id", "department"), ("team_id", "team"),
                        ("reporting_manager_id", IDENTITY), ("current_project_id", "project"))),
    EntityKind("emergency_contact", EmergencyContact, parents=(("user_id", IDENTITY),)),
    EntityKind("bank_account", EmployeeBankAccount, parents=(("user_id", IDENTITY),)),
    EntityKind("attendance_record", AttendanceRecord, parents=(("employee_id", IDENTITY),)),
    EntityKind("leave_request", LeaveRequest,
               parents=(("employee_id", IDENTITY),),
               nullify=(("reviewer_id", IDENTITY),)),
    EntityKind("employee_profile", EmployeeProfile, parents=(("user_id", IDENTITY),)),
    EntityKind("secure_token", SecureToken,
               subjects=((TokenPurpose.INVITATION, IDENTITY),
                         (TokenPurpose.PASSWORD_RESET, IDENTITY),
                         (TokenPurpose.ATTACHMENT_UNLOCK, "leave_request"),
                         (TokenPurpose.INVOICE_UNLOCK, "invoice"))),
    EntityKind(IDENTITY, User, parents=(("org_id", ORG),), nullify=(("invited_by_id", IDENTITY),)),
    EntityKind(ORG, Organization),
)

BY_NAME: Dict[str, EntityKind] = {k.name: k for k in KINDS}


@lru_cache(maxsize=None)
def deletion_order() -> Tuple[EntityKind, ...]:
    """Kinds ordered so each one is emptied before any kind it references."""
    sorter = TopologicalSorter()
    for kind in KINDS:
        sorter.add(kind.name)
        for target in kind.depends_on:
            sorter.add(target, kind.name)
    sorter.prepare()

    position = {k.name: i for i, k in enumerate(KINDS)}
    order: List[str] = []
    while sorter.is_active():
        ready = sorted(sorter.get_ready(), key=position.__getitem__)
        order.extend(ready)
        sorter.done(*ready)
    return tuple(BY_NAME[name] for name in order)


def _doomed(kind_name: str, root: Tuple[str, int], memo: Dict[str, Optional[object]]):
    """Select of ids of ``kind_name`` rows that go when ``root`` goes, or None if untouched."""
    if kind_name in memo:
        return memo[kind_name]

    kind = BY_NAME[kind_name]
    root_kind, root_id = root
    if kind_name == root_kind:
        stmt = select(kind.model.id).where(kind.model.id == root_id).correlate(None)
        memo[kind_name] = stmt
        return stmt

    clauses = []
    for column, target in kind.parents:
        sub = _doomed(target, root, memo)
        if sub is not None:
            clauses.append(getattr(kind.model, column).in_(sub))
    for purpose, target in kind.subjects:
        sub = _doomed(target, root, memo)
        if sub is not None:
            target_model = BY_NAME[target].model
            subject_ids = select(cast(target_model.id, String)).where(target_model.id.in_(sub)).correlate(None)
            clauses.append(and_(kind.model.purpose == purpose, kind.model.subject_id.in_(subject_ids)))

    stmt = select(kind.model.id).where(or_(*clauses)).correlate(None) if clauses else None
    memo[kind_name] = stmt
    return stmt


def _nullify_references(db: Session, kind: EntityKind, root: Tuple[str, int], memo) -> None:
    for column, target in kind.nullify:
        sub = _doomed(target, root, memo)
        if sub is None:
            continue
        col = getattr(kind.model, column)
        db.execute(
            update(kind.model)
            .where(col.in_(sub))
            .values({column: None})
            .execution_options(synchronize_session=False)
        )


def _delete_rows(db: Session, kind: EntityKind, doomed_ids) -> int:
    result = db.execute(
        delete(kind.model)
        .where(kind.model.id.in_(doomed_ids))
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def purge(db: Session, kind_name: str, entity_id: int) -> Dict[str, int]:
    """
    Delete one entity and everything that depends on it.

    Soft references to anything being deleted are nulled first, then every
    affected kind is emptied in dependency order. Returns the number of rows
    deleted per kind. Does not commit.
    """
    if kind_name not in BY_NAME:
        raise KeyError(kind_name)
    root = (kind_name, entity_id)
    memo: Dict[str, Optional[object]] = {}
    order = deletion_order()

    for kind in order:
        _nullify_references(db, kind, root, memo)

    counts: Dict[str, int] = {}
    for kind in order:
        doomed_ids = _doomed(kind.name, root, memo)
        if doomed_ids is None:
            continue
        counts[kind.name] = _delete_rows(db, kind, doomed_ids)

    db.expire_all()
    logger.info("Cascade purge finished", root=kind_name, entity_id=entity_id,
                rows=sum(counts.values()))
    return counts


def delete_identity(db: Session, user_id: int) -> Dict[str, int]:
    return purge(db, IDENTITY, user_id)


def delete_organization_tree(db: Session, org_id: int) -> Dict[str, int]:
    return purge(db, ORG, org_id)
