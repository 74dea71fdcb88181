"""Role-based visibility rules.

==============  =============================  ==================  ===========================  =====================
Role            Tasks                          Leave requests      Announcements                Project updates
==============  =============================  ==================  ===========================  =====================
employee        assigned to / by self          own only            company-wide + own dept      own only
manager         to / by self, or own dept      all                 company-wide + own dept      own + own dept
super_admin     all                            all                 all                          all
==============  =============================  ==================  ===========================  =====================

These functions govern what a view *displays*. They are applied to rows
already fetched (and used to narrow the remote query where the rule can be
expressed as filters); they are not an authorization boundary.
"""

from __future__ import annotations

from typing import Any, Iterable, NamedTuple, TypeVar

from portal.client.query import Query
from portal.client.rows import Announcement, LeaveRequest, Profile, ProjectUpdate, Task
from portal.common.constants import MANAGE_ROLES, UserRole

T = TypeVar("T")


# ═════════════════════════════════════════════════════════════════════
# Row predicates
# ═════════════════════════════════════════════════════════════════════


def can_view_task(viewer: Profile, task: Task) -> bool:
    if viewer.role == UserRole.super_admin:
        return True
    if viewer.id in (task.assigned_to, task.assigned_by):
        return True
    return viewer.role == UserRole.manager and task.department == viewer.department


def can_view_leave(viewer: Profile, leave: LeaveRequest) -> bool:
    if viewer.role in MANAGE_ROLES:
        return True
    return leave.employee_id == viewer.id


def can_view_announcement(viewer: Profile, announcement: Announcement) -> bool:
    if viewer.role == UserRole.super_admin:
        return True
    return announcement.department is None or announcement.department == viewer.department


def can_view_project_update(viewer: Profile, update: ProjectUpdate) -> bool:
    if viewer.role == UserRole.super_admin or update.employee_id == viewer.id:
        return True
    if viewer.role != UserRole.manager or update.employee is None:
        return False
    return update.employee.department == viewer.department


_PREDICATES: dict[type, Any] = {
    Task: can_view_task,
    LeaveRequest: can_view_leave,
    Announcement: can_view_announcement,
    ProjectUpdate: can_view_project_update,
}


def is_visible(viewer: Profile, entity: Any) -> bool:
    """Dispatch to the rule for *entity*'s type."""
    predicate = _PREDICATES.get(type(entity))
    if predicate is None:
        raise TypeError(f"No visibility rule for {type(entity).__name__}")
    return predicate(viewer, entity)


def filter_visible(viewer: Profile, rows: Iterable[T]) -> list[T]:
    return [row for row in rows if is_visible(viewer, row)]


# ═════════════════════════════════════════════════════════════════════
# Action rules
# ═════════════════════════════════════════════════════════════════════


def can_manage(viewer: Profile) -> bool:
    """Approve leave, assign tasks, review project updates, open the admin panel."""
    return viewer.role in MANAGE_ROLES


def can_publish_announcements(viewer: Profile) -> bool:
    return viewer.role == UserRole.super_admin


# ═════════════════════════════════════════════════════════════════════
# Query shaping
# ═════════════════════════════════════════════════════════════════════


class Scope(NamedTuple):
    """Filters a view adds to its remote query for one viewer."""

    filters: dict[str, Any] = {}
    any_of: list[dict[str, Any]] = []

    def apply(self, query: Query) -> Query:
        return query.model_copy(update={
            "filters": {**query.filters, **self.filters},
            "any_of": [*query.any_of, *self.any_of],
        })


UNSCOPED = Scope()


def task_scope(viewer: Profile) -> Scope:
    if viewer.role == UserRole.super_admin:
        return UNSCOPED
    alternatives: list[dict[str, Any]] = [
        {"assigned_to": viewer.id},
        {"assigned_by": viewer.id},
    ]
    if viewer.role == UserRole.manager:
        alternatives.append({"department": viewer.department})
    return Scope(any_of=alternatives)


def leave_scope(viewer: Profile) -> Scope:
    if viewer.role in MANAGE_ROLES:
        return UNSCOPED
    return Scope(filters={"employee_id": viewer.id})


def announcement_scope(viewer: Profile) -> Scope:
    if viewer.role == UserRole.super_admin:
        return UNSCOPED
    return Scope(any_of=[{"department__isnull": True}, {"department": viewer.department}])


def project_update_scope(viewer: Profile) -> Scope:
    # A manager's department rule needs the author's profile, so it is
    # applied after fetch via can_view_project_update.
    if viewer.role == UserRole.employee:
        return Scope(filters={"employee_id": viewer.id})
    return UNSCOPED
