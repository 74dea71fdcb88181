"""Common module — shared utilities for the workforce portal."""

from portal.common.cache import DataCache
from portal.common.constants import (
    DATE_FORMAT,
    MANAGE_ROLES,
    LeaveStatus,
    LeaveType,
    ProjectUpdateStatus,
    TaskPriority,
    TaskStatus,
    UserRole,
)
from portal.common.exceptions import (
    AppException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
    register_exception_handlers,
)
from portal.common.filters import apply_any_of, apply_filters, apply_sorting

__all__ = [
    # Cache
    "DataCache",
    # Constants / Enums
    "LeaveStatus",
    "LeaveType",
    "ProjectUpdateStatus",
    "TaskPriority",
    "TaskStatus",
    "UserRole",
    "MANAGE_ROLES",
    "DATE_FORMAT",
    # Exceptions
    "AppException",
    "ForbiddenException",
    "NotFoundException",
    "ValidationException",
    "register_exception_handlers",
    # Filters
    "apply_any_of",
    "apply_filters",
    "apply_sorting",
]
