"""Field-presence and status-transition checks shared by the write paths."""

from __future__ import annotations

import enum
from typing import Any, Mapping, TypeVar

from portal.common.exceptions import ValidationException

S = TypeVar("S", bound=enum.Enum)


def require_fields(data: Mapping[str, Any], *names: str) -> None:
    """Raise ``ValidationException`` listing every named field that is missing or blank."""
    errors: dict[str, list[str]] = {}
    for name in names:
        value = data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            errors[name] = ["This field is required."]
    if errors:
        raise ValidationException(errors)


def check_transition(
    transitions: Mapping[S, set[S]],
    current: S,
    target: S,
    *,
    field: str = "status",
) -> None:
    """Reject a status change that the transition table does not allow."""
    if target not in transitions.get(current, set()):
        raise ValidationException({
            field: [f"Cannot change {field} from '{current.value}' to '{target.value}'."],
        })
