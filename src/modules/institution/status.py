"""Lifecycle transitions shared by institutions and classrooms."""

from src.api.core.exceptions.base import InvalidTransitionError
from src.database.models import InstitutionStatus

ALLOWED_TRANSITIONS: dict[InstitutionStatus, frozenset[InstitutionStatus]] = {
    InstitutionStatus.ACTIVE: frozenset(
        {InstitutionStatus.INACTIVE, InstitutionStatus.DELETED}
    ),
    InstitutionStatus.INACTIVE: frozenset(
        {InstitutionStatus.ACTIVE, InstitutionStatus.DELETED}
    ),
    # Restored records are never reactivated automatically
    InstitutionStatus.DELETED: frozenset({InstitutionStatus.INACTIVE}),
    InstitutionStatus.PENDING: frozenset({InstitutionStatus.ACTIVE}),
}


def can_transition(current: InstitutionStatus, target: InstitutionStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_transition(
    current: InstitutionStatus, target: InstitutionStatus, resource: str = "institution"
) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is allowed."""
    if not can_transition(current, target):
        raise InvalidTransitionError(
            details={
                "resource": resource,
                "current_status": current.value,
                "requested_status": target.value,
            },
            message=f"Cannot change {resource} status from "
            f"{current.value} to {target.value}",
        )


SWITCHABLE_STATUSES = frozenset({InstitutionStatus.ACTIVE, InstitutionStatus.INACTIVE})


def ensure_switchable(
    current: InstitutionStatus, target: InstitutionStatus, resource: str = "institution"
) -> None:
    """Direct status changes only move between ACTIVE and INACTIVE.

    Deleted records leave DELETED through restore, never through a status
    change.
    """
    if current not in SWITCHABLE_STATUSES or target not in SWITCHABLE_STATUSES:
        raise InvalidTransitionError(
            details={
                "resource": resource,
                "current_status": current.value,
                "requested_status": target.value,
            },
            message=f"Only active and inactive {resource} records can be "
            "switched directly; use delete or restore instead",
        )
